"""Celery task infrastructure package.

Importing this module wires up the configured Celery app.
"""
from .config.celery import celery_app

__all__ = ["celery_app"]
