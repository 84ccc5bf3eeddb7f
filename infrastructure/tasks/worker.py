"""Entry point for running a Celery worker with the embedded beat scheduler.

Deployments usually call the celery CLI directly
(``celery -A infrastructure.tasks worker -B``); this script is the
``contest-arena-worker`` console entry.
"""
from __future__ import annotations

from core.logging_config import configure_logging

from .config.celery import celery_app


def main() -> None:
    configure_logging()
    celery_app.worker_main(
        argv=["worker", "--beat", "--loglevel=INFO", "--hostname=worker@%h"],
    )


if __name__ == "__main__":
    main()
