"""Celery beat schedule."""
from __future__ import annotations

from core.config import settings

CELERY_BEAT_SCHEDULE = {
    "reconcile-pending-payments": {
        "task": "payments.reconcile_pending",
        "schedule": float(settings.reconcile.interval_seconds),
        "options": {"queue": "high"},
    },
}
