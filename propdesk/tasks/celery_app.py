"""Celery application bootstrap."""

from __future__ import annotations

import os

from celery import Celery
from celery.schedules import crontab

from propdesk.core.config import get_config

_config = get_config()

celery_app = Celery(
    "propdesk",
    broker=_config.CELERY_BROKER_URL,
    backend=_config.CELERY_RESULT_BACKEND,
    include=["propdesk.tasks.payment_tasks"],
)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    beat_schedule={
        "payments-mark-overdue-daily": {
            "task": "payments.mark_overdue",
            "schedule": crontab(hour=3, minute=0),
        },
    },
)

# Local/dev convenience: run tasks synchronously when requested.
if os.getenv("CELERY_TASK_ALWAYS_EAGER", "false").lower() in {"1", "true", "yes", "on"}:
    celery_app.conf.task_always_eager = True
