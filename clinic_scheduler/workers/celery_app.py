from celery import Celery
from clinic_scheduler.core.config import settings

# Create Celery app
celery_app = Celery(
    "clinic_scheduler",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["clinic_scheduler.workers.tasks"]
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Worker settings
    worker_prefetch_multiplier=1,
    task_acks_late=True,

    task_routes={
        "clinic_scheduler.workers.tasks.*": {"queue": "reminders"},
    },

    # Beat schedule (periodic tasks)
    beat_schedule={
        "scan-due-reminders": {
            "task": "clinic_scheduler.workers.tasks.dispatch_due_reminders",
            "schedule": float(settings.REMINDER_SCAN_SECONDS),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
