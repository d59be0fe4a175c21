"""
Celery Worker Configuration
Redis is both broker and result backend for the spreadsheet export tasks.

Run a worker with:
    celery -A kiosk.celery_worker.celery_app worker --loglevel=info
"""

from celery import Celery

from kiosk.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "kiosk_worker",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["kiosk.tasks"],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Tests and single-box deployments run exports in-process
    task_always_eager=settings.celery_task_always_eager,
    task_eager_propagates=False,
    task_store_eager_result=False,

    # One writer at a time keeps the workbook lock uncontended
    worker_prefetch_multiplier=1,
    worker_concurrency=1,

    result_expires=3600,

    task_acks_late=True,
    task_reject_on_worker_lost=True,

    broker_connection_retry_on_startup=True,
)


if __name__ == "__main__":
    celery_app.start()
