"""Celery application configuration."""

from celery import Celery

from snippet_manager.config import settings

# Create Celery app
celery_app = Celery(
    "snippet_manager",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["snippet_manager.workers.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task routing
    task_routes={
        "snippet_manager.workers.tasks.send_email": {"queue": "emails"},
    },

    # Task execution settings
    task_acks_late=True,  # Acknowledge after task completion
    task_reject_on_worker_lost=True,  # Requeue if worker dies

    # Result settings
    result_expires=3600,  # Results expire after 1 hour

    # Fail fast when the broker is down instead of blocking the request
    broker_connection_timeout=5,
    broker_transport_options={"max_retries": 1},

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,
)
