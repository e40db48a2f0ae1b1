from celery import Celery

from src.app.config import settings

# Create Celery instance and include explicit task modules
celery_app = Celery(
    'photo_lifecycle',
    include=[
        'src.tasks.workers.photo_reconciler',
    ]
)

celery_app.conf.update(
    broker_url=settings.CELERY_BROKER_URL,
    result_backend=settings.CELERY_RESULT_BACKEND,
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes hard limit
)

celery_app.conf.beat_schedule = {
    'reconcile-photo-storage': {
        'task': 'tasks.reconcile_photo_storage',
        'schedule': settings.RECONCILE_INTERVAL_MINUTES * 60.0,
    },
}
