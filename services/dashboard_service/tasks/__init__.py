from services.dashboard_service.tasks.celery_app import celery_app
from services.dashboard_service.tasks.periodic_tasks import weekly_audit

__all__ = [
    "celery_app",
    "weekly_audit",
]
