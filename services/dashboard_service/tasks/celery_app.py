from celery import Celery
from celery.schedules import crontab

from services.dashboard_service.config import settings
from config.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_WEEKLY_SCHEDULE = "0 14 * * 1"

celery_app = Celery(
    "dashboard_service",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)


def cron_from_expr(expr: str):
    try:
        minute, hour, day_of_month, month_of_year, day_of_week = expr.split()
    except ValueError:
        logger.warning(
            f"Invalid WEEKLY_AUDIT_SCHEDULE, using {DEFAULT_WEEKLY_SCHEDULE}",
            extra={"value": expr},
        )
        return crontab(minute=0, hour=14, day_of_week=1)

    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    broker_connection_retry_on_startup=True,
)

celery_app.conf.beat_schedule = {
    "weekly_audit": {
        "task": "services.dashboard_service.tasks.periodic_tasks.weekly_audit",
        "schedule": cron_from_expr(settings.weekly_audit_schedule),
    }
}

celery_app.autodiscover_tasks(["services.dashboard_service.tasks"])
