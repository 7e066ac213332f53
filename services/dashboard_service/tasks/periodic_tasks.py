import asyncio
from datetime import datetime, timezone
from typing import Any, Dict

from services.dashboard_service.audit_runner import run_weekly_audit
from services.dashboard_service.config import settings
from services.dashboard_service.schemas.dashboard import AuditRunSummary
from services.dashboard_service.store import DashboardStore, StoreBackend, create_store
from services.discord_service.client import DiscordClient
from services.discord_service.relay import Relay, build_audit_report
from config.logging_config import get_logger

from services.dashboard_service.tasks.celery_app import celery_app

logger = get_logger(__name__)


async def relay_audit_reports(store: DashboardStore, relay: Relay, results: list[AuditRunSummary]) -> int:
    posted = 0
    recommendations = await store.get_recommendations()
    for result in results:
        try:
            history = await store.get_audit_history(result.site, 30)
            if not history:
                continue
            latest = history[-1]
            previous = history[-2] if len(history) > 1 else None
            findings = await store.get_findings(site=result.site)
            report = build_audit_report(latest, findings, recommendations, previous)
            if await relay.post_audit_report(report):
                posted += 1
        except Exception as exc:
            logger.error(
                "Audit report relay failed",
                extra={"site": result.site.value, "error": str(exc)},
            )
    return posted


async def run_weekly_audit_and_relay(store: DashboardStore) -> Dict[str, Any]:
    if store.backend is StoreBackend.SQL:
        await store.init_schema()

    results = await run_weekly_audit(store, settings.pagespeed_api_key)

    relayed = 0
    if settings.discord_bot_token:
        async with DiscordClient(token=settings.discord_bot_token) as client:
            relayed = await relay_audit_reports(store, Relay(client), results)
    else:
        logger.warning("DISCORD_BOT_TOKEN is not configured, skipping report relay")

    return {
        "status": "completed",
        "results": [r.model_dump(mode="json") for r in results],
        "relayed": relayed,
        "completed_at": datetime.now(timezone.utc).isoformat(),
    }


async def _weekly_audit() -> Dict[str, Any]:
    store = create_store(settings)
    try:
        return await run_weekly_audit_and_relay(store)
    finally:
        await store.close()


@celery_app.task(
    name="services.dashboard_service.tasks.periodic_tasks.weekly_audit"
)
def weekly_audit() -> Dict[str, Any]:
    if not settings.database_url:
        logger.warning("DATABASE_URL is not configured")
        return {"status": "skipped", "reason": "database_url_missing"}

    return asyncio.run(_weekly_audit())
