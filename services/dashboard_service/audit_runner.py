import asyncio
import sys

from config.logging_config import get_logger, setup_logging
from services.dashboard_service.analyzers import derived_metrics
from services.dashboard_service.analyzers.form_checker import check_form_health
from services.dashboard_service.config import settings
from services.dashboard_service.integrations.psi_api import fetch_pagespeed_metrics
from services.dashboard_service.schemas.dashboard import (
    AuditCreate,
    AuditRunSummary,
    FindingCreate,
    FindingType,
    Severity,
    SiteSlug,
)
from services.dashboard_service.store import DashboardStore, StoreBackend, create_store
from services.dashboard_service.store.base import utcnow

logger = get_logger(__name__)

SITES: tuple[tuple[SiteSlug, str], ...] = (
    (SiteSlug.BRUCEAC, "https://bruceac.com"),
    (SiteSlug.MERAKI, "https://merakirestoration.com"),
)


async def audit_site(store: DashboardStore, site: SiteSlug, url: str, pagespeed_api_key: str | None = None) -> AuditRunSummary:
    psi = await fetch_pagespeed_metrics(url, pagespeed_api_key)
    form = await check_form_health(url)

    payload = AuditCreate(
        site_slug=site,
        audit_date=utcnow(),
        lighthouse_score=psi.lighthouse,
        lcp_ms=derived_metrics.round_half_up(psi.lcp),
        cls=round(psi.cls, 3),
        fid_ms=derived_metrics.round_half_up(psi.fid),
        estimated_seo_visibility=derived_metrics.estimated_seo_visibility(psi.lighthouse, form.has_form),
        conversion_rate=derived_metrics.conversion_rate(form.has_form),
        critical_issues=derived_metrics.critical_issues(form.has_form),
        high_priority_issues=derived_metrics.high_priority_issues(psi.lighthouse),
    )

    audit = await store.create_audit(payload)

    if form.issue:
        await store.create_finding(FindingCreate(
            site_slug=site,
            audit_id=audit.id,
            title="Form availability issue",
            severity=Severity.CRITICAL,
            description=form.issue,
            type=FindingType.FORM_ERROR,
        ))

    if psi.lighthouse < derived_metrics.LIGHTHOUSE_TARGET:
        await store.create_finding(FindingCreate(
            site_slug=site,
            audit_id=audit.id,
            title="Performance below target",
            severity=Severity.HIGH,
            description=f"Lighthouse score is {psi.lighthouse}, target is 85+",
            type=FindingType.SPEED_ISSUE,
        ))

    logger.info(
        "Site audit stored",
        extra={
            "site": site.value,
            "audit_id": audit.id,
            "lighthouse": psi.lighthouse,
            "synthetic_metrics": psi.synthetic,
            "has_form": form.has_form,
        },
    )

    return AuditRunSummary(
        site=site,
        lighthouse=psi.lighthouse,
        issues=payload.critical_issues + payload.high_priority_issues,
    )


async def run_weekly_audit(
    store: DashboardStore,
    pagespeed_api_key: str | None = None,
    sites: tuple[tuple[SiteSlug, str], ...] = SITES,
) -> list[AuditRunSummary]:
    """Audit every configured site, one after another.

    A store failure aborts the run and propagates; sites already written
    stay written.
    """
    results = []
    for site, url in sites:
        results.append(await audit_site(store, site, url, pagespeed_api_key))
    return results


async def main() -> int:
    setup_logging("audit_runner")

    if not settings.database_url:
        logger.error("Missing DATABASE_URL; refusing to run the weekly audit")
        return 1

    store = create_store(settings)
    try:
        if store.backend is StoreBackend.SQL:
            await store.init_schema()
        logger.info("Starting weekly mission-control audit")
        results = await run_weekly_audit(store, settings.pagespeed_api_key)
        logger.info("Audit complete", extra={"results": [r.model_dump(mode="json") for r in results]})
    finally:
        await store.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
