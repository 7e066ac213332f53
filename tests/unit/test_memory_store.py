from datetime import timedelta

import pytest

from services.dashboard_service.schemas.dashboard import (
    AuditCreate,
    FindingCreate,
    RecommendationPatch,
    RecommendationStatus,
    Severity,
    SiteSlug,
)
from services.dashboard_service.store import InMemoryDashboardStore, StoreBackend, get_dashboard_summary, resolve_backend
from services.dashboard_service.store.base import utcnow


def _seeded():
    # Seed slightly in the past so day boundaries are unambiguous.
    return InMemoryDashboardStore.with_seed_data(now=utcnow() - timedelta(hours=1))


def test_resolve_backend():
    assert resolve_backend(None) is StoreBackend.MEMORY
    assert resolve_backend("   ") is StoreBackend.MEMORY
    assert resolve_backend("postgresql://db/mc") is StoreBackend.SQL


@pytest.mark.asyncio
async def test_history_window_and_order():
    store = _seeded()

    rows = await store.get_audit_history(SiteSlug.MERAKI, days=7)

    assert len(rows) == 7
    assert all(r.site_slug == SiteSlug.MERAKI for r in rows)
    dates = [r.audit_date for r in rows]
    assert dates == sorted(dates)
    assert rows[-1].id == "meraki-0"


@pytest.mark.asyncio
async def test_latest_audit():
    store = _seeded()

    latest = await store.get_latest_audit(SiteSlug.BRUCEAC)

    assert latest.id == "bruce-0"
    assert latest.lighthouse_score == 74
    assert await InMemoryDashboardStore().get_latest_audit(SiteSlug.BRUCEAC) is None


@pytest.mark.asyncio
async def test_recommendations_ordered_by_priority_then_recency():
    store = _seeded()

    rows = await store.get_recommendations()
    assert [r.id for r in rows] == ["r1", "r2", "r3"]

    meraki = await store.get_recommendations(SiteSlug.MERAKI)
    assert [r.id for r in meraki] == ["r2", "r3"]


@pytest.mark.asyncio
async def test_update_recommendation_touches_only_given_fields():
    store = _seeded()
    before = {r.id: r for r in await store.get_recommendations()}["r3"]

    updated = await store.update_recommendation(
        "r3", RecommendationPatch(status=RecommendationStatus.IN_PROGRESS, blocker_notes=None)
    )

    assert updated.status == RecommendationStatus.IN_PROGRESS
    assert updated.blocker_notes is None
    assert updated.owner == "Content"
    assert updated.updated_at > before.updated_at


@pytest.mark.asyncio
async def test_update_unknown_recommendation_returns_none():
    store = _seeded()
    before = await store.get_recommendations()

    result = await store.update_recommendation("nope", RecommendationPatch(status=RecommendationStatus.COMPLETED))

    assert result is None
    assert await store.get_recommendations() == before


@pytest.mark.asyncio
async def test_findings_filters_and_limit():
    store = _seeded()

    assert [f.id for f in await store.get_findings()] == ["f1", "f2"]
    assert [f.id for f in await store.get_findings(site=SiteSlug.MERAKI)] == ["f2"]
    assert [f.id for f in await store.get_findings(severity=Severity.CRITICAL)] == ["f1"]
    assert await store.get_findings(site=SiteSlug.MERAKI, severity=Severity.CRITICAL) == []
    assert len(await store.get_findings(limit=1)) == 1


@pytest.mark.asyncio
async def test_create_audit_and_finding():
    store = InMemoryDashboardStore()
    audit = await store.create_audit(AuditCreate(
        site_slug=SiteSlug.BRUCEAC,
        audit_date=utcnow(),
        lighthouse_score=80,
        lcp_ms=2100,
        cls=0.05,
        fid_ms=90,
        estimated_seo_visibility=68,
        conversion_rate=0.11,
        critical_issues=0,
        high_priority_issues=1,
    ))
    finding = await store.create_finding(FindingCreate(
        site_slug=SiteSlug.BRUCEAC,
        audit_id=audit.id,
        title="Performance below target",
        severity=Severity.HIGH,
        description="Lighthouse score is 70, target is 85+",
        type="speed_issue",
    ))

    assert audit.id and finding.id
    assert (await store.get_latest_audit(SiteSlug.BRUCEAC)).id == audit.id
    assert (await store.get_findings())[0].audit_id == audit.id


@pytest.mark.asyncio
async def test_dashboard_summary_covers_both_sites():
    store = _seeded()

    summary = await get_dashboard_summary(store)
    payload = summary.model_dump(mode="json", by_alias=True)

    assert set(payload["latestAudits"]) == {"bruceac", "meraki"}
    assert set(payload["auditsBySite"]) == {"bruceac", "meraki"}
    assert len(payload["auditsBySite"]["bruceac"]) == 30
    assert len(payload["recommendations"]) == 3
    assert len(payload["findings"]) == 2
    assert "generatedAt" in payload
