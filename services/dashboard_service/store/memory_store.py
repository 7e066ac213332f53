import uuid
from datetime import datetime, timedelta

from config.logging_config import get_logger
from services.dashboard_service.schemas.dashboard import (
    Audit,
    AuditCreate,
    Finding,
    FindingCreate,
    PRIORITY_RANK,
    Recommendation,
    RecommendationPatch,
    Severity,
    SiteSlug,
)
from services.dashboard_service.store.base import (
    DEFAULT_FINDINGS_LIMIT,
    DEFAULT_HISTORY_DAYS,
    DashboardStore,
    StoreBackend,
    utcnow,
)

logger = get_logger(__name__)


def build_seed_audits(now: datetime, days: int = 30) -> list[Audit]:
    audits = []
    for i in range(days):
        date = now - timedelta(days=i)
        audits.append(Audit(
            id=f"bruce-{i}",
            site_slug=SiteSlug.BRUCEAC,
            audit_date=date,
            lighthouse_score=74 + ((i * 3) % 20),
            lcp_ms=1500 + ((i * 70) % 1200),
            cls=round(0.07 + ((i * 0.01) % 0.1), 3),
            fid_ms=80 + ((i * 9) % 90),
            estimated_seo_visibility=58 + ((i * 2) % 30),
            conversion_rate=round(0.11 + ((i * 0.005) % 0.1), 3),
            critical_issues=1 if i % 6 == 0 else 0,
            high_priority_issues=(i + 2) % 4,
            created_at=date,
        ))
        audits.append(Audit(
            id=f"meraki-{i}",
            site_slug=SiteSlug.MERAKI,
            audit_date=date,
            lighthouse_score=69 + ((i * 4) % 22),
            lcp_ms=1800 + ((i * 90) % 1300),
            cls=round(0.09 + ((i * 0.01) % 0.12), 3),
            fid_ms=95 + ((i * 8) % 100),
            estimated_seo_visibility=52 + ((i * 3) % 35),
            conversion_rate=round(0.09 + ((i * 0.004) % 0.08), 3),
            critical_issues=1 if i % 5 == 0 else 0,
            high_priority_issues=(i + 1) % 5,
            created_at=date,
        ))
    return audits


def build_seed_recommendations(now: datetime) -> list[Recommendation]:
    created = now - timedelta(days=3)
    return [
        Recommendation(
            id="r1",
            site_slug=SiteSlug.BRUCEAC,
            title="Fix homepage hero LCP image preload",
            description="Preload hero image and convert to AVIF to cut LCP by ~500ms.",
            impact="high",
            effort_hours=2,
            priority="critical",
            status="in_progress",
            blocker_notes=None,
            category="speed",
            owner="Ricky",
            created_at=created,
            updated_at=created,
        ),
        Recommendation(
            id="r2",
            site_slug=SiteSlug.MERAKI,
            title="Repair quote form email validation edge cases",
            description="Client-side and server-side validation mismatch drops submissions.",
            impact="high",
            effort_hours=3,
            priority="critical",
            status="not_started",
            blocker_notes=None,
            category="conversion",
            owner=None,
            created_at=created,
            updated_at=created - timedelta(hours=1),
        ),
        Recommendation(
            id="r3",
            site_slug=SiteSlug.MERAKI,
            title="Add location pages for top ZIPs",
            description="Build 5 geo-targeted pages to increase local SEO coverage.",
            impact="medium",
            effort_hours=5,
            priority="high",
            status="blocked",
            blocker_notes="Need approved copy deck",
            category="seo",
            owner="Content",
            created_at=created,
            updated_at=created,
        ),
    ]


def build_seed_findings(now: datetime) -> list[Finding]:
    return [
        Finding(
            id="f1",
            site_slug=SiteSlug.BRUCEAC,
            audit_id="bruce-0",
            title="Broken financing link on services page",
            severity="critical",
            description="404 on CTA path /financing",
            type="broken_link",
            created_at=now,
        ),
        Finding(
            id="f2",
            site_slug=SiteSlug.MERAKI,
            audit_id="meraki-0",
            title="Quote form timeout after 12s",
            severity="high",
            description="Form endpoint timing out under moderate load.",
            type="form_error",
            created_at=now - timedelta(minutes=5),
        ),
    ]


class InMemoryDashboardStore(DashboardStore):
    """Process-local store used when no database is configured.

    Each instance owns its rows; nothing is shared between instances.
    """

    backend = StoreBackend.MEMORY

    def __init__(
        self,
        audits: list[Audit] | None = None,
        findings: list[Finding] | None = None,
        recommendations: list[Recommendation] | None = None,
    ):
        self._audits = list(audits or [])
        self._findings = list(findings or [])
        self._recommendations = list(recommendations or [])

    @classmethod
    def with_seed_data(cls, now: datetime | None = None) -> "InMemoryDashboardStore":
        now = now or utcnow()
        return cls(
            audits=build_seed_audits(now),
            findings=build_seed_findings(now),
            recommendations=build_seed_recommendations(now),
        )

    async def get_latest_audit(self, site: SiteSlug) -> Audit | None:
        rows = [a for a in self._audits if a.site_slug == site]
        if not rows:
            return None
        return max(rows, key=lambda a: a.audit_date)

    async def get_audit_history(self, site: SiteSlug, days: float = DEFAULT_HISTORY_DAYS) -> list[Audit]:
        cutoff = utcnow() - timedelta(days=days)
        rows = [a for a in self._audits if a.site_slug == site and a.audit_date >= cutoff]
        return sorted(rows, key=lambda a: a.audit_date)

    async def get_recommendations(self, site: SiteSlug | None = None) -> list[Recommendation]:
        rows = [r for r in self._recommendations if not site or r.site_slug == site]
        # Stable two-pass sort: recency first, then priority rank.
        rows.sort(key=lambda r: r.updated_at, reverse=True)
        rows.sort(key=lambda r: PRIORITY_RANK[r.priority])
        return rows

    async def update_recommendation(self, recommendation_id: str, patch: RecommendationPatch) -> Recommendation | None:
        for idx, rec in enumerate(self._recommendations):
            if rec.id != recommendation_id:
                continue
            updated = rec.model_copy(update={**patch.changes(), "updated_at": utcnow()})
            self._recommendations[idx] = updated
            logger.info(
                "Recommendation updated",
                extra={"recommendation_id": recommendation_id, "fields": sorted(patch.changes())},
            )
            return updated
        return None

    async def get_findings(
        self,
        site: SiteSlug | None = None,
        severity: Severity | None = None,
        limit: int = DEFAULT_FINDINGS_LIMIT,
    ) -> list[Finding]:
        rows = [
            f for f in self._findings
            if (not site or f.site_slug == site) and (not severity or f.severity == severity)
        ]
        rows.sort(key=lambda f: f.created_at, reverse=True)
        return rows[:limit]

    async def create_audit(self, payload: AuditCreate) -> Audit:
        audit = Audit(**payload.model_dump(), id=str(uuid.uuid4()), created_at=utcnow())
        self._audits.append(audit)
        return audit

    async def create_finding(self, payload: FindingCreate) -> Finding:
        finding = Finding(**payload.model_dump(), id=str(uuid.uuid4()), created_at=utcnow())
        self._findings.append(finding)
        return finding
