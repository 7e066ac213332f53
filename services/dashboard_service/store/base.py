import asyncio
import enum
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from services.dashboard_service.schemas.dashboard import (
    Audit,
    AuditCreate,
    DashboardSummary,
    Finding,
    FindingCreate,
    Recommendation,
    RecommendationPatch,
    Severity,
    SiteSlug,
)

DEFAULT_HISTORY_DAYS = 30
DEFAULT_FINDINGS_LIMIT = 100
SUMMARY_FINDINGS_LIMIT = 50


class StoreBackend(str, enum.Enum):
    SQL = "sql"
    MEMORY = "memory"


class DashboardStore(ABC):
    """Read/write access to audits, findings and recommendations.

    Implementations never mix backends: the variant is picked once when the
    store is constructed (see ``create_store``). ``update_recommendation``
    returns ``None`` for an unknown id; any other failure raises.
    """

    backend: StoreBackend

    @abstractmethod
    async def get_latest_audit(self, site: SiteSlug) -> Audit | None:
        ...

    @abstractmethod
    async def get_audit_history(self, site: SiteSlug, days: float = DEFAULT_HISTORY_DAYS) -> list[Audit]:
        ...

    @abstractmethod
    async def get_recommendations(self, site: SiteSlug | None = None) -> list[Recommendation]:
        ...

    @abstractmethod
    async def update_recommendation(self, recommendation_id: str, patch: RecommendationPatch) -> Recommendation | None:
        ...

    @abstractmethod
    async def get_findings(
        self,
        site: SiteSlug | None = None,
        severity: Severity | None = None,
        limit: int = DEFAULT_FINDINGS_LIMIT,
    ) -> list[Finding]:
        ...

    @abstractmethod
    async def create_audit(self, payload: AuditCreate) -> Audit:
        ...

    @abstractmethod
    async def create_finding(self, payload: FindingCreate) -> Finding:
        ...

    async def close(self) -> None:
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def get_dashboard_summary(store: DashboardStore) -> DashboardSummary:
    sites = list(SiteSlug)
    latest = await asyncio.gather(*(store.get_latest_audit(site) for site in sites))
    history = await asyncio.gather(*(store.get_audit_history(site, DEFAULT_HISTORY_DAYS) for site in sites))
    recommendations = await store.get_recommendations()
    findings = await store.get_findings(limit=SUMMARY_FINDINGS_LIMIT)

    return DashboardSummary(
        generated_at=utcnow(),
        latest_audits=dict(zip(sites, latest)),
        audits_by_site=dict(zip(sites, history)),
        recommendations=recommendations,
        findings=findings,
    )
