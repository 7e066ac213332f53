from datetime import timedelta

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncEngine

from config.logging_config import get_logger
from services.dashboard_service.db.models import AuditRow, FindingRow, RecommendationRow
from services.dashboard_service.db.session import create_engine_for, create_sessionmaker, session_scope, init_db
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
    ensure_aware,
    utcnow,
)

logger = get_logger(__name__)

_priority_order = case(
    {p.value: rank for p, rank in PRIORITY_RANK.items()},
    value=RecommendationRow.priority,
    else_=len(PRIORITY_RANK),
)


def _audit(row: AuditRow) -> Audit:
    audit = Audit.model_validate(row)
    return audit.model_copy(update={
        "audit_date": ensure_aware(audit.audit_date),
        "created_at": ensure_aware(audit.created_at),
    })


def _finding(row: FindingRow) -> Finding:
    finding = Finding.model_validate(row)
    return finding.model_copy(update={"created_at": ensure_aware(finding.created_at)})


def _recommendation(row: RecommendationRow) -> Recommendation:
    rec = Recommendation.model_validate(row)
    return rec.model_copy(update={
        "created_at": ensure_aware(rec.created_at),
        "updated_at": ensure_aware(rec.updated_at),
    })


class SqlDashboardStore(DashboardStore):
    backend = StoreBackend.SQL

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._sessionmaker = create_sessionmaker(engine)

    @classmethod
    def from_url(cls, url: str) -> "SqlDashboardStore":
        return cls(create_engine_for(url))

    async def init_schema(self) -> None:
        await init_db(self._engine)

    async def get_latest_audit(self, site: SiteSlug) -> Audit | None:
        async with session_scope(self._sessionmaker) as session:
            res = await session.execute(
                select(AuditRow)
                .where(AuditRow.site_slug == SiteSlug(site).value)
                .order_by(AuditRow.audit_date.desc())
                .limit(1)
            )
            row = res.scalar_one_or_none()
            return _audit(row) if row is not None else None

    async def get_audit_history(self, site: SiteSlug, days: float = DEFAULT_HISTORY_DAYS) -> list[Audit]:
        cutoff = utcnow() - timedelta(days=days)
        async with session_scope(self._sessionmaker) as session:
            res = await session.execute(
                select(AuditRow)
                .where(AuditRow.site_slug == SiteSlug(site).value, AuditRow.audit_date >= cutoff)
                .order_by(AuditRow.audit_date.asc())
            )
            return [_audit(row) for row in res.scalars().all()]

    async def get_recommendations(self, site: SiteSlug | None = None) -> list[Recommendation]:
        query = select(RecommendationRow)
        if site:
            query = query.where(RecommendationRow.site_slug == SiteSlug(site).value)
        query = query.order_by(_priority_order.asc(), RecommendationRow.updated_at.desc())

        async with session_scope(self._sessionmaker) as session:
            res = await session.execute(query)
            return [_recommendation(row) for row in res.scalars().all()]

    async def update_recommendation(self, recommendation_id: str, patch: RecommendationPatch) -> Recommendation | None:
        changes = patch.changes()
        async with session_scope(self._sessionmaker) as session:
            row = await session.get(RecommendationRow, recommendation_id)
            if row is None:
                return None

            for field, value in changes.items():
                setattr(row, field, value.value if hasattr(value, "value") else value)
            row.updated_at = utcnow()
            await session.commit()

            logger.info(
                "Recommendation updated",
                extra={"recommendation_id": recommendation_id, "fields": sorted(changes)},
            )
            return _recommendation(row)

    async def get_findings(
        self,
        site: SiteSlug | None = None,
        severity: Severity | None = None,
        limit: int = DEFAULT_FINDINGS_LIMIT,
    ) -> list[Finding]:
        query = select(FindingRow)
        if site:
            query = query.where(FindingRow.site_slug == SiteSlug(site).value)
        if severity:
            query = query.where(FindingRow.severity == Severity(severity).value)
        query = query.order_by(FindingRow.created_at.desc()).limit(limit)

        async with session_scope(self._sessionmaker) as session:
            res = await session.execute(query)
            return [_finding(row) for row in res.scalars().all()]

    async def create_audit(self, payload: AuditCreate) -> Audit:
        data = payload.model_dump()
        data["site_slug"] = payload.site_slug.value
        async with session_scope(self._sessionmaker) as session:
            row = AuditRow(**data, created_at=utcnow())
            session.add(row)
            await session.commit()
            return _audit(row)

    async def create_finding(self, payload: FindingCreate) -> Finding:
        data = payload.model_dump()
        data.update(
            site_slug=payload.site_slug.value,
            severity=payload.severity.value,
            type=payload.type.value,
        )
        async with session_scope(self._sessionmaker) as session:
            row = FindingRow(**data, created_at=utcnow())
            session.add(row)
            await session.commit()
            return _finding(row)

    async def add_recommendation(self, rec: Recommendation) -> Recommendation:
        data = rec.model_dump()
        for key in ("site_slug", "impact", "priority", "status", "category"):
            data[key] = getattr(rec, key).value
        async with session_scope(self._sessionmaker) as session:
            row = RecommendationRow(**data)
            session.add(row)
            await session.commit()
            return _recommendation(row)

    async def close(self) -> None:
        await self._engine.dispose()
