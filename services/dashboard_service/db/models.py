import uuid
from datetime import datetime

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, DateTime, Integer, Float, Text, ForeignKey, Index


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class AuditRow(Base):
    __tablename__ = "audits"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    site_slug: Mapped[str] = mapped_column(String(32), nullable=False)
    audit_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    lighthouse_score: Mapped[int] = mapped_column(Integer, nullable=False)
    lcp_ms: Mapped[float] = mapped_column(Float, nullable=False)
    cls: Mapped[float] = mapped_column(Float, nullable=False)
    fid_ms: Mapped[float] = mapped_column(Float, nullable=False)
    estimated_seo_visibility: Mapped[int] = mapped_column(Integer, nullable=False)
    conversion_rate: Mapped[float] = mapped_column(Float, nullable=False)
    critical_issues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    high_priority_issues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_audits_site_date", "site_slug", "audit_date"),
    )


class FindingRow(Base):
    __tablename__ = "findings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    site_slug: Mapped[str] = mapped_column(String(32), nullable=False)
    audit_id: Mapped[str] = mapped_column(String(64), ForeignKey("audits.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_findings_site_severity", "site_slug", "severity"),
        Index("idx_findings_created_at", "created_at"),
    )


class RecommendationRow(Base):
    __tablename__ = "recommendations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    site_slug: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    impact: Mapped[str] = mapped_column(String(16), nullable=False)
    effort_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    priority: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="not_started")
    blocker_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_recommendations_site_slug", "site_slug"),
    )
