import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SiteSlug(str, enum.Enum):
    BRUCEAC = "bruceac"
    MERAKI = "meraki"


class Severity(str, enum.Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Priority shares the severity ladder.
Priority = Severity

PRIORITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


class Impact(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecommendationStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class RecommendationCategory(str, enum.Enum):
    SEO = "seo"
    CONVERSION = "conversion"
    SPEED = "speed"
    DESIGN = "design"
    CONTENT = "content"


class FindingType(str, enum.Enum):
    BROKEN_LINK = "broken_link"
    FORM_ERROR = "form_error"
    SEO_GAP = "seo_gap"
    SPEED_ISSUE = "speed_issue"
    DESIGN_FLAW = "design_flaw"
    CONTENT_GAP = "content_gap"


def is_site_slug(value: str | None) -> bool:
    return value in {s.value for s in SiteSlug}


def is_severity(value: str | None) -> bool:
    return value in {s.value for s in Severity}


def is_recommendation_status(value) -> bool:
    return isinstance(value, str) and value in {s.value for s in RecommendationStatus}


class AuditCreate(BaseModel):
    site_slug: SiteSlug
    audit_date: datetime
    lighthouse_score: int = Field(ge=0, le=100)
    lcp_ms: float = Field(ge=0)
    cls: float = Field(ge=0)
    fid_ms: float = Field(ge=0)
    estimated_seo_visibility: int = Field(ge=0, le=100)
    conversion_rate: float = Field(ge=0, le=1)
    critical_issues: int = Field(ge=0)
    high_priority_issues: int = Field(ge=0)


class Audit(AuditCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class FindingCreate(BaseModel):
    site_slug: SiteSlug
    audit_id: str
    title: str
    severity: Severity
    description: str
    type: FindingType


class Finding(FindingCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class Recommendation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    site_slug: SiteSlug
    title: str
    description: str
    impact: Impact
    effort_hours: float
    priority: Priority
    status: RecommendationStatus
    blocker_notes: str | None = None
    category: RecommendationCategory
    owner: str | None = None
    created_at: datetime
    updated_at: datetime


class RecommendationPatch(BaseModel):
    """Fields a caller may change on a recommendation.

    Only keys that were explicitly supplied are written, so
    ``RecommendationPatch(status="blocked")`` leaves ``owner`` and
    ``blocker_notes`` untouched while ``owner=None`` clears the owner.
    """

    model_config = ConfigDict(extra="ignore")

    status: RecommendationStatus | None = None
    blocker_notes: str | None = None
    owner: str | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class DashboardSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    generated_at: datetime = Field(alias="generatedAt")
    latest_audits: dict[SiteSlug, Audit | None] = Field(alias="latestAudits")
    audits_by_site: dict[SiteSlug, list[Audit]] = Field(alias="auditsBySite")
    recommendations: list[Recommendation]
    findings: list[Finding]


class AuditRunSummary(BaseModel):
    site: SiteSlug
    lighthouse: int
    issues: int
