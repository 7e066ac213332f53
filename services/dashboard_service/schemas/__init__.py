from services.dashboard_service.schemas.dashboard import (
    SiteSlug,
    Severity,
    Priority,
    PRIORITY_RANK,
    Impact,
    RecommendationStatus,
    RecommendationCategory,
    FindingType,
    Audit,
    AuditCreate,
    Finding,
    FindingCreate,
    Recommendation,
    RecommendationPatch,
    DashboardSummary,
    AuditRunSummary,
    is_site_slug,
    is_severity,
    is_recommendation_status,
)

__all__ = [
    "SiteSlug",
    "Severity",
    "Priority",
    "PRIORITY_RANK",
    "Impact",
    "RecommendationStatus",
    "RecommendationCategory",
    "FindingType",
    "Audit",
    "AuditCreate",
    "Finding",
    "FindingCreate",
    "Recommendation",
    "RecommendationPatch",
    "DashboardSummary",
    "AuditRunSummary",
    "is_site_slug",
    "is_severity",
    "is_recommendation_status",
]
