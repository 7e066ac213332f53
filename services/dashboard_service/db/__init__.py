from services.dashboard_service.db.models import (
    Base,
    AuditRow,
    FindingRow,
    RecommendationRow,
)

from services.dashboard_service.db.session import (
    create_engine_for,
    create_sessionmaker,
    session_scope,
    init_db,
)

__all__ = [
    "Base",
    "AuditRow",
    "FindingRow",
    "RecommendationRow",
    "create_engine_for",
    "create_sessionmaker",
    "session_scope",
    "init_db",
]
