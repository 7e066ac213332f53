from config.logging_config import get_logger
from services.dashboard_service.store.base import (
    DashboardStore,
    StoreBackend,
    get_dashboard_summary,
)
from services.dashboard_service.store.memory_store import InMemoryDashboardStore
from services.dashboard_service.store.sql_store import SqlDashboardStore

logger = get_logger(__name__)


def resolve_backend(database_url: str | None) -> StoreBackend:
    if database_url and database_url.strip():
        return StoreBackend.SQL
    return StoreBackend.MEMORY


def create_store(settings) -> DashboardStore:
    backend = resolve_backend(settings.database_url)
    if backend is StoreBackend.SQL:
        store = SqlDashboardStore.from_url(settings.database_url)
    else:
        store = InMemoryDashboardStore.with_seed_data()
    logger.info("Dashboard store selected", extra={"backend": backend.value})
    return store


__all__ = [
    "DashboardStore",
    "StoreBackend",
    "InMemoryDashboardStore",
    "SqlDashboardStore",
    "create_store",
    "resolve_backend",
    "get_dashboard_summary",
]
