from services.dashboard_service.middleware.cors import setup_cors
from services.dashboard_service.middleware.logging import LoggingMiddleware
from services.dashboard_service.middleware.error_handler import DashboardAPIError, setup_error_handlers

__all__ = ["setup_cors", "LoggingMiddleware", "DashboardAPIError", "setup_error_handlers"]
