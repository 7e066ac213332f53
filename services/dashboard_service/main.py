import math
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from config.logging_config import get_logger, setup_logging
from services.dashboard_service.audit_runner import run_weekly_audit
from services.dashboard_service.config import settings
from services.dashboard_service.middleware import (
    DashboardAPIError,
    LoggingMiddleware,
    setup_cors,
    setup_error_handlers,
)
from services.dashboard_service.schemas.dashboard import (
    RecommendationPatch,
    Severity,
    SiteSlug,
    is_recommendation_status,
    is_severity,
    is_site_slug,
)
from services.dashboard_service.store import (
    DashboardStore,
    StoreBackend,
    create_store,
    get_dashboard_summary,
)
from services.dashboard_service.store.base import DEFAULT_HISTORY_DAYS

logger = get_logger(__name__)

DEFAULT_SITE = SiteSlug.BRUCEAC.value
FINDINGS_ENDPOINT_LIMIT = 200
MIN_HISTORY_DAYS = 1
MAX_HISTORY_DAYS = 365
DAYS_ERROR = f"days must be between {MIN_HISTORY_DAYS} and {MAX_HISTORY_DAYS}"


def get_store(request: Request) -> DashboardStore:
    return request.app.state.store


def _site_or_400(site: str | None, default: str | None = DEFAULT_SITE) -> SiteSlug | None:
    if site is None or (site == "" and default is None):
        return SiteSlug(default) if default else None
    if not is_site_slug(site):
        raise DashboardAPIError(400, "Invalid site")
    return SiteSlug(site)


def parse_days(raw: str | None) -> float:
    if raw is None:
        return DEFAULT_HISTORY_DAYS
    try:
        days = float(raw)
    except ValueError:
        raise DashboardAPIError(400, DAYS_ERROR)
    if not math.isfinite(days) or days < MIN_HISTORY_DAYS or days > MAX_HISTORY_DAYS:
        raise DashboardAPIError(400, DAYS_ERROR)
    return days


def create_app(store: DashboardStore | None = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or create_store(settings)
        if app.state.store.backend is StoreBackend.SQL:
            await app.state.store.init_schema()
        logger.info("Dashboard service started", extra={"backend": app.state.store.backend.value})

        yield

        await app.state.store.close()
        logger.info("Dashboard service stopped")

    app = FastAPI(
        title="Mission Control Dashboard",
        description="Website performance audits, findings and recommendations",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url=None,
    )

    setup_cors(app)
    app.add_middleware(LoggingMiddleware)
    setup_error_handlers(app)

    @app.get("/health")
    async def health(request: Request) -> dict:
        return {
            "status": "ok",
            "service": settings.service_name,
            "store": request.app.state.store.backend.value,
            "ts": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/audits")
    async def latest_audit(site: str | None = None, store: DashboardStore = Depends(get_store)):
        slug = _site_or_400(site)
        try:
            audit = await store.get_latest_audit(slug)
        except Exception as e:
            raise DashboardAPIError(500, "Failed to fetch latest audit", str(e))
        return {"data": audit.model_dump(mode="json") if audit else None}

    @app.get("/api/audits/history")
    async def audit_history(site: str | None = None, days: str | None = None, store: DashboardStore = Depends(get_store)):
        slug = _site_or_400(site)
        window = parse_days(days)
        try:
            audits = await store.get_audit_history(slug, window)
        except Exception as e:
            raise DashboardAPIError(500, "Failed to fetch audit history", str(e))
        return {"data": [a.model_dump(mode="json") for a in audits]}

    @app.get("/api/findings")
    async def findings(site: str | None = None, severity: str | None = None, store: DashboardStore = Depends(get_store)):
        slug = _site_or_400(site, default=None)
        if severity and not is_severity(severity):
            raise DashboardAPIError(400, "Invalid severity")
        try:
            rows = await store.get_findings(
                site=slug,
                severity=Severity(severity) if severity else None,
                limit=FINDINGS_ENDPOINT_LIMIT,
            )
        except Exception as e:
            raise DashboardAPIError(500, "Failed to fetch findings", str(e))
        return {"data": [f.model_dump(mode="json") for f in rows]}

    @app.get("/api/recommendations")
    async def recommendations(site: str | None = None, store: DashboardStore = Depends(get_store)):
        slug = _site_or_400(site, default=None)
        try:
            rows = await store.get_recommendations(slug)
        except Exception as e:
            raise DashboardAPIError(500, "Failed to fetch recommendations", str(e))
        return {"data": [r.model_dump(mode="json") for r in rows]}

    @app.api_route("/api/recommendations/{recommendation_id}", methods=["POST", "PATCH"])
    async def update_recommendation(recommendation_id: str, request: Request, store: DashboardStore = Depends(get_store)):
        try:
            body = await request.json()
        except ValueError:
            raise DashboardAPIError(400, "Invalid JSON body")

        if not isinstance(body, dict) or not is_recommendation_status(body.get("status")):
            raise DashboardAPIError(400, "Invalid status")

        fields = {"status": body["status"]}
        for key in ("blocker_notes", "owner"):
            if key in body:
                fields[key] = body[key]

        try:
            patch = RecommendationPatch(**fields)
        except ValidationError as e:
            raise DashboardAPIError(400, "Invalid recommendation patch", str(e))

        try:
            updated = await store.update_recommendation(recommendation_id, patch)
        except Exception as e:
            raise DashboardAPIError(500, "Failed to update recommendation", str(e))

        if updated is None:
            raise DashboardAPIError(404, "Recommendation not found")
        return {"data": updated.model_dump(mode="json")}

    @app.get("/api/dashboard")
    async def dashboard(store: DashboardStore = Depends(get_store)):
        try:
            summary = await get_dashboard_summary(store)
        except Exception as e:
            raise DashboardAPIError(500, "Failed to fetch dashboard data", str(e))
        return {"data": summary.model_dump(mode="json", by_alias=True)}

    @app.get("/api/cron/weekly-audit")
    async def weekly_audit(request: Request, store: DashboardStore = Depends(get_store)):
        auth = request.headers.get("authorization")
        if settings.cron_secret and auth != f"Bearer {settings.cron_secret}":
            raise DashboardAPIError(401, "Unauthorized")

        if store.backend is not StoreBackend.SQL:
            raise DashboardAPIError(500, "Missing database configuration")

        try:
            results = await run_weekly_audit(store, settings.pagespeed_api_key)
        except Exception as e:
            logger.error("Weekly audit failed", extra={"error": str(e)}, exc_info=True)
            return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})

        return {"ok": True, "results": [r.model_dump(mode="json") for r in results]}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    setup_logging(settings.service_name)
    uvicorn.run("services.dashboard_service.main:app", host="0.0.0.0", port=settings.port, reload=False)
