from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.dashboard_service.config import settings


def setup_cors(app: FastAPI) -> None:
    origins = settings.cors_origin_list

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
        max_age=3600
    )
