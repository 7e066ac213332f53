import random
import time
from dataclasses import dataclass

import httpx

from config.logging_config import get_logger, log_external_api_call
from services.dashboard_service.analyzers.derived_metrics import round_half_up
from services.dashboard_service.config import settings

logger = get_logger(__name__)

PSI_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

DEFAULT_PERFORMANCE_SCORE = 0.75
DEFAULT_LCP_MS = 2800
DEFAULT_CLS = 0.12
DEFAULT_FID_MS = 120


@dataclass
class PageSpeedMetrics:
    lighthouse: int
    lcp: float
    cls: float
    fid: float
    synthetic: bool = False


def _random_between(min_value: int, max_value: int) -> int:
    return round_half_up(min_value + random.random() * (max_value - min_value))


def synthetic_metrics() -> PageSpeedMetrics:
    return PageSpeedMetrics(
        lighthouse=_random_between(65, 90),
        lcp=_random_between(1700, 3500),
        cls=round(random.random() * 0.18, 3),
        fid=_random_between(40, 180),
        synthetic=True,
    )


def _section(parent, key: str) -> dict:
    value = parent.get(key) if isinstance(parent, dict) else None
    return value if isinstance(value, dict) else {}


def _numeric(audits: dict, key: str, default: float) -> float:
    value = _section(audits, key).get("numericValue")
    return float(value) if isinstance(value, (int, float)) else float(default)


def parse_pagespeed_response(j: dict) -> PageSpeedMetrics:
    lh = _section(j, "lighthouseResult")
    audits = _section(lh, "audits")
    score = _section(_section(lh, "categories"), "performance").get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        score = DEFAULT_PERFORMANCE_SCORE

    return PageSpeedMetrics(
        lighthouse=round_half_up(score * 100),
        lcp=_numeric(audits, "largest-contentful-paint", DEFAULT_LCP_MS),
        cls=_numeric(audits, "cumulative-layout-shift", DEFAULT_CLS),
        fid=_numeric(audits, "max-potential-fid", DEFAULT_FID_MS),
    )


async def fetch_pagespeed_metrics(url: str, api_key: str | None = None) -> PageSpeedMetrics:
    params = {"url": url, "strategy": "mobile", "category": "performance"}
    if api_key:
        params["key"] = api_key

    started = time.monotonic()
    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout_s) as client:
            r = await client.get(PSI_ENDPOINT, params=params)
        if r.status_code >= 400:
            log_external_api_call(logger, "pagespeed", url, time.monotonic() - started, r.status_code,
                                  error=f"HTTP {r.status_code}, using synthetic metrics")
            return synthetic_metrics()
        j = r.json()
    except Exception as e:
        log_external_api_call(logger, "pagespeed", url, time.monotonic() - started, None, error=e)
        return synthetic_metrics()

    log_external_api_call(logger, "pagespeed", url, time.monotonic() - started, r.status_code)
    if not isinstance(j, dict):
        return synthetic_metrics()
    return parse_pagespeed_response(j)
