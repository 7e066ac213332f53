import re
from dataclasses import dataclass

import httpx

from config.logging_config import get_logger
from services.dashboard_service.config import settings

logger = get_logger(__name__)

FORM_TAG = re.compile(r"<form[\s>]", re.I)

NO_FORM_ISSUE = "No form detected on landing page"
UNREACHABLE_ISSUE = "Site unreachable during form check"


@dataclass
class FormHealth:
    has_form: bool
    issue: str | None


def detect_form(html: str | None) -> bool:
    return bool(html) and FORM_TAG.search(html) is not None


async def check_form_health(url: str) -> FormHealth:
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=settings.request_timeout_s) as client:
            r = await client.get(url)
            html = r.text
    except Exception as e:
        logger.warning("Form check failed", extra={"url": url, "error": str(e)})
        return FormHealth(has_form=False, issue=UNREACHABLE_ISSUE)

    has_form = detect_form(html)
    return FormHealth(has_form=has_form, issue=None if has_form else NO_FORM_ISSUE)
