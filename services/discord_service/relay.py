from datetime import datetime

from config.logging_config import get_logger
from services.dashboard_service.schemas.dashboard import Audit, Finding, Recommendation, Severity
from services.discord_service.client import DiscordClient
from services.discord_service.config import settings
from services.discord_service.formatting import ms, pct, trend
from services.discord_service.schemas import AuditReport, ReportMetrics, ReportRecommendation

logger = get_logger(__name__)

COLOR_BLUE = 3447003
COLOR_RED = 15158332
COLOR_YELLOW = 16776960

ALERT_COLORS = {
    "critical": COLOR_RED,
    "high": COLOR_YELLOW,
    "medium": COLOR_BLUE,
}

TOP_RECOMMENDATIONS = 3
FOOTER_TEXT = "Mission Control Dashboard"


def build_audit_report(
    audit: Audit,
    findings: list[Finding],
    recommendations: list[Recommendation],
    previous: Audit | None = None,
) -> AuditReport:
    own = [f for f in findings if f.audit_id == audit.id]
    lighthouse_trend = None
    if previous is not None:
        lighthouse_trend = trend(audit.lighthouse_score, previous.lighthouse_score)

    return AuditReport(
        site=audit.site_slug.value,
        timestamp=audit.audit_date.isoformat(),
        metrics=ReportMetrics(
            lighthouse_score=audit.lighthouse_score,
            page_speed_ms=audit.lcp_ms,
            seo_visibility=audit.estimated_seo_visibility,
            conversion_rate=audit.conversion_rate,
            lighthouse_trend=lighthouse_trend,
        ),
        critical_issues=[f.title for f in own if f.severity == Severity.CRITICAL],
        high_priority_items=[f.title for f in own if f.severity == Severity.HIGH],
        recommendations=[
            ReportRecommendation(title=r.title, impact=r.impact.value, effort_hours=r.effort_hours)
            for r in recommendations
            if r.site_slug == audit.site_slug
        ][:TOP_RECOMMENDATIONS],
    )


def _bullets(items: list[str], empty: str) -> str:
    return "\n".join(f"• {item}" for item in items) if items else empty


def _hours(value: float) -> str:
    return f"{value:g}h"


def build_report_embed(report: AuditReport) -> dict:
    m = report.metrics
    metrics_lines = [
        f"• Lighthouse Score: **{m.lighthouse_score}/100**",
        f"• Page Speed: **{ms(m.page_speed_ms)}**",
        f"• SEO Visibility: **{m.seo_visibility}%**",
        f"• Conversion Rate: **{pct(m.conversion_rate)}**",
    ]
    if m.lighthouse_trend:
        metrics_lines.append(f"• Lighthouse Trend: **{m.lighthouse_trend}**")

    rec_lines = [
        f"**{r.title}** (Impact: {r.impact}, Effort: {_hours(r.effort_hours)})"
        for r in report.recommendations[:TOP_RECOMMENDATIONS]
    ]

    report_date = datetime.fromisoformat(report.timestamp).date().isoformat()

    return {
        "title": f"📊 {report.site.upper()} Audit Report",
        "description": f"Weekly optimization audit - {report_date}",
        "color": COLOR_BLUE,
        "fields": [
            {"name": "📈 Metrics", "value": "\n".join(metrics_lines), "inline": False},
            {"name": "🔴 Critical Issues", "value": _bullets(report.critical_issues, "None detected"), "inline": False},
            {"name": "🟡 High Priority", "value": _bullets(report.high_priority_items, "None"), "inline": False},
            {"name": "💡 Top Recommendations", "value": _bullets(rec_lines, "None"), "inline": False},
        ],
        "footer": {"text": FOOTER_TEXT},
    }


class Relay:
    def __init__(self, client: DiscordClient, channels: dict[str, str] | None = None):
        self.client = client
        self.channels = channels if channels is not None else settings.discord_channels

    def channel_for_site(self, site: str) -> str | None:
        return self.channels.get(site)

    async def post_audit_report(self, report: AuditReport) -> bool:
        channel_id = self.channel_for_site(report.site)
        if not channel_id:
            logger.warning(f"Unknown site: {report.site}", extra={"site": report.site})
            return False

        await self.client.send_message(
            channel_id,
            content=f"🚀 New {report.site} audit report ready!",
            embeds=[build_report_embed(report)],
        )
        logger.info("Audit report posted", extra={"site": report.site, "channel_id": channel_id})
        return True

    async def post_alert(self, sites: list[str], title: str, message: str, severity: str) -> int:
        embed = {
            "title": f"🚨 {title}",
            "description": message,
            "color": ALERT_COLORS.get(severity, COLOR_BLUE),
            "timestamp": datetime.now().astimezone().isoformat(),
        }

        posted = 0
        for site in sites:
            channel_id = self.channel_for_site(site)
            if not channel_id:
                logger.warning(f"No channel configured for site: {site}", extra={"site": site})
                continue
            await self.client.send_message(channel_id, embeds=[embed])
            posted += 1
        return posted
