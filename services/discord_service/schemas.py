from pydantic import BaseModel, ConfigDict, Field


class DiscordUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    username: str = ""


class DiscordMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    channel_id: str
    author: DiscordUser
    content: str = ""
    mentions: list[DiscordUser] = Field(default_factory=list)


class ParsedCommand(BaseModel):
    command: str
    args: list[str] = Field(default_factory=list)


class ReportMetrics(BaseModel):
    lighthouse_score: int
    page_speed_ms: float
    seo_visibility: int
    conversion_rate: float
    lighthouse_trend: str | None = None


class ReportRecommendation(BaseModel):
    title: str
    impact: str
    effort_hours: float


class AuditReport(BaseModel):
    site: str
    timestamp: str
    metrics: ReportMetrics
    critical_issues: list[str] = Field(default_factory=list)
    high_priority_items: list[str] = Field(default_factory=list)
    recommendations: list[ReportRecommendation] = Field(default_factory=list)
