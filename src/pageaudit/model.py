import math
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


DEFAULT_SEO_API_URL = "https://api.example.com/seo/analyze"

Severity = Literal["critical", "warning", "info"]
ElementType = Literal["image", "anchor"]


class ReportModel(BaseModel):
    """
    Base for every report object handed to callers.
    Attributes are snake_case in Python and camelCase once serialized.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


# --- Configuration ---

class ScoringThresholds(BaseModel):
    """Length and ratio limits shared by the scorers and the link auditor."""
    title_max_length: int = Field(default=60, gt=0)
    description_max_length: int = Field(default=160, gt=0)
    content_sufficient_length: int = Field(default=300, ge=0)
    content_minimum_length: int = Field(default=100, ge=0)
    alt_partial_percentage: float = Field(default=50.0, ge=0, le=100)
    base64_warning_kb: float = Field(default=20.0, gt=0)
    base64_critical_kb: float = Field(default=100.0, gt=0)
    max_url_length: int = Field(default=200, gt=0)


class AnalyzerConfig(BaseModel):
    """
    Explicit configuration handed to each analyzer.
    Built from settings.json by `config_manager.build_analyzer_config()`.
    """
    seo_api_url: str = DEFAULT_SEO_API_URL
    seo_api_timeout: Optional[float] = Field(default=30.0, gt=0)
    thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)
    # Ordered from best to worst; anything below the last entry is an F.
    grade_thresholds: Dict[str, int] = Field(
        default_factory=lambda: {"A": 90, "B": 80, "C": 70, "D": 60}
    )


# --- Head-tag report ---

class FieldResult(ReportModel):
    score: int = Field(ge=0, le=100)
    message: str
    value: str = ""


class HeadSeoReport(ReportModel):
    """Fixed-shape report: one FieldResult per head-level SEO signal."""
    title: FieldResult
    meta_description: FieldResult
    meta_keywords: FieldResult
    og_title: FieldResult
    og_description: FieldResult
    og_image: FieldResult
    og_url: FieldResult


# --- Full-page SEO report ---

class CategoryResult(ReportModel):
    score: int
    message: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def round_fractional_score(cls, v):
        # External services may report fractional sub-scores.
        if isinstance(v, float) and math.isfinite(v):
            return int(round(v))
        return v

    @field_validator("message", mode="before")
    @classmethod
    def null_message_as_empty(cls, v):
        return "" if v is None else v


class SeoScoreReport(ReportModel):
    score: int = Field(ge=0, le=100)
    grade: Literal["A", "B", "C", "D", "F"]
    details: Dict[str, CategoryResult] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)


# --- Link & attribute audit report ---

class AuditIssue(ReportModel):
    """
    A single finding of the link & attribute audit.
    One issue per defect; an element can produce several.
    """
    id: str
    type: ElementType
    tag: str
    attribute: str
    value: str = ""
    issue: str
    severity: Severity
    line_context: str
    line_number: Optional[int] = None
    code: str


class ElementTally(ReportModel):
    total: int = 0
    issues: int = 0


class AuditBreakdown(ReportModel):
    anchors: ElementTally = Field(default_factory=ElementTally)
    images: ElementTally = Field(default_factory=ElementTally)


class LinkAuditReport(ReportModel):
    total_elements: int = 0
    total_issues: int = 0
    critical: int = 0
    warning: int = 0
    info: int = 0
    issues: List[AuditIssue] = Field(default_factory=list)
    breakdown: AuditBreakdown = Field(default_factory=AuditBreakdown)
    scan_time: float = 0.0


class PageAnalysis(ReportModel):
    """All three reports for one document."""
    head: HeadSeoReport
    seo: SeoScoreReport
    links: LinkAuditReport
