# src/pageaudit/services/head_seo_service.py
import logging
from typing import Optional

from pageaudit.dom.extractor import ExtractedElements, extract_elements
from pageaudit.model import AnalyzerConfig, FieldResult, HeadSeoReport

logger = logging.getLogger(__name__)


def _score_length(
        value: Optional[str], max_length: int, label: str, missing_message: str
) -> FieldResult:
    """
    Three-tier rule shared by title and meta description:
    missing/empty -> 0, within limit -> 100, too long -> 50.
    """
    if value is None:
        return FieldResult(score=0, message=missing_message, value="")

    text = value.strip()
    length = len(text)
    if length == 0:
        return FieldResult(score=0, message=f"{label} is empty", value=text)
    if length <= max_length:
        return FieldResult(
            score=100,
            message=f"{label} is present and optimal length ({length} characters)",
            value=text,
        )
    return FieldResult(
        score=50,
        message=f"{label} is too long ({length} characters, recommended: {max_length} or less)",
        value=text,
    )


def _score_keywords(value: Optional[str]) -> FieldResult:
    if value is None:
        return FieldResult(score=0, message="Meta keywords tag is missing", value="")

    keywords = value.strip()
    if not keywords:
        return FieldResult(score=0, message="Meta keywords are empty", value="")
    return FieldResult(
        score=100,
        message=f"Meta keywords are present ({len(keywords.split(','))} keywords)",
        value=keywords,
    )


def _score_presence(value: Optional[str], label: str, prop: str, with_length: bool) -> FieldResult:
    """Binary rule for OpenGraph properties."""
    text = (value or "").strip()
    if not text:
        return FieldResult(score=0, message=f"{label} ({prop}) is missing", value="")

    message = f"{label} is present ({len(text)} characters)" if with_length else f"{label} is present"
    return FieldResult(score=100, message=message, value=text)


class HeadSeoService:
    """
    Scores the seven head-level SEO signals of a document.
    Every field is evaluated independently and the report always carries all seven.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig()

    def analyze(self, html: str) -> HeadSeoReport:
        return self.analyze_elements(extract_elements(html))

    def analyze_elements(self, elements: ExtractedElements) -> HeadSeoReport:
        thresholds = self.config.thresholds
        meta = elements.meta

        report = HeadSeoReport(
            title=_score_length(
                elements.title, thresholds.title_max_length, "Title", "Title tag is missing"
            ),
            meta_description=_score_length(
                meta.get("description"), thresholds.description_max_length,
                "Meta description", "Meta description tag is missing"
            ),
            meta_keywords=_score_keywords(meta.get("keywords")),
            og_title=_score_presence(meta.get("og:title"), "OG title", "og:title", with_length=True),
            og_description=_score_presence(
                meta.get("og:description"), "OG description", "og:description", with_length=True
            ),
            og_image=_score_presence(meta.get("og:image"), "OG image", "og:image", with_length=False),
            og_url=_score_presence(meta.get("og:url"), "OG URL", "og:url", with_length=False),
        )
        logger.debug("Head SEO title=%d description=%d", report.title.score, report.meta_description.score)
        return report


def analyze_head_seo(html: str, config: Optional[AnalyzerConfig] = None) -> HeadSeoReport:
    """Convenience wrapper around HeadSeoService."""
    return HeadSeoService(config).analyze(html)
