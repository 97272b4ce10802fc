# src/pageaudit/services/seo_score_service.py
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from pageaudit.dom.extractor import ExtractedElements, extract_elements
from pageaudit.model import AnalyzerConfig, CategoryResult, SeoScoreReport
from pageaudit.services.scoring_api_service import ScoringApiError, ScoringApiService

logger = logging.getLogger(__name__)

GRADES = ("A", "B", "C", "D", "F")

# Output field -> response keys tried in order. The first present, non-null key wins.
RESPONSE_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "score": ("score", "seoScore"),
    "grade": ("grade",),
    "details": ("details", "analysis"),
    "recommendations": ("recommendations", "suggestions"),
}

# Category weights of the local computation.
TITLE_MAX = 15
DESCRIPTION_MAX = 15
SUBHEADING_BONUS = 5
IMAGES_MAX = 15
LINKS_MAX = 10
CONTENT_MAX = 15


def grade_from_score(score: float, grade_thresholds: Optional[Dict[str, int]] = None) -> str:
    """Converts a numeric score to a letter grade (A-F)."""
    thresholds = grade_thresholds or AnalyzerConfig().grade_thresholds
    for grade, minimum in sorted(thresholds.items(), key=lambda item: item[1], reverse=True):
        if score >= minimum:
            return grade
    return "F"


def _pick(data: Dict[str, Any], field: str) -> Any:
    for key in RESPONSE_FIELD_ALIASES[field]:
        value = data.get(key)
        if value is not None:
            return value
    return None


def normalize_response(data: Dict[str, Any], config: Optional[AnalyzerConfig] = None) -> SeoScoreReport:
    """
    Maps an external scoring response onto SeoScoreReport.

    Raises:
        ScoringApiError: if the response carries no numeric score or its
                         details/recommendations cannot be coerced.
    """
    config = config or AnalyzerConfig()

    raw_score = _pick(data, "score")
    if isinstance(raw_score, bool) or not isinstance(raw_score, (int, float)) or not math.isfinite(raw_score):
        raise ScoringApiError(f"Scoring API response has no numeric score: {raw_score!r}")
    score = min(max(int(round(raw_score)), 0), 100)

    grade = _pick(data, "grade")
    if not isinstance(grade, str) or grade.strip().upper() not in GRADES:
        grade = grade_from_score(score, config.grade_thresholds)
    else:
        grade = grade.strip().upper()

    details = _pick(data, "details") or {}
    recommendations = _pick(data, "recommendations") or []
    if not isinstance(details, dict) or not isinstance(recommendations, list):
        raise ScoringApiError("Scoring API response has malformed details or recommendations")

    try:
        return SeoScoreReport(
            score=score,
            grade=grade,
            details={name: CategoryResult.model_validate(entry) for name, entry in details.items()},
            recommendations=[str(item) for item in recommendations],
        )
    except ValidationError as e:
        raise ScoringApiError(f"Scoring API response could not be normalized: {e}") from e


class _Tally:
    """Collects category results and recommendations in declaration order."""

    def __init__(self):
        self.details: Dict[str, CategoryResult] = {}
        self.recommendations: List[str] = []

    def add(self, category: str, score: int, message: str, recommendation: Optional[str] = None):
        self.details[category] = CategoryResult(score=score, message=message)
        if recommendation:
            self.recommendations.append(recommendation)

    @property
    def total(self) -> int:
        return sum(result.score for result in self.details.values())


def _score_title(tally: _Tally, title: Optional[str], max_length: int):
    if title is None:
        tally.add("title", 0, "Title tag is missing", "Add a title tag")
        return
    length = len(title.strip())
    if length == 0:
        tally.add("title", 0, "Title tag is missing or empty", "Add a descriptive title tag")
    elif length <= max_length:
        tally.add("title", TITLE_MAX, "Title tag is present and optimal length")
    else:
        tally.add("title", 10, "Title tag is too long", f"Title tag should be {max_length} characters or less")


def _score_description(tally: _Tally, description: Optional[str], max_length: int):
    if description is None:
        tally.add("metaDescription", 0, "Meta description is missing", "Add a meta description tag")
        return
    length = len(description.strip())
    if length == 0:
        tally.add("metaDescription", 0, "Meta description is missing or empty", "Add a meta description")
    elif length <= max_length:
        tally.add("metaDescription", DESCRIPTION_MAX, "Meta description is present and optimal length")
    else:
        tally.add(
            "metaDescription", 10, "Meta description is too long",
            f"Meta description should be {max_length} characters or less"
        )


def _score_headings(tally: _Tally, elements: ExtractedElements):
    bonus = SUBHEADING_BONUS if (elements.h2_count > 0 or elements.h3_count > 0) else 0
    if elements.h1_count == 1:
        tally.add("headings", 15 + bonus, "Proper heading structure (1 H1 tag)")
    elif elements.h1_count > 1:
        tally.add(
            "headings", 10 + bonus, f"Multiple H1 tags found ({elements.h1_count})",
            "Use only one H1 tag per page"
        )
    else:
        tally.add("headings", 5 + bonus, "No H1 tag found", "Add an H1 heading tag")


def _score_images(tally: _Tally, elements: ExtractedElements, partial_percentage: float):
    total = len(elements.images)
    if total == 0:
        tally.add("images", 0, "No images found")
        return

    with_alt = sum(1 for img in elements.images if img.attrs.get("alt", "").strip())
    alt_percentage = with_alt / total * 100
    rounded = round(alt_percentage)
    if alt_percentage == 100:
        tally.add("images", IMAGES_MAX, "All images have alt text")
        return

    score = 10 if alt_percentage >= partial_percentage else 5
    tally.add(
        "images", score, f"{rounded}% of images have alt text",
        f"Add alt text to all images ({rounded}% currently have alt text)"
    )


def _score_links(tally: _Tally, elements: ExtractedElements):
    link_count = sum(1 for a in elements.anchors if a.attrs.get("href", "").strip())
    if link_count > 0:
        tally.add("links", LINKS_MAX, f"{link_count} links found")
    else:
        tally.add("links", 0, "No links found", "Add internal and external links")


def _score_content(tally: _Tally, text: str, sufficient: int, minimum: int):
    length = len(text)
    if length > sufficient:
        tally.add("content", CONTENT_MAX, f"Sufficient content length ({length} characters)")
    elif length > minimum:
        tally.add("content", 10, f"Content could be longer ({length} characters)", "Add more content to improve SEO")
    else:
        tally.add(
            "content", 5, f"Content is too short ({length} characters)",
            f"Add more content (at least {sufficient} characters recommended)"
        )


def calculate_basic_seo_score(
        html: str,
        config: Optional[AnalyzerConfig] = None,
        elements: Optional[ExtractedElements] = None
) -> SeoScoreReport:
    """
    Deterministic local SEO score over six categories, capped at 100.
    Used whenever the external scoring endpoint is unavailable.
    """
    config = config or AnalyzerConfig()
    thresholds = config.thresholds
    elements = elements or extract_elements(html)

    tally = _Tally()
    _score_title(tally, elements.title, thresholds.title_max_length)
    _score_description(tally, elements.meta_description, thresholds.description_max_length)
    _score_headings(tally, elements)
    _score_images(tally, elements, thresholds.alt_partial_percentage)
    _score_links(tally, elements)
    _score_content(
        tally, elements.visible_text,
        thresholds.content_sufficient_length, thresholds.content_minimum_length
    )

    score = min(tally.total, 100)
    return SeoScoreReport(
        score=score,
        grade=grade_from_score(score, config.grade_thresholds),
        details=tally.details,
        recommendations=tally.recommendations,
    )


class SeoScoreService:
    """
    Full-page SEO scorer.

    Delegates to the external scoring endpoint first and falls back to the
    local heuristic on any failure, so callers always receive a report.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None, client: Optional[ScoringApiService] = None):
        self.config = config or AnalyzerConfig()
        self.client = client

    def _build_client(self) -> ScoringApiService:
        return ScoringApiService(self.config.seo_api_url, timeout=self.config.seo_api_timeout)

    async def _fetch_remote(self, html: str) -> SeoScoreReport:
        if self.client is not None:
            data = await self.client.analyze(html)
        else:
            async with self._build_client() as client:
                data = await client.analyze(html)
        return normalize_response(data, self.config)

    async def get_seo_score(self, html: str) -> SeoScoreReport:
        html = html or ""
        try:
            report = await self._fetch_remote(html)
            logger.debug("External SEO score received: %d (%s)", report.score, report.grade)
            return report
        except ScoringApiError as e:
            logger.warning("External SEO scoring failed, using local fallback: %s", e)
        except Exception as e:
            logger.warning("Unexpected error during external SEO scoring, using local fallback: %s", e, exc_info=True)

        return calculate_basic_seo_score(html, self.config)


async def get_seo_score(
        html: str,
        config: Optional[AnalyzerConfig] = None,
        client: Optional[ScoringApiService] = None
) -> SeoScoreReport:
    """Convenience wrapper around SeoScoreService."""
    return await SeoScoreService(config, client).get_seo_score(html)
