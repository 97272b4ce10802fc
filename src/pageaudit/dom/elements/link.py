from typing import Optional, List
from pydantic import Field, model_validator
from ...model import ScoringThresholds
from ..core import ElementBase, ElementDefinition, AuditResult, audit_spec

MAX_URL_LENGTH = 200


class LinkElement(ElementBase):
    """
    Data model for anchor (<a>) tags.
    Validation flags are collected once and consumed by the audit rules.
    """
    tag: str = "a"
    max_url_length: int = MAX_URL_LENGTH
    validation_errors: List[str] = Field(default_factory=list)

    @property
    def href(self) -> Optional[str]:
        """Convenience property to access the href attribute."""
        return self.attrs.get('href')

    @model_validator(mode='after')
    def validate_link(self):
        """Perform initial data validation on the link attributes."""
        if self.href is None:
            self.validation_errors.append("missing_href")
            return self

        href_stripped = self.href.strip()
        if not href_stripped:
            self.validation_errors.append("empty_href")
        elif href_stripped == "#":
            self.validation_errors.append("placeholder_href")
        elif href_stripped.lower().startswith("javascript:"):
            self.validation_errors.append("javascript_href")

        if len(href_stripped) > self.max_url_length:
            self.validation_errors.append("url_len")

        return self


def parse_link(
        attrs: dict, raw: str, index: int,
        line_number: Optional[int] = None,
        thresholds: Optional[ScoringThresholds] = None
) -> LinkElement:
    """Builds a LinkElement from the attributes of one <a> opening tag."""
    max_len = thresholds.max_url_length if thresholds else MAX_URL_LENGTH
    return LinkElement(attrs=attrs, raw=raw, index=index, line_number=line_number, max_url_length=max_len)


# --- AUDIT RULES ---


@audit_spec(codes=["MISSING_HREF", "EMPTY_HREF", "PLACEHOLDER_HREF"])
def check_link_integrity(node: LinkElement) -> List[AuditResult]:
    """Validates that the anchor points somewhere."""
    res = []
    if "missing_href" in node.validation_errors:
        res.append(("MISSING_HREF", "Link has no href attribute", "href", "warning"))
    if "empty_href" in node.validation_errors:
        res.append(("EMPTY_HREF", "Link href is empty or whitespace", "href", "warning"))
    if "placeholder_href" in node.validation_errors:
        res.append(("PLACEHOLDER_HREF", "Link href is a placeholder ('#')", "href", "warning"))
    return res


@audit_spec(codes=["JAVASCRIPT_HREF", "URL_TOO_LONG"])
def check_link_target(node: LinkElement) -> List[AuditResult]:
    """Flags link targets worth a manual review."""
    res = []
    if "javascript_href" in node.validation_errors:
        res.append(("JAVASCRIPT_HREF", "Link uses a javascript: pseudo-URL", "href", "info"))
    if "url_len" in node.validation_errors:
        res.append((
            "URL_TOO_LONG",
            f"URL exceeds {node.max_url_length} chars ({len(node.href.strip())})",
            "href", "info"
        ))
    return res


# --- ELEMENT DEFINITION ---

DEFINITION = ElementDefinition(
    tag_name="a",
    element_type="anchor",
    parser=parse_link,
    audit_rules=[check_link_integrity, check_link_target]
)
