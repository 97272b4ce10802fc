from typing import List, Optional
from ...model import ScoringThresholds
from ..core import ElementBase, ElementDefinition, AuditResult, audit_spec

WARNING_THRESHOLD_KB = 20
CRITICAL_THRESHOLD_KB = 100


class ImageElement(ElementBase):
    tag: str = "img"
    base64_warning_kb: float = WARNING_THRESHOLD_KB
    base64_critical_kb: float = CRITICAL_THRESHOLD_KB

    @property
    def src(self) -> str: return self.attrs.get('src', '')

    @property
    def alt(self) -> Optional[str]: return self.attrs.get('alt')

    @property
    def is_decorative(self) -> bool:
        """Images explicitly hidden from assistive technology may carry an empty alt."""
        role = self.attrs.get('role', '').strip().lower()
        hidden = self.attrs.get('aria-hidden', '').strip().lower()
        return role in ('presentation', 'none') or hidden == 'true'


def parse_image(
        attrs: dict, raw: str, index: int,
        line_number: Optional[int] = None,
        thresholds: Optional[ScoringThresholds] = None
) -> ImageElement:
    limits = {}
    if thresholds:
        limits = {
            "base64_warning_kb": thresholds.base64_warning_kb,
            "base64_critical_kb": thresholds.base64_critical_kb,
        }
    return ImageElement(attrs=attrs, raw=raw, index=index, line_number=line_number, **limits)


# --- RULES ---

@audit_spec(codes=["MISSING_ALT", "EMPTY_ALT"])
def check_alt_text(node: ImageElement) -> List[AuditResult]:
    res = []
    # alt=None means the attribute is missing
    if node.alt is None:
        res.append(("MISSING_ALT", f"Image missing alt attribute: {node.src or '(no src)'}", "alt", "critical"))
    elif not node.alt.strip() and not node.is_decorative:
        res.append(("EMPTY_ALT", f"Image has empty alt text: {node.src or '(no src)'}", "alt", "warning"))

    return res


@audit_spec(codes=["MISSING_SRC", "CRITICAL_BASE64_BLOAT", "LARGE_BASE64_IMG"])
def check_source(node: ImageElement) -> List[AuditResult]:
    res = []

    if not node.src.strip():
        res.append(("MISSING_SRC", "Image tag has no source", "src", "critical"))
        return res

    if node.src.startswith("data:image"):
        # len(str) is a sufficient proxy for bytes here
        size_in_kb = len(node.src) / 1024

        if size_in_kb > node.base64_critical_kb:
            res.append((
                "CRITICAL_BASE64_BLOAT",
                f"Critical HTML Bloat: Base64 image is {round(size_in_kb, 2)}KB. Prevents caching & slows TTFB.",
                "src",
                "critical"
            ))
        elif size_in_kb > node.base64_warning_kb:
            res.append((
                "LARGE_BASE64_IMG",
                f"Large Base64 image detected ({round(size_in_kb, 2)}KB). Consider using an external file.",
                "src",
                "warning"
            ))

    return res


# --- DEFINITION ---
DEFINITION = ElementDefinition(
    tag_name="img",
    element_type="image",
    parser=parse_image,
    audit_rules=[check_alt_text, check_source]
)
