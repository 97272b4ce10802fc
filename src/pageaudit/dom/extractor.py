# src/pageaudit/dom/extractor.py
import logging
import re
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .core import parse_tag_attrs

logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r'<title\b[^>]*>([^<]*)</title\s*>', re.IGNORECASE)
META_RE = re.compile(r'<meta\b[^>]*>', re.IGNORECASE)
TAG_STRIP_RE = re.compile(r'<[^>]*>')

# Meta signals: key -> (discriminating attribute, expected value)
META_SIGNALS: Dict[str, tuple] = {
    "description": ("name", "description"),
    "keywords": ("name", "keywords"),
    "og:title": ("property", "og:title"),
    "og:description": ("property", "og:description"),
    "og:image": ("property", "og:image"),
    "og:url": ("property", "og:url"),
}


def _opening_tag_re(tag_name: str) -> re.Pattern:
    return re.compile(r'<%s\b[^>]*>' % re.escape(tag_name), re.IGNORECASE)


class TagOccurrence(BaseModel):
    """The full opening-tag text of one element occurrence and where it starts."""
    text: str
    line_number: int

    @property
    def attrs(self) -> Dict[str, str]:
        return parse_tag_attrs(self.text)


class ExtractedElements(BaseModel):
    """
    Everything the analyzers need from one document.
    `None` means the construct was not found; an empty string means it was found but empty.
    """
    title: Optional[str] = None
    meta: Dict[str, Optional[str]] = Field(default_factory=dict)
    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0
    images: List[TagOccurrence] = Field(default_factory=list)
    anchors: List[TagOccurrence] = Field(default_factory=list)
    visible_text: str = ""

    @property
    def meta_description(self) -> Optional[str]:
        return self.meta.get("description")

    @property
    def meta_keywords(self) -> Optional[str]:
        return self.meta.get("keywords")


def extract_title(html: str) -> Optional[str]:
    """Returns the raw text of the first <title> element, or None."""
    match = TITLE_RE.search(html or "")
    return match.group(1) if match else None


def extract_meta_content(html: str, attribute: str, expected: str) -> Optional[str]:
    """
    Returns the `content` of the first <meta> tag whose `attribute` equals `expected`
    (case-insensitive) and that also carries a `content` attribute itself.
    Attributes are never combined across separate tags.
    """
    for match in META_RE.finditer(html or ""):
        attrs = parse_tag_attrs(match.group(0))
        if attrs.get(attribute, "").strip().lower() != expected:
            continue
        if "content" in attrs:
            return attrs["content"]
    return None


def count_tags(html: str, tag_name: str) -> int:
    return len(_opening_tag_re(tag_name).findall(html or ""))


def find_tags(html: str, tag_name: str) -> List[TagOccurrence]:
    """Returns every opening tag of `tag_name` in document order."""
    html = html or ""
    occurrences = []
    line = 1
    last_pos = 0
    for match in _opening_tag_re(tag_name).finditer(html):
        line += html.count("\n", last_pos, match.start())
        last_pos = match.start()
        occurrences.append(TagOccurrence(text=match.group(0), line_number=line))
    return occurrences


def visible_text(html: str) -> str:
    """Strips every tag and returns the trimmed remaining text."""
    return TAG_STRIP_RE.sub("", html or "").strip()


def extract_elements(html: str) -> ExtractedElements:
    """
    Scans a raw HTML string for all constructs used by the analyzers.
    Never raises on malformed input; missing constructs are simply absent.
    """
    html = html or ""
    meta = {
        key: extract_meta_content(html, attribute, expected)
        for key, (attribute, expected) in META_SIGNALS.items()
    }

    elements = ExtractedElements(
        title=extract_title(html),
        meta=meta,
        h1_count=count_tags(html, "h1"),
        h2_count=count_tags(html, "h2"),
        h3_count=count_tags(html, "h3"),
        images=find_tags(html, "img"),
        anchors=find_tags(html, "a"),
        visible_text=visible_text(html),
    )
    logger.debug(
        "Extracted: title=%s, h1=%d, images=%d, anchors=%d",
        elements.title is not None, elements.h1_count, len(elements.images), len(elements.anchors)
    )
    return elements
