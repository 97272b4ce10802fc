from typing import Dict, Any, List, Callable, Optional, Tuple, Set
from pydantic import BaseModel, Field
from bs4 import BeautifulSoup


def audit_spec(codes: List[str]):
    """
    Decorator to declare which issue codes a specific audit rule function returns.
    Facilitates auto-discovery by the DOMRegistry.
    """
    def decorator(func):
        func.defined_codes = codes
        return func
    return decorator


def parse_tag_attrs(tag_text: str) -> Dict[str, str]:
    """
    Reads the attributes of a single opening tag (e.g. '<img src="a.png" alt>').

    Attribute names are lower-cased, bare attributes map to an empty string
    and multi-valued attributes (class, rel) are joined back into one string.
    A duplicated attribute keeps its first value.
    Returns an empty dict when the text holds no recognizable tag.
    """
    if not tag_text:
        return {}

    soup = BeautifulSoup(tag_text, "html.parser", on_duplicate_attribute="ignore")
    tag = soup.find(True)
    if tag is None:
        return {}

    attrs = {}
    for name, value in tag.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        attrs[name.lower()] = value if value is not None else ""
    return attrs


class ElementBase(BaseModel):
    """
    Base data model for one scanned element occurrence (opening tag only).
    """
    tag: str
    attrs: Dict[str, Any] = Field(default_factory=dict)
    raw: str = ""
    index: int = 0
    line_number: Optional[int] = None


# Type alias for audit findings: (Code, Message, Attribute, Severity)
AuditResult = Tuple[str, str, str, str]


class ElementDefinition:
    """
    Configuration object binding an HTML tag to its parser and audit rules.
    The issue codes declared by the rules through `@audit_spec` are the only
    codes the auditor accepts for this element.
    """

    def __init__(
            self,
            tag_name: str,
            element_type: str,
            parser: Callable[..., ElementBase],
            audit_rules: Optional[List[Callable[[Any], List[AuditResult]]]] = None
    ):
        self.tag_name = tag_name
        self.element_type = element_type
        self.parser = parser
        self.audit_rules = audit_rules or []

        # --- Auto-Discovery of Issue Codes ---
        final_codes: Set[str] = set()
        for rule in self.audit_rules:
            final_codes.update(getattr(rule, 'defined_codes', []))

        self.codes = sorted(final_codes)
