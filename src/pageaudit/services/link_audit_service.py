# src/pageaudit/services/link_audit_service.py
import logging
import time
from collections import Counter
from typing import List, Optional

from pageaudit.dom.core import ElementBase, ElementDefinition
from pageaudit.dom.extractor import ExtractedElements, TagOccurrence, extract_elements
from pageaudit.dom.registry import DOMRegistry
from pageaudit.model import (
    AnalyzerConfig,
    AuditBreakdown,
    AuditIssue,
    ElementTally,
    LinkAuditReport,
)

logger = logging.getLogger(__name__)

MAX_CONTEXT_LENGTH = 200


def _truncate(text: str, limit: int = MAX_CONTEXT_LENGTH) -> str:
    return text if len(text) <= limit else text[:limit - 3] + "..."


class LinkAuditService:
    """
    Structural audit of every <img> and <a> occurrence.

    Applies the audit rules registered for each element definition and
    aggregates the findings per severity and element type.
    Attribute checks only: discovered URLs are never requested.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig()
        DOMRegistry.discover()

    def audit(self, html: str) -> LinkAuditReport:
        return self.audit_elements(extract_elements(html))

    def audit_elements(self, elements: ExtractedElements) -> LinkAuditReport:
        start_time = time.perf_counter()

        image_issues = self._run_rules(DOMRegistry.get_definition("img"), elements.images)
        anchor_issues = self._run_rules(DOMRegistry.get_definition("a"), elements.anchors)
        issues = image_issues + anchor_issues

        severities = Counter(issue.severity for issue in issues)
        report = LinkAuditReport(
            total_elements=len(elements.images) + len(elements.anchors),
            total_issues=len(issues),
            critical=severities["critical"],
            warning=severities["warning"],
            info=severities["info"],
            issues=issues,
            breakdown=AuditBreakdown(
                anchors=ElementTally(total=len(elements.anchors), issues=len(anchor_issues)),
                images=ElementTally(total=len(elements.images), issues=len(image_issues)),
            ),
            scan_time=round((time.perf_counter() - start_time) * 1000, 3),
        )
        logger.debug(
            "Link audit: %d elements, %d issues (%d critical)",
            report.total_elements, report.total_issues, report.critical
        )
        return report

    def _run_rules(self, defn: ElementDefinition, occurrences: List[TagOccurrence]) -> List[AuditIssue]:
        issues = []
        for index, occurrence in enumerate(occurrences):
            node = defn.parser(
                occurrence.attrs,
                raw=occurrence.text,
                index=index,
                line_number=occurrence.line_number,
                thresholds=self.config.thresholds,
            )
            for rule in defn.audit_rules:
                # Rule returns a list of tuples: [(Code, Msg, Attribute, Severity)]
                for (code, msg, attribute, severity) in rule(node):
                    if code not in defn.codes:
                        raise ValueError(
                            f"Rule '{rule.__name__}' emitted undeclared issue code "
                            f"'{code}' for <{defn.tag_name}>"
                        )
                    issues.append(self._build_issue(defn, node, code, msg, attribute, severity))
        return issues

    @staticmethod
    def _build_issue(
            defn: ElementDefinition, node: ElementBase,
            code: str, msg: str, attribute: str, severity: str
    ) -> AuditIssue:
        return AuditIssue(
            id=f"{defn.element_type}-{node.index + 1}-{code.lower().replace('_', '-')}",
            type=defn.element_type,
            tag=defn.tag_name,
            attribute=attribute,
            value=_truncate(str(node.attrs.get(attribute, ""))),
            issue=_truncate(msg),
            severity=severity,
            line_context=_truncate(node.raw.strip()),
            line_number=node.line_number,
            code=code,
        )


def audit_links(html: str, config: Optional[AnalyzerConfig] = None) -> LinkAuditReport:
    """Convenience wrapper around LinkAuditService."""
    return LinkAuditService(config).audit(html)
