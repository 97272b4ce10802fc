import logging
from typing import Optional

from pageaudit.dom.extractor import extract_elements
from pageaudit.model import AnalyzerConfig, HeadSeoReport, LinkAuditReport, PageAnalysis, SeoScoreReport
from pageaudit.services.head_seo_service import HeadSeoService
from pageaudit.services.link_audit_service import LinkAuditService
from pageaudit.services.scoring_api_service import ScoringApiService
from pageaudit.services.seo_score_service import SeoScoreService, calculate_basic_seo_score

logger = logging.getLogger(__name__)


class AnalysisController:
    """
    Runs the document analyzers for one page.
    The document is scanned once and the extracted elements are shared by the synchronous analyzers.
    """

    def __init__(
            self,
            config: Optional[AnalyzerConfig] = None,
            client: Optional[ScoringApiService] = None,
            offline: bool = False
    ):
        self.config = config or AnalyzerConfig()
        self.offline = offline
        self.head_service = HeadSeoService(self.config)
        self.seo_service = SeoScoreService(self.config, client)
        self.link_service = LinkAuditService(self.config)

    def analyze_head(self, html: str) -> HeadSeoReport:
        return self.head_service.analyze(html)

    def audit_links(self, html: str) -> LinkAuditReport:
        return self.link_service.audit(html)

    async def score_seo(self, html: str) -> SeoScoreReport:
        if self.offline:
            return calculate_basic_seo_score(html, self.config)
        return await self.seo_service.get_seo_score(html)

    async def analyze_page(self, html: str) -> PageAnalysis:
        html = html or ""
        elements = extract_elements(html)

        head = self.head_service.analyze_elements(elements)
        links = self.link_service.audit_elements(elements)
        if self.offline:
            seo = calculate_basic_seo_score(html, self.config, elements=elements)
        else:
            seo = await self.seo_service.get_seo_score(html)

        logger.info(
            "Page analysed: seo=%d (%s), link issues=%d",
            seo.score, seo.grade, links.total_issues
        )
        return PageAnalysis(head=head, seo=seo, links=links)
