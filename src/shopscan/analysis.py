"""Scrape a URL and run one of the HTML analyzers over it."""

import logging
from typing import Any, Callable, Optional

from shopscan.config import AnalysisThresholds, default_thresholds
from shopscan.models import AnalysisReport, ErrorKind, ProviderType, ScrapeResult
from shopscan.orchestrator import ScrapeOrchestrator
from shopscan.procurement_detector import ProcurementDetector
from shopscan.seo_analyzer import SEOAnalyzer
from shopscan.technology_detector import TechStackDetector

logger = logging.getLogger(__name__)

NO_HTML_ERROR = "Konnte HTML nicht laden"


class SiteAnalyzer:
    """Runs tech detection, SEO checks and procurement checks by URL.

    The analyzers need raw HTML. Providers that only return Markdown (the
    reader backend) are followed by a direct fetch of the page.
    """

    def __init__(
        self,
        orchestrator: Optional[ScrapeOrchestrator] = None,
        thresholds: Optional[AnalysisThresholds] = None,
    ):
        self.orchestrator = orchestrator or ScrapeOrchestrator()
        self.thresholds = thresholds or default_thresholds
        self.tech_detector = TechStackDetector(self.thresholds)
        self.seo_analyzer = SEOAnalyzer(self.thresholds)
        self.procurement_detector = ProcurementDetector(self.thresholds)

    def fetch_html(self, url: str) -> ScrapeResult:
        """Scrape through the fallback chain, making sure HTML is present."""
        result = self.orchestrator.scrape(url, enable_fallback=True)
        if not result.success or result.data.html:
            return result

        if result.provider != ProviderType.NATIVE:
            logger.info(f"{result.provider.value} returned no HTML for {url}, fetching directly")
            result = self.orchestrator.scrape(url, provider=ProviderType.NATIVE)
            if not result.success or result.data.html:
                return result

        return ScrapeResult.failure(result.provider, NO_HTML_ERROR, ErrorKind.CONTENT)

    def detect_tech(self, url: str) -> AnalysisReport:
        return self._analyze(url, self.tech_detector.detect, self.tech_detector.format_result)

    def check_seo(self, url: str) -> AnalysisReport:
        return self._analyze(
            url,
            lambda html: self.seo_analyzer.analyze(html, url),
            self.seo_analyzer.format_result,
        )

    def check_procurement(self, url: str) -> AnalysisReport:
        return self._analyze(
            url, self.procurement_detector.detect, self.procurement_detector.format_result
        )

    def _analyze(
        self,
        url: str,
        analyze: Callable[[str], Any],
        render: Callable[[Any], str],
    ) -> AnalysisReport:
        scraped = self.fetch_html(url)
        if not scraped.success:
            return AnalysisReport(
                success=False,
                url=url,
                provider=scraped.provider,
                error=scraped.error or NO_HTML_ERROR,
                error_kind=scraped.error_kind,
            )

        analysis = analyze(scraped.data.html)
        return AnalysisReport(
            success=True,
            url=url,
            provider=scraped.provider,
            analysis=analysis,
            formatted=render(analysis),
        )
