"""Multi-provider shop scraping with tech stack, SEO and B2B readiness analysis."""

__version__ = "0.1.0"

from shopscan.orchestrator import ScrapeOrchestrator
from shopscan.agent import FirecrawlAgent
from shopscan.firecrawl import FirecrawlClient
from shopscan.compare import ShopComparison, format_comparison
from shopscan.templates import (
    ANALYSIS_TEMPLATES,
    COMPARISON_CRITERIA,
    get_template_by_id,
    get_templates_by_category,
)
from shopscan.analysis import SiteAnalyzer
from shopscan.markdown import html_to_markdown, extract_title
from shopscan.patterns import PatternRule, detect_patterns, rule
from shopscan.technology_detector import (
    TechStackDetector,
    detect_tech_stack,
    format_tech_stack_result,
)
from shopscan.seo_analyzer import SEOAnalyzer, analyze_seo, format_seo_result
from shopscan.procurement_detector import (
    ProcurementDetector,
    detect_procurement,
    format_procurement_result,
)
from shopscan.models import (
    ProviderType,
    ErrorKind,
    ScrapeData,
    ScrapeResult,
    SearchHit,
    SearchData,
    SearchResult,
    DetectionOutcome,
    DetectedTech,
    TechDetectionResult,
    SEOAnalysisResult,
    ProcurementResult,
    AgentJobState,
    AgentJobResult,
    AnalysisReport,
)
from shopscan.config import Config, ProviderCredentials, AnalysisThresholds

__all__ = [
    "ScrapeOrchestrator",
    "FirecrawlAgent",
    "FirecrawlClient",
    "ShopComparison",
    "format_comparison",
    "ANALYSIS_TEMPLATES",
    "COMPARISON_CRITERIA",
    "get_template_by_id",
    "get_templates_by_category",
    "SiteAnalyzer",
    "html_to_markdown",
    "extract_title",
    "PatternRule",
    "detect_patterns",
    "rule",
    "TechStackDetector",
    "detect_tech_stack",
    "format_tech_stack_result",
    "SEOAnalyzer",
    "analyze_seo",
    "format_seo_result",
    "ProcurementDetector",
    "detect_procurement",
    "format_procurement_result",
    "ProviderType",
    "ErrorKind",
    "ScrapeData",
    "ScrapeResult",
    "SearchHit",
    "SearchData",
    "SearchResult",
    "DetectionOutcome",
    "DetectedTech",
    "TechDetectionResult",
    "SEOAnalysisResult",
    "ProcurementResult",
    "AgentJobState",
    "AgentJobResult",
    "AnalysisReport",
    "Config",
    "ProviderCredentials",
    "AnalysisThresholds",
]
