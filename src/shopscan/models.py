"""Data models for scraping results and HTML analysis."""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Optional


class ProviderType(str, Enum):
    """Scraping and search backends."""

    FIRECRAWL = "firecrawl"
    EXA = "exa"
    JINA = "jina"
    SCRAPINGANT = "scrapingant"
    NATIVE = "native"


class ErrorKind(str, Enum):
    """Classification of a failed provider call."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    BAD_CREDENTIAL = "bad_credential"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    BLOCKED = "blocked"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    HTTP = "http"
    CONTENT = "content"
    UNSUPPORTED = "unsupported"


def _camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


def _serialize(value: Any) -> Any:
    if is_dataclass(value):
        return {
            _camel(f.name): _serialize(getattr(value, f.name))
            for f in fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


class SerializableMixin:
    """Adds a camelCase ``to_dict`` matching the JSON API shape."""

    def to_dict(self) -> dict:
        return _serialize(self)


# =============================================================================
# Scraping and search
# =============================================================================

@dataclass
class ScrapeData(SerializableMixin):
    """Normalized page content returned by a provider."""

    markdown: str
    url: str
    html: Optional[str] = None
    title: Optional[str] = None


@dataclass
class ScrapeResult(SerializableMixin):
    """Result envelope of a scrape call.

    ``success`` implies ``data`` is set; a failure always carries ``error``.
    """

    success: bool
    provider: ProviderType
    data: Optional[ScrapeData] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    credits_used: Optional[int] = None
    fallback_used: bool = False

    @classmethod
    def failure(
        cls,
        provider: ProviderType,
        error: str,
        kind: ErrorKind = ErrorKind.HTTP,
    ) -> "ScrapeResult":
        return cls(success=False, provider=provider, error=error, error_kind=kind)


@dataclass
class SearchHit(SerializableMixin):
    """A single search or similarity result."""

    title: str
    url: str
    snippet: str = ""
    content: str = ""
    published_date: Optional[str] = None
    author: Optional[str] = None


@dataclass
class SearchData(SerializableMixin):
    results: list[SearchHit]
    query: str
    total_results: int


@dataclass
class SearchResult(SerializableMixin):
    """Result envelope of a search or find-similar call."""

    success: bool
    provider: ProviderType
    data: Optional[SearchData] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(
        cls,
        provider: ProviderType,
        error: str,
        kind: ErrorKind = ErrorKind.HTTP,
    ) -> "SearchResult":
        return cls(success=False, provider=provider, error=error, error_kind=kind)


# =============================================================================
# Pattern detection
# =============================================================================

@dataclass
class DetectionOutcome(SerializableMixin):
    """Weighted detection result; confidence is capped at 100."""

    detected: bool = False
    confidence: int = 0
    evidence: list[str] = field(default_factory=list)


@dataclass
class DetectedTech(SerializableMixin):
    """A technology candidate with its confidence and evidence."""

    name: str
    confidence: int
    evidence: list[str] = field(default_factory=list)
    version: Optional[str] = None


@dataclass
class TechDetectionResult(SerializableMixin):
    """Tech stack of a page.

    Shop system, PIM and CMS are single primary picks; the other
    categories list every candidate above the secondary threshold.
    """

    shop_system: Optional[DetectedTech] = None
    pim: Optional[DetectedTech] = None
    cms: Optional[DetectedTech] = None
    frontend: list[DetectedTech] = field(default_factory=list)
    analytics: list[DetectedTech] = field(default_factory=list)
    marketing: list[DetectedTech] = field(default_factory=list)
    payment: list[DetectedTech] = field(default_factory=list)
    other: list[DetectedTech] = field(default_factory=list)
    confidence: str = "low"  # high/medium/low


# =============================================================================
# SEO
# =============================================================================

@dataclass
class TitleAnalysis(SerializableMixin):
    exists: bool = False
    content: str = ""
    length: int = 0
    optimal: bool = False
    has_keywords: bool = False


@dataclass
class MetaDescriptionAnalysis(SerializableMixin):
    exists: bool = False
    content: str = ""
    length: int = 0
    optimal: bool = False


@dataclass
class HeadingsAnalysis(SerializableMixin):
    h1_count: int = 0
    h1_content: list[str] = field(default_factory=list)
    h2_count: int = 0
    h3_count: int = 0
    has_proper_hierarchy: bool = False
    heading_structure: list[str] = field(default_factory=list)


@dataclass
class ImagesAnalysis(SerializableMixin):
    total: int = 0
    with_alt: int = 0
    without_alt: int = 0
    missing_alt_urls: list[str] = field(default_factory=list)
    lazy_loaded: int = 0


@dataclass
class LinksAnalysis(SerializableMixin):
    internal: int = 0
    external: int = 0
    nofollow: int = 0
    broken_suspects: list[str] = field(default_factory=list)


@dataclass
class TechnicalSEO(SerializableMixin):
    has_canonical: bool = False
    canonical_url: str = ""
    has_robots_meta: bool = False
    robots_content: str = ""
    has_viewport: bool = False
    has_charset: bool = False
    has_open_graph: bool = False
    has_twitter_cards: bool = False
    has_structured_data: bool = False
    structured_data_types: list[str] = field(default_factory=list)
    has_favicon: bool = False
    has_hreflang: bool = False


@dataclass
class ContentAnalysis(SerializableMixin):
    word_count: int = 0
    paragraph_count: int = 0
    has_video: bool = False
    readability_score: str = "poor"  # good/average/poor


@dataclass
class SEOIssue(SerializableMixin):
    severity: str  # critical/warning/info
    category: str
    message: str


@dataclass
class SEOAnalysisResult(SerializableMixin):
    """Structural SEO facts of one page plus derived issues and score."""

    score: int
    title: TitleAnalysis
    meta_description: MetaDescriptionAnalysis
    headings: HeadingsAnalysis
    images: ImagesAnalysis
    links: LinksAnalysis
    technical: TechnicalSEO
    content: ContentAnalysis
    issues: list[SEOIssue] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


# =============================================================================
# Procurement
# =============================================================================

@dataclass
class B2BPortalInfo(SerializableMixin):
    detected: bool = False
    confidence: int = 0
    evidence: list[str] = field(default_factory=list)
    login_type: Optional[str] = None  # separate/integrated/unknown


@dataclass
class PunchoutInfo(SerializableMixin):
    oci_support: DetectionOutcome = field(default_factory=DetectionOutcome)
    cxml_support: DetectionOutcome = field(default_factory=DetectionOutcome)
    ariba_support: DetectionOutcome = field(default_factory=DetectionOutcome)
    coupa_support: DetectionOutcome = field(default_factory=DetectionOutcome)


@dataclass
class CatalogInfo(SerializableMixin):
    bmecat_support: DetectionOutcome = field(default_factory=DetectionOutcome)
    datanorm_support: DetectionOutcome = field(default_factory=DetectionOutcome)
    etim_support: DetectionOutcome = field(default_factory=DetectionOutcome)
    csv_export: DetectionOutcome = field(default_factory=DetectionOutcome)


@dataclass
class ERPIntegrationInfo(SerializableMixin):
    sap_support: DetectionOutcome = field(default_factory=DetectionOutcome)
    microsoft_dynamics: DetectionOutcome = field(default_factory=DetectionOutcome)
    oracle_support: DetectionOutcome = field(default_factory=DetectionOutcome)
    api_available: DetectionOutcome = field(default_factory=DetectionOutcome)


@dataclass
class B2BFeature(SerializableMixin):
    name: str
    category: str  # ordering/pricing/account/integration/payment
    detected: bool = False
    confidence: int = 0
    evidence: list[str] = field(default_factory=list)


@dataclass
class ProcurementResult(SerializableMixin):
    """B2B and e-procurement readiness of a page."""

    b2b_portal: B2BPortalInfo
    punchout: PunchoutInfo
    catalog: CatalogInfo
    erp_integration: ERPIntegrationInfo
    b2b_features: list[B2BFeature] = field(default_factory=list)
    score: int = 0
    recommendation: str = ""


# =============================================================================
# Agent jobs and URL analysis
# =============================================================================

class AgentJobState(str, Enum):
    """Lifecycle of a Firecrawl job (agent, crawl, extract, map)."""

    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class AgentJobResult(SerializableMixin):
    """Outcome of a Firecrawl job; map requests complete in one step."""

    success: bool
    state: AgentJobState
    output: Any = None
    credits_used: Optional[int] = None
    duration: float = 0.0
    job_id: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


@dataclass
class AnalysisReport(SerializableMixin):
    """A scraped URL run through one analyzer."""

    success: bool
    url: str
    provider: Optional[ProviderType] = None
    analysis: Any = None
    formatted: str = ""
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
