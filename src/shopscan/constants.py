# src/shopscan/constants.py
"""Centralized constants for shopscan.

Values here are fixed by the provider APIs or by the report formats. For
user-tunable thresholds, see config.py.
"""

# =============================================================================
# Provider endpoints
# =============================================================================

JINA_READER_URL = "https://r.jina.ai"
SCRAPINGANT_API_URL = "https://api.scrapingant.com/v2/general"
EXA_API_URL = "https://api.exa.ai"
FIRECRAWL_API_URL = "https://api.firecrawl.dev/v2"
FIRECRAWL_AGENT_URL = f"{FIRECRAWL_API_URL}/agent"
FIRECRAWL_CRAWL_URL = f"{FIRECRAWL_API_URL}/crawl"
FIRECRAWL_MAP_URL = f"{FIRECRAWL_API_URL}/map"
FIRECRAWL_EXTRACT_URL = f"{FIRECRAWL_API_URL}/extract"

# =============================================================================
# HTTP
# =============================================================================

DEFAULT_TIMEOUT_SECONDS = 30

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT_LANGUAGE = "de-DE,de;q=0.9,en-US;q=0.8,en;q=0.7"
HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

# Content types the local fetch provider accepts
SUPPORTED_CONTENT_TYPES = ("text/html", "text/plain")

# ScrapingAnt reports consumed credits in this header
CREDITS_HEADER = "x-credits-used"

# =============================================================================
# Search
# =============================================================================

SEARCH_MIN_RESULTS = 1
SEARCH_MAX_RESULTS = 50
SEARCH_DEFAULT_RESULTS = 10
SNIPPET_LENGTH = 300  # Characters of full content used as snippet
UNTITLED = "Untitled"

# =============================================================================
# Firecrawl jobs
# =============================================================================

AGENT_POLL_INTERVAL_SECONDS = 3.0
AGENT_MAX_POLL_SECONDS = 270.0  # 4.5 minutes, leaves a buffer for the response
AGENT_MIN_PROMPT_LENGTH = 10
CRAWL_DEFAULT_LIMIT = 10  # Pages per crawl job
MAP_DEFAULT_LIMIT = 100  # URLs per map request

# Shops per comparison
COMPARE_MIN_SHOPS = 2
COMPARE_MAX_SHOPS = 5

# =============================================================================
# SEO report
# =============================================================================

HEADING_OUTLINE_LIMIT = 15
HEADING_TEXT_LIMIT = 50
MISSING_ALT_SAMPLE_LIMIT = 5
BROKEN_LINK_SAMPLE_LIMIT = 5
META_PREVIEW_LENGTH = 100
MIN_WORD_LENGTH = 3  # Tokens shorter than this do not count as words
