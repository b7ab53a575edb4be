"""Side-by-side comparison of several shops.

Each shop is analyzed once per criterion by an agent job focused on the
shop URL. Jobs run strictly one after another, so comparing three shops on
five criteria means fifteen agent jobs.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urlparse

from shopscan.agent import FirecrawlAgent
from shopscan.constants import COMPARE_MAX_SHOPS, COMPARE_MIN_SHOPS
from shopscan.firecrawl import MISSING_KEY_ERROR
from shopscan.models import ErrorKind, SerializableMixin
from shopscan.orchestrator import validate_url
from shopscan.templates import ComparisonCriterion, default_criteria, get_criterion_by_id

logger = logging.getLogger(__name__)

NO_DATA = "Keine Daten"
ANALYSIS_ERROR = "Fehler bei Analyse"


@dataclass
class ShopAnalysis(SerializableMixin):
    """Agent answers for one shop, keyed by criterion id."""

    url: str
    results: Dict[str, str] = field(default_factory=dict)


@dataclass
class ComparisonResult(SerializableMixin):
    success: bool
    criteria: List[ComparisonCriterion] = field(default_factory=list)
    shops: List[ShopAnalysis] = field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, error: str, kind: ErrorKind = ErrorKind.VALIDATION) -> "ComparisonResult":
        return cls(success=False, error=error, error_kind=kind)


def _as_text(output) -> str:
    if isinstance(output, str):
        return output
    return json.dumps(output, ensure_ascii=False)


class ShopComparison:
    """Runs the comparison matrix through a FirecrawlAgent."""

    def __init__(self, agent: Optional[FirecrawlAgent] = None):
        self.agent = agent or FirecrawlAgent()

    def compare(self, urls: List[str], criteria: Optional[List[str]] = None) -> ComparisonResult:
        """Analyze every shop on every criterion.

        Args:
            urls: Two to five shop URLs
            criteria: Criterion ids (the default set when empty)

        Returns:
            ComparisonResult; a failed agent job marks its cell instead of
            failing the whole comparison
        """
        shop_urls = [url.strip() for url in urls or [] if url and url.strip()]
        if not COMPARE_MIN_SHOPS <= len(shop_urls) <= COMPARE_MAX_SHOPS:
            return ComparisonResult.failure(
                f"Bitte {COMPARE_MIN_SHOPS} bis {COMPARE_MAX_SHOPS} Shop-URLs angeben"
            )
        for url in shop_urls:
            error = validate_url(url)
            if error:
                return ComparisonResult.failure(f"{error}: {url}")

        selected = []
        for criterion_id in criteria or []:
            criterion = get_criterion_by_id(criterion_id)
            if criterion is None:
                return ComparisonResult.failure(f"Unbekanntes Kriterium: {criterion_id}")
            selected.append(criterion)
        selected = selected or default_criteria()

        if not self.agent.api_key():
            return ComparisonResult.failure(MISSING_KEY_ERROR, ErrorKind.CONFIGURATION)

        total = len(shop_urls) * len(selected)
        step = 0
        shops = []
        for url in shop_urls:
            analysis = ShopAnalysis(url=url)
            for criterion in selected:
                step += 1
                logger.info(f"[{step}/{total}] {url} - {criterion.name}")
                result = self.agent.run(criterion.prompt, urls=[url])
                if not result.success:
                    analysis.results[criterion.id] = ANALYSIS_ERROR
                elif result.output:
                    analysis.results[criterion.id] = _as_text(result.output)
                else:
                    analysis.results[criterion.id] = NO_DATA
            shops.append(analysis)

        return ComparisonResult(success=True, criteria=selected, shops=shops)


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", "<br>")


def format_comparison(result: ComparisonResult) -> str:
    """Render the comparison as a Markdown table, one column per shop."""
    hosts = [urlparse(shop.url).hostname or shop.url for shop in result.shops]
    lines = [
        "## Shop-Vergleich",
        "",
        "| Kriterium | " + " | ".join(hosts) + " |",
        "|---" * (len(hosts) + 1) + "|",
    ]
    for criterion in result.criteria:
        cells = [_cell(shop.results.get(criterion.id, "-")) for shop in result.shops]
        lines.append(f"| {criterion.icon} {criterion.name} | " + " | ".join(cells) + " |")
    return "\n".join(lines)
