"""Provider adapters."""

from shopscan.scrapers.base import BaseScraper
from shopscan.scrapers.exa import ExaScraper
from shopscan.scrapers.jina import JinaScraper
from shopscan.scrapers.native import NativeScraper
from shopscan.scrapers.scrapingant import ScrapingAntScraper

__all__ = [
    "BaseScraper",
    "ExaScraper",
    "JinaScraper",
    "NativeScraper",
    "ScrapingAntScraper",
]
