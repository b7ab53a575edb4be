"""Provider registry: metadata, tools and default fallback order."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from shopscan.config import CREDENTIAL_ENV_VARS
from shopscan.models import ProviderType, SerializableMixin


@dataclass
class ProviderConfig(SerializableMixin):
    """Static description of one scraping or search backend."""

    id: ProviderType
    name: str
    description: str
    features: List[str] = field(default_factory=list)
    limitations: List[str] = field(default_factory=list)
    free_credits: str = ""
    best_for: str = ""
    enabled: bool = True
    requires_api_key: bool = True
    api_key_env_var: Optional[str] = None
    docs_url: Optional[str] = None


@dataclass
class ToolConfig(SerializableMixin):
    """An operation and the providers able to run it."""

    id: str
    name: str
    description: str
    supported_providers: List[ProviderType] = field(default_factory=list)


PROVIDERS: Dict[ProviderType, ProviderConfig] = {
    ProviderType.FIRECRAWL: ProviderConfig(
        id=ProviderType.FIRECRAWL,
        name="Firecrawl",
        description="KI-gestütztes Web-Scraping mit Agent-Funktion. Verarbeitet JavaScript-Seiten und komplexe Websites.",
        features=[
            "Agent für autonome Web-Suche",
            "JavaScript-Rendering",
            "Anti-Bot-Umgehung",
            "Strukturierte Datenextraktion",
            "Crawling ganzer Websites",
            "Map für URL-Discovery",
        ],
        limitations=["500 kostenlose Credits (einmalig)", "Danach kostenpflichtig"],
        free_credits="500 Credits",
        best_for="Komplexe Shops, JS-Heavy Seiten, Agent-Aufgaben",
        api_key_env_var=CREDENTIAL_ENV_VARS["firecrawl"],
        docs_url="https://firecrawl.dev",
    ),
    ProviderType.EXA: ProviderConfig(
        id=ProviderType.EXA,
        name="Exa",
        description="Semantische Web-Suche mit KI. Findet relevante Inhalte basierend auf Bedeutung, nicht nur Keywords.",
        features=[
            "Semantische Suche",
            "Content-Extraktion",
            "Ähnliche Seiten finden",
            "News & Artikel durchsuchen",
            "Embedding-basierte Suche",
        ],
        limitations=["$10 kostenlose Credits", "Pay-per-use danach"],
        free_credits="$10 Credits (~2000 Suchen)",
        best_for="Wettbewerber-Recherche, Marktanalyse, Content-Discovery",
        api_key_env_var=CREDENTIAL_ENV_VARS["exa"],
        docs_url="https://exa.ai",
    ),
    ProviderType.JINA: ProviderConfig(
        id=ProviderType.JINA,
        name="Jina Reader",
        description="Konvertiert jede URL in sauberes Markdown. Einfachste Integration, ideal für LLM-ready Content.",
        features=[
            "URL zu Markdown Konvertierung",
            "Automatische Content-Extraktion",
            "Entfernt Werbung & Navigation",
            "Sehr einfache API (URL-Prefix)",
            "Schnell und zuverlässig",
        ],
        limitations=[
            "20 req/min ohne Key",
            "200 req/min mit kostenlosem Key",
            "Kein JavaScript-Rendering",
        ],
        free_credits="Unbegrenzt (Rate-Limited)",
        best_for="Blogs, Artikel, Produktseiten, Dokumentation",
        requires_api_key=False,  # Key only raises the rate limit
        api_key_env_var=CREDENTIAL_ENV_VARS["jina"],
        docs_url="https://jina.ai/reader",
    ),
    ProviderType.SCRAPINGANT: ProviderConfig(
        id=ProviderType.SCRAPINGANT,
        name="ScrapingAnt",
        description="Web-Scraping API mit Proxy-Rotation und Anti-Bot-Schutz. Großzügiges kostenloses Kontingent.",
        features=[
            "10.000 Credits/Monat kostenlos",
            "Proxy-Rotation",
            "JavaScript-Rendering",
            "Anti-Bot-Umgehung",
            "Headless Chrome",
        ],
        limitations=[
            "10.000 Credits/Monat",
            "JS-Rendering kostet 10 Credits",
            "Keine Kreditkarte nötig",
        ],
        free_credits="10.000 Credits/Monat",
        best_for="E-Commerce Shops, dynamische Seiten, regelmäßiges Scraping",
        api_key_env_var=CREDENTIAL_ENV_VARS["scrapingant"],
        docs_url="https://scrapingant.com",
    ),
    ProviderType.NATIVE: ProviderConfig(
        id=ProviderType.NATIVE,
        name="Native Fetch",
        description="Direkter HTTP-Abruf ohne externe API. Komplett kostenlos und unbegrenzt, aber nur für einfache Seiten.",
        features=[
            "Komplett kostenlos",
            "Keine API-Keys nötig",
            "Unbegrenzte Requests",
            "Schnellste Option",
            "HTML zu Markdown Konvertierung",
        ],
        limitations=[
            "Kein JavaScript-Rendering",
            "Keine Anti-Bot-Umgehung",
            "Nur öffentliche Seiten",
            "Keine Proxy-Rotation",
        ],
        free_credits="Unbegrenzt",
        best_for="Einfache Blogs, statische Seiten, öffentliche Produktseiten",
        requires_api_key=False,
    ),
}

TOOLS: Dict[str, ToolConfig] = {
    "scrape": ToolConfig(
        id="scrape",
        name="Scrape",
        description="Extrahiert den Inhalt einer einzelnen URL als Markdown oder strukturierte Daten.",
        supported_providers=[
            ProviderType.FIRECRAWL,
            ProviderType.JINA,
            ProviderType.SCRAPINGANT,
            ProviderType.NATIVE,
        ],
    ),
    "search": ToolConfig(
        id="search",
        name="Search",
        description="Durchsucht das Web nach relevanten Inhalten basierend auf einer Suchanfrage.",
        supported_providers=[ProviderType.EXA],
    ),
    "crawl": ToolConfig(
        id="crawl",
        name="Crawl",
        description="Durchsucht eine Website rekursiv und sammelt Inhalte von mehreren Unterseiten.",
        supported_providers=[ProviderType.FIRECRAWL],
    ),
    "map": ToolConfig(
        id="map",
        name="Map",
        description="Erstellt eine Übersicht aller URLs einer Website ohne die Inhalte zu extrahieren.",
        supported_providers=[ProviderType.FIRECRAWL],
    ),
    "extract": ToolConfig(
        id="extract",
        name="Extract",
        description="Extrahiert strukturierte Daten aus einer oder mehreren Seiten anhand eines Prompts oder JSON-Schemas.",
        supported_providers=[ProviderType.FIRECRAWL],
    ),
    "agent": ToolConfig(
        id="agent",
        name="Agent",
        description="KI-Agent sucht autonom im Web nach Informationen basierend auf natürlicher Sprache.",
        supported_providers=[ProviderType.FIRECRAWL],
    ),
}

# Default fallback order per tool
FALLBACK_ORDER: Dict[str, List[ProviderType]] = {
    "scrape": [
        ProviderType.JINA,
        ProviderType.SCRAPINGANT,
        ProviderType.FIRECRAWL,
        ProviderType.NATIVE,
    ],
    "search": [ProviderType.EXA],
    "crawl": [ProviderType.FIRECRAWL],
    "map": [ProviderType.FIRECRAWL],
    "extract": [ProviderType.FIRECRAWL],
    "agent": [ProviderType.FIRECRAWL],
}


def get_provider_config(provider: ProviderType) -> ProviderConfig:
    return PROVIDERS[ProviderType(provider)]


def get_enabled_providers() -> List[ProviderConfig]:
    return [config for config in PROVIDERS.values() if config.enabled]


def get_providers_for_tool(tool: str) -> List[ProviderConfig]:
    """Return the enabled providers supporting a tool, in tool order.

    Raises:
        KeyError: If the tool is unknown
    """
    return [
        PROVIDERS[provider]
        for provider in TOOLS[tool].supported_providers
        if PROVIDERS[provider].enabled
    ]


def get_tools_for_provider(provider: ProviderType) -> List[ToolConfig]:
    provider = ProviderType(provider)
    return [tool for tool in TOOLS.values() if provider in tool.supported_providers]
