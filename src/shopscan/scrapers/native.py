"""Direct HTTP fetch without a third-party service."""

import logging
from typing import Optional
from urllib.parse import urlparse

from shopscan.constants import HTML_ACCEPT, SUPPORTED_CONTENT_TYPES
from shopscan.markdown import FULL_PROFILE, extract_title, html_to_markdown
from shopscan.models import ErrorKind, ProviderType, ScrapeData, ScrapeResult
from shopscan.scrapers.base import BaseScraper

logger = logging.getLogger(__name__)


class NativeScraper(BaseScraper):
    """Fetches the page directly with browser-like headers.

    Free and unlimited, but without JS rendering or anti-bot handling.
    """

    provider = ProviderType.NATIVE
    display_name = "Native Fetch"
    requires_api_key = False

    status_errors = {
        403: (
            "Zugriff verweigert (403). Diese Seite blockiert automatische Anfragen. "
            "Versuche einen anderen Provider.",
            ErrorKind.BLOCKED,
        ),
        404: ("Seite nicht gefunden (404)", ErrorKind.NOT_FOUND),
    }

    @property
    def error_prefix(self) -> str:
        return "HTTP Fehler"

    def unreachable_error(self) -> str:
        return "Netzwerkfehler. Die URL ist möglicherweise nicht erreichbar."

    def _scrape(self, url: str, api_key: Optional[str], js_rendering: bool) -> ScrapeResult:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            return self._failure(ScrapeResult, "Nur HTTP und HTTPS URLs werden unterstützt", ErrorKind.VALIDATION)
        if not parsed.netloc:
            return self._failure(ScrapeResult, "Ungültige URL", ErrorKind.VALIDATION)

        logger.debug(f"Fetching {url}")
        response = self.session.get(
            url,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": HTML_ACCEPT,
                "Accept-Language": self.config.accept_language,
            },
            timeout=self.timeout,
            allow_redirects=True,
        )

        if not response.ok:
            return self._http_failure(ScrapeResult, response)

        content_type = response.headers.get("content-type", "")
        if not any(supported in content_type for supported in SUPPORTED_CONTENT_TYPES):
            return self._failure(
                ScrapeResult,
                f"Nicht unterstützter Content-Type: {content_type}. Native Fetch unterstützt nur HTML/Text.",
                ErrorKind.CONTENT,
            )

        html = response.text
        if response.url != url:
            logger.debug(f"Redirected to {response.url}")

        return ScrapeResult(
            success=True,
            provider=self.provider,
            data=ScrapeData(
                markdown=html_to_markdown(html, FULL_PROFILE),
                html=html,
                url=response.url or url,
                title=extract_title(html),
            ),
        )
