"""Jina Reader adapter: turns any URL into Markdown via a URL prefix."""

import logging
from typing import Optional

from shopscan.constants import JINA_READER_URL
from shopscan.models import ErrorKind, ProviderType, ScrapeData, ScrapeResult
from shopscan.scrapers.base import BaseScraper, is_json_response, json_object, text_field

logger = logging.getLogger(__name__)


class JinaScraper(BaseScraper):
    """Reader-style backend. A key is optional and only raises the rate limit."""

    provider = ProviderType.JINA
    display_name = "Jina Reader"
    requires_api_key = False

    status_errors = {
        429: (
            "Rate limit erreicht. Bitte warte einen Moment und versuche es erneut.",
            ErrorKind.RATE_LIMITED,
        ),
    }

    def _scrape(self, url: str, api_key: Optional[str], js_rendering: bool) -> ScrapeResult:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        logger.debug(f"Jina Reader request for {url}")
        response = self.session.get(f"{JINA_READER_URL}/{url}", headers=headers, timeout=self.timeout)

        if not response.ok:
            return self._http_failure(ScrapeResult, response)

        if not is_json_response(response):
            return ScrapeResult(
                success=True,
                provider=self.provider,
                data=ScrapeData(markdown=response.text, url=url),
            )

        payload = json_object(response)
        # The reader wraps its fields in a "data" envelope
        if isinstance(payload.get("data"), dict):
            payload = payload["data"]

        return ScrapeResult(
            success=True,
            provider=self.provider,
            data=ScrapeData(
                markdown=text_field(payload, "content", "text"),
                url=payload.get("url") or url,
                title=payload.get("title") or None,
            ),
        )
