"""ScrapingAnt adapter: scrape-as-a-service with proxy rotation."""

import logging
from typing import Optional

from shopscan.constants import CREDITS_HEADER, SCRAPINGANT_API_URL
from shopscan.markdown import REDUCED_PROFILE, html_to_markdown
from shopscan.models import ErrorKind, ProviderType, ScrapeData, ScrapeResult
from shopscan.scrapers.base import BaseScraper, is_json_response, json_object, text_field

logger = logging.getLogger(__name__)


def _credits_used(value: Optional[str]) -> int:
    try:
        return int(value) if value else 1
    except ValueError:
        return 1


class ScrapingAntScraper(BaseScraper):
    """General scrape backend.

    JS rendering uses a headless browser on the provider side and costs
    about ten times the credits of a plain request.
    """

    provider = ProviderType.SCRAPINGANT
    display_name = "ScrapingAnt"

    status_errors = {
        401: ("Ungültiger ScrapingAnt API-Key", ErrorKind.BAD_CREDENTIAL),
        403: ("ScrapingAnt Credits aufgebraucht", ErrorKind.QUOTA_EXHAUSTED),
        422: ("Ungültige URL oder Parameter", ErrorKind.BAD_REQUEST),
    }

    def __init__(self, *args, return_text: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.return_text = return_text

    def _scrape(self, url: str, api_key: Optional[str], js_rendering: bool) -> ScrapeResult:
        params = {"url": url}
        if js_rendering:
            params["browser"] = "true"
        if self.return_text:
            params["return_text"] = "true"

        logger.debug(f"ScrapingAnt request for {url} (browser={js_rendering})")
        response = self.session.get(
            SCRAPINGANT_API_URL,
            params=params,
            headers={"Accept": "text/html,application/json", "x-api-key": api_key},
            timeout=self.timeout,
        )

        if not response.ok:
            return self._http_failure(ScrapeResult, response)

        credits_used = _credits_used(response.headers.get(CREDITS_HEADER))

        if is_json_response(response):
            html = text_field(json_object(response), "content")
        else:
            html = response.text

        return ScrapeResult(
            success=True,
            provider=self.provider,
            data=ScrapeData(
                markdown=html_to_markdown(html, REDUCED_PROFILE),
                html=html,
                url=url,
            ),
            credits_used=credits_used,
        )
