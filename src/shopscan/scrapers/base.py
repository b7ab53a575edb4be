"""Common plumbing for provider adapters.

Every adapter makes exactly one outbound request per operation and never
raises: transport errors and non-2xx statuses become failed results with a
user-facing message and an ``ErrorKind``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple, Type, Union

import requests

from shopscan.config import Config
from shopscan.models import ErrorKind, ProviderType, ScrapeResult, SearchResult

logger = logging.getLogger(__name__)

Result = Union[ScrapeResult, SearchResult]


class BaseScraper(ABC):
    """Capability interface shared by all adapters.

    Subclasses implement ``_scrape``; search backends additionally override
    ``search`` and ``find_similar``.
    """

    provider: ProviderType
    display_name: str = ""
    requires_api_key: bool = True

    # HTTP status -> (message, kind); anything else is a generic HTTP error
    status_errors: Dict[int, Tuple[str, ErrorKind]] = {}

    def __init__(self, session: Optional[requests.Session] = None, config: Optional[Config] = None):
        """Initialize the adapter.

        Args:
            session: HTTP session to use (a new one is created if None)
            config: Runtime configuration (timeouts, user agent)
        """
        self.config = config or Config()
        self.session = session or requests.Session()

    @property
    def timeout(self) -> int:
        return self.config.timeout

    @property
    def error_prefix(self) -> str:
        return f"{self.display_name} Fehler"

    @property
    def missing_key_error(self) -> str:
        return f"{self.display_name} API-Key nicht konfiguriert"

    @property
    def invalid_payload_error(self) -> str:
        return f"{self.error_prefix}: Ungültige Antwort"

    def scrape_url(self, url: str, api_key: Optional[str] = None, js_rendering: bool = False) -> ScrapeResult:
        """Fetch one URL and normalize it into a ScrapeResult.

        Args:
            url: Absolute http(s) URL
            api_key: Provider credential (ignored by providers without one)
            js_rendering: Ask for a rendered page where the provider supports it

        Returns:
            ScrapeResult, never raises
        """
        if self.requires_api_key and not api_key:
            return ScrapeResult.failure(self.provider, self.missing_key_error, ErrorKind.CONFIGURATION)

        return self._guarded(ScrapeResult, self._scrape, url, api_key, js_rendering)

    @abstractmethod
    def _scrape(self, url: str, api_key: Optional[str], js_rendering: bool) -> ScrapeResult:
        ...

    def search(
        self,
        query: str,
        api_key: Optional[str] = None,
        num_results: int = 10,
        include_domains: Optional[List[str]] = None,
        exclude_domains: Optional[List[str]] = None,
        **options,
    ) -> SearchResult:
        return self.unsupported_search()

    def find_similar(
        self,
        url: str,
        api_key: Optional[str] = None,
        num_results: int = 10,
        include_domains: Optional[List[str]] = None,
        exclude_domains: Optional[List[str]] = None,
    ) -> SearchResult:
        return self.unsupported_search()

    def unsupported_search(self) -> SearchResult:
        return SearchResult.failure(
            self.provider,
            f"Provider {self.provider.value} unterstützt keine Suche",
            ErrorKind.UNSUPPORTED,
        )

    def _guarded(self, result_cls: Type[Result], func: Callable[..., Result], *args) -> Result:
        """Run one adapter call and convert transport errors into results."""
        try:
            return func(*args)
        except requests.exceptions.Timeout:
            return self._failure(result_cls, f"Zeitüberschreitung nach {self.timeout}s", ErrorKind.TIMEOUT)
        except requests.exceptions.ConnectionError:
            return self._failure(result_cls, self.unreachable_error(), ErrorKind.UNREACHABLE)
        except (ValueError, TypeError, AttributeError, KeyError):
            # Undecodable body or a payload of the wrong shape
            return self._failure(result_cls, self.invalid_payload_error, ErrorKind.CONTENT)
        except requests.exceptions.RequestException:
            return self._failure(result_cls, f"{self.error_prefix}: Anfrage fehlgeschlagen", ErrorKind.HTTP)

    def unreachable_error(self) -> str:
        return f"{self.display_name} ist nicht erreichbar."

    def _http_failure(self, result_cls: Type[Result], response: requests.Response) -> Result:
        """Classify a non-2xx response."""
        status = response.status_code
        if status in self.status_errors:
            message, kind = self.status_errors[status]
        else:
            message, kind = f"{self.error_prefix}: {status} {response.reason or ''}".rstrip(), ErrorKind.HTTP
        return self._failure(result_cls, message, kind, status=status)

    def _failure(
        self,
        result_cls: Type[Result],
        message: str,
        kind: ErrorKind,
        status: Optional[int] = None,
    ) -> Result:
        if status is not None:
            logger.warning(f"{self.provider.value}: HTTP {status} ({kind.value})")
        else:
            logger.warning(f"{self.provider.value}: {message} ({kind.value})")
        return result_cls.failure(self.provider, message, kind)


def is_json_response(response: requests.Response) -> bool:
    return "application/json" in response.headers.get("content-type", "")


def json_object(response: requests.Response) -> dict:
    """Decode a JSON object body; raises ValueError for anything else."""
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object")
    return payload


def text_field(payload: dict, *keys: str) -> str:
    """Return the first non-empty value among ``keys``.

    Raises:
        TypeError: If that value is not a string
    """
    for key in keys:
        value = payload.get(key)
        if value:
            if not isinstance(value, str):
                raise TypeError(f"Expected a string in '{key}', got {type(value).__name__}")
            return value
    return ""
