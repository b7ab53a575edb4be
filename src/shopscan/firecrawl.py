"""Firecrawl v2 REST client: crawl, map and extract.

Crawl and extract are asynchronous jobs. The submission returns a job id
which is polled on a fixed interval until the job reaches a terminal status
or the wall-clock budget runs out:

    SUBMITTED -> COMPLETED                  (submission already carries the result)
    SUBMITTED -> POLLING -> COMPLETED | FAILED | TIMED_OUT

Only one poll is in flight at a time. A timed-out job may still be running
on the provider side; its id is returned so the caller can follow up. Map
answers in a single request. Agent jobs (see agent.py) share the same
machinery.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from shopscan.config import Config, ProviderCredentials
from shopscan.constants import (
    CRAWL_DEFAULT_LIMIT,
    FIRECRAWL_CRAWL_URL,
    FIRECRAWL_EXTRACT_URL,
    FIRECRAWL_MAP_URL,
    MAP_DEFAULT_LIMIT,
)
from shopscan.models import AgentJobResult, AgentJobState, ErrorKind
from shopscan.orchestrator import validate_url
from shopscan.scrapers.base import json_object

logger = logging.getLogger(__name__)

MISSING_KEY_ERROR = "FIRECRAWL_API_KEY is not configured"
TERMINAL_FAILURES = ("failed", "cancelled")


class FirecrawlJobError(Exception):
    """Raised internally when the Firecrawl API cannot be talked to."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.HTTP):
        super().__init__(message)
        self.kind = kind


class FirecrawlJobClient:
    """Transport, credential lookup and job polling for the Firecrawl API."""

    def __init__(
        self,
        credentials: Optional[ProviderCredentials] = None,
        config: Optional[Config] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the client.

        Args:
            credentials: Provider credentials; read from the environment per call when None
            config: Poll interval, poll budget and HTTP timeout
            session: HTTP session
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self._credentials = credentials
        self.config = config or Config()
        self.session = session or requests.Session()
        self.sleep = sleep
        self.clock = clock

    def api_key(self) -> Optional[str]:
        credentials = self._credentials or ProviderCredentials.from_env()
        return credentials.get("firecrawl")

    @staticmethod
    def _headers(api_key: str, json_body: bool = True) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {api_key}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _request(self, label: str, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """Send one request and decode the JSON body.

        Error bodies are decoded too; they carry ``success`` and ``error``.

        Raises:
            FirecrawlJobError: On transport failures or undecodable bodies
        """
        try:
            response = self.session.request(method, url, timeout=self.config.timeout, **kwargs)
            return json_object(response)
        except requests.exceptions.Timeout:
            raise FirecrawlJobError(f"{label} request timed out after {self.config.timeout}s", ErrorKind.TIMEOUT)
        except requests.exceptions.ConnectionError:
            raise FirecrawlJobError(f"{label} API is not reachable", ErrorKind.UNREACHABLE)
        except ValueError:
            raise FirecrawlJobError(f"{label} API returned an invalid response", ErrorKind.CONTENT)
        except requests.exceptions.RequestException:
            raise FirecrawlJobError(f"{label} request failed", ErrorKind.HTTP)

    def _guarded_job(self, label: str, func: Callable[..., AgentJobResult], *args) -> AgentJobResult:
        """Run a job and turn transport errors into a failed result."""
        start = self.clock()
        try:
            return func(start, *args)
        except FirecrawlJobError as e:
            logger.warning(f"{label} job aborted: {e}")
            return self._failed(str(e), e.kind, duration=self._elapsed(start))

    def _await_job(
        self,
        label: str,
        api_key: str,
        submission: Dict[str, Any],
        status_url: str,
        start: float,
        hint: str,
    ) -> AgentJobResult:
        """Follow a submitted job to a terminal state.

        Args:
            label: Job name used in messages ("Agent", "Crawl", ...)
            api_key: Firecrawl API key
            submission: Decoded submission response
            status_url: Base URL the job id is appended to for polling
            start: Clock value when the job was started
            hint: Advice appended to the time-out message
        """
        if not submission.get("success"):
            return self._failed(
                submission.get("error") or f"Failed to start {label.lower()} job",
                ErrorKind.HTTP,
                duration=self._elapsed(start),
            )

        if submission.get("status") == "completed" or submission.get("data"):
            logger.info(f"{label} job completed immediately in {self._elapsed(start)}s")
            return self._completed(submission, start)

        job_id = submission.get("id")
        if not job_id:
            # Nothing to poll; hand back the submission as is
            return AgentJobResult(
                success=True,
                state=AgentJobState.COMPLETED,
                output=submission,
                duration=self._elapsed(start),
            )

        logger.info(f"{label} job {job_id} started, polling for completion")
        state = AgentJobState.POLLING
        last_status = submission.get("status")
        poll_start = self.clock()

        while state == AgentJobState.POLLING:
            if self.clock() - poll_start >= self.config.max_poll_time:
                state = AgentJobState.TIMED_OUT
                break

            self.sleep(self.config.poll_interval)
            status_body = self._request(
                label, "GET", f"{status_url}/{job_id}", headers=self._headers(api_key, json_body=False)
            )
            status = status_body.get("status")

            if status != last_status:
                logger.info(f"{label} job {job_id} status changed: {last_status} -> {status}")
                last_status = status

            if status == "completed":
                logger.info(f"{label} job {job_id} completed in {self._elapsed(start)}s")
                return self._completed(status_body, start, job_id=job_id)

            if status in TERMINAL_FAILURES:
                logger.info(f"{label} job {job_id} {status} after {self._elapsed(start)}s")
                return self._failed(
                    status_body.get("error") or f"{label} job {status}",
                    ErrorKind.HTTP,
                    duration=self._elapsed(start),
                    job_id=job_id,
                )

        duration = self._elapsed(start)
        logger.info(f"{label} job {job_id} timed out after {duration}s")
        return AgentJobResult(
            success=False,
            state=AgentJobState.TIMED_OUT,
            duration=duration,
            job_id=job_id,
            error=f"{label} job timed out after {duration}s. The job may still be running - {hint}.",
            error_kind=ErrorKind.TIMEOUT,
        )

    def _completed(self, body: Dict[str, Any], start: float, job_id: Optional[str] = None) -> AgentJobResult:
        return AgentJobResult(
            success=True,
            state=AgentJobState.COMPLETED,
            output=body.get("data"),
            credits_used=body.get("creditsUsed"),
            duration=self._elapsed(start),
            job_id=job_id or body.get("id"),
        )

    @staticmethod
    def _failed(
        message: str,
        kind: ErrorKind,
        duration: float = 0.0,
        job_id: Optional[str] = None,
    ) -> AgentJobResult:
        return AgentJobResult(
            success=False,
            state=AgentJobState.FAILED,
            duration=duration,
            job_id=job_id,
            error=message,
            error_kind=kind,
        )

    def _elapsed(self, start: float) -> float:
        return round(self.clock() - start, 1)


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


class FirecrawlClient(FirecrawlJobClient):
    """Crawl, map and extract against the Firecrawl v2 API.

    Every operation returns an ``AgentJobResult`` and never raises.
    """

    def crawl(self, url: str, limit: int = CRAWL_DEFAULT_LIMIT) -> AgentJobResult:
        """Crawl a site and return its pages as Markdown.

        Args:
            url: Start URL
            limit: Maximum number of pages

        Returns:
            AgentJobResult whose output is the list of crawled pages
        """
        error = validate_url(url)
        if error:
            return self._failed(error, ErrorKind.VALIDATION)
        if not _positive_int(limit):
            return self._failed("Limit must be a positive number", ErrorKind.VALIDATION)

        api_key = self.api_key()
        if not api_key:
            return self._failed(MISSING_KEY_ERROR, ErrorKind.CONFIGURATION)

        body = {
            "url": url.strip(),
            "limit": limit,
            "scrapeOptions": {"formats": ["markdown"]},
        }
        return self._guarded_job("Crawl", self._run_crawl, api_key, body)

    def _run_crawl(self, start: float, api_key: str, body: Dict[str, Any]) -> AgentJobResult:
        logger.info(f"Starting crawl of {body['url']} (limit {body['limit']})")
        submission = self._request("Crawl", "POST", FIRECRAWL_CRAWL_URL, json=body, headers=self._headers(api_key))
        return self._await_job(
            "Crawl", api_key, submission, FIRECRAWL_CRAWL_URL, start, "try again with a lower limit"
        )

    def map_site(self, url: str, search: Optional[str] = None, limit: int = MAP_DEFAULT_LIMIT) -> AgentJobResult:
        """List the URLs of a site without fetching their content.

        Args:
            url: Site URL
            search: Only return URLs related to this term
            limit: Maximum number of URLs

        Returns:
            AgentJobResult whose output is a list of ``{url, title, description}``
        """
        error = validate_url(url)
        if error:
            return self._failed(error, ErrorKind.VALIDATION)
        if not _positive_int(limit):
            return self._failed("Limit must be a positive number", ErrorKind.VALIDATION)

        api_key = self.api_key()
        if not api_key:
            return self._failed(MISSING_KEY_ERROR, ErrorKind.CONFIGURATION)

        body: Dict[str, Any] = {"url": url.strip(), "limit": limit}
        if search:
            body["search"] = search
        return self._guarded_job("Map", self._run_map, api_key, body)

    def _run_map(self, start: float, api_key: str, body: Dict[str, Any]) -> AgentJobResult:
        logger.info(f"Mapping {body['url']}")
        response = self._request("Map", "POST", FIRECRAWL_MAP_URL, json=body, headers=self._headers(api_key))
        if not response.get("success"):
            return self._failed(response.get("error") or "Map failed", ErrorKind.HTTP, duration=self._elapsed(start))

        links = response.get("links") or []
        if not isinstance(links, list):
            return self._failed("Map API returned an invalid response", ErrorKind.CONTENT, duration=self._elapsed(start))

        logger.info(f"Mapped {len(links)} URLs for {body['url']}")
        return AgentJobResult(
            success=True,
            state=AgentJobState.COMPLETED,
            output=links,
            credits_used=response.get("creditsUsed"),
            duration=self._elapsed(start),
        )

    def extract(
        self,
        urls: List[str],
        prompt: Optional[str] = None,
        schema: Union[str, Dict[str, Any], None] = None,
    ) -> AgentJobResult:
        """Extract structured data from pages.

        Args:
            urls: Pages to extract from (wildcards such as ``/*`` are allowed)
            prompt: What to extract
            schema: JSON schema of the result, as a dict or a JSON string

        Returns:
            AgentJobResult whose output is the extracted data
        """
        url_list = [url.strip() for url in urls or [] if url and url.strip()]
        if not url_list:
            return self._failed("At least one URL is required", ErrorKind.VALIDATION)
        for url in url_list:
            if validate_url(url):
                return self._failed(f"Invalid URL: {url}", ErrorKind.VALIDATION)
        if isinstance(schema, str):
            try:
                schema = json.loads(schema) if schema.strip() else None
            except ValueError:
                return self._failed("Invalid JSON schema", ErrorKind.VALIDATION)
        if schema and not isinstance(schema, dict):
            return self._failed("Invalid JSON schema", ErrorKind.VALIDATION)
        if not prompt and not schema:
            return self._failed("Either prompt or schema is required", ErrorKind.VALIDATION)

        api_key = self.api_key()
        if not api_key:
            return self._failed(MISSING_KEY_ERROR, ErrorKind.CONFIGURATION)

        body: Dict[str, Any] = {"urls": url_list}
        if prompt:
            body["prompt"] = prompt
        if schema:
            body["schema"] = schema
        return self._guarded_job("Extract", self._run_extract, api_key, body)

    def _run_extract(self, start: float, api_key: str, body: Dict[str, Any]) -> AgentJobResult:
        logger.info(f"Starting extract for {len(body['urls'])} URL(s)")
        submission = self._request(
            "Extract", "POST", FIRECRAWL_EXTRACT_URL, json=body, headers=self._headers(api_key)
        )
        return self._await_job(
            "Extract", api_key, submission, FIRECRAWL_EXTRACT_URL, start, "try again with fewer URLs"
        )
