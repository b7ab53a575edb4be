"""Tests for Firecrawl crawl, map and extract."""

import pytest
import requests

from shopscan.config import Config, ProviderCredentials
from shopscan.constants import FIRECRAWL_CRAWL_URL, FIRECRAWL_EXTRACT_URL, FIRECRAWL_MAP_URL
from shopscan.firecrawl import FirecrawlClient
from shopscan.models import AgentJobState, ErrorKind

URL = "https://shop.example.com"


@pytest.fixture
def client_factory(session, clock):
    def factory(config=None, credentials=None):
        return FirecrawlClient(
            credentials=credentials or ProviderCredentials(firecrawl="fc-key"),
            config=config or Config(poll_interval=2, max_poll_time=60),
            session=session,
            sleep=clock.sleep,
            clock=clock,
        )
    return factory


class TestCrawl:
    """Test cases for crawl jobs."""

    def test_submit_and_poll(self, client_factory, session, make_response, clock):
        """Test the crawl is submitted and polled by id."""
        pages = [{"markdown": "# Start", "metadata": {"sourceURL": URL}}]
        session.request.side_effect = [
            make_response(json_data={"success": True, "id": "crawl-1"}),
            make_response(json_data={"status": "scraping", "completed": 1, "total": 3}),
            make_response(json_data={"status": "completed", "data": pages, "creditsUsed": 3}),
        ]

        result = client_factory().crawl(f"  {URL}  ", limit=3)

        assert result.success is True
        assert result.state == AgentJobState.COMPLETED
        assert result.output == pages
        assert result.credits_used == 3
        assert result.job_id == "crawl-1"
        assert clock.sleeps == [2, 2]

        submit_args, submit_kwargs = session.request.call_args_list[0]
        assert submit_args == ("POST", FIRECRAWL_CRAWL_URL)
        assert submit_kwargs["json"] == {
            "url": URL,
            "limit": 3,
            "scrapeOptions": {"formats": ["markdown"]},
        }
        poll_args, poll_kwargs = session.request.call_args_list[1]
        assert poll_args == ("GET", f"{FIRECRAWL_CRAWL_URL}/crawl-1")
        assert "Content-Type" not in poll_kwargs["headers"]

    def test_cancelled(self, client_factory, session, make_response):
        """Test a cancelled crawl is a failure."""
        session.request.side_effect = [
            make_response(json_data={"success": True, "id": "crawl-2"}),
            make_response(json_data={"status": "cancelled"}),
        ]

        result = client_factory().crawl(URL)

        assert result.success is False
        assert result.state == AgentJobState.FAILED
        assert result.error == "Crawl job cancelled"
        assert result.job_id == "crawl-2"

    def test_timeout_hint(self, client_factory, session, make_response):
        """Test a crawl that outlives the budget suggests a lower limit."""
        session.request.side_effect = [
            make_response(json_data={"success": True, "id": "crawl-3"}),
        ] + [make_response(json_data={"status": "scraping"}) for _ in range(2)]

        result = client_factory(config=Config(poll_interval=2, max_poll_time=4)).crawl(URL)

        assert result.state == AgentJobState.TIMED_OUT
        assert result.error_kind == ErrorKind.TIMEOUT
        assert result.error.endswith("try again with a lower limit.")

    @pytest.mark.parametrize("limit", [0, -1, True, "5"])
    def test_invalid_limit(self, client_factory, session, limit):
        """Test the page limit must be a positive integer."""
        result = client_factory().crawl(URL, limit=limit)

        assert result.error == "Limit must be a positive number"
        assert result.error_kind == ErrorKind.VALIDATION
        session.request.assert_not_called()

    def test_invalid_url(self, client_factory, session):
        """Test non-HTTP URLs are rejected."""
        result = client_factory().crawl("ftp://shop.example.com")

        assert result.error == "Nur HTTP und HTTPS URLs werden unterstützt"
        session.request.assert_not_called()

    def test_missing_key(self, client_factory, session):
        """Test crawling needs a Firecrawl key."""
        result = client_factory(credentials=ProviderCredentials(jina="jina-key")).crawl(URL)

        assert result.error == "FIRECRAWL_API_KEY is not configured"
        assert result.error_kind == ErrorKind.CONFIGURATION
        session.request.assert_not_called()

    def test_timeout_on_submit(self, client_factory, session):
        """Test a request time-out ends the job."""
        session.request.side_effect = requests.exceptions.Timeout()

        result = client_factory().crawl(URL)

        assert result.success is False
        assert result.error == "Crawl request timed out after 30s"
        assert result.error_kind == ErrorKind.TIMEOUT


class TestMap:
    """Test cases for map requests."""

    def test_links(self, client_factory, session, make_response, clock):
        """Test map returns the links in a single request."""
        links = [{"url": f"{URL}/werkzeug", "title": "Werkzeug"}, {"url": f"{URL}/kontakt"}]
        session.request.return_value = make_response(json_data={"success": True, "links": links})

        result = client_factory().map_site(URL, search="werkzeug", limit=50)

        assert result.success is True
        assert result.state == AgentJobState.COMPLETED
        assert result.output == links
        assert clock.sleeps == []
        args, kwargs = session.request.call_args
        assert args == ("POST", FIRECRAWL_MAP_URL)
        assert kwargs["json"] == {"url": URL, "limit": 50, "search": "werkzeug"}

    def test_no_search_term(self, client_factory, session, make_response):
        """Test the search term is only sent when given."""
        session.request.return_value = make_response(json_data={"success": True})

        result = client_factory().map_site(URL)

        assert result.output == []
        assert session.request.call_args.kwargs["json"] == {"url": URL, "limit": 100}

    def test_rejected(self, client_factory, session, make_response):
        """Test an unsuccessful map reports the API error."""
        session.request.return_value = make_response(
            status=401, json_data={"success": False, "error": "Unauthorized"}
        )

        result = client_factory().map_site(URL)

        assert result.success is False
        assert result.error == "Unauthorized"
        assert result.error_kind == ErrorKind.HTTP

    def test_links_not_a_list(self, client_factory, session, make_response):
        """Test a malformed links field is a content error."""
        session.request.return_value = make_response(json_data={"success": True, "links": "nope"})

        result = client_factory().map_site(URL)

        assert result.success is False
        assert result.error == "Map API returned an invalid response"
        assert result.error_kind == ErrorKind.CONTENT


class TestExtract:
    """Test cases for extract jobs."""

    def test_schema_string(self, client_factory, session, make_response):
        """Test a JSON schema string is parsed before submission."""
        session.request.side_effect = [
            make_response(json_data={"success": True, "id": "ex-1"}),
            make_response(json_data={"status": "completed", "data": {"name": "Werkzeug AG"}}),
        ]

        result = client_factory().extract(
            [f" {URL}/* ", ""],
            schema='{"type": "object", "properties": {"name": {"type": "string"}}}',
        )

        assert result.success is True
        assert result.output == {"name": "Werkzeug AG"}
        args, kwargs = session.request.call_args_list[0]
        assert args == ("POST", FIRECRAWL_EXTRACT_URL)
        assert kwargs["json"] == {
            "urls": [f"{URL}/*"],
            "schema": {"type": "object", "properties": {"name": {"type": "string"}}},
        }
        assert session.request.call_args_list[1][0] == ("GET", f"{FIRECRAWL_EXTRACT_URL}/ex-1")

    def test_prompt_only(self, client_factory, session, make_response):
        """Test a prompt without schema is enough."""
        session.request.return_value = make_response(
            json_data={"success": True, "status": "completed", "data": {"phone": "0800"}}
        )

        result = client_factory().extract([URL], prompt="Telefonnummer des Shops")

        assert result.output == {"phone": "0800"}
        assert session.request.call_args.kwargs["json"] == {
            "urls": [URL],
            "prompt": "Telefonnummer des Shops",
        }

    @pytest.mark.parametrize("urls, prompt, schema, error", [
        ([], "Preise", None, "At least one URL is required"),
        (["  "], "Preise", None, "At least one URL is required"),
        ([URL, "shop.example.com"], "Preise", None, "Invalid URL: shop.example.com"),
        ([URL], None, "{oops", "Invalid JSON schema"),
        ([URL], None, "[1, 2]", "Invalid JSON schema"),
        ([URL], None, None, "Either prompt or schema is required"),
        ([URL], "", "  ", "Either prompt or schema is required"),
        ([URL], None, "{}", "Either prompt or schema is required"),
    ])
    def test_validation(self, client_factory, session, urls, prompt, schema, error):
        """Test inputs are checked before anything is sent."""
        result = client_factory().extract(urls, prompt=prompt, schema=schema)

        assert result.success is False
        assert result.error == error
        assert result.error_kind == ErrorKind.VALIDATION
        session.request.assert_not_called()

    def test_failed_without_message(self, client_factory, session, make_response):
        """Test a failed status without error text gets a default message."""
        session.request.side_effect = [
            make_response(json_data={"success": True, "id": "ex-2"}),
            make_response(json_data={"status": "failed"}),
        ]

        result = client_factory().extract([URL], prompt="Preise")

        assert result.error == "Extract job failed"
        assert result.job_id == "ex-2"

    def test_submission_rejected(self, client_factory, session, make_response):
        """Test an unsuccessful submission without error text."""
        session.request.return_value = make_response(status=400, json_data={"success": False})

        result = client_factory().extract([URL], prompt="Preise")

        assert result.error == "Failed to start extract job"
        assert session.request.call_count == 1
