"""Tests for URL-based analysis."""

from unittest.mock import Mock, call

import pytest

from shopscan.analysis import NO_HTML_ERROR, SiteAnalyzer
from shopscan.models import ErrorKind, ProviderType, ScrapeData, ScrapeResult

URL = "https://shop.example.com/"
SHOP_HTML = (
    "<html><head><title>Werkzeug Shop</title></head><body>"
    '<script src="https://cdn.shopify.com/s/app.js"></script>'
    '<a href="/kategorie">Kategorie</a><p>OCI Punchout</p>'
    "</body></html>"
)


def _scraped(provider, html):
    return ScrapeResult(
        success=True,
        provider=provider,
        data=ScrapeData(markdown="text", url=URL, html=html),
    )


@pytest.fixture
def orchestrator():
    return Mock()


class TestFetchHtml:
    """Test cases for SiteAnalyzer.fetch_html."""

    def test_html_from_chain(self, orchestrator):
        """Test HTML from the first successful provider is used."""
        orchestrator.scrape.return_value = _scraped(ProviderType.SCRAPINGANT, SHOP_HTML)

        result = SiteAnalyzer(orchestrator).fetch_html(URL)

        assert result.provider == ProviderType.SCRAPINGANT
        orchestrator.scrape.assert_called_once_with(URL, enable_fallback=True)

    def test_markdown_only_provider_followed_by_direct_fetch(self, orchestrator):
        """Test a Markdown-only result triggers a direct fetch."""
        orchestrator.scrape.side_effect = [
            _scraped(ProviderType.JINA, None),
            _scraped(ProviderType.NATIVE, SHOP_HTML),
        ]

        result = SiteAnalyzer(orchestrator).fetch_html(URL)

        assert result.provider == ProviderType.NATIVE
        assert result.data.html == SHOP_HTML
        assert orchestrator.scrape.call_args_list == [
            call(URL, enable_fallback=True),
            call(URL, provider=ProviderType.NATIVE),
        ]

    def test_direct_fetch_failure_is_returned(self, orchestrator):
        """Test a failing direct fetch is reported as is."""
        orchestrator.scrape.side_effect = [
            _scraped(ProviderType.JINA, None),
            ScrapeResult.failure(ProviderType.NATIVE, "Seite nicht gefunden (404)", ErrorKind.NOT_FOUND),
        ]

        result = SiteAnalyzer(orchestrator).fetch_html(URL)

        assert result.success is False
        assert result.error_kind == ErrorKind.NOT_FOUND

    def test_no_html_at_all(self, orchestrator):
        """Test an empty native body is a content error."""
        orchestrator.scrape.return_value = _scraped(ProviderType.NATIVE, "")

        result = SiteAnalyzer(orchestrator).fetch_html(URL)

        assert result.success is False
        assert result.error == NO_HTML_ERROR
        assert result.error_kind == ErrorKind.CONTENT
        assert orchestrator.scrape.call_count == 1


class TestSiteAnalyzer:
    """Test cases for the three analysis entry points."""

    def test_detect_tech(self, orchestrator):
        """Test tech detection runs over the fetched HTML."""
        orchestrator.scrape.return_value = _scraped(ProviderType.NATIVE, SHOP_HTML)

        report = SiteAnalyzer(orchestrator).detect_tech(URL)

        assert report.success is True
        assert report.url == URL
        assert report.provider == ProviderType.NATIVE
        assert report.analysis.shop_system.name == "Shopify"
        assert "### Shop-System: Shopify" in report.formatted

    def test_check_seo_uses_page_url(self, orchestrator):
        """Test the SEO check knows the page host."""
        orchestrator.scrape.return_value = _scraped(ProviderType.NATIVE, SHOP_HTML)

        report = SiteAnalyzer(orchestrator).check_seo(URL)

        assert report.analysis.title.content == "Werkzeug Shop"
        assert report.analysis.links.internal == 1
        assert "## SEO Quick-Check" in report.formatted

    def test_check_procurement(self, orchestrator):
        """Test the procurement check runs over the fetched HTML."""
        orchestrator.scrape.return_value = _scraped(ProviderType.NATIVE, SHOP_HTML)

        report = SiteAnalyzer(orchestrator).check_procurement(URL)

        assert report.analysis.score == 25
        assert report.to_dict()["analysis"]["punchout"]["ociSupport"]["detected"] is True

    def test_scrape_failure(self, orchestrator):
        """Test scrape failures end up in the report."""
        orchestrator.scrape.return_value = ScrapeResult.failure(
            ProviderType.NATIVE, "Netzwerkfehler. Die URL ist möglicherweise nicht erreichbar.", ErrorKind.UNREACHABLE
        )

        report = SiteAnalyzer(orchestrator).detect_tech(URL)

        assert report.success is False
        assert report.analysis is None
        assert report.error_kind == ErrorKind.UNREACHABLE
        assert report.formatted == ""
