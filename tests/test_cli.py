"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest

from shopscan.cli import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, exit_code_for, main
from shopscan.compare import ComparisonResult, ShopAnalysis
from shopscan.models import (
    AgentJobResult,
    AgentJobState,
    ErrorKind,
    ProviderType,
    ScrapeData,
    ScrapeResult,
    SearchData,
    SearchHit,
    SearchResult,
)
from shopscan.templates import get_criterion_by_id, get_template_by_id

URL = "https://shop.example.com/"
OTHER = "https://other.example.com/"


@pytest.fixture
def orchestrator():
    with patch("shopscan.cli.ScrapeOrchestrator") as orchestrator_cls:
        yield orchestrator_cls.return_value


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestExitCodes:
    """Test cases for exit_code_for."""

    def test_mapping(self):
        """Test success, usage errors and runtime failures."""
        ok = ScrapeResult(success=True, provider=ProviderType.NATIVE, data=ScrapeData(markdown="", url=URL))
        assert exit_code_for(ok) == EXIT_OK
        assert exit_code_for(ScrapeResult.failure(ProviderType.NATIVE, "x", ErrorKind.VALIDATION)) == EXIT_USAGE
        assert exit_code_for(ScrapeResult.failure(ProviderType.EXA, "x", ErrorKind.CONFIGURATION)) == EXIT_USAGE
        assert exit_code_for(ScrapeResult.failure(ProviderType.NATIVE, "x", ErrorKind.TIMEOUT)) == EXIT_FAILURE


class TestScrapeCommand:
    """Test cases for the scrape command."""

    def test_json_output(self, orchestrator, capsys):
        """Test --json prints the camelCase envelope."""
        orchestrator.scrape.return_value = ScrapeResult(
            success=True,
            provider=ProviderType.JINA,
            data=ScrapeData(markdown="# Shop", url=URL, title="Shop"),
        )

        code = run_cli(["--json", "scrape", URL])

        assert code == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["provider"] == "jina"
        assert data["fallbackUsed"] is False
        assert data["data"]["markdown"] == "# Shop"
        orchestrator.scrape.assert_called_once_with(URL, provider=None, enable_fallback=True, js_rendering=False)

    def test_text_output(self, orchestrator, capsys):
        """Test the Markdown is printed with a header."""
        orchestrator.scrape.return_value = ScrapeResult(
            success=True,
            provider=ProviderType.SCRAPINGANT,
            data=ScrapeData(markdown="# Hammer", url=URL, title="Werkzeug"),
            credits_used=10,
            fallback_used=True,
        )

        code = run_cli(["scrape", URL, "--js"])

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "Provider: scrapingant (Fallback), Credits: 10" in out
        assert "# Hammer" in out

    def test_explicit_provider(self, orchestrator):
        """Test --provider and --no-fallback are passed on."""
        orchestrator.scrape.return_value = ScrapeResult.failure(
            ProviderType.NATIVE, "Netzwerkfehler.", ErrorKind.UNREACHABLE
        )

        code = run_cli(["scrape", URL, "-p", "native", "--no-fallback"])

        assert code == EXIT_FAILURE
        orchestrator.scrape.assert_called_once_with(URL, provider="native", enable_fallback=False, js_rendering=False)

    def test_validation_failure(self, orchestrator, capsys):
        """Test invalid input exits with the usage code."""
        orchestrator.scrape.return_value = ScrapeResult.failure(
            ProviderType.NATIVE, "Nur HTTP und HTTPS URLs werden unterstützt", ErrorKind.VALIDATION
        )

        code = run_cli(["scrape", "ftp://example.com"])

        assert code == EXIT_USAGE
        assert "❌ [native] Nur HTTP und HTTPS URLs werden unterstützt" in capsys.readouterr().out

    def test_unknown_provider_choice(self, orchestrator):
        """Test argparse rejects unknown providers."""
        assert run_cli(["scrape", URL, "-p", "browserless"]) == 2

    def test_several_urls(self, orchestrator, capsys):
        """Test several URLs go through scrape_many and print a JSON list."""
        orchestrator.scrape_many.return_value = [
            ScrapeResult(success=True, provider=ProviderType.JINA, data=ScrapeData(markdown="# A", url=URL)),
            ScrapeResult.failure(ProviderType.NATIVE, "Netzwerkfehler.", ErrorKind.UNREACHABLE),
        ]

        code = run_cli(["--json", "scrape", URL, OTHER])

        assert code == EXIT_FAILURE
        data = json.loads(capsys.readouterr().out)
        assert [entry["success"] for entry in data] == [True, False]
        orchestrator.scrape.assert_not_called()
        orchestrator.scrape_many.assert_called_once_with(
            [URL, OTHER], provider=None, enable_fallback=True, js_rendering=False
        )

    def test_several_urls_text(self, orchestrator, capsys):
        """Test each failed URL is named in text mode."""
        orchestrator.scrape_many.return_value = [
            ScrapeResult(success=True, provider=ProviderType.JINA, data=ScrapeData(markdown="# A", url=URL)),
            ScrapeResult.failure(ProviderType.NATIVE, "Netzwerkfehler.", ErrorKind.UNREACHABLE),
        ]

        run_cli(["scrape", URL, OTHER])

        out = capsys.readouterr().out
        assert "# A" in out
        assert f"❌ [native] {OTHER}: Netzwerkfehler." in out


class TestSearchCommands:
    """Test cases for search and similar."""

    def test_search(self, orchestrator, capsys):
        """Test search options reach the orchestrator."""
        orchestrator.search.return_value = SearchResult(
            success=True,
            provider=ProviderType.EXA,
            data=SearchData(
                results=[SearchHit(title="Werkzeug AG", url="https://a.example", snippet="Großhandel")],
                query="werkzeug",
                total_results=1,
            ),
        )

        code = run_cli([
            "search", "werkzeug", "-n", "5",
            "--include-domain", "a.example", "--include-domain", "b.example", "--type", "neural",
        ])

        assert code == EXIT_OK
        orchestrator.search.assert_called_once_with(
            "werkzeug",
            provider="exa",
            num_results=5,
            include_domains=["a.example", "b.example"],
            exclude_domains=None,
            search_type="neural",
            use_autoprompt=True,
            start_published_date=None,
            end_published_date=None,
        )
        out = capsys.readouterr().out
        assert "1. Werkzeug AG" in out
        assert "werkzeug (1 Ergebnisse)" in out

    def test_search_date_window(self, orchestrator):
        """Test --no-autoprompt and the published-date bounds reach Exa."""
        orchestrator.search.return_value = SearchResult.failure(ProviderType.EXA, "Exa Fehler: 500", ErrorKind.HTTP)

        code = run_cli([
            "search", "werkzeug", "--no-autoprompt",
            "--start-date", "2024-01-01", "--end-date", "2024-06-30",
        ])

        assert code == EXIT_FAILURE
        kwargs = orchestrator.search.call_args.kwargs
        assert kwargs["use_autoprompt"] is False
        assert kwargs["start_published_date"] == "2024-01-01"
        assert kwargs["end_published_date"] == "2024-06-30"
        assert kwargs["num_results"] == 10

    def test_similar_json(self, orchestrator, capsys):
        """Test similar prints JSON on failure too."""
        orchestrator.find_similar.return_value = SearchResult.failure(
            ProviderType.EXA, "Exa API-Key nicht konfiguriert", ErrorKind.CONFIGURATION
        )

        code = run_cli(["--json", "similar", URL])

        assert code == EXIT_USAGE
        assert json.loads(capsys.readouterr().out)["errorKind"] == "configuration"


class TestOtherCommands:
    """Test cases for providers, analysis and agent commands."""

    def test_providers_json(self, orchestrator, capsys):
        """Test the provider listing marks configured providers."""
        orchestrator.configured_providers.return_value = [ProviderType.JINA, ProviderType.NATIVE]

        code = run_cli(["--json", "providers"])

        assert code == EXIT_OK
        listing = {entry["id"]: entry for entry in json.loads(capsys.readouterr().out)}
        assert listing["jina"]["configured"] is True
        assert listing["exa"]["configured"] is False
        assert listing["firecrawl"]["tools"] == ["scrape", "crawl", "map", "extract", "agent"]
        assert listing["exa"]["tools"] == ["search"]

    def test_tech(self, orchestrator, capsys):
        """Test the tech command prints the report and its source."""
        orchestrator.scrape.return_value = ScrapeResult(
            success=True,
            provider=ProviderType.NATIVE,
            data=ScrapeData(
                markdown="",
                url=URL,
                html='<script src="https://cdn.shopify.com/s/app.js"></script>',
            ),
        )

        code = run_cli(["tech", URL])

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "### Shop-System: Shopify" in out
        assert f"_Quelle: {URL} via native_" in out

    def test_malformed_thresholds_file(self, orchestrator, tmp_path, capsys):
        """Test a broken thresholds file is a usage error before any scrape."""
        path = tmp_path / "thresholds.json"
        path.write_text("{not json")

        code = run_cli(["seo", URL, "--thresholds", str(path)])

        assert code == EXIT_USAGE
        assert "is not valid JSON" in capsys.readouterr().out
        orchestrator.scrape.assert_not_called()

    def test_agent_timeout(self, capsys):
        """Test a timed-out agent job prints its id."""
        with patch("shopscan.cli.FirecrawlAgent") as agent_cls:
            agent_cls.return_value.run.return_value = AgentJobResult(
                success=False,
                state=AgentJobState.TIMED_OUT,
                duration=270.0,
                job_id="job-9",
                error="Agent job timed out after 270.0s.",
                error_kind=ErrorKind.TIMEOUT,
            )

            code = run_cli(["agent", "Finde Werkzeughändler", "--url", "https://a.example"])

        out = capsys.readouterr().out
        assert code == EXIT_FAILURE
        assert "Job ID: job-9" in out
        agent_cls.return_value.run.assert_called_once_with("Finde Werkzeughändler", urls=["https://a.example"])

    def test_no_command(self, capsys):
        """Test running without a command prints help."""
        assert run_cli([]) == EXIT_USAGE
        assert "usage:" in capsys.readouterr().out


@pytest.fixture
def agent_cls():
    with patch("shopscan.cli.FirecrawlAgent") as agent_cls:
        yield agent_cls


@pytest.fixture
def client():
    with patch("shopscan.cli.FirecrawlClient") as client_cls:
        yield client_cls.return_value


def completed(output):
    return AgentJobResult(success=True, state=AgentJobState.COMPLETED, output=output, duration=6.0, job_id="job-1")


class TestTemplateCommands:
    """Test cases for templates and agent --template."""

    def test_agent_template(self, agent_cls):
        """Test the template prompt is used as is."""
        agent_cls.return_value.run.return_value = completed("Bericht")

        code = run_cli(["agent", "--template", "tech-stack", "--url", URL])

        assert code == EXIT_OK
        agent_cls.return_value.run.assert_called_once_with(
            get_template_by_id("tech-stack").prompt, urls=[URL]
        )

    def test_agent_template_with_prompt(self, agent_cls):
        """Test a free-text prompt is appended to the template."""
        agent_cls.return_value.run.return_value = completed("Bericht")

        run_cli(["agent", "Nur Werkzeugkategorie", "-t", "price-analysis"])

        prompt = agent_cls.return_value.run.call_args.args[0]
        assert prompt == get_template_by_id("price-analysis").prompt + "\n\nNur Werkzeugkategorie"

    def test_agent_unknown_template(self, agent_cls, capsys):
        """Test an unknown template id is a usage error."""
        code = run_cli(["agent", "--template", "nope"])

        assert code == EXIT_USAGE
        assert "Unbekannte Vorlage: nope" in capsys.readouterr().out
        agent_cls.return_value.run.assert_not_called()

    def test_templates_json(self, capsys):
        """Test --category filters the listing."""
        code = run_cli(["--json", "templates", "--category", "procurement"])

        assert code == EXIT_OK
        ids = [entry["id"] for entry in json.loads(capsys.readouterr().out)]
        assert ids == ["b2b-features", "eprocurement-check"]

    def test_templates_text(self, capsys):
        """Test the listing is grouped by category."""
        assert run_cli(["templates"]) == EXIT_OK

        out = capsys.readouterr().out
        assert "Wettbewerber-Analyse" in out
        assert "seo-check" in out


class TestCompareCommand:
    """Test cases for compare."""

    def test_table(self, agent_cls, capsys):
        """Test the comparison is printed as a Markdown table."""
        overview = get_criterion_by_id("overview")
        with patch("shopscan.cli.ShopComparison") as comparison_cls:
            comparison_cls.return_value.compare.return_value = ComparisonResult(
                success=True,
                criteria=[overview],
                shops=[
                    ShopAnalysis(url=URL, results={"overview": "Werkzeug"}),
                    ShopAnalysis(url=OTHER, results={"overview": "Baumarkt"}),
                ],
            )

            code = run_cli(["compare", URL, OTHER, "-c", "overview"])

        assert code == EXIT_OK
        comparison_cls.return_value.compare.assert_called_once_with([URL, OTHER], criteria=["overview"])
        out = capsys.readouterr().out
        assert "| Kriterium | shop.example.com | other.example.com |" in out
        assert "| 🏢 Allgemein | Werkzeug | Baumarkt |" in out

    def test_too_few_shops(self, agent_cls, capsys):
        """Test a single shop is rejected before any agent job runs."""
        code = run_cli(["compare", URL])

        assert code == EXIT_USAGE
        assert "Bitte 2 bis 5 Shop-URLs angeben" in capsys.readouterr().out
        agent_cls.return_value.run.assert_not_called()

    def test_unknown_criterion_choice(self, agent_cls):
        """Test argparse rejects unknown criteria."""
        assert run_cli(["compare", URL, OTHER, "-c", "weather"]) == 2


class TestFirecrawlCommands:
    """Test cases for crawl, map and extract."""

    def test_crawl(self, client, capsys):
        """Test the crawl limit is passed on."""
        client.crawl.return_value = completed([{"markdown": "# Start"}])

        code = run_cli(["crawl", URL, "--limit", "3"])

        assert code == EXIT_OK
        client.crawl.assert_called_once_with(URL, limit=3)
        assert "Crawl completed in 6.0s" in capsys.readouterr().out

    def test_map(self, client, capsys):
        """Test mapped URLs are printed one per line."""
        client.map_site.return_value = completed([{"url": URL}, OTHER])

        code = run_cli(["map", URL, "--search", "werkzeug"])

        assert code == EXIT_OK
        client.map_site.assert_called_once_with(URL, search="werkzeug", limit=100)
        out = capsys.readouterr().out
        assert "2 URLs" in out
        assert OTHER in out

    def test_extract_failure(self, client, capsys):
        """Test a validation failure exits with the usage code."""
        client.extract.return_value = AgentJobResult(
            success=False,
            state=AgentJobState.FAILED,
            error="Invalid JSON schema",
            error_kind=ErrorKind.VALIDATION,
        )

        code = run_cli(["--json", "extract", URL, OTHER, "--schema", "{oops"])

        assert code == EXIT_USAGE
        client.extract.assert_called_once_with([URL, OTHER], prompt=None, schema="{oops")
        assert json.loads(capsys.readouterr().out)["error"] == "Invalid JSON schema"
