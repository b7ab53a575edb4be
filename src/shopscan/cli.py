"""Command-line interface for shopscan."""

import json
import sys
from typing import List, Optional

from shopscan.agent import FirecrawlAgent
from shopscan.analysis import SiteAnalyzer
from shopscan.compare import ShopComparison, format_comparison
from shopscan.config import AnalysisThresholds, Config
from shopscan.constants import CRAWL_DEFAULT_LIMIT, MAP_DEFAULT_LIMIT, SEARCH_DEFAULT_RESULTS
from shopscan.firecrawl import FirecrawlClient
from shopscan.logging_config import setup_logging
from shopscan.models import ErrorKind, ProviderType
from shopscan.orchestrator import ScrapeOrchestrator
from shopscan.providers import PROVIDERS, get_tools_for_provider
from shopscan.templates import (
    ANALYSIS_TEMPLATES,
    COMPARISON_CRITERIA,
    TEMPLATE_CATEGORIES,
    get_template_by_id,
    get_templates_by_category,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_USAGE_ERRORS = (ErrorKind.VALIDATION, ErrorKind.CONFIGURATION)


def exit_code_for(result) -> int:
    """Map a result envelope to a process exit code."""
    if result.success:
        return EXIT_OK
    if result.error_kind in _USAGE_ERRORS:
        return EXIT_USAGE
    return EXIT_FAILURE


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def print_failure(result) -> None:
    """Print a failed result in text mode."""
    provider = getattr(result, "provider", None)
    prefix = f"[{provider.value}] " if provider else ""
    print(f"\n❌ {prefix}{result.error}")


def _orchestrator(config: Config) -> ScrapeOrchestrator:
    return ScrapeOrchestrator(config=config)


def providers_command(args) -> int:
    """List providers, their tools and whether they are configured."""
    orchestrator = _orchestrator(args.config)
    configured = set(orchestrator.configured_providers())

    if args.json:
        print_json([
            {
                **config.to_dict(),
                "configured": provider in configured,
                "tools": [tool.id for tool in get_tools_for_provider(provider)],
            }
            for provider, config in PROVIDERS.items()
        ])
        return EXIT_OK

    print(f"\n{'=' * 60}")
    print("Provider")
    print(f"{'=' * 60}")
    for provider, config in PROVIDERS.items():
        status = "✅ konfiguriert" if provider in configured else "❌ nicht konfiguriert"
        tools = ", ".join(tool.id for tool in get_tools_for_provider(provider))
        print(f"\n{config.name} ({provider.value}) - {status}")
        print(f"  {config.description}")
        print(f"  Tools: {tools}")
        print(f"  Kostenlos: {config.free_credits}")
        if config.api_key_env_var:
            optional = "" if config.requires_api_key else " (optional)"
            print(f"  API-Key: {config.api_key_env_var}{optional}")
    print()
    return EXIT_OK


def _scrape_many(orchestrator: ScrapeOrchestrator, args) -> int:
    results = orchestrator.scrape_many(
        args.url,
        provider=args.provider,
        enable_fallback=not args.no_fallback,
        js_rendering=args.js,
    )

    if args.json:
        print_json([result.to_dict() for result in results])
    else:
        for url, result in zip(args.url, results):
            if result.success:
                print(f"\n{'=' * 60}")
                print(f"{result.data.title or result.data.url}")
                print(f"Provider: {result.provider.value}")
                print(f"{'=' * 60}\n")
                print(result.data.markdown)
            else:
                print(f"\n❌ [{result.provider.value}] {url}: {result.error}")

    # Worst outcome wins
    return max(exit_code_for(result) for result in results)


def scrape_command(args) -> int:
    """Scrape one or more URLs and print their Markdown."""
    orchestrator = _orchestrator(args.config)
    if len(args.url) > 1:
        return _scrape_many(orchestrator, args)

    result = orchestrator.scrape(
        args.url[0],
        provider=args.provider,
        enable_fallback=not args.no_fallback,
        js_rendering=args.js,
    )

    if args.json:
        print_json(result.to_dict())
    elif not result.success:
        print_failure(result)
    else:
        print(f"\n{'=' * 60}")
        print(f"{result.data.title or result.data.url}")
        print(f"Provider: {result.provider.value}"
              + (" (Fallback)" if result.fallback_used else "")
              + (f", Credits: {result.credits_used}" if result.credits_used else ""))
        print(f"{'=' * 60}\n")
        print(result.data.markdown)

    return exit_code_for(result)


def _print_search_result(result) -> None:
    print(f"\n{'=' * 60}")
    print(f"{result.data.query} ({result.data.total_results} Ergebnisse)")
    print(f"{'=' * 60}")
    for index, hit in enumerate(result.data.results, start=1):
        print(f"\n{index}. {hit.title}")
        print(f"   {hit.url}")
        if hit.published_date:
            print(f"   {hit.published_date}")
        if hit.snippet:
            print(f"   {hit.snippet}")
    print()


def search_command(args) -> int:
    """Search the web."""
    result = _orchestrator(args.config).search(
        args.query,
        provider=args.provider,
        num_results=args.num_results,
        include_domains=args.include_domain,
        exclude_domains=args.exclude_domain,
        search_type=args.type,
        use_autoprompt=not args.no_autoprompt,
        start_published_date=args.start_date,
        end_published_date=args.end_date,
    )

    if args.json:
        print_json(result.to_dict())
    elif not result.success:
        print_failure(result)
    else:
        _print_search_result(result)

    return exit_code_for(result)


def similar_command(args) -> int:
    """Find pages similar to a URL."""
    result = _orchestrator(args.config).find_similar(
        args.url,
        num_results=args.num_results,
        include_domains=args.include_domain,
        exclude_domains=args.exclude_domain,
    )

    if args.json:
        print_json(result.to_dict())
    elif not result.success:
        print_failure(result)
    else:
        _print_search_result(result)

    return exit_code_for(result)


def _analysis_command(args, check: str) -> int:
    try:
        thresholds = (
            AnalysisThresholds.from_file(args.thresholds)
            if args.thresholds
            else AnalysisThresholds.from_env()
        )
    except ValueError as e:
        print(f"\n❌ {e}")
        return EXIT_USAGE
    analyzer = SiteAnalyzer(_orchestrator(args.config), thresholds)
    report = getattr(analyzer, check)(args.url)

    if args.json:
        print_json(report.to_dict())
    elif not report.success:
        print_failure(report)
    else:
        print(report.formatted)
        print(f"\n_Quelle: {report.url} via {report.provider.value}_")

    return exit_code_for(report)


def tech_command(args) -> int:
    """Detect the tech stack of a URL."""
    return _analysis_command(args, "detect_tech")


def seo_command(args) -> int:
    """Run the SEO check for a URL."""
    return _analysis_command(args, "check_seo")


def procurement_command(args) -> int:
    """Run the e-procurement check for a URL."""
    return _analysis_command(args, "check_procurement")


def _print_job_result(result, label: str) -> None:
    if not result.success:
        print(f"\n❌ {result.error}")
        if result.job_id:
            print(f"Job ID: {result.job_id}")
        return
    print(f"\n✅ {label} completed in {result.duration}s"
          + (f" ({result.credits_used} credits)" if result.credits_used is not None else ""))
    output = result.output
    print(output if isinstance(output, str) else json.dumps(output, indent=2, ensure_ascii=False))


def _agent_prompt(args) -> Optional[str]:
    """Template prompt, followed by the free-text prompt if both are given."""
    if not args.template:
        return args.prompt
    template = get_template_by_id(args.template)
    if template is None:
        return None
    if args.prompt:
        return f"{template.prompt}\n\n{args.prompt}"
    return template.prompt


def agent_command(args) -> int:
    """Run a Firecrawl agent job and print its output."""
    prompt = _agent_prompt(args)
    if prompt is None:
        print(f"\n❌ Unbekannte Vorlage: {args.template}")
        return EXIT_USAGE

    result = FirecrawlAgent(config=args.config).run(prompt, urls=args.url)

    if args.json:
        print_json(result.to_dict())
    else:
        _print_job_result(result, "Agent job")

    return exit_code_for(result)


def templates_command(args) -> int:
    """List the agent prompt templates."""
    if args.category:
        templates = get_templates_by_category(args.category)
    else:
        templates = ANALYSIS_TEMPLATES

    if args.json:
        print_json([template.to_dict() for template in templates])
        return EXIT_OK

    for category_id, category in TEMPLATE_CATEGORIES.items():
        in_category = [t for t in templates if t.category == category_id]
        if not in_category:
            continue
        print(f"\n{category.icon} {category.name}")
        for template in in_category:
            print(f"  {template.id:<22} {template.icon} {template.name} - {template.description}")
    print()
    return EXIT_OK


def compare_command(args) -> int:
    """Compare shops side by side through agent jobs."""
    comparison = ShopComparison(FirecrawlAgent(config=args.config))
    result = comparison.compare(args.url, criteria=args.criterion)

    if args.json:
        print_json(result.to_dict())
    elif not result.success:
        print(f"\n❌ {result.error}")
    else:
        print(format_comparison(result))

    return exit_code_for(result)


def crawl_command(args) -> int:
    """Crawl a site and print its pages."""
    result = FirecrawlClient(config=args.config).crawl(args.url, limit=args.limit)

    if args.json:
        print_json(result.to_dict())
    else:
        _print_job_result(result, "Crawl")

    return exit_code_for(result)


def map_command(args) -> int:
    """List the URLs of a site."""
    result = FirecrawlClient(config=args.config).map_site(args.url, search=args.search, limit=args.limit)

    if args.json:
        print_json(result.to_dict())
    elif not result.success:
        print(f"\n❌ {result.error}")
    else:
        print(f"\n{len(result.output)} URLs")
        for link in result.output:
            print(link.get("url", "") if isinstance(link, dict) else link)

    return exit_code_for(result)


def extract_command(args) -> int:
    """Extract structured data from pages."""
    result = FirecrawlClient(config=args.config).extract(args.url, prompt=args.prompt, schema=args.schema)

    if args.json:
        print_json(result.to_dict())
    else:
        _print_job_result(result, "Extract")

    return exit_code_for(result)


def _add_domain_filters(parser) -> None:
    parser.add_argument(
        "--num-results",
        "-n",
        type=int,
        default=SEARCH_DEFAULT_RESULTS,
        help=f"Number of results, 1-50 (default: {SEARCH_DEFAULT_RESULTS})",
    )
    parser.add_argument(
        "--include-domain",
        action="append",
        help="Only return results from this domain (repeatable)",
    )
    parser.add_argument(
        "--exclude-domain",
        action="append",
        help="Never return results from this domain (repeatable)",
    )


def build_parser():
    """Build the argument parser."""
    import argparse

    parser = argparse.ArgumentParser(
        description="shopscan - Scrape shops through multiple providers and analyze tech stack, SEO and B2B readiness"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging verbosity (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to stderr",
    )
    parser.add_argument(
        "--log-http",
        action="store_true",
        help="Include HTTP client logs (urllib3, requests) at the chosen level",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    providers_parser = subparsers.add_parser("providers", help="List providers and their configuration.")
    providers_parser.set_defaults(func=providers_command)

    provider_choices = [provider.value for provider in ProviderType]

    scrape_parser = subparsers.add_parser("scrape", help="Scrape one or more URLs into Markdown.")
    scrape_parser.add_argument("url", nargs="+", help="URLs to scrape (one after another)")
    scrape_parser.add_argument(
        "--provider",
        "-p",
        choices=provider_choices,
        help="Use only this provider (disables fallback)",
    )
    scrape_parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Only try the first configured provider",
    )
    scrape_parser.add_argument(
        "--js",
        action="store_true",
        help="Render JavaScript where the provider supports it (costs more credits)",
    )
    scrape_parser.set_defaults(func=scrape_command)

    search_parser = subparsers.add_parser("search", help="Search the web.")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument(
        "--provider",
        "-p",
        choices=provider_choices,
        default=ProviderType.EXA.value,
        help="Search provider (default: exa)",
    )
    search_parser.add_argument(
        "--type",
        choices=["auto", "keyword", "neural"],
        default="auto",
        help="Search type (default: auto)",
    )
    search_parser.add_argument(
        "--no-autoprompt",
        action="store_true",
        help="Send the query as typed instead of letting Exa rewrite it",
    )
    search_parser.add_argument(
        "--start-date",
        help="Only results published on or after this ISO date (e.g. 2024-01-01)",
    )
    search_parser.add_argument(
        "--end-date",
        help="Only results published on or before this ISO date",
    )
    _add_domain_filters(search_parser)
    search_parser.set_defaults(func=search_command)

    similar_parser = subparsers.add_parser("similar", help="Find pages similar to a URL.")
    similar_parser.add_argument("url", help="Reference URL")
    _add_domain_filters(similar_parser)
    similar_parser.set_defaults(func=similar_command)

    for name, func, help_text in (
        ("tech", tech_command, "Detect shop system, CMS, PIM and other technologies."),
        ("seo", seo_command, "Run an on-page SEO check."),
        ("procurement", procurement_command, "Check B2B and e-procurement readiness."),
    ):
        analysis_parser = subparsers.add_parser(name, help=help_text)
        analysis_parser.add_argument("url", help="URL to analyze")
        analysis_parser.add_argument(
            "--thresholds",
            help="JSON file with analysis thresholds",
        )
        analysis_parser.set_defaults(func=func)

    agent_parser = subparsers.add_parser("agent", help="Run a Firecrawl agent job.")
    agent_parser.add_argument(
        "prompt",
        nargs="?",
        help="What the agent should find (at least 10 characters); appended to --template",
    )
    agent_parser.add_argument(
        "--template",
        "-t",
        help="Start from a prompt template (see: shopscan templates)",
    )
    agent_parser.add_argument(
        "--url",
        action="append",
        help="URL to focus the agent on (repeatable)",
    )
    agent_parser.set_defaults(func=agent_command)

    templates_parser = subparsers.add_parser("templates", help="List agent prompt templates.")
    templates_parser.add_argument(
        "--category",
        choices=list(TEMPLATE_CATEGORIES),
        help="Only list templates of this category",
    )
    templates_parser.set_defaults(func=templates_command)

    compare_parser = subparsers.add_parser("compare", help="Compare 2-5 shops side by side.")
    compare_parser.add_argument("url", nargs="+", help="Shop URLs")
    compare_parser.add_argument(
        "--criterion",
        "-c",
        action="append",
        choices=[criterion.id for criterion in COMPARISON_CRITERIA],
        help="Comparison criterion (repeatable; default: overview, pricing, products, delivery, payment)",
    )
    compare_parser.set_defaults(func=compare_command)

    crawl_parser = subparsers.add_parser("crawl", help="Crawl a site with Firecrawl.")
    crawl_parser.add_argument("url", help="Start URL")
    crawl_parser.add_argument(
        "--limit",
        type=int,
        default=CRAWL_DEFAULT_LIMIT,
        help=f"Maximum number of pages (default: {CRAWL_DEFAULT_LIMIT})",
    )
    crawl_parser.set_defaults(func=crawl_command)

    map_parser = subparsers.add_parser("map", help="List the URLs of a site with Firecrawl.")
    map_parser.add_argument("url", help="Site URL")
    map_parser.add_argument("--search", help="Only return URLs related to this term")
    map_parser.add_argument(
        "--limit",
        type=int,
        default=MAP_DEFAULT_LIMIT,
        help=f"Maximum number of URLs (default: {MAP_DEFAULT_LIMIT})",
    )
    map_parser.set_defaults(func=map_command)

    extract_parser = subparsers.add_parser("extract", help="Extract structured data with Firecrawl.")
    extract_parser.add_argument("url", nargs="+", help="Pages to extract from")
    extract_parser.add_argument("--prompt", help="What to extract")
    extract_parser.add_argument("--schema", help="JSON schema of the result")
    extract_parser.set_defaults(func=extract_command)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    args.config = Config.from_env()

    # Configure logging based on flags
    setup_logging(
        level=args.log_level or args.config.log_level,
        log_file=args.log_file,
        log_http=args.log_http,
    )

    if hasattr(args, "func"):
        sys.exit(args.func(args))
    else:
        parser.print_help()
        sys.exit(EXIT_USAGE)


if __name__ == "__main__":
    main()
