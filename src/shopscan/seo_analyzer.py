"""Single-page SEO quick check.

Extracts structural facts (title, meta description, headings, images,
links, technical tags, content) from raw HTML, raises issues by fixed rules
and derives a score by subtracting a penalty per issue from 100.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from shopscan.config import AnalysisThresholds, default_thresholds
from shopscan.constants import (
    BROKEN_LINK_SAMPLE_LIMIT,
    HEADING_OUTLINE_LIMIT,
    HEADING_TEXT_LIMIT,
    META_PREVIEW_LENGTH,
    MIN_WORD_LENGTH,
    MISSING_ALT_SAMPLE_LIMIT,
)
from shopscan.models import (
    ContentAnalysis,
    HeadingsAnalysis,
    ImagesAnalysis,
    LinksAnalysis,
    MetaDescriptionAnalysis,
    SEOAnalysisResult,
    SEOIssue,
    TechnicalSEO,
    TitleAnalysis,
)

logger = logging.getLogger(__name__)

_HEADING_TAG = re.compile(r'^h[1-6]$')
_STRUCTURED_TYPE = re.compile(r'"@type"\s*:\s*"([^"]+)"')
_VIDEO = re.compile(r'<video|youtube|vimeo', re.IGNORECASE)


def _attr_text(tag, name: str) -> str:
    """Return an attribute as a string (multi-valued attributes joined)."""
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return value


def _has_attr_value(tag, name: str, expected: str) -> bool:
    return _attr_text(tag, name).strip().lower() == expected


class SEOAnalyzer:
    """Analyzes the on-page SEO of a single HTML document."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        """Initialize analyzer.

        Args:
            thresholds: Analysis thresholds configuration
        """
        self.thresholds = thresholds or default_thresholds

    def analyze(self, html: str, url: Optional[str] = None) -> SEOAnalysisResult:
        """Analyze a page.

        Args:
            html: Raw HTML of the page
            url: Page URL, used to tell internal from external links

        Returns:
            SEOAnalysisResult with facts, issues, score and recommendations
        """
        html = html or ""
        soup = BeautifulSoup(html, "html.parser")
        issues: List[SEOIssue] = []

        title = self._analyze_title(soup)
        self._check_title(title, issues)

        meta_description = self._analyze_meta_description(soup)
        self._check_meta_description(meta_description, issues)

        headings = self._analyze_headings(soup)
        self._check_headings(headings, issues)

        images = self._analyze_images(soup)
        if images.without_alt > 0:
            issues.append(SEOIssue("warning", "Images", f"{images.without_alt} Bilder ohne Alt-Text"))

        links = self._analyze_links(soup, url)

        technical = self._analyze_technical(soup)
        self._check_technical(technical, issues)

        content = self._analyze_content(html, soup)
        if content.word_count < self.thresholds.thin_content_words:
            issues.append(SEOIssue(
                "warning", "Content", f"Wenig Text-Inhalt ({content.word_count} Wörter)"
            ))

        score = self.calculate_score(issues)

        result = SEOAnalysisResult(
            score=score,
            title=title,
            meta_description=meta_description,
            headings=headings,
            images=images,
            links=links,
            technical=technical,
            content=content,
            issues=issues,
            recommendations=self._recommendations(title, meta_description, headings, images, technical),
        )

        logger.debug(f"SEO score {score} with {len(issues)} issues for {url or 'inline HTML'}")
        return result

    def calculate_score(self, issues: List[SEOIssue]) -> int:
        """Subtract the penalty of each issue from 100, clamped to [0, 100].

        Args:
            issues: Issues raised for the page

        Returns:
            Score between 0 and 100
        """
        penalties = {
            "critical": self.thresholds.critical_penalty,
            "warning": self.thresholds.warning_penalty,
        }
        score = 100
        for issue in issues:
            score -= penalties.get(issue.severity, self.thresholds.info_penalty)
        return max(0, min(100, score))

    # -------------------------------------------------------------------------
    # Extraction
    # -------------------------------------------------------------------------

    def _analyze_title(self, soup: BeautifulSoup) -> TitleAnalysis:
        tag = soup.find("title")
        content = tag.get_text().strip() if tag else ""
        length = len(content)
        return TitleAnalysis(
            exists=tag is not None,
            content=content,
            length=length,
            optimal=self.thresholds.title_optimal_min <= length <= self.thresholds.title_optimal_max,
            has_keywords=length > 10,
        )

    def _analyze_meta_description(self, soup: BeautifulSoup) -> MetaDescriptionAnalysis:
        tag = soup.find(
            lambda t: t.name == "meta"
            and _has_attr_value(t, "name", "description")
            and t.get("content") is not None
        )
        content = _attr_text(tag, "content").strip() if tag else ""
        length = len(content)
        return MetaDescriptionAnalysis(
            exists=tag is not None,
            content=content,
            length=length,
            optimal=(
                self.thresholds.meta_description_optimal_min
                <= length
                <= self.thresholds.meta_description_optimal_max
            ),
        )

    def _analyze_headings(self, soup: BeautifulSoup) -> HeadingsAnalysis:
        h1_tags = soup.find_all("h1")
        h2_count = len(soup.find_all("h2"))

        structure = []
        for heading in soup.find_all(_HEADING_TAG)[:HEADING_OUTLINE_LIMIT]:
            text = heading.get_text(" ", strip=True)[:HEADING_TEXT_LIMIT]
            suffix = "..." if len(text) >= HEADING_TEXT_LIMIT else ""
            structure.append(f"{heading.name.upper()}: {text}{suffix}")

        return HeadingsAnalysis(
            h1_count=len(h1_tags),
            h1_content=[h1.get_text(" ", strip=True) for h1 in h1_tags],
            h2_count=h2_count,
            h3_count=len(soup.find_all("h3")),
            has_proper_hierarchy=len(h1_tags) == 1 and h2_count > 0,
            heading_structure=structure,
        )

    def _analyze_images(self, soup: BeautifulSoup) -> ImagesAnalysis:
        all_images = soup.find_all("img")
        without_alt = [img for img in all_images if not img.get("alt")]

        missing_alt_urls = [img.get("src") for img in without_alt if img.get("src")]

        lazy_loaded = sum(
            1 for img in all_images
            if _has_attr_value(img, "loading", "lazy") or img.has_attr("data-src")
        )

        return ImagesAnalysis(
            total=len(all_images),
            with_alt=len(all_images) - len(without_alt),
            without_alt=len(without_alt),
            missing_alt_urls=missing_alt_urls[:MISSING_ALT_SAMPLE_LIMIT],
            lazy_loaded=lazy_loaded,
        )

    def _analyze_links(self, soup: BeautifulSoup, url: Optional[str]) -> LinksAnalysis:
        hostname = None
        if url:
            try:
                hostname = urlparse(url).hostname
            except ValueError:
                hostname = None

        internal = external = nofollow = 0
        broken_suspects = []

        for link in soup.find_all("a", href=True):
            href = _attr_text(link, "href")

            if href.startswith("/") or href.startswith("#") or (hostname and hostname in href):
                internal += 1
            if href.startswith("http") and (not hostname or hostname not in href):
                external += 1
            if "nofollow" in _attr_text(link, "rel").lower():
                nofollow += 1
            if href == "" or href == "#" or href.lower().startswith("javascript:"):
                broken_suspects.append(href or "empty")

        return LinksAnalysis(
            internal=internal,
            external=external,
            nofollow=nofollow,
            broken_suspects=broken_suspects[:BROKEN_LINK_SAMPLE_LIMIT],
        )

    def _analyze_technical(self, soup: BeautifulSoup) -> TechnicalSEO:
        canonical = soup.find(
            lambda t: t.name == "link" and _has_attr_value(t, "rel", "canonical") and t.has_attr("href")
        )
        robots = soup.find(
            lambda t: t.name == "meta" and _has_attr_value(t, "name", "robots") and t.has_attr("content")
        )
        viewport = soup.find(lambda t: t.name == "meta" and _has_attr_value(t, "name", "viewport"))
        # <meta charset> or the http-equiv Content-Type form
        charset = soup.find(
            lambda t: t.name == "meta"
            and (t.has_attr("charset") or "charset=" in _attr_text(t, "content").lower())
        )
        open_graph = soup.find(
            lambda t: t.name == "meta" and _attr_text(t, "property").lower().startswith("og:")
        )
        twitter = soup.find(
            lambda t: t.name == "meta" and _attr_text(t, "name").lower().startswith("twitter:")
        )
        favicon = soup.find(
            lambda t: t.name == "link" and _attr_text(t, "rel").lower() in ("icon", "shortcut icon")
        )
        hreflang = soup.find("link", hreflang=True)

        ld_scripts = soup.find_all(
            lambda t: t.name == "script" and _has_attr_value(t, "type", "application/ld+json")
        )
        structured_types = []
        for script in ld_scripts:
            type_match = _STRUCTURED_TYPE.search(script.string or script.get_text() or "")
            if type_match:
                structured_types.append(type_match.group(1))

        return TechnicalSEO(
            has_canonical=canonical is not None,
            canonical_url=_attr_text(canonical, "href") if canonical else "",
            has_robots_meta=robots is not None,
            robots_content=_attr_text(robots, "content") if robots else "",
            has_viewport=viewport is not None,
            has_charset=charset is not None,
            has_open_graph=open_graph is not None,
            has_twitter_cards=twitter is not None,
            has_structured_data=bool(ld_scripts),
            structured_data_types=structured_types,
            has_favicon=favicon is not None,
            has_hreflang=hreflang is not None,
        )

    def _analyze_content(self, html: str, soup: BeautifulSoup) -> ContentAnalysis:
        text_soup = BeautifulSoup(html, "html.parser")
        for element in text_soup(["script", "style"]):
            element.decompose()

        words = [
            word for word in text_soup.get_text(" ").split()
            if len(word) >= MIN_WORD_LENGTH
        ]
        word_count = len(words)

        if word_count > self.thresholds.readability_good_words:
            readability = "good"
        elif word_count > self.thresholds.readability_average_words:
            readability = "average"
        else:
            readability = "poor"

        return ContentAnalysis(
            word_count=word_count,
            paragraph_count=len(soup.find_all("p")),
            has_video=bool(_VIDEO.search(html)),
            readability_score=readability,
        )

    # -------------------------------------------------------------------------
    # Issues and recommendations
    # -------------------------------------------------------------------------

    def _check_title(self, title: TitleAnalysis, issues: List[SEOIssue]) -> None:
        if not title.exists:
            issues.append(SEOIssue("critical", "Title", "Kein Title-Tag gefunden"))
        elif title.length < self.thresholds.title_min:
            issues.append(SEOIssue("warning", "Title", f"Title zu kurz ({title.length} Zeichen)"))
        elif title.length > self.thresholds.title_max:
            issues.append(SEOIssue("warning", "Title", f"Title zu lang ({title.length} Zeichen)"))

    def _check_meta_description(self, meta: MetaDescriptionAnalysis, issues: List[SEOIssue]) -> None:
        if not meta.exists:
            issues.append(SEOIssue("critical", "Meta", "Keine Meta-Description gefunden"))
        elif meta.length < self.thresholds.meta_description_min:
            issues.append(SEOIssue(
                "warning", "Meta", f"Meta-Description zu kurz ({meta.length} Zeichen)"
            ))
        elif meta.length > self.thresholds.meta_description_max:
            issues.append(SEOIssue(
                "warning", "Meta", f"Meta-Description zu lang ({meta.length} Zeichen)"
            ))

    def _check_headings(self, headings: HeadingsAnalysis, issues: List[SEOIssue]) -> None:
        if headings.h1_count == 0:
            issues.append(SEOIssue("critical", "Headings", "Keine H1-Überschrift gefunden"))
        elif headings.h1_count > 1:
            issues.append(SEOIssue(
                "warning", "Headings", f"Mehrere H1-Überschriften ({headings.h1_count})"
            ))

        if headings.h2_count == 0:
            issues.append(SEOIssue("info", "Headings", "Keine H2-Überschriften für Struktur"))

    def _check_technical(self, technical: TechnicalSEO, issues: List[SEOIssue]) -> None:
        if not technical.has_canonical:
            issues.append(SEOIssue("warning", "Technical", "Kein Canonical-Tag gefunden"))
        if not technical.has_viewport:
            issues.append(SEOIssue("critical", "Technical", "Kein Viewport-Meta-Tag (Mobile!)"))
        if not technical.has_open_graph:
            issues.append(SEOIssue("info", "Social", "Keine Open Graph Tags für Social Sharing"))
        if not technical.has_structured_data:
            issues.append(SEOIssue("info", "Technical", "Keine strukturierten Daten (Schema.org)"))

    def _recommendations(
        self,
        title: TitleAnalysis,
        meta: MetaDescriptionAnalysis,
        headings: HeadingsAnalysis,
        images: ImagesAnalysis,
        technical: TechnicalSEO,
    ) -> List[str]:
        recommendations = []

        if not title.exists or title.length < self.thresholds.title_min:
            recommendations.append("Füge einen aussagekräftigen Title-Tag mit 50-60 Zeichen hinzu")
        if not meta.exists or meta.length < self.thresholds.meta_description_min:
            recommendations.append("Erstelle eine Meta-Description mit 150-160 Zeichen")
        if headings.h1_count != 1:
            recommendations.append("Verwende genau eine H1-Überschrift pro Seite")
        if images.without_alt > 0:
            recommendations.append(f"Füge Alt-Texte zu {images.without_alt} Bildern hinzu")
        if not technical.has_structured_data:
            recommendations.append("Implementiere strukturierte Daten (Schema.org) für Rich Snippets")
        if not technical.has_open_graph:
            recommendations.append("Füge Open Graph Tags für besseres Social Media Sharing hinzu")

        return recommendations

    def format_result(self, result: SEOAnalysisResult) -> str:
        """Format an analysis result into a readable report.

        Args:
            result: SEOAnalysisResult

        Returns:
            Markdown report
        """
        lines = ["## SEO Quick-Check\n", f"**Score: {result.score}/100**\n"]

        lines.append("### Title")
        if result.title.exists:
            lines.append(f'✅ "{result.title.content}"')
            optimal = "(optimal)" if result.title.optimal else ""
            lines.append(f"   Länge: {result.title.length} Zeichen {optimal}\n")
        else:
            lines.append("❌ Nicht vorhanden\n")

        lines.append("### Meta-Description")
        if result.meta_description.exists:
            preview = result.meta_description.content[:META_PREVIEW_LENGTH]
            lines.append(f'✅ "{preview}..."')
            optimal = "(optimal)" if result.meta_description.optimal else ""
            lines.append(f"   Länge: {result.meta_description.length} Zeichen {optimal}\n")
        else:
            lines.append("❌ Nicht vorhanden\n")

        h1_marker = "✅" if result.headings.h1_count == 1 else "⚠️"
        lines.append("### Überschriften-Struktur")
        lines.append(f"- H1: {result.headings.h1_count} ({h1_marker})")
        lines.append(f"- H2: {result.headings.h2_count}")
        lines.append(f"- H3: {result.headings.h3_count}\n")

        alt_marker = "⚠️" if result.images.without_alt > 0 else ""
        lines.append("### Bilder")
        lines.append(f"- Gesamt: {result.images.total}")
        lines.append(f"- Mit Alt-Text: {result.images.with_alt} ✅")
        lines.append(f"- Ohne Alt-Text: {result.images.without_alt} {alt_marker}\n")

        def flag(value: bool) -> str:
            return "✅" if value else "❌"

        lines.append("### Technisches SEO")
        lines.append(f"- Canonical: {flag(result.technical.has_canonical)}")
        lines.append(f"- Viewport: {flag(result.technical.has_viewport)}")
        lines.append(f"- Open Graph: {flag(result.technical.has_open_graph)}")
        lines.append(f"- Schema.org: {flag(result.technical.has_structured_data)}\n")

        if result.recommendations:
            lines.append("### Empfehlungen")
            for recommendation in result.recommendations:
                lines.append(f"- {recommendation}")

        return "\n".join(lines)


def analyze_seo(html: str, url: Optional[str] = None) -> SEOAnalysisResult:
    """Convenience function to analyze a page's SEO.

    Args:
        html: Raw HTML
        url: Optional page URL

    Returns:
        SEOAnalysisResult
    """
    return SEOAnalyzer().analyze(html, url)


def format_seo_result(result: SEOAnalysisResult) -> str:
    """Convenience function to render an SEO result."""
    return SEOAnalyzer().format_result(result)
