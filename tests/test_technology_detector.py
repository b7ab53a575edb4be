"""Tests for tech stack detection."""

from shopscan.config import AnalysisThresholds
from shopscan.technology_detector import (
    SHOP_SIGNATURES,
    TechStackDetector,
    detect_tech_stack,
    format_tech_stack_result,
)


class TestTechStackDetector:
    """Test cases for TechStackDetector."""

    def test_shopify_cdn_only(self):
        """Test a single Shopify CDN reference."""
        result = detect_tech_stack('<script src="https://cdn.shopify.com/s/app.js"></script>')

        assert result.shop_system is not None
        assert result.shop_system.name == "Shopify"
        assert result.shop_system.confidence == 90
        assert result.shop_system.evidence == ["Shopify CDN"]
        assert result.pim is None
        assert result.cms is None
        assert result.frontend == []
        assert result.analytics == []
        assert result.marketing == []
        assert result.payment == []
        assert result.confidence == "high"

    def test_empty_html(self):
        """Test nothing is detected in empty input."""
        result = detect_tech_stack("")
        assert result.shop_system is None
        assert result.confidence == "low"

    def test_medium_tier(self):
        """Test a shop system between 50 and 80 gives medium."""
        result = detect_tech_stack("<div>shopware</div>")
        assert result.shop_system.name == "Shopware"
        assert result.shop_system.confidence == 60
        assert result.confidence == "medium"

    def test_primary_requires_threshold(self):
        """Test a weak shop signal is not picked as primary."""
        result = detect_tech_stack("<p>Yves</p>")
        assert result.shop_system is None
        assert result.confidence == "low"

    def test_primary_is_highest_confidence(self):
        """Test the strongest candidate wins the exclusive slot."""
        html = '<link href="https://cdn.shopify.com/a.css"><div class="woocommerce"></div>'
        result = detect_tech_stack(html)
        assert result.shop_system.name == "Shopify"

    def test_tier_follows_shop_system_only(self):
        """Test a strong CMS alone does not raise the tier."""
        result = detect_tech_stack('<link href="/wp-content/themes/a.css">')
        assert result.cms.name == "WordPress"
        assert result.shop_system is None
        assert result.confidence == "low"

    def test_secondary_sorted_by_confidence(self):
        """Test non-exclusive categories list candidates descending."""
        html = '<div data-reactroot></div><script src="/js/jquery.js"></script>'
        result = detect_tech_stack(html)
        names = [tech.name for tech in result.frontend]
        assert names == ["React", "jQuery"]
        assert result.frontend[0].confidence == 100
        assert result.frontend[1].confidence == 70

    def test_payment_and_marketing(self):
        """Test payment and marketing detections."""
        html = (
            '<script src="https://js.stripe.com/v3"></script>'
            '<script src="https://static.klaviyo.com/onsite.js"></script>'
        )
        result = detect_tech_stack(html)
        assert [tech.name for tech in result.payment] == ["Stripe"]
        assert result.payment[0].confidence == 100
        assert [tech.name for tech in result.marketing] == ["Klaviyo"]

    def test_ga4_id_is_case_sensitive(self):
        """Test GA4 measurement IDs only match in upper case."""
        assert [t.name for t in detect_tech_stack("<p>G-AB12CD34</p>").analytics] == ["Google Analytics"]
        assert detect_tech_stack("<p>g-ab12cd34</p>").analytics == []

    def test_custom_thresholds(self):
        """Test thresholds are configurable."""
        detector = TechStackDetector(AnalysisThresholds(primary_min_confidence=95))
        result = detector.detect('<script src="https://cdn.shopify.com/s/app.js"></script>')
        assert result.shop_system is None

    def test_stable_sort_keeps_declaration_order(self):
        """Test ties keep signature declaration order."""
        html = "myshopify.com bigcommerce"  # 80 and 85
        candidates = TechStackDetector.detect_candidates(html, SHOP_SIGNATURES)
        assert [c.name for c in candidates] == ["BigCommerce", "Shopify"]

        tie = TechStackDetector.detect_candidates("shopify-section woocommerce", SHOP_SIGNATURES)
        assert [c.name for c in tie] == ["Shopify", "WooCommerce"]
        assert tie[0].confidence == tie[1].confidence == 85


class TestFormatTechStackResult:
    """Test cases for the formatted report."""

    def test_report_contains_detections(self):
        """Test the report names the shop system and tier."""
        result = detect_tech_stack('<script src="https://cdn.shopify.com/s/app.js"></script>')
        report = format_tech_stack_result(result)
        assert "### Shop-System: Shopify" in report
        assert "Konfidenz: 90%" in report
        assert "Erkannt durch: Shopify CDN" in report
        assert "*Analyse-Konfidenz: high*" in report

    def test_report_without_shop(self):
        """Test the report for an empty page."""
        report = format_tech_stack_result(detect_tech_stack(""))
        assert "### Shop-System: Nicht erkannt" in report
        assert "Frontend-Technologien" not in report
