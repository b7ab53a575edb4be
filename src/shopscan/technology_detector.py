"""Technology stack detection for shop websites.

Detects shop systems, PIM, CMS, frontend frameworks, analytics, marketing
tools and payment providers from raw HTML using weighted signatures.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from shopscan.config import AnalysisThresholds, default_thresholds
from shopscan.models import DetectedTech, TechDetectionResult
from shopscan.patterns import detect_patterns, rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TechSignature:
    """All rules that identify one technology."""

    name: str
    rules: tuple


SHOP_SIGNATURES = [
    TechSignature("Shopify", (
        rule(r'cdn\.shopify\.com', 90, "Shopify CDN"),
        rule(r'Shopify\.theme', 95, "Shopify.theme JS"),
        rule(r'shopify-section', 85, "shopify-section class"),
        rule(r'//cdn\.shopifycdn\.net', 90, "Shopify CDN net"),
        rule(r'myshopify\.com', 80, "myshopify.com domain"),
    )),
    TechSignature("Magento", (
        rule(r'Mage\.Cookies', 95, "Mage.Cookies JS"),
        rule(r'/static/version', 70, "Magento static versioning"),
        rule(r'mage/cookies', 90, "mage/cookies module"),
        rule(r'varien/form\.js', 85, "varien form.js"),
        rule(r'skin/frontend', 75, "Magento skin path"),
        rule(r'magento', 30, "magento keyword"),
    )),
    TechSignature("WooCommerce", (
        rule(r'woocommerce', 85, "woocommerce class/id"),
        rule(r'wc-add-to-cart', 90, "WC add to cart"),
        rule(r'wp-content/plugins/woocommerce', 95, "WooCommerce plugin path"),
        rule(r'wc_add_to_cart_params', 90, "WC JS params"),
    )),
    TechSignature("Shopware", (
        rule(r'shopware', 60, "shopware keyword"),
        rule(r'themes/Frontend/Responsive', 90, "Shopware theme path"),
        rule(r'StateManager', 50, "Shopware StateManager"),
        rule(r'swag-', 70, "Shopware swag- prefix"),
        rule(r'/widgets/listing', 75, "Shopware widgets"),
    )),
    TechSignature("OXID eShop", (
        rule(r'oxid', 50, "oxid keyword"),
        rule(r'oxideshop', 90, "oxideshop"),
        rule(r'out/azure', 85, "OXID azure theme"),
        rule(r'oxbasket', 80, "oxbasket"),
    )),
    TechSignature("PrestaShop", (
        rule(r'prestashop', 80, "prestashop keyword"),
        rule(r'modules/prestashop', 95, "PrestaShop modules"),
        rule(r'id_product', 40, "PrestaShop product ID"),
        rule(r'prestashop\.js', 90, "prestashop.js"),
    )),
    TechSignature("Spryker", (
        rule(r'spryker', 85, "spryker keyword"),
        rule(r'Yves', 40, "Spryker Yves"),
        rule(r'spryker-shop', 90, "spryker-shop"),
    )),
    TechSignature("commercetools", (
        rule(r'commercetools', 90, "commercetools"),
        rule(r'ct-storefront', 85, "CT storefront"),
    )),
    TechSignature("Salesforce Commerce Cloud", (
        rule(r'demandware', 90, "demandware (SFCC)"),
        rule(r'dwanalytics', 85, "DW analytics"),
        rule(r'sites-site_id', 80, "SFCC sites"),
    )),
    TechSignature("BigCommerce", (
        rule(r'bigcommerce', 85, "bigcommerce"),
        rule(r'cdn\.bcapp\.com', 90, "BigCommerce CDN"),
        rule(r'stencil', 40, "BC Stencil"),
    )),
]

PIM_SIGNATURES = [
    TechSignature("Akeneo", (
        rule(r'akeneo', 90, "akeneo keyword"),
        rule(r'pim_catalog', 85, "Akeneo catalog"),
    )),
    TechSignature("Pimcore", (
        rule(r'pimcore', 90, "pimcore keyword"),
        rule(r'/pimcore/', 85, "pimcore path"),
    )),
    TechSignature("Salsify", (
        rule(r'salsify', 85, "salsify keyword"),
    )),
    TechSignature("inRiver", (
        rule(r'inriver', 85, "inriver keyword"),
    )),
]

CMS_SIGNATURES = [
    TechSignature("WordPress", (
        rule(r'wp-content', 90, "wp-content path"),
        rule(r'wp-includes', 90, "wp-includes path"),
        rule(r'wordpress', 50, "wordpress keyword"),
    )),
    TechSignature("TYPO3", (
        rule(r'typo3', 85, "typo3 keyword"),
        rule(r'/typo3conf/', 95, "typo3conf path"),
    )),
    TechSignature("Drupal", (
        rule(r'drupal', 70, "drupal keyword"),
        rule(r'sites/all/modules', 90, "Drupal modules path"),
        rule(r'sites/default/files', 85, "Drupal files path"),
    )),
    TechSignature("Contentful", (
        rule(r'contentful', 80, "contentful keyword"),
        rule(r'cdn\.contentful\.com', 95, "Contentful CDN"),
    )),
    TechSignature("Storyblok", (
        rule(r'storyblok', 85, "storyblok keyword"),
        rule(r'a\.storyblok\.com', 95, "Storyblok assets"),
    )),
]

FRONTEND_SIGNATURES = [
    TechSignature("React", (
        rule(r'react', 50, "react keyword"),
        rule(r'_react|reactDOM', 85, "React DOM"),
        rule(r'data-reactroot', 95, "React root"),
    )),
    TechSignature("Vue.js", (
        rule(r'vue\.js|vue\.min\.js', 90, "Vue.js file"),
        rule(r'v-if|v-for|v-bind', 85, "Vue directives"),
        rule(r'__vue__', 90, "Vue instance"),
    )),
    TechSignature("Angular", (
        rule(r'angular', 60, "angular keyword"),
        rule(r'ng-app|ng-controller', 90, "Angular directives"),
        rule(r'_angular|@angular', 85, "Angular core"),
    )),
    TechSignature("Next.js", (
        rule(r'_next/', 95, "_next path"),
        rule(r'__NEXT_DATA__', 95, "Next.js data"),
    )),
    TechSignature("Nuxt.js", (
        rule(r'_nuxt/', 95, "_nuxt path"),
        rule(r'__NUXT__', 95, "Nuxt data"),
    )),
    TechSignature("jQuery", (
        rule(r'jquery', 70, "jQuery"),
        rule(r'jquery\.min\.js', 85, "jQuery minified"),
    )),
    TechSignature("Bootstrap", (
        rule(r'bootstrap', 60, "bootstrap keyword"),
        rule(r'bootstrap\.min\.(css|js)', 85, "Bootstrap files"),
    )),
    TechSignature("Tailwind CSS", (
        rule(r'tailwind', 70, "tailwind keyword"),
        rule(r'class="[^"]*\b(flex|grid|px-|py-|bg-|text-)\b', 60, "Tailwind classes"),
    )),
]

ANALYTICS_SIGNATURES = [
    TechSignature("Google Analytics", (
        rule(r'google-analytics\.com/analytics', 95, "GA script"),
        rule(r'googletagmanager', 90, "GTM"),
        rule(r'gtag\(', 90, "gtag function"),
        rule(r'UA-\d{4,}-\d', 85, "UA tracking ID"),
        # GA4 measurement IDs are upper case
        rule(r'\bG-[A-Z0-9]{6,}\b', 85, "GA4 ID", flags=0),
    )),
    TechSignature("Matomo/Piwik", (
        rule(r'matomo', 85, "matomo keyword"),
        rule(r'piwik', 85, "piwik keyword"),
        rule(r'_paq\.push', 95, "Matomo tracking"),
    )),
    TechSignature("Hotjar", (
        rule(r'hotjar', 90, "hotjar"),
        rule(r'static\.hotjar\.com', 95, "Hotjar CDN"),
    )),
    TechSignature("Microsoft Clarity", (
        rule(r'clarity\.ms', 95, "Clarity script"),
    )),
]

MARKETING_SIGNATURES = [
    TechSignature("HubSpot", (
        rule(r'hubspot', 85, "hubspot keyword"),
        rule(r'js\.hs-scripts\.com', 95, "HubSpot scripts"),
    )),
    TechSignature("Klaviyo", (
        rule(r'klaviyo', 90, "klaviyo"),
        rule(r'a\.klaviyo\.com', 95, "Klaviyo API"),
    )),
    TechSignature("Mailchimp", (
        rule(r'mailchimp', 85, "mailchimp"),
        rule(r'chimpstatic\.com', 90, "Mailchimp CDN"),
    )),
    TechSignature("Zendesk", (
        rule(r'zendesk', 85, "zendesk"),
        rule(r'static\.zdassets\.com', 95, "Zendesk assets"),
    )),
    TechSignature("Intercom", (
        rule(r'intercom', 80, "intercom"),
        rule(r'widget\.intercom\.io', 95, "Intercom widget"),
    )),
    TechSignature("Crisp Chat", (
        rule(r'crisp\.chat', 95, "Crisp chat"),
    )),
]

PAYMENT_SIGNATURES = [
    TechSignature("PayPal", (
        rule(r'paypal', 70, "paypal keyword"),
        rule(r'paypalobjects\.com', 90, "PayPal objects"),
    )),
    TechSignature("Stripe", (
        rule(r'stripe', 60, "stripe keyword"),
        rule(r'js\.stripe\.com', 95, "Stripe JS"),
    )),
    TechSignature("Klarna", (
        rule(r'klarna', 85, "klarna"),
        rule(r'x\.klarnacdn\.net', 95, "Klarna CDN"),
    )),
    TechSignature("Adyen", (
        rule(r'adyen', 85, "adyen"),
        rule(r'checkoutshopper.*adyen', 95, "Adyen checkout"),
    )),
    TechSignature("Mollie", (
        rule(r'mollie', 80, "mollie keyword"),
    )),
]


class TechStackDetector:
    """Detects the technology stack of a shop page."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        """Initialize detector.

        Args:
            thresholds: Analysis thresholds configuration
        """
        self.thresholds = thresholds or default_thresholds

    @staticmethod
    def detect_candidates(html: str, signatures: List[TechSignature]) -> List[DetectedTech]:
        """Score every signature and return the matching ones.

        Candidates are sorted by confidence, highest first. The sort is
        stable, so ties keep declaration order.

        Args:
            html: Raw HTML
            signatures: Technologies of one category

        Returns:
            List of DetectedTech with at least one matching rule
        """
        candidates = []

        for signature in signatures:
            outcome = detect_patterns(html, signature.rules)
            if outcome.detected:
                candidates.append(DetectedTech(
                    name=signature.name,
                    confidence=outcome.confidence,
                    evidence=outcome.evidence,
                ))

        return sorted(candidates, key=lambda tech: tech.confidence, reverse=True)

    def _primary(self, candidates: List[DetectedTech]) -> Optional[DetectedTech]:
        for candidate in candidates:
            if candidate.confidence >= self.thresholds.primary_min_confidence:
                return candidate
        return None

    def _secondary(self, candidates: List[DetectedTech]) -> List[DetectedTech]:
        return [
            candidate for candidate in candidates
            if candidate.confidence >= self.thresholds.secondary_min_confidence
        ]

    def detect(self, html: str) -> TechDetectionResult:
        """Detect the technology stack of a page.

        Args:
            html: Raw HTML of the page

        Returns:
            TechDetectionResult with primary picks and secondary lists
        """
        html = html or ""

        shop_system = self._primary(self.detect_candidates(html, SHOP_SIGNATURES))
        pim = self._primary(self.detect_candidates(html, PIM_SIGNATURES))
        cms = self._primary(self.detect_candidates(html, CMS_SIGNATURES))

        # The tier only follows the shop system signal
        if shop_system and shop_system.confidence >= self.thresholds.high_confidence_tier:
            tier = "high"
        elif shop_system and shop_system.confidence >= self.thresholds.medium_confidence_tier:
            tier = "medium"
        else:
            tier = "low"

        result = TechDetectionResult(
            shop_system=shop_system,
            pim=pim,
            cms=cms,
            frontend=self._secondary(self.detect_candidates(html, FRONTEND_SIGNATURES)),
            analytics=self._secondary(self.detect_candidates(html, ANALYTICS_SIGNATURES)),
            marketing=self._secondary(self.detect_candidates(html, MARKETING_SIGNATURES)),
            payment=self._secondary(self.detect_candidates(html, PAYMENT_SIGNATURES)),
            confidence=tier,
        )

        logger.debug(
            f"Tech stack: shop={shop_system.name if shop_system else None}, "
            f"cms={cms.name if cms else None}, tier={tier}"
        )
        return result

    def format_result(self, result: TechDetectionResult) -> str:
        """Format a detection result into a readable report.

        Args:
            result: TechDetectionResult

        Returns:
            Markdown report
        """
        lines = ["## Tech-Stack Analyse\n"]

        if result.shop_system:
            lines.append(f"### Shop-System: {result.shop_system.name}")
            lines.append(f"Konfidenz: {result.shop_system.confidence}%")
            lines.append(f"Erkannt durch: {', '.join(result.shop_system.evidence)}\n")
        else:
            lines.append("### Shop-System: Nicht erkannt\n")

        if result.pim:
            lines.append(f"### PIM-System: {result.pim.name}")
            lines.append(f"Konfidenz: {result.pim.confidence}%\n")

        if result.cms:
            lines.append(f"### CMS: {result.cms.name}")
            lines.append(f"Konfidenz: {result.cms.confidence}%\n")

        if result.frontend:
            lines.append("### Frontend-Technologien")
            for tech in result.frontend:
                lines.append(f"- {tech.name} ({tech.confidence}%)")
            lines.append("")

        if result.analytics:
            lines.append("### Analytics & Tracking")
            for tech in result.analytics:
                lines.append(f"- {tech.name} ({tech.confidence}%)")
            lines.append("")

        if result.marketing:
            lines.append("### Marketing & CRM")
            for tech in result.marketing:
                lines.append(f"- {tech.name}")
            lines.append("")

        if result.payment:
            lines.append("### Zahlungsanbieter")
            for tech in result.payment:
                lines.append(f"- {tech.name}")
            lines.append("")

        lines.append(f"---\n*Analyse-Konfidenz: {result.confidence}*")

        return "\n".join(lines)


def detect_tech_stack(html: str) -> TechDetectionResult:
    """Convenience function to detect a page's tech stack.

    Args:
        html: Raw HTML

    Returns:
        TechDetectionResult
    """
    return TechStackDetector().detect(html)


def format_tech_stack_result(result: TechDetectionResult) -> str:
    """Convenience function to render a detection result."""
    return TechStackDetector().format_result(result)
