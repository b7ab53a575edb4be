"""E-procurement and B2B readiness detection.

Looks for B2B portal wording, punch-out protocols, catalog exchange formats,
ERP integrations and typical B2B shop features in raw HTML, and sums them
up in an additive readiness score.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from shopscan.config import AnalysisThresholds, default_thresholds
from shopscan.models import (
    B2BFeature,
    B2BPortalInfo,
    CatalogInfo,
    ERPIntegrationInfo,
    ProcurementResult,
    PunchoutInfo,
)
from shopscan.patterns import detect_patterns, rule

logger = logging.getLogger(__name__)

B2B_PORTAL_RULES = (
    rule(r'geschäftskund', 80, "Geschäftskunden-Bereich"),
    rule(r'b2b(-|\s)?portal', 90, "B2B-Portal"),
    rule(r'business(-|\s)?kund', 75, "Business-Kunden"),
    rule(r'firmen(-|\s)?kund', 80, "Firmenkunden"),
    rule(r'gewerblich', 70, "Gewerbliche Kunden"),
    rule(r'für\s+unternehmen', 75, "Für Unternehmen"),
    rule(r'b2b(-|\s)?shop', 85, "B2B-Shop"),
    rule(r'großhandel', 80, "Großhandel"),
    rule(r'händler(-|\s)?(portal|login|bereich)', 85, "Händler-Portal"),
    rule(r'netto(-|\s)?preis', 70, "Nettopreise"),
    rule(r'preis\s+exkl\.|preis\s+netto', 65, "Exkl. Preise"),
)

OCI_RULES = (
    rule(r'\boci\b', 60, "OCI erwähnt"),
    rule(r'open\s*catalog\s*interface', 90, "Open Catalog Interface"),
    rule(r'oci(-|\s)?anbindung', 85, "OCI-Anbindung"),
    rule(r'oci(-|\s)?schnittstelle', 85, "OCI-Schnittstelle"),
    rule(r'oci(-|\s)?punchout', 90, "OCI-Punchout"),
    rule(r'hook_url|return_url.*oci', 80, "OCI Parameter"),
)

CXML_RULES = (
    rule(r'cxml', 70, "cXML erwähnt"),
    rule(r'cxml(-|\s)?punchout', 90, "cXML-Punchout"),
    rule(r'cxml(-|\s)?order', 85, "cXML-Order"),
    rule(r'punchoutsetupre(quest|sponse)', 95, "PunchOutSetup"),
)

ARIBA_RULES = (
    rule(r'ariba', 75, "Ariba erwähnt"),
    rule(r'sap\s*ariba', 90, "SAP Ariba"),
    rule(r'ariba\s*network', 85, "Ariba Network"),
    rule(r'ariba(-|\s)?punchout', 90, "Ariba-Punchout"),
)

COUPA_RULES = (
    rule(r'coupa', 80, "Coupa erwähnt"),
    rule(r'coupa(-|\s)?punchout', 90, "Coupa-Punchout"),
    rule(r'coupa(-|\s)?integration', 85, "Coupa-Integration"),
)

BMECAT_RULES = (
    rule(r'bmecat', 85, "BMEcat erwähnt"),
    rule(r'bme\s*cat', 80, "BME cat"),
    rule(r'katalog(-|\s)?export', 50, "Katalog-Export"),
)

DATANORM_RULES = (
    rule(r'datanorm', 90, "DATANORM"),
    rule(r'datanorm\s*\d', 95, "DATANORM Version"),
)

ETIM_RULES = (
    rule(r'\betim\b', 70, "ETIM erwähnt"),
    rule(r'etim(-|\s)?klassifizierung', 90, "ETIM-Klassifizierung"),
    rule(r'etim(-|\s)?klasse', 85, "ETIM-Klasse"),
)

CSV_RULES = (
    rule(r'csv(-|\s)?export', 70, "CSV-Export"),
    rule(r'csv(-|\s)?download', 70, "CSV-Download"),
    rule(r'excel(-|\s)?export', 65, "Excel-Export"),
)

SAP_RULES = (
    rule(r'\bsap\b(?!\s*ariba)', 60, "SAP erwähnt"),
    rule(r'sap(-|\s)?integration', 85, "SAP-Integration"),
    rule(r'sap(-|\s)?anbindung', 85, "SAP-Anbindung"),
    rule(r'sap(-|\s)?schnittstelle', 85, "SAP-Schnittstelle"),
    rule(r'idoc', 80, "SAP IDoc"),
)

DYNAMICS_RULES = (
    rule(r'microsoft\s*dynamics', 85, "Microsoft Dynamics"),
    rule(r'dynamics\s*(365|nav|ax)', 90, "Dynamics Version"),
    rule(r'navision', 80, "Navision"),
)

ORACLE_RULES = (
    rule(r'oracle\s*(erp|cloud)', 85, "Oracle ERP"),
    rule(r'netsuite', 80, "NetSuite"),
)

API_RULES = (
    rule(r'api(-|\s)?dokumentation', 80, "API-Dokumentation"),
    rule(r'rest(-|\s)?api', 75, "REST-API"),
    rule(r'api(-|\s)?schnittstelle', 75, "API-Schnittstelle"),
    rule(r'entwickler(-|\s)?(portal|dokumentation)', 85, "Entwickler-Portal"),
    rule(r'swagger|openapi', 80, "OpenAPI/Swagger"),
)


@dataclass(frozen=True)
class FeatureSignature:
    """Rules for one named B2B shop feature."""

    name: str
    category: str
    rules: tuple


B2B_FEATURE_SIGNATURES = [
    FeatureSignature("Schnellbestellung", "ordering", (
        rule(r'schnell(-|\s)?bestellung', 90, "Schnellbestellung"),
        rule(r'quick(-|\s)?order', 85, "Quick Order"),
        rule(r'csv(-|\s)?upload', 80, "CSV-Upload"),
        rule(r'artikelliste\s*hochladen', 85, "Artikelliste hochladen"),
    )),
    FeatureSignature("Bestelllisten/Favoriten", "ordering", (
        rule(r'bestellliste', 85, "Bestellliste"),
        rule(r'merkliste', 70, "Merkliste"),
        rule(r'einkaufsliste', 80, "Einkaufsliste"),
        rule(r'wunschliste', 60, "Wunschliste"),
    )),
    FeatureSignature("Wiederbestellung", "ordering", (
        rule(r'wieder(-|\s)?bestell', 85, "Wiederbestellung"),
        rule(r'erneut\s*bestell', 80, "Erneut bestellen"),
        rule(r'nachbestellung', 80, "Nachbestellung"),
    )),
    FeatureSignature("Staffelpreise", "pricing", (
        rule(r'staffel(-|\s)?preis', 90, "Staffelpreise"),
        rule(r'mengen(-|\s)?rabatt', 85, "Mengenrabatt"),
        rule(r'ab\s+\d+\s*(stück|stk)', 75, "Ab X Stück"),
        rule(r'preis\s*ab\s*menge', 80, "Preis ab Menge"),
    )),
    FeatureSignature("Individuelle Preise", "pricing", (
        rule(r'individuelle\s*preis', 85, "Individuelle Preise"),
        rule(r'kunden(-|\s)?preis', 80, "Kundenpreise"),
        rule(r'vereinbarte\s*preis', 85, "Vereinbarte Preise"),
        rule(r'rahmen(-|\s)?vertrag', 90, "Rahmenvertrag"),
    )),
    FeatureSignature("Kostenstellen", "account", (
        rule(r'kostenstelle', 90, "Kostenstelle"),
        rule(r'cost\s*center', 85, "Cost Center"),
        rule(r'budget(-|\s)?verwaltung', 80, "Budgetverwaltung"),
    )),
    FeatureSignature("Freigabeworkflow", "account", (
        rule(r'freigabe(-|\s)?workflow', 90, "Freigabeworkflow"),
        rule(r'bestell(-|\s)?freigabe', 85, "Bestellfreigabe"),
        rule(r'genehmigung', 70, "Genehmigung"),
        rule(r'approval', 70, "Approval"),
    )),
    FeatureSignature("Mehrere Benutzer", "account", (
        rule(r'benutzer(-|\s)?verwaltung', 80, "Benutzerverwaltung"),
        rule(r'unter(-|\s)?konten', 85, "Unterkonten"),
        rule(r'mitarbeiter(-|\s)?zugang', 85, "Mitarbeiterzugang"),
    )),
    FeatureSignature("EDI-Anbindung", "integration", (
        rule(r'\bedi\b', 75, "EDI erwähnt"),
        rule(r'edi(-|\s)?anbindung', 90, "EDI-Anbindung"),
        rule(r'edifact', 90, "EDIFACT"),
        rule(r'elektronischer\s*datenaustausch', 85, "Elektronischer Datenaustausch"),
    )),
    FeatureSignature("Kauf auf Rechnung", "payment", (
        rule(r'kauf\s*auf\s*rechnung', 90, "Kauf auf Rechnung"),
        rule(r'rechnung(-|\s)?skauf', 85, "Rechnungskauf"),
        rule(r'zahlungsziel', 80, "Zahlungsziel"),
        rule(r'\d+\s*tage\s*zahlungsziel', 90, "X Tage Zahlungsziel"),
    )),
    FeatureSignature("SEPA-Lastschrift", "payment", (
        rule(r'sepa(-|\s)?lastschrift', 90, "SEPA-Lastschrift"),
        rule(r'bankeinzug', 80, "Bankeinzug"),
        rule(r'lastschrift(-|\s)?mandat', 85, "Lastschriftmandat"),
    )),
    FeatureSignature("Sammelrechnung", "payment", (
        rule(r'sammelrechnung', 90, "Sammelrechnung"),
        rule(r'monatsrechnung', 85, "Monatsrechnung"),
        rule(r'periodische\s*abrechnung', 80, "Periodische Abrechnung"),
    )),
]

# Readiness score bands
PORTAL_POINTS = 20
PUNCHOUT_POINTS = 25
PROCUREMENT_NETWORK_POINTS = 10
BMECAT_POINTS = 10
ERP_POINTS = 15
FEATURE_POINTS = 3
MAX_FEATURE_POINTS = 20

RECOMMENDATIONS = [
    (80, "Exzellente B2B-Fähigkeiten. Der Shop ist sehr gut für E-Procurement geeignet."),
    (60, "Gute B2B-Grundausstattung. Punchout-Kataloge und weitere Integrationen könnten ergänzt werden."),
    (40, "Grundlegende B2B-Features vorhanden. Empfehlung: OCI/cXML-Schnittstellen und Katalogformate implementieren."),
    (20, "Wenige B2B-Features erkannt. Der Shop ist primär auf B2C ausgerichtet."),
]
DEFAULT_RECOMMENDATION = "Keine B2B-Features erkannt. Der Shop scheint ausschließlich B2C zu sein."

CATEGORY_NAMES = {
    "ordering": "Bestellung",
    "pricing": "Preise",
    "account": "Konto",
    "integration": "Integration",
    "payment": "Zahlung",
}


class ProcurementDetector:
    """Detects B2B and e-procurement capabilities of a shop page."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def detect(self, html: str) -> ProcurementResult:
        """Detect procurement capabilities.

        Args:
            html: Raw HTML of the page

        Returns:
            ProcurementResult with detections, score and recommendation
        """
        html = html or ""

        portal = detect_patterns(html, B2B_PORTAL_RULES)
        b2b_portal = B2BPortalInfo(
            detected=portal.confidence >= self.thresholds.b2b_portal_min_confidence,
            confidence=portal.confidence,
            evidence=portal.evidence,
            login_type="unknown" if portal.detected else None,
        )

        punchout = PunchoutInfo(
            oci_support=detect_patterns(html, OCI_RULES),
            cxml_support=detect_patterns(html, CXML_RULES),
            ariba_support=detect_patterns(html, ARIBA_RULES),
            coupa_support=detect_patterns(html, COUPA_RULES),
        )

        catalog = CatalogInfo(
            bmecat_support=detect_patterns(html, BMECAT_RULES),
            datanorm_support=detect_patterns(html, DATANORM_RULES),
            etim_support=detect_patterns(html, ETIM_RULES),
            csv_export=detect_patterns(html, CSV_RULES),
        )

        erp_integration = ERPIntegrationInfo(
            sap_support=detect_patterns(html, SAP_RULES),
            microsoft_dynamics=detect_patterns(html, DYNAMICS_RULES),
            oracle_support=detect_patterns(html, ORACLE_RULES),
            api_available=detect_patterns(html, API_RULES),
        )

        b2b_features = self._detect_features(html)

        score = self.calculate_score(b2b_portal, punchout, catalog, erp_integration, b2b_features)

        logger.debug(f"B2B readiness score {score} with {len(b2b_features)} features")

        return ProcurementResult(
            b2b_portal=b2b_portal,
            punchout=punchout,
            catalog=catalog,
            erp_integration=erp_integration,
            b2b_features=b2b_features,
            score=score,
            recommendation=self.recommendation_for(score),
        )

    def _detect_features(self, html: str) -> List[B2BFeature]:
        features = []
        for signature in B2B_FEATURE_SIGNATURES:
            outcome = detect_patterns(html, signature.rules)
            if outcome.confidence >= self.thresholds.b2b_feature_min_confidence:
                features.append(B2BFeature(
                    name=signature.name,
                    category=signature.category,
                    detected=True,
                    confidence=outcome.confidence,
                    evidence=outcome.evidence,
                ))
        return features

    @staticmethod
    def calculate_score(
        b2b_portal: B2BPortalInfo,
        punchout: PunchoutInfo,
        catalog: CatalogInfo,
        erp_integration: ERPIntegrationInfo,
        b2b_features: List[B2BFeature],
    ) -> int:
        """Sum the readiness bands.

        The punch-out band and the procurement-network band are independent
        checks, so a page naming Ariba and OCI gets both.

        Returns:
            Score between 0 and 100
        """
        score = 0
        if b2b_portal.detected:
            score += PORTAL_POINTS
        if punchout.oci_support.detected or punchout.cxml_support.detected:
            score += PUNCHOUT_POINTS
        if punchout.ariba_support.detected or punchout.coupa_support.detected:
            score += PROCUREMENT_NETWORK_POINTS
        if catalog.bmecat_support.detected:
            score += BMECAT_POINTS
        if erp_integration.sap_support.detected or erp_integration.api_available.detected:
            score += ERP_POINTS
        score += min(MAX_FEATURE_POINTS, FEATURE_POINTS * len(b2b_features))
        return score

    @staticmethod
    def recommendation_for(score: int) -> str:
        for threshold, text in RECOMMENDATIONS:
            if score >= threshold:
                return text
        return DEFAULT_RECOMMENDATION

    def format_result(self, result: ProcurementResult) -> str:
        """Format a procurement result into a readable report.

        Args:
            result: ProcurementResult

        Returns:
            Markdown report
        """
        lines = [
            "## E-Procurement Analyse\n",
            f"**B2B Readiness Score: {result.score}/100**\n",
            f"*{result.recommendation}*\n",
        ]

        lines.append("### B2B-Portal")
        if result.b2b_portal.detected:
            lines.append(f"✅ Erkannt (Konfidenz: {result.b2b_portal.confidence}%)")
            lines.append(f"   - {', '.join(result.b2b_portal.evidence)}\n")
        else:
            lines.append("❌ Nicht erkannt\n")

        punchout_items = [
            ("OCI", result.punchout.oci_support),
            ("cXML", result.punchout.cxml_support),
            ("SAP Ariba", result.punchout.ariba_support),
            ("Coupa", result.punchout.coupa_support),
        ]
        lines.append("### Punchout-Schnittstellen")
        for name, outcome in punchout_items:
            if outcome.detected:
                lines.append(f"✅ {name}: Erkannt ({outcome.confidence}%)")
        if not any(outcome.detected for _, outcome in punchout_items):
            lines.append("❌ Keine Punchout-Schnittstellen erkannt")
        lines.append("")

        catalog_items = [
            ("BMEcat", result.catalog.bmecat_support),
            ("DATANORM", result.catalog.datanorm_support),
            ("ETIM", result.catalog.etim_support),
            ("CSV-Export", result.catalog.csv_export),
        ]
        self._append_group(lines, "### Katalogformate", catalog_items, "❌ Keine Katalogformate erkannt")

        erp_items = [
            ("SAP", result.erp_integration.sap_support),
            ("Microsoft Dynamics", result.erp_integration.microsoft_dynamics),
            ("Oracle/NetSuite", result.erp_integration.oracle_support),
            ("API verfügbar", result.erp_integration.api_available),
        ]
        self._append_group(lines, "### ERP-Integration", erp_items, "❌ Keine ERP-Integrationen erkannt")

        if result.b2b_features:
            lines.append("### B2B-Features")
            by_category = {}
            for feature in result.b2b_features:
                by_category.setdefault(feature.category, []).append(feature)

            for category, features in by_category.items():
                lines.append(f"\n**{CATEGORY_NAMES.get(category, category)}:**")
                for feature in features:
                    lines.append(f"- ✅ {feature.name}")

        return "\n".join(lines)

    @staticmethod
    def _append_group(lines: List[str], heading: str, items, empty_message: str) -> None:
        lines.append(heading)
        for name, outcome in items:
            if outcome.detected:
                lines.append(f"✅ {name}: Erkannt")
        if not any(outcome.detected for _, outcome in items):
            lines.append(empty_message)
        lines.append("")


def detect_procurement(html: str) -> ProcurementResult:
    """Convenience function to detect procurement capabilities.

    Args:
        html: Raw HTML

    Returns:
        ProcurementResult
    """
    return ProcurementDetector().detect(html)


def format_procurement_result(result: ProcurementResult) -> str:
    """Convenience function to render a procurement result."""
    return ProcurementDetector().format_result(result)
