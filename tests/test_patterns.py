"""Tests for the weighted pattern engine."""

import re

from shopscan.patterns import PatternRule, detect_patterns, rule


class TestDetectPatterns:
    """Test cases for detect_patterns."""

    def test_no_match(self):
        """Test nothing detected for unrelated text."""
        outcome = detect_patterns("plain text", [rule(r"shopify", 90, "Shopify")])
        assert outcome.detected is False
        assert outcome.confidence == 0
        assert outcome.evidence == []

    def test_weights_are_summed(self):
        """Test every matching rule contributes its weight."""
        rules = [rule(r"alpha", 20, "A"), rule(r"beta", 15, "B"), rule(r"gamma", 50, "C")]
        outcome = detect_patterns("alpha and beta", rules)
        assert outcome.detected is True
        assert outcome.confidence == 35
        assert outcome.evidence == ["A", "B"]

    def test_confidence_capped_at_100(self):
        """Test the sum never exceeds 100."""
        rules = [rule(r"x", 90, "one"), rule(r"y", 95, "two")]
        outcome = detect_patterns("x y", rules)
        assert outcome.confidence == 100
        assert outcome.evidence == ["one", "two"]

    def test_evidence_follows_rule_order(self):
        """Test evidence order is rule order, not text order."""
        rules = [rule(r"second", 10, "S"), rule(r"first", 10, "F")]
        outcome = detect_patterns("first second", rules)
        assert outcome.evidence == ["S", "F"]

    def test_adding_matching_rule_never_lowers_confidence(self):
        """Test confidence is monotonic in matching rules."""
        text = "woocommerce wc-add-to-cart"
        rules = [rule(r"woocommerce", 85, "wc")]
        before = detect_patterns(text, rules).confidence
        after = detect_patterns(text, rules + [rule(r"wc-add-to-cart", 90, "cart")]).confidence
        assert after >= before
        assert 0 <= after <= 100

    def test_case_insensitive_by_default(self):
        """Test rules ignore case unless flags say otherwise."""
        assert detect_patterns("SHOPWARE", [rule(r"shopware", 60, "sw")]).detected

    def test_case_sensitive_rule(self):
        """Test flags=0 keeps a rule case-sensitive."""
        ga4 = rule(r"\bG-[A-Z0-9]{6,}\b", 85, "GA4 ID", flags=0)
        assert detect_patterns("G-ABC1234", [ga4]).detected
        assert not detect_patterns("g-abc1234", [ga4]).detected

    def test_empty_rules(self):
        """Test an empty rule set detects nothing."""
        assert detect_patterns("anything", []).confidence == 0


class TestPatternRule:
    """Test cases for PatternRule."""

    def test_matches(self):
        """Test matching searches anywhere in the text."""
        pattern_rule = PatternRule(re.compile(r"cdn\.example"), 50, "cdn")
        assert pattern_rule.matches("<script src='//cdn.example/app.js'>")
        assert not pattern_rule.matches("cdnXexample")
