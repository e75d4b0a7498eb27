"""
Unit tests for the trigger matcher.

Covers:
- Safe / caution / avoid classification
- Candidate dish extraction from menu text
- End-to-end menu scanning
"""
import logging

from nutrimood.services.trigger_matcher import (
    COMMON_ALLERGENS,
    classify,
    extract_candidate_items,
    scan_menu,
)


class TestClassify:
    """Tests for single-item verdicts."""

    def test_allergen_gives_caution(self):
        verdict = classify("Grilled Cheese Sandwich", set(), {"dairy", "cheese"})

        assert verdict.status == "caution"
        assert verdict.matched_terms == {"cheese"}
        assert verdict.confidence == 0.5

    def test_trigger_gives_avoid(self):
        verdict = classify("Peanut Noodles", {"peanut"}, set())

        assert verdict.status == "avoid"
        assert verdict.matched_terms == {"peanut"}
        assert verdict.confidence == 0.8
        assert "your trigger food" in verdict.reason

    def test_no_match_is_safe(self):
        verdict = classify("Green Salad", {"peanut"})

        assert verdict.status == "safe"
        assert verdict.matched_terms == set()
        assert verdict.confidence == 0.5
        assert verdict.reason == ""

    def test_trigger_wins_over_allergen(self):
        verdict = classify("Cheese Pizza", {"pizza"})

        assert verdict.status == "avoid"
        assert verdict.matched_terms == {"pizza"}

    def test_reports_every_matching_term(self):
        verdict = classify("Mac and Cheese with Milk", set())

        assert verdict.status == "caution"
        assert verdict.matched_terms == {"cheese", "milk"}

    def test_case_insensitive(self):
        verdict = classify("PEANUT Butter Toast", {"Peanut"})

        assert verdict.status == "avoid"
        assert verdict.matched_terms == {"peanut"}

    def test_missing_item_name_is_safe(self):
        verdict = classify(None, {"peanut"})

        assert verdict.status == "safe"
        assert verdict.item_name == ""
        assert verdict.matched_terms == set()

    def test_blank_trigger_terms_ignored(self):
        assert classify("Toast", {"", "  "}).status == "safe"

    def test_default_allergens(self):
        assert "dairy" in COMMON_ALLERGENS
        assert classify("Whole Wheat Bagel", set()).matched_terms == {"wheat"}

    def test_substring_match(self):
        # "milk" matches inside "buttermilk"
        assert classify("Buttermilk Pancakes", {"milk"}).status == "avoid"


class TestExtractCandidateItems:
    """Tests for pulling dish names out of menu text."""

    def test_headers_and_short_lines_dropped(self):
        raw = "APPETIZERS\nCaesar Salad $12\nThe soup of the day\nXX"

        assert extract_candidate_items(raw) == ["Caesar Salad", "The soup of the day"]

    def test_decimal_prices_stripped(self):
        assert extract_candidate_items("Fish Tacos $14.50") == ["Fish Tacos"]

    def test_lines_without_price_or_food_word_dropped(self):
        raw = "Served with love since 1985\nGarlic Knots $6"

        assert extract_candidate_items(raw) == ["Garlic Knots"]

    def test_all_section_headers(self):
        raw = "Entrees\nDesserts\nDrinks\nMenu\nPrices $ vary\nChicken Curry"

        assert extract_candidate_items(raw) == ["Chicken Curry"]

    def test_price_only_line_dropped(self):
        assert extract_candidate_items("   $12.00   ") == []

    def test_empty_text(self):
        assert extract_candidate_items("") == []


class TestScanMenu:
    """Tests for classifying every dish on a menu."""

    def test_classifies_each_item(self):
        raw = "Peanut Noodle Bowl $11\nCheese Burger $9\nGarden Salad $8"

        items = scan_menu(raw, {"peanut"})

        assert [(i.name, i.verdict.status) for i in items] == [
            ("Peanut Noodle Bowl", "avoid"),
            ("Cheese Burger", "caution"),
            ("Garden Salad", "safe"),
        ]
        assert items[0].raw_text == "Peanut Noodle Bowl $11"

    def test_custom_allergens(self):
        items = scan_menu("Shrimp Fried Rice $13", set(), ["shrimp"])

        assert items[0].verdict.status == "caution"
        assert items[0].verdict.matched_terms == {"shrimp"}

    def test_logs_summary(self, caplog):
        caplog.set_level(logging.INFO, logger="nutrimood.services.trigger_matcher")

        scan_menu("Peanut Noodle Bowl $11", ["peanut"])

        assert "1 items, 1 to avoid" in caplog.text
