"""
Safe/caution/avoid verdicts for food and dish names.

Used both when logging a meal and for menu text that an external OCR step
has already extracted.
"""

import logging
import re
from typing import Iterable, Iterator, List, Optional, Tuple

from nutrimood.services.schemas import MenuItemVerdict, TriggerVerdict


logger = logging.getLogger(__name__)

COMMON_ALLERGENS = frozenset({"dairy", "gluten", "lactose", "milk", "cheese", "wheat"})

FOOD_KEYWORDS = (
    "burger",
    "pizza",
    "pasta",
    "salad",
    "chicken",
    "beef",
    "fish",
    "sandwich",
    "soup",
    "rice",
    "noodle",
    "steak",
    "taco",
    "wrap",
    "bowl",
)

AVOID_CONFIDENCE = 0.8
DEFAULT_CONFIDENCE = 0.5
MIN_ITEM_LENGTH = 5

_HEADER_PATTERN = re.compile(r"^(appetizer|entree|dessert|drink|menu|price)", re.IGNORECASE)
_PRICE_PATTERN = re.compile(r"\$\d+(?:[.,]\d+)?")
_FOOD_PATTERN = re.compile("|".join(FOOD_KEYWORDS), re.IGNORECASE)


def _matching_terms(text: str, terms: Iterable[str]) -> set[str]:
    """Lower-cased terms that occur in ``text``; blank terms never match."""
    matched = set()
    for term in terms:
        needle = term.strip().lower()
        if needle and needle in text:
            matched.add(needle)
    return matched


def classify(
    item_name: Optional[str],
    trigger_foods: Iterable[str],
    known_allergens: Optional[Iterable[str]] = None,
) -> TriggerVerdict:
    """
    Classify a dish against the user's trigger foods and common allergens.

    Matching is case-insensitive substring containment. Personal triggers
    win over allergens: any trigger hit is ``avoid``, otherwise any allergen
    hit is ``caution``, otherwise ``safe``. Every matching term is reported.

    Args:
        item_name: Dish or food name
        trigger_foods: Foods the user has reacted to
        known_allergens: Allergen terms; ``None`` uses COMMON_ALLERGENS

    Returns:
        TriggerVerdict
    """
    if known_allergens is None:
        known_allergens = COMMON_ALLERGENS

    item_name = item_name or ""
    text = item_name.lower()

    triggers = _matching_terms(text, trigger_foods)
    if triggers:
        return TriggerVerdict(
            item_name=item_name,
            status="avoid",
            matched_terms=triggers,
            confidence=AVOID_CONFIDENCE,
            reason=f"Contains {', '.join(sorted(triggers))} (your trigger food)",
        )

    allergens = _matching_terms(text, known_allergens)
    if allergens:
        return TriggerVerdict(
            item_name=item_name,
            status="caution",
            matched_terms=allergens,
            confidence=DEFAULT_CONFIDENCE,
            reason=f"May contain {', '.join(sorted(allergens))}",
        )

    return TriggerVerdict(
        item_name=item_name,
        status="safe",
        matched_terms=set(),
        confidence=DEFAULT_CONFIDENCE,
    )


def _candidate_lines(raw_text: str) -> Iterator[Tuple[str, str]]:
    """Yield (line, dish name) for each menu line that looks like a dish."""
    for line in (raw_text or "").splitlines():
        cleaned = line.strip()

        # Skip very short lines and section headers
        if len(cleaned) < MIN_ITEM_LENGTH:
            continue
        if _HEADER_PATTERN.match(cleaned):
            continue

        if _PRICE_PATTERN.search(cleaned) or _FOOD_PATTERN.search(cleaned):
            name = _PRICE_PATTERN.sub("", cleaned, count=1).strip()
            if name:
                yield cleaned, name


def extract_candidate_items(raw_text: str) -> List[str]:
    """
    Pull likely dish names out of raw menu text.

    Keeps lines of at least 5 characters that are not section headers and
    that carry a price or a food keyword. The price is stripped from the
    returned name.
    """
    return [name for _, name in _candidate_lines(raw_text)]


def scan_menu(
    raw_text: str,
    trigger_foods: Iterable[str],
    known_allergens: Optional[Iterable[str]] = None,
) -> List[MenuItemVerdict]:
    """Extract candidate dishes from menu text and classify each one."""
    trigger_foods = list(trigger_foods)
    results = [
        MenuItemVerdict(
            name=name,
            raw_text=line,
            verdict=classify(name, trigger_foods, known_allergens),
        )
        for line, name in _candidate_lines(raw_text)
    ]

    logger.info(
        "Scanned menu: %d items, %d to avoid",
        len(results),
        sum(1 for r in results if r.verdict.status == "avoid"),
    )
    return results
