# --------------------------
# File: app/services/catalog_services/category_classifier.py
# Description: Derived, time-sensitive book categories
# --------------------------

from datetime import datetime
from typing import Dict, FrozenSet, Iterable

from app.core.exceptions import InvalidCategory
from app.services.pricing_services.discount_ledger import is_sale_live
from app.utils.time_helpers import add_months

ALL = "all"
BESTSELLERS = "bestsellers"
AWARD_WINNERS = "award-winners"
NEW_RELEASES = "new-releases"
NEW_ARRIVALS = "new-arrivals"
COMING_SOON = "coming-soon"
DEALS = "deals"

CATEGORIES = (ALL, BESTSELLERS, AWARD_WINNERS, NEW_RELEASES, NEW_ARRIVALS, COMING_SOON, DEALS)

CATEGORY_ALIASES = {
    "bestseller": BESTSELLERS,
    "award-winner": AWARD_WINNERS,
    "new-release": NEW_RELEASES,
    "new-arrival": NEW_ARRIVALS,
    "deal": DEALS,
}

NEW_RELEASE_WINDOW_MONTHS = 3
NEW_ARRIVAL_WINDOW_MONTHS = 1


def normalize_category(name: str) -> str:
    key = (name or "").strip().lower()
    key = CATEGORY_ALIASES.get(key, key)
    if key not in CATEGORIES:
        raise InvalidCategory(f"Unknown category '{name}'. Expected one of: {', '.join(CATEGORIES)}")
    return key


def is_new_release(book, now: datetime) -> bool:
    return add_months(now, -NEW_RELEASE_WINDOW_MONTHS) <= book.published_date <= now


def is_new_arrival(book, now: datetime) -> bool:
    return book.added_date >= add_months(now, -NEW_ARRIVAL_WINDOW_MONTHS)


def is_coming_soon(book, now: datetime) -> bool:
    return book.published_date > now


def classify(book, now: datetime) -> FrozenSet[str]:
    """
    Categories a book belongs to at `now`. `all` is implied and never returned.

    Bestseller and award-winner pass the stored flags through; everything else
    is derived from timestamps, so the result changes as `now` moves.
    """
    categories = set()
    if book.is_bestseller:
        categories.add(BESTSELLERS)
    if book.is_award_winner:
        categories.add(AWARD_WINNERS)
    if is_new_release(book, now):
        categories.add(NEW_RELEASES)
    if is_new_arrival(book, now):
        categories.add(NEW_ARRIVALS)
    if is_coming_soon(book, now):
        categories.add(COMING_SOON)
    if is_sale_live(book, now):
        categories.add(DEALS)
    return frozenset(categories)


def in_category(book, category: str, now: datetime) -> bool:
    category = normalize_category(category)
    return category == ALL or category in classify(book, now)


def category_counts(books: Iterable, now: datetime) -> Dict[str, int]:
    counts = {name: 0 for name in CATEGORIES}
    for book in books:
        counts[ALL] += 1
        for name in classify(book, now):
            counts[name] += 1
    return counts
