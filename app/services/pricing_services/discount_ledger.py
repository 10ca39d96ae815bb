# --------------------------
# File: app/services/pricing_services/discount_ledger.py
# Description: Pure sale-field commands. Given a book snapshot and its discounts,
# compute what the book's public sale fields must be. Persistence lives in
# discount_service; nothing here touches the session or reads the clock.
# --------------------------

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from app.core.config import PRICE_DECIMAL_PLACES
from app.core.exceptions import ValidationError

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class SaleFields:
    on_sale: bool
    discount_price: Optional[Decimal]
    discount_end_date: Optional[datetime]

    def write_to(self, book) -> None:
        book.on_sale = self.on_sale
        book.discount_price = self.discount_price
        book.discount_end_date = self.discount_end_date


NO_SALE = SaleFields(on_sale=False, discount_price=None, discount_end_date=None)


def compute_discount_price(price, percentage, places: int = PRICE_DECIMAL_PLACES) -> Decimal:
    """
    price * (1 - percentage / 100), quantized to the currency precision.

    Both inputs are coerced through str() so floats never leak binary noise
    into the result; recomputing from the same price and percentage always
    yields the same value.
    """
    price = Decimal(str(price))
    percentage = Decimal(str(percentage))
    exponent = Decimal(1).scaleb(-places)
    discounted = (price * (HUNDRED - percentage) / HUNDRED).quantize(exponent, rounding=ROUND_HALF_UP)
    return max(discounted, Decimal(0).quantize(exponent))


def is_active(discount, now: datetime) -> bool:
    """An active discount is switched on and has not ended yet."""
    return bool(discount.is_on_sale) and discount.end_date > now


def is_sale_live(book, now: datetime) -> bool:
    """
    Lazy expiry: the stored on_sale flag is only trusted while its end date lies ahead.
    """
    return bool(book.on_sale) and book.discount_end_date is not None and book.discount_end_date > now


def apply_discount(book, discount) -> SaleFields:
    """Sale fields for a book driven by `discount`, priced from the book's current price."""
    return SaleFields(
        on_sale=True,
        discount_price=compute_discount_price(book.price, discount.percentage),
        discount_end_date=discount.end_date,
    )


def clear_sale() -> SaleFields:
    return NO_SALE


def select_driving_discount(discounts: Iterable, now: datetime):
    """The most recently written active discount, ties broken by the newer id."""
    active = [d for d in discounts if is_active(d, now)]
    if not active:
        return None
    return max(active, key=lambda d: (d.updated_at, d.id or 0))


def resync_sale(book, discounts: Iterable, now: datetime) -> SaleFields:
    driving = select_driving_discount(discounts, now)
    if driving is None:
        return clear_sale()
    return apply_discount(book, driving)


def is_driving(discount, discounts: Iterable, now: datetime) -> bool:
    """Whether `discount` is the one the book's sale fields currently reflect."""
    driving = select_driving_discount(discounts, now)
    return driving is not None and driving.id == discount.id


def validate_sale_fields(on_sale, price, discount_price, discount_end_date, now: datetime) -> None:
    """
    Invariant for sale fields written directly on a book: an on-sale book carries
    a discount price no higher than its price and an end date still ahead of `now`.
    """
    if not on_sale:
        return
    if discount_price is None or discount_end_date is None:
        raise ValidationError("on_sale requires discount_price and discount_end_date")
    if Decimal(str(discount_price)) > Decimal(str(price)):
        raise ValidationError("discount_price must not exceed price")
    if discount_end_date <= now:
        raise ValidationError("discount_end_date must be in the future for a book on sale")
