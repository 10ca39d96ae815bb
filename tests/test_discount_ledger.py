"""
Discount ledger tests: sale-field commands on plain snapshots.
"""
from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.core.exceptions import ValidationError
from app.services.pricing_services.discount_ledger import (
    NO_SALE,
    SaleFields,
    apply_discount,
    clear_sale,
    compute_discount_price,
    is_active,
    is_driving,
    is_sale_live,
    resync_sale,
    select_driving_discount,
    validate_sale_fields,
)
from tests.fixtures.sample_data import NOW

pytestmark = pytest.mark.unit


def discount(id=1, percentage="20", is_on_sale=True, end_in_days=7, written_days_ago=0):
    return SimpleNamespace(
        id=id,
        percentage=Decimal(percentage),
        start_date=NOW - timedelta(days=1),
        end_date=NOW + timedelta(days=end_in_days),
        is_on_sale=is_on_sale,
        updated_at=NOW - timedelta(days=written_days_ago),
    )


def book(price="100.00", **overrides):
    values = {"price": Decimal(price), "on_sale": False, "discount_price": None, "discount_end_date": None}
    values.update(overrides)
    return SimpleNamespace(**values)


class TestComputeDiscountPrice:

    def test_twenty_percent_of_hundred(self):
        assert compute_discount_price(Decimal("100.00"), Decimal("20")) == Decimal("80.00")

    def test_result_uses_currency_precision(self):
        assert compute_discount_price(Decimal("19.99"), Decimal("15")) == Decimal("16.99")
        assert compute_discount_price(Decimal("0.05"), Decimal("50")) == Decimal("0.03")

    def test_bounds(self):
        assert compute_discount_price(Decimal("42.50"), Decimal("0")) == Decimal("42.50")
        assert compute_discount_price(Decimal("42.50"), Decimal("100")) == Decimal("0.00")

    def test_float_inputs_do_not_drift(self):
        assert compute_discount_price(33.33, 33) == Decimal("22.33")

    def test_recomputation_is_stable(self):
        first = compute_discount_price(Decimal("57.77"), Decimal("12.5"))
        for _ in range(5):
            assert compute_discount_price(Decimal("57.77"), Decimal("12.5")) == first


class TestActiveAndLive:

    def test_active_requires_flag_and_future_end(self):
        assert is_active(discount(), NOW)
        assert not is_active(discount(is_on_sale=False), NOW)
        assert not is_active(discount(end_in_days=0), NOW)
        assert not is_active(discount(end_in_days=-1), NOW)

    def test_sale_live_is_evaluated_lazily(self):
        stale = book(on_sale=True, discount_price=Decimal("80.00"), discount_end_date=NOW - timedelta(hours=1))
        live = book(on_sale=True, discount_price=Decimal("80.00"), discount_end_date=NOW + timedelta(hours=1))
        assert not is_sale_live(stale, NOW)
        assert is_sale_live(live, NOW)
        assert not is_sale_live(book(), NOW)


class TestApplyAndResync:

    def test_apply_discount_prices_from_current_price(self):
        d = discount(percentage="25")
        fields = apply_discount(book(price="40.00"), d)
        assert fields == SaleFields(on_sale=True, discount_price=Decimal("30.00"), discount_end_date=d.end_date)

    def test_clear_sale(self):
        assert clear_sale() == NO_SALE
        assert NO_SALE.on_sale is False
        assert NO_SALE.discount_price is None
        assert NO_SALE.discount_end_date is None

    def test_write_to_sets_all_three_fields(self):
        target = book(on_sale=True, discount_price=Decimal("1.00"), discount_end_date=NOW)
        NO_SALE.write_to(target)
        assert (target.on_sale, target.discount_price, target.discount_end_date) == (False, None, None)

    def test_driving_discount_is_most_recently_written_active_one(self):
        older = discount(id=1, written_days_ago=3)
        newer = discount(id=2, written_days_ago=1)
        expired = discount(id=3, end_in_days=-1)
        switched_off = discount(id=4, is_on_sale=False)
        assert select_driving_discount([older, newer, expired, switched_off], NOW) is newer

    def test_driving_ties_break_on_newer_id(self):
        a = discount(id=5)
        b = discount(id=9)
        assert select_driving_discount([b, a], NOW) is b

    def test_resync_without_active_discount_clears(self):
        assert resync_sale(book(), [discount(is_on_sale=False)], NOW) == NO_SALE
        assert resync_sale(book(), [], NOW) == NO_SALE

    def test_resync_applies_driving_discount(self):
        d = discount(percentage="10")
        assert resync_sale(book(), [d], NOW).discount_price == Decimal("90.00")

    def test_is_driving(self):
        older = discount(id=1, written_days_ago=2)
        newer = discount(id=2)
        assert is_driving(newer, [older, newer], NOW)
        assert not is_driving(older, [older, newer], NOW)


class TestValidateSaleFields:

    def test_not_on_sale_needs_nothing(self):
        validate_sale_fields(False, Decimal("10"), None, None, NOW)

    def test_on_sale_requires_price_and_end(self):
        with pytest.raises(ValidationError):
            validate_sale_fields(True, Decimal("10"), None, NOW + timedelta(days=1), NOW)
        with pytest.raises(ValidationError):
            validate_sale_fields(True, Decimal("10"), Decimal("5"), None, NOW)

    def test_discount_price_cannot_exceed_price(self):
        with pytest.raises(ValidationError):
            validate_sale_fields(True, Decimal("10"), Decimal("10.01"), NOW + timedelta(days=1), NOW)

    def test_end_date_must_be_ahead(self):
        with pytest.raises(ValidationError):
            validate_sale_fields(True, Decimal("10"), Decimal("5"), NOW, NOW)

    def test_valid_sale(self):
        validate_sale_fields(True, Decimal("10"), Decimal("10"), NOW + timedelta(days=1), NOW)
