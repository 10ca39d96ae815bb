from datetime import datetime, timedelta, timezone

import pytest

from app.utils.time_helpers import add_months, ensure_utc

pytestmark = pytest.mark.unit


class TestAddMonths:

    def test_simple_shift(self):
        assert add_months(datetime(2025, 6, 15, 12, 0), -3) == datetime(2025, 3, 15, 12, 0)

    def test_crosses_year_boundary(self):
        assert add_months(datetime(2025, 2, 10), -3) == datetime(2024, 11, 10)
        assert add_months(datetime(2024, 11, 10), 3) == datetime(2025, 2, 10)

    def test_clamps_to_month_length(self):
        assert add_months(datetime(2025, 5, 31), -3) == datetime(2025, 2, 28)
        assert add_months(datetime(2024, 5, 31), -3) == datetime(2024, 2, 29)
        assert add_months(datetime(2025, 3, 31), -1) == datetime(2025, 2, 28)

    def test_keeps_timezone(self):
        value = datetime(2025, 6, 15, tzinfo=timezone.utc)
        assert add_months(value, -1).tzinfo is timezone.utc


class TestEnsureUtc:

    def test_none_passes_through(self):
        assert ensure_utc(None) is None

    def test_naive_is_taken_as_utc(self):
        assert ensure_utc(datetime(2025, 1, 1, 8, 0)) == datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_aware_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        converted = ensure_utc(datetime(2025, 1, 1, 10, 0, tzinfo=plus_two))
        assert converted == datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)
        assert converted.tzinfo == timezone.utc
