"""
Testes unitários para a aritmética de datas.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from circulation.core.dates import (
    calculate_late_fee,
    days_between,
    days_overdue,
    is_due_soon,
    is_overdue,
    parse_instant,
    to_naive_utc,
)

DUE = datetime(2025, 1, 20, 15, 30)


class TestDaysBetween:
    """Testes para days_between."""

    def test_ignores_time_of_day(self):
        """Mesmo dia em horários diferentes conta como 0."""
        morning = datetime(2025, 1, 20, 8, 0)
        night = datetime(2025, 1, 20, 23, 59)

        assert days_between(morning, night) == 0
        assert days_between(night, morning) == 0

    def test_crossing_midnight_counts_one_day(self):
        assert days_between(datetime(2025, 1, 20, 23, 59), datetime(2025, 1, 21, 0, 1)) == 1

    @pytest.mark.parametrize(
        "a,b",
        [
            (datetime(2025, 1, 1), datetime(2025, 3, 1)),
            (datetime(2025, 2, 28, 22), datetime(2024, 2, 28, 1)),
            (DUE, DUE),
        ],
    )
    def test_antisymmetric(self, a, b):
        assert days_between(a, b) == -days_between(b, a)

    def test_normalizes_aware_datetimes(self):
        """Datas com fuso são comparadas em UTC."""
        aware = datetime(2025, 1, 21, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        # 2025-01-20 22:00 UTC
        assert days_between(DUE, aware) == 0


class TestOverdueAndDueSoon:
    """Testes para os predicados de vencimento."""

    def test_not_overdue_on_due_day(self):
        assert is_overdue(DUE, DUE.replace(hour=23, minute=59)) is False

    def test_overdue_day_after(self):
        assert is_overdue(DUE, datetime(2025, 1, 21, 0, 0)) is True

    def test_due_soon_window(self):
        assert is_due_soon(DUE, datetime(2025, 1, 18, 9, 0)) is True
        assert is_due_soon(DUE, DUE) is True
        assert is_due_soon(DUE, datetime(2025, 1, 17, 9, 0)) is False

    def test_due_soon_custom_threshold(self):
        assert is_due_soon(DUE, datetime(2025, 1, 15), threshold_days=5) is True

    def test_overdue_and_due_soon_are_exclusive(self):
        """Nenhum instante é ao mesmo tempo atrasado e com vencimento próximo."""
        for offset in range(-10, 10):
            now = DUE + timedelta(days=offset, hours=offset)
            for threshold in (0, 2, 7):
                assert not (is_overdue(DUE, now) and is_due_soon(DUE, now, threshold))


class TestLateFee:
    """Testes para multa por atraso."""

    def test_no_fee_before_due(self):
        assert days_overdue(DUE, DUE - timedelta(days=3)) == 0
        assert calculate_late_fee(DUE, DUE, Decimal("0.25")) == Decimal("0")

    def test_fee_per_day(self):
        now = DUE + timedelta(days=3)
        assert days_overdue(DUE, now) == 3
        assert calculate_late_fee(DUE, now, Decimal("0.25")) == Decimal("0.75")


class TestParseInstant:
    """Testes para parse_instant."""

    def test_date_only_is_midnight_utc(self):
        assert parse_instant("2025-01-20") == datetime(2025, 1, 20)

    def test_zulu_suffix(self):
        assert parse_instant("2025-01-20T12:30:00Z") == datetime(2025, 1, 20, 12, 30)

    def test_offset_converted_to_utc(self):
        assert parse_instant("2025-01-20T09:00:00-03:00") == datetime(2025, 1, 20, 12, 0)

    def test_invalid_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_instant("amanhã")

    def test_to_naive_utc_keeps_naive_values(self):
        assert to_naive_utc(DUE) is DUE
