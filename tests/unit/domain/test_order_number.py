"""Unit tests for OrderNumber."""

from datetime import date

import pytest

from core.domain.value_objects import OrderNumber

DAY = date(2026, 10, 19)


def test_first_order_of_the_day():
    assert OrderNumber.next_after(None, DAY).value == "ORD-001191026"


def test_sequence_increments_within_day():
    number = OrderNumber.next_after("ORD-041191026", DAY)

    assert number.value == "ORD-042191026"
    assert number.sequence == 42
    assert number.date_suffix == "191026"


def test_previous_day_restarts_sequence():
    assert OrderNumber.next_after("ORD-517181026", DAY).value == "ORD-001191026"


def test_sequence_wraps_after_999():
    assert OrderNumber.next_after("ORD-999191026", DAY).value == "ORD-001191026"


def test_invalid_format_rejected():
    with pytest.raises(ValueError):
        OrderNumber("ORD-1-191026")
