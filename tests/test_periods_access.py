"""
Tests for utils/order_ranking/periods.py and access_control.py
"""

from datetime import date, datetime

import pytest

from utils.order_ranking.access_control import AccessControl
from utils.order_ranking.periods import period_bounds, period_label, year_options


# ── Periods ───────────────────────────────────────────────────────────


def test_month_bounds():
    assert period_bounds(2025, 3) == (datetime(2025, 3, 1), datetime(2025, 4, 1))


def test_december_rolls_into_next_year():
    assert period_bounds(2024, 12) == (datetime(2024, 12, 1), datetime(2025, 1, 1))


def test_whole_year_bounds():
    assert period_bounds(2025) == (datetime(2025, 1, 1), datetime(2026, 1, 1))


@pytest.mark.parametrize("month", [0, 13])
def test_invalid_month(month):
    with pytest.raises(ValueError):
        period_bounds(2025, month)


def test_year_options_newest_first():
    assert year_options(3, today=date(2025, 6, 1)) == [2025, 2024, 2023]
    assert year_options(0, today=date(2025, 6, 1)) == [2025]


def test_period_label():
    assert period_label(2025, 3) == "March 2025"
    assert period_label(2025) == "2025"


# ── Access control ────────────────────────────────────────────────────


def test_admin_has_full_access():
    access = AccessControl("Admin", "a-1")

    assert access.get_access_level() == 'full'
    assert access.get_order_scope() == 'all'
    assert access.can_delete_order("someone-else")
    assert access.can_register_for("someone-else")


def test_operator_is_limited_to_self():
    access = AccessControl("user", 42)

    assert access.get_access_level() == 'self'
    assert access.get_order_scope() == 'mine'
    assert access.can_view_order("42")
    assert not access.can_delete_order(43)
    assert not access.can_register_for(None)


def test_missing_role_is_treated_as_operator():
    assert not AccessControl(None, "u-1").is_admin()
