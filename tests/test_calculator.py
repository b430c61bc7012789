# This project was developed with assistance from AI tools.
"""Tests for EMI calculation."""

import pytest

from loandesk.schemas.calculator import EmiRequest
from loandesk.services.calculator import calculate_emi, compute_emi


def test_standard_amortization():
    """100000 at 12% over 12 months rounds to 8885."""
    assert compute_emi(100000, 12, 12) == 8885


def test_default_rate_scenario():
    """50000 at 18% over 12 months rounds to 4584."""
    assert compute_emi(50000, 18, 12) == 4584


def test_zero_rate_is_straight_line():
    """A zero rate repays the principal evenly rather than returning 0."""
    assert compute_emi(100000, 0, 10) == 10000


def test_zero_rate_rounds_half_up():
    assert compute_emi(1000, 0, 3) == 333
    assert compute_emi(1001, 0, 2) == 501


@pytest.mark.parametrize(
    "principal,rate,tenure",
    [(0, 12, 12), (-5, 12, 12), (1000, 12, 0), (1000, -1, 12)],
)
def test_invalid_inputs_raise(principal, rate, tenure):
    with pytest.raises(ValueError):
        compute_emi(principal, rate, tenure)


def test_calculate_emi_totals():
    resp = calculate_emi(EmiRequest(loan_amount=100000, interest_rate=12, tenure_months=12))
    assert resp.emi == 8885
    assert resp.total_payable == 8885 * 12
    assert resp.total_interest == 8885 * 12 - 100000


def test_calculate_emi_zero_rate_has_no_interest():
    resp = calculate_emi(EmiRequest(loan_amount=100000, interest_rate=0, tenure_months=10))
    assert resp.emi == 10000
    assert resp.total_interest == 0
