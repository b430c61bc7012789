# This project was developed with assistance from AI tools.
"""EMI calculation logic.

Pure math, no I/O. Shared by the public EMI preview route and the
application intake pipeline.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..schemas.calculator import EmiRequest, EmiResponse


def _round_currency(value: float) -> int:
    """Round half up to a whole currency unit."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_emi(principal: float, annual_rate: float, tenure_months: int) -> int:
    """Equated monthly installment for an amortizing loan.

    EMI = P * r * (1+r)^n / ((1+r)^n - 1) with r the monthly rate. A zero
    rate degenerates to straight-line repayment P / n.
    """
    if principal <= 0:
        raise ValueError("principal must be positive")
    if tenure_months <= 0:
        raise ValueError("tenure_months must be positive")
    if annual_rate < 0:
        raise ValueError("annual_rate must not be negative")

    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return _round_currency(principal / tenure_months)

    compound = (1 + monthly_rate) ** tenure_months
    return _round_currency(principal * monthly_rate * compound / (compound - 1))


def calculate_emi(req: EmiRequest) -> EmiResponse:
    """EMI preview with totals over the full tenure."""
    emi = compute_emi(req.loan_amount, req.interest_rate, req.tenure_months)
    total_payable = emi * req.tenure_months
    return EmiResponse(
        emi=emi,
        total_payable=total_payable,
        total_interest=max(total_payable - _round_currency(req.loan_amount), 0),
    )
