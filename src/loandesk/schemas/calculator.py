# This project was developed with assistance from AI tools.
"""EMI calculator schemas."""

from pydantic import BaseModel, Field


class EmiRequest(BaseModel):
    """Input for the EMI preview."""

    loan_amount: float = Field(gt=0)
    tenure_months: int = Field(ge=1, le=600)
    interest_rate: float = Field(ge=0, le=100)


class EmiResponse(BaseModel):
    """EMI preview results, in whole currency units."""

    emi: int
    total_payable: int
    total_interest: int
