# This project was developed with assistance from AI tools.
"""Loan catalog request/response schemas (loan products and categories)."""

from datetime import datetime

from loandesk_db.enums import LoanType
from pydantic import BaseModel, ConfigDict, Field, model_validator


class InterestRate(BaseModel):
    """Annual percentage rate triple. ``default`` falls back to ``min`` when absent."""

    min: float = Field(ge=0, le=100)
    max: float = Field(ge=0, le=100)
    default: float | None = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def _check_order(self):
        if self.min > self.max:
            raise ValueError("interest_rate.min must not exceed interest_rate.max")
        if self.default is not None and not (self.min <= self.default <= self.max):
            raise ValueError("interest_rate.default must lie within [min, max]")
        return self


class TitledItem(BaseModel):
    title: str
    description: str = ""


class EligibilityCriteria(BaseModel):
    min_age: int = 18
    max_age: int = 65
    min_income: float = 25000
    min_credit_score: int = 600
    employment_type: list[str] = []
    other_criteria: list[str] = []


class RequiredDocument(BaseModel):
    name: str
    description: str = ""
    required: bool = True


class RepaymentOption(BaseModel):
    tenure: int = Field(ge=1)
    interest_rate: float = Field(ge=0, le=100)
    emi: int | None = None


class LoanCreate(BaseModel):
    """Create a loan product (admin)."""

    name: str = Field(min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220)
    loan_type: LoanType
    description: str = ""
    category_id: int | None = None
    interest_rate: InterestRate
    min_loan_amount: float = Field(gt=0)
    max_loan_amount: float = Field(gt=0)
    min_tenure: int = Field(ge=1)
    max_tenure: int = Field(ge=1)
    features: list[TitledItem] = []
    benefits: list[TitledItem] = []
    eligibility_criteria: EligibilityCriteria | None = None
    required_documents: list[RequiredDocument] = []
    repayment_options: list[RepaymentOption] = []
    image: str = ""
    is_active: bool = True
    display_order: int = 0

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min_loan_amount > self.max_loan_amount:
            raise ValueError("min_loan_amount must not exceed max_loan_amount")
        if self.min_tenure > self.max_tenure:
            raise ValueError("min_tenure must not exceed max_tenure")
        return self


class LoanUpdate(BaseModel):
    """Partial update to a loan product. Bounds are re-checked after merging."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220)
    loan_type: LoanType | None = None
    description: str | None = None
    category_id: int | None = None
    interest_rate: InterestRate | None = None
    min_loan_amount: float | None = Field(default=None, gt=0)
    max_loan_amount: float | None = Field(default=None, gt=0)
    min_tenure: int | None = Field(default=None, ge=1)
    max_tenure: int | None = Field(default=None, ge=1)
    features: list[TitledItem] | None = None
    benefits: list[TitledItem] | None = None
    eligibility_criteria: EligibilityCriteria | None = None
    required_documents: list[RequiredDocument] | None = None
    repayment_options: list[RepaymentOption] | None = None
    image: str | None = None
    is_active: bool | None = None
    display_order: int | None = None


class LoanResponse(BaseModel):
    """Loan product as shown in the catalog."""

    id: int
    name: str
    slug: str
    loan_type: LoanType
    description: str
    category_id: int | None = None
    interest_rate: InterestRate
    min_loan_amount: float
    max_loan_amount: float
    min_tenure: int
    max_tenure: int
    features: list[TitledItem] = []
    benefits: list[TitledItem] = []
    eligibility_criteria: EligibilityCriteria | None = None
    required_documents: list[RequiredDocument] = []
    repayment_options: list[RepaymentOption] = []
    image: str = ""
    is_active: bool
    display_order: int
    created_at: datetime
    updated_at: datetime


class LoanListResponse(BaseModel):
    data: list[LoanResponse]
    count: int


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    active: bool | None = None


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: str | None = None
    active: bool
    created_at: datetime
    updated_at: datetime
    loan_count: int | None = None


class CategoryListResponse(BaseModel):
    data: list[CategoryResponse]
    count: int


class CategoryLoanCreate(BaseModel):
    """Flat loan payload used by the category screen.

    Missing rate values fall back to ``interest_rate_min``.
    """

    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    loan_type: LoanType
    interest_rate_min: float = Field(default=0, ge=0, le=100)
    interest_rate_max: float | None = Field(default=None, ge=0, le=100)
    interest_rate_default: float | None = Field(default=None, ge=0, le=100)
    min_loan_amount: float = Field(gt=0)
    max_loan_amount: float = Field(gt=0)
    min_tenure: int = Field(ge=1)
    max_tenure: int = Field(ge=1)


class CategoryLoansResponse(BaseModel):
    category_id: int
    category_name: str
    data: list[LoanResponse]
    count: int
