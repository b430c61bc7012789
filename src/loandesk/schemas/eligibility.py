# This project was developed with assistance from AI tools.
"""Eligibility pre-screen request/response schemas."""

import re
from datetime import date, datetime

from loandesk_db.enums import EligibilityStatus, EmploymentType, Gender
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from . import Pagination

_PAN_RE = re.compile(r"[A-Z0-9]{10}")


class EligibilityCreate(BaseModel):
    """Pre-screen form. Accepts the wizard's camelCase keys or snake_case."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    loan_id: int | None = Field(default=None, validation_alias=AliasChoices("loanId", "loan_id"))
    pan: str = Field(validation_alias=AliasChoices("pancard", "pan"))
    date_of_birth: date = Field(validation_alias=AliasChoices("dob", "date_of_birth"))
    gender: Gender
    personal_email: EmailStr = Field(validation_alias=AliasChoices("personalEmail", "personal_email"))
    employment_type: EmploymentType = Field(
        validation_alias=AliasChoices("employmentType", "employment_type"),
    )
    company_name: str | None = Field(
        default=None, max_length=200, validation_alias=AliasChoices("companyName", "company_name"),
    )
    next_salary_date: date | None = Field(
        default=None, validation_alias=AliasChoices("nextSalaryDate", "next_salary_date"),
    )
    net_monthly_income: float = Field(
        ge=0, allow_inf_nan=False, validation_alias=AliasChoices("netMonthlyIncome", "net_monthly_income"),
    )
    pin_code: str = Field(pattern=r"^\d{6}$", validation_alias=AliasChoices("pinCode", "pin_code"))
    state: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)

    @field_validator("pan")
    @classmethod
    def _normalize_pan(cls, value: str) -> str:
        value = value.upper()
        if not _PAN_RE.fullmatch(value):
            raise ValueError("PAN must be 10 letters or digits")
        return value

    @field_validator("date_of_birth")
    @classmethod
    def _past_date(cls, value: date) -> date:
        if value >= date.today():
            raise ValueError("date of birth must be in the past")
        return value

    @field_validator("company_name", "state", "city")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None


class EligibilityLoan(BaseModel):
    id: int
    name: str
    slug: str


class EligibilityResponse(BaseModel):
    id: int
    email: str
    user_id: str | None = None
    loan_id: int | None = None
    loan: EligibilityLoan | None = None
    pan: str
    date_of_birth: date
    gender: Gender
    personal_email: str
    employment_type: EmploymentType
    company_name: str | None = None
    next_salary_date: date | None = None
    net_monthly_income: float
    pin_code: str
    state: str | None = None
    city: str | None = None
    status: EligibilityStatus
    created_at: datetime


class EligibilityListResponse(BaseModel):
    """Paginated list of eligibility checks."""

    data: list[EligibilityResponse]
    pagination: Pagination
