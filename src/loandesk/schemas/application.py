# This project was developed with assistance from AI tools.
"""Application request/response schemas."""

from datetime import datetime

from loandesk_db.enums import ApplicationStatus, DocumentStatus, LoanType
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field

from . import Pagination

# Closed set of values a dynamic field may hold. File fields store the
# list of document URLs produced by intake.
DynamicValue = str | int | float | bool | list[str | int | float | bool] | None


class PersonalInfoIn(BaseModel):
    """Applicant details from the wizard. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    full_name: str = Field(alias="fullName", min_length=1)
    email: EmailStr
    phone: str | None = None


class DocumentResponse(BaseModel):
    """Document metadata nested inside application responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    doc_type: str
    name: str
    url: str
    status: DocumentStatus
    created_at: datetime


class LoanDetailsResponse(BaseModel):
    loan_amount: float
    loan_tenure: int
    interest_rate: float
    emi: int
    loan_purpose: str | None = None


class ApplicationResponse(BaseModel):
    """Single application response.

    ``warnings`` is schema-only; intake fills it when the confirmation
    email could not be sent.
    """

    id: int
    application_number: str
    user_id: str
    loan_id: int
    loan_type: LoanType
    personal_info: dict
    address: dict
    employment_info: dict
    loan_details: LoanDetailsResponse
    dynamic_fields: dict[str, DynamicValue]
    documents: list[DocumentResponse] = []
    status: ApplicationStatus
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None
    rejection_reason: str | None = None
    created_at: datetime
    updated_at: datetime
    warnings: list[str] = []


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationResponse]
    pagination: Pagination


class ApplicationUpdate(BaseModel):
    """Partial update. Loan terms, rate and EMI snapshot are not editable."""

    personal_info: dict | None = Field(
        default=None, validation_alias=AliasChoices("personal_info", "personalInfo"),
    )
    address: dict | None = None
    employment_info: dict | None = Field(
        default=None, validation_alias=AliasChoices("employment_info", "employmentInfo"),
    )
    dynamic_fields: dict[str, DynamicValue] | None = Field(
        default=None, validation_alias=AliasChoices("dynamic_fields", "dynamicFields"),
    )


class RejectRequest(BaseModel):
    rejection_reason: str | None = Field(
        default=None,
        max_length=2000,
        validation_alias=AliasChoices("rejectionReason", "rejection_reason"),
    )
