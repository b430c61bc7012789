# This project was developed with assistance from AI tools.
"""
Domain enums for the loan origination lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class LoanType(str, enum.Enum):
    PERSONAL = "Personal"
    BUSINESS = "Business"
    HOME = "Home"
    VEHICLE = "Vehicle"
    EDUCATION = "Education"


class ApplicationStatus(str, enum.Enum):
    # DRAFT, UNDER_REVIEW and DOCUMENTS_PENDING are reserved: nothing
    # transitions into them yet, but authorization rules honor DRAFT.
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    UNDER_REVIEW = "UnderReview"
    DOCUMENTS_PENDING = "DocumentsPending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @classmethod
    def terminal_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses from which no review transition is allowed."""
        return frozenset({cls.APPROVED, cls.REJECTED})

    @classmethod
    def reviewable_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses an admin may approve or reject from."""
        return frozenset(set(cls) - cls.terminal_statuses())


class DocumentType(str, enum.Enum):
    """Fixed upload channels. Dynamic File fields use their field name as the tag."""

    ID = "ID"
    ADDRESS = "Address"
    INCOME = "Income"
    BANK_STATEMENT = "Bank Statement"
    OTHER = "Other"


class DocumentStatus(str, enum.Enum):
    PENDING = "Pending"
    VERIFIED = "Verified"
    REJECTED = "Rejected"


class FieldKind(str, enum.Enum):
    TEXT = "Text"
    NUMBER = "Number"
    EMAIL = "Email"
    PHONE = "Phone"
    DATE = "Date"
    TEXTAREA = "Textarea"
    SELECT = "Select"
    RADIO = "Radio"
    CHECKBOX = "Checkbox"
    FILE = "File"

    @classmethod
    def option_kinds(cls) -> frozenset["FieldKind"]:
        """Kinds that are meaningless without at least one option."""
        return frozenset({cls.SELECT, cls.RADIO})


class FieldWidth(str, enum.Enum):
    FULL = "full"
    HALF = "half"
    THIRD = "third"
    QUARTER = "quarter"


class OtpPurpose(str, enum.Enum):
    VERIFICATION = "verification"
    APPLICATION = "application"
    LOGIN = "login"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class EmploymentType(str, enum.Enum):
    SALARIED = "SALARIED"
    SELF_EMPLOYED = "SELF EMPLOYED"


class EligibilityStatus(str, enum.Enum):
    # Checks are recorded for staff follow-up; nothing scores them yet.
    PENDING = "Pending"
