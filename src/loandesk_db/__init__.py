# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, SessionLocal, engine, get_db
from .enums import (
    ApplicationStatus,
    DocumentStatus,
    DocumentType,
    EligibilityStatus,
    EmploymentType,
    FieldKind,
    FieldWidth,
    Gender,
    LoanType,
    OtpPurpose,
    UserRole,
)
from .models import (
    Application,
    ApplicationDocument,
    EligibilityCheck,
    FormField,
    Loan,
    LoanCategory,
    OtpChallenge,
)

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "__version__",
    # Enums
    "ApplicationStatus",
    "DocumentStatus",
    "DocumentType",
    "EligibilityStatus",
    "EmploymentType",
    "FieldKind",
    "FieldWidth",
    "Gender",
    "LoanType",
    "OtpPurpose",
    "UserRole",
    # Models
    "Application",
    "ApplicationDocument",
    "EligibilityCheck",
    "FormField",
    "Loan",
    "LoanCategory",
    "OtpChallenge",
]
