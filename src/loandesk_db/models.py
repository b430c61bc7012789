# This project was developed with assistance from AI tools.
"""
LoanDesk -- domain models

Loan catalog (categories, loan products), per-scope dynamic form fields,
loan applications with their documents, one-time passcode challenges and
eligibility pre-screen checks.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ApplicationStatus,
    DocumentStatus,
    EligibilityStatus,
    EmploymentType,
    FieldKind,
    FieldWidth,
    Gender,
    LoanType,
    OtpPurpose,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _created_at() -> Column:
    return Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False,
    )


def _updated_at() -> Column:
    return Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
        nullable=False,
    )


class LoanCategory(Base):
    """Grouping of loan products; also owns a shared set of form fields."""

    __tablename__ = "loan_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = _created_at()
    updated_at = _updated_at()

    loans = relationship("Loan", back_populates="category")
    form_fields = relationship(
        "FormField", back_populates="category", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<LoanCategory(id={self.id}, slug='{self.slug}')>"


class Loan(Base):
    """Loan product offered in the public catalog."""

    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint("interest_rate_min <= interest_rate_max", name="ck_loans_rate_bounds"),
        CheckConstraint(
            "interest_rate_default IS NULL OR "
            "(interest_rate_min <= interest_rate_default AND interest_rate_default <= interest_rate_max)",
            name="ck_loans_rate_default",
        ),
        CheckConstraint("min_loan_amount <= max_loan_amount", name="ck_loans_amount_bounds"),
        CheckConstraint("min_tenure <= max_tenure", name="ck_loans_tenure_bounds"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False)
    slug = Column(String(220), unique=True, nullable=False, index=True)
    loan_type = Column(Enum(LoanType, name="loan_type", native_enum=False), nullable=False)
    description = Column(Text, nullable=False, default="")
    category_id = Column(
        Integer, ForeignKey("loan_categories.id", ondelete="RESTRICT"), nullable=True, index=True,
    )
    interest_rate_min = Column(Numeric(5, 2), nullable=False)
    interest_rate_max = Column(Numeric(5, 2), nullable=False)
    interest_rate_default = Column(Numeric(5, 2), nullable=True)
    min_loan_amount = Column(Numeric(14, 2), nullable=False)
    max_loan_amount = Column(Numeric(14, 2), nullable=False)
    min_tenure = Column(Integer, nullable=False)
    max_tenure = Column(Integer, nullable=False)
    features = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    eligibility_criteria = Column(JSON, nullable=True)
    required_documents = Column(JSON, nullable=False, default=list)
    repayment_options = Column(JSON, nullable=False, default=list)
    image = Column(String(500), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = _created_at()
    updated_at = _updated_at()

    category = relationship("LoanCategory", back_populates="loans")
    form_fields = relationship(
        "FormField", back_populates="loan", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Loan(id={self.id}, slug='{self.slug}')>"


class FormField(Base):
    """Dynamic application form field owned by exactly one category or loan."""

    __tablename__ = "form_fields"
    __table_args__ = (
        UniqueConstraint("category_id", "name", name="uq_form_fields_category_name"),
        UniqueConstraint("loan_id", "name", name="uq_form_fields_loan_name"),
        CheckConstraint(
            "(category_id IS NULL AND loan_id IS NOT NULL) OR "
            "(category_id IS NOT NULL AND loan_id IS NULL)",
            name="ck_form_fields_single_scope",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(
        Integer, ForeignKey("loan_categories.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    loan_id = Column(
        Integer, ForeignKey("loans.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    name = Column(String(100), nullable=False)
    label = Column(String(200), nullable=False, default="")
    kind = Column(
        Enum(FieldKind, name="field_kind", native_enum=False),
        nullable=False,
        default=FieldKind.TEXT,
    )
    options = Column(JSON, nullable=False, default=list)
    required = Column(Boolean, nullable=False, default=False)
    placeholder = Column(String(200), nullable=True)
    width = Column(
        Enum(FieldWidth, name="field_width", native_enum=False),
        nullable=False,
        default=FieldWidth.FULL,
    )
    section = Column(String(50), nullable=False, default="additional")
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = _created_at()
    updated_at = _updated_at()

    category = relationship("LoanCategory", back_populates="form_fields")
    loan = relationship("Loan", back_populates="form_fields")

    def __repr__(self):
        return f"<FormField(id={self.id}, name='{self.name}', kind='{self.kind}')>"


class Application(Base):
    """Loan application submitted by an authenticated user."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    user_email = Column(String(255), nullable=True)
    loan_id = Column(
        Integer, ForeignKey("loans.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    loan_type = Column(Enum(LoanType, name="loan_type", native_enum=False), nullable=False)
    personal_info = Column(JSON, nullable=False, default=dict)
    address = Column(JSON, nullable=False, default=dict)
    employment_info = Column(JSON, nullable=False, default=dict)
    # Rate and EMI are a snapshot taken at submission; never recomputed.
    loan_amount = Column(Numeric(14, 2), nullable=False)
    tenure_months = Column(Integer, nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)
    emi = Column(Integer, nullable=False)
    loan_purpose = Column(String(255), nullable=True)
    dynamic_fields = Column(JSON, nullable=False, default=dict)
    status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
        default=ApplicationStatus.SUBMITTED,
        index=True,
    )
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(255), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(String(255), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = _created_at()
    updated_at = _updated_at()

    loan = relationship("Loan")
    documents = relationship(
        "ApplicationDocument",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationDocument.id",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Application(number='{self.application_number}', status='{self.status}')>"


class ApplicationDocument(Base):
    """Uploaded document owned by a single application."""

    __tablename__ = "application_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    doc_type = Column(String(100), nullable=False)
    name = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    content_type = Column(String(100), nullable=True)
    size_bytes = Column(Integer, nullable=True)
    status = Column(
        Enum(DocumentStatus, name="document_status", native_enum=False),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    created_at = _created_at()

    application = relationship("Application", back_populates="documents")

    def __repr__(self):
        return f"<ApplicationDocument(id={self.id}, type='{self.doc_type}')>"


class OtpChallenge(Base):
    """Short-lived one-time passcode bound to an email/phone and a purpose."""

    __tablename__ = "otp_challenges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(32), nullable=True, index=True)
    purpose = Column(Enum(OtpPurpose, name="otp_purpose", native_enum=False), nullable=False)
    code_hash = Column(String(64), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    consumed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = _created_at()

    def __repr__(self):
        return f"<OtpChallenge(id={self.id}, purpose='{self.purpose}')>"


class EligibilityCheck(Base):
    """Pre-screen a borrower fills in before the full application."""

    __tablename__ = "eligibility_checks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, index=True)
    user_id = Column(String(255), nullable=True)
    loan_id = Column(
        Integer, ForeignKey("loans.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    pan = Column(String(10), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(Enum(Gender, name="gender", native_enum=False), nullable=False)
    personal_email = Column(String(255), nullable=False)
    employment_type = Column(
        Enum(EmploymentType, name="employment_type", native_enum=False), nullable=False,
    )
    company_name = Column(String(200), nullable=True)
    next_salary_date = Column(Date, nullable=True)
    net_monthly_income = Column(Numeric(14, 2), nullable=False)
    pin_code = Column(String(6), nullable=False)
    state = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    status = Column(
        Enum(EligibilityStatus, name="eligibility_status", native_enum=False),
        nullable=False,
        default=EligibilityStatus.PENDING,
    )
    created_at = _created_at()
    updated_at = _updated_at()

    loan = relationship("Loan")

    def __repr__(self):
        return f"<EligibilityCheck(id={self.id}, email='{self.email}')>"
