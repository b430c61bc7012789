# This project was developed with assistance from AI tools.
"""Eligibility pre-screen.

A borrower states identity, employment and income details before starting
the full application. Checks are stored as Pending for staff follow-up and
read back by admins; nothing here scores or decides them.
"""

import logging
from decimal import Decimal

from loandesk_db import EligibilityCheck, Loan
from loandesk_db.enums import EmploymentType
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from ..schemas.eligibility import EligibilityCreate, EligibilityLoan, EligibilityResponse
from .errors import FieldError, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


def to_response(check: EligibilityCheck) -> EligibilityResponse:
    loan = None
    if check.loan is not None:
        loan = EligibilityLoan(id=check.loan.id, name=check.loan.name, slug=check.loan.slug)
    return EligibilityResponse(
        id=check.id,
        email=check.email,
        user_id=check.user_id,
        loan_id=check.loan_id,
        loan=loan,
        pan=check.pan,
        date_of_birth=check.date_of_birth,
        gender=check.gender,
        personal_email=check.personal_email,
        employment_type=check.employment_type,
        company_name=check.company_name,
        next_salary_date=check.next_salary_date,
        net_monthly_income=float(check.net_monthly_income),
        pin_code=check.pin_code,
        state=check.state,
        city=check.city,
        status=check.status,
        created_at=check.created_at,
    )


def _check_employment_details(data: EligibilityCreate) -> None:
    if data.employment_type != EmploymentType.SALARIED:
        return
    errors = []
    if not data.company_name:
        errors.append(FieldError("companyName", "Company name is required for salaried applicants"))
    if data.next_salary_date is None:
        errors.append(FieldError("nextSalaryDate", "Next salary date is required for salaried applicants"))
    if errors:
        raise ValidationFailed(errors)


async def _load_check(session: AsyncSession, check_id: int) -> EligibilityCheck | None:
    stmt = (
        select(EligibilityCheck)
        .options(selectinload(EligibilityCheck.loan))
        .where(EligibilityCheck.id == check_id)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def submit_check(
    session: AsyncSession,
    data: EligibilityCreate,
    user: UserContext | None = None,
) -> EligibilityCheck:
    """Record one pre-screen.

    Raises:
        NotFound: ``loan_id`` names no active loan.
        ValidationFailed: a salaried applicant left out company name or next salary date.
    """
    if data.loan_id is not None:
        loan = await session.get(Loan, data.loan_id)
        if loan is None or not loan.is_active:
            raise NotFound(f"Loan {data.loan_id} not found")
    _check_employment_details(data)

    check = EligibilityCheck(
        email=data.email.lower(),
        user_id=user.user_id if user else None,
        loan_id=data.loan_id,
        pan=data.pan,
        date_of_birth=data.date_of_birth,
        gender=data.gender,
        personal_email=data.personal_email.lower(),
        employment_type=data.employment_type,
        company_name=data.company_name,
        next_salary_date=data.next_salary_date,
        net_monthly_income=Decimal(str(data.net_monthly_income)),
        pin_code=data.pin_code,
        state=data.state,
        city=data.city,
    )
    session.add(check)
    await session.commit()
    logger.info(
        "Eligibility check %s recorded (loan=%s, employment=%s)",
        check.id, data.loan_id, data.employment_type.value,
    )
    return await _load_check(session, check.id)


async def get_check(session: AsyncSession, check_id: int) -> EligibilityCheck:
    check = await _load_check(session, check_id)
    if check is None:
        raise NotFound(f"Eligibility check {check_id} not found")
    return check


async def list_checks(
    session: AsyncSession,
    *,
    offset: int = 0,
    limit: int = 20,
    email: str | None = None,
    loan_id: int | None = None,
) -> tuple[list[EligibilityCheck], int]:
    """Eligibility checks newest first, optionally filtered by email or loan."""
    filters = []
    if email:
        filters.append(EligibilityCheck.email == email.strip().lower())
    if loan_id is not None:
        filters.append(EligibilityCheck.loan_id == loan_id)

    total = await session.scalar(select(func.count(EligibilityCheck.id)).where(*filters)) or 0
    stmt = (
        select(EligibilityCheck)
        .options(selectinload(EligibilityCheck.loan))
        .where(*filters)
        .order_by(EligibilityCheck.created_at.desc(), EligibilityCheck.id.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all()), total
