# This project was developed with assistance from AI tools.
"""Loan catalog: loan products and categories.

Public reads only ever see active loans. Writes are admin-only at the
route layer; this module enforces the catalog invariants (rate, amount and
tenure bounds, unique names and slugs) and the delete guards.
"""

import logging
import re
import unicodedata

from loandesk_db import Application, Loan, LoanCategory
from loandesk_db.enums import LoanType
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.catalog import (
    CategoryCreate,
    CategoryLoanCreate,
    CategoryResponse,
    CategoryUpdate,
    EligibilityCriteria,
    InterestRate,
    LoanCreate,
    LoanResponse,
    LoanUpdate,
)
from .errors import Conflict, FieldError, NotFound, ValidationFailed

logger = logging.getLogger(__name__)

_JSON_LIST_FIELDS = ("features", "benefits", "required_documents", "repayment_options")


def slugify(text: str) -> str:
    """Lower-case, ASCII-only, hyphen-separated slug."""
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug or "item"


def effective_rate(loan: Loan) -> float:
    """Annual rate applied at submission: the default, else the minimum."""
    rate = loan.interest_rate_default
    if rate is None:
        rate = loan.interest_rate_min
    return float(rate)


def loan_to_response(loan: Loan) -> LoanResponse:
    return LoanResponse(
        id=loan.id,
        name=loan.name,
        slug=loan.slug,
        loan_type=loan.loan_type,
        description=loan.description or "",
        category_id=loan.category_id,
        interest_rate=InterestRate(
            min=float(loan.interest_rate_min),
            max=float(loan.interest_rate_max),
            default=None if loan.interest_rate_default is None else float(loan.interest_rate_default),
        ),
        min_loan_amount=float(loan.min_loan_amount),
        max_loan_amount=float(loan.max_loan_amount),
        min_tenure=loan.min_tenure,
        max_tenure=loan.max_tenure,
        features=loan.features or [],
        benefits=loan.benefits or [],
        eligibility_criteria=loan.eligibility_criteria,
        required_documents=loan.required_documents or [],
        repayment_options=loan.repayment_options or [],
        image=loan.image or "",
        is_active=loan.is_active,
        display_order=loan.display_order,
        created_at=loan.created_at,
        updated_at=loan.updated_at,
    )


def _check_loan_bounds(loan: Loan) -> None:
    errors = []
    if loan.interest_rate_min > loan.interest_rate_max:
        errors.append(FieldError("interest_rate", "min must not exceed max"))
    default = loan.interest_rate_default
    if default is not None and not (loan.interest_rate_min <= default <= loan.interest_rate_max):
        errors.append(FieldError("interest_rate", "default must lie within [min, max]"))
    if loan.min_loan_amount > loan.max_loan_amount:
        errors.append(FieldError("min_loan_amount", "must not exceed max_loan_amount"))
    if loan.min_tenure > loan.max_tenure:
        errors.append(FieldError("min_tenure", "must not exceed max_tenure"))
    if errors:
        raise ValidationFailed(errors)


async def _ensure_unique(session: AsyncSession, model, column, value, exclude_id: int | None = None):
    stmt = select(model.id).where(column == value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if (await session.execute(stmt)).first() is not None:
        raise Conflict(f"{column.key} '{value}' is already in use")


async def _commit_or_conflict(session: AsyncSession, what: str) -> None:
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict(f"{what} conflicts with an existing record") from exc


# ---------------------------------------------------------------------------
# Loans
# ---------------------------------------------------------------------------


async def list_loans(
    session: AsyncSession,
    *,
    loan_type: LoanType | None = None,
    include_inactive: bool = False,
) -> list[Loan]:
    """Loans ordered by display order (ties by id)."""
    stmt = select(Loan).order_by(Loan.display_order, Loan.id)
    if not include_inactive:
        stmt = stmt.where(Loan.is_active.is_(True))
    if loan_type is not None:
        stmt = stmt.where(Loan.loan_type == loan_type)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_loan(session: AsyncSession, loan_id: int) -> Loan:
    loan = await session.get(Loan, loan_id)
    if loan is None:
        raise NotFound(f"Loan {loan_id} not found")
    return loan


async def get_loan_by_slug(session: AsyncSession, slug: str) -> Loan:
    stmt = select(Loan).where(Loan.slug == slug, Loan.is_active.is_(True))
    loan = (await session.execute(stmt)).scalar_one_or_none()
    if loan is None:
        raise NotFound(f"Loan '{slug}' not found")
    return loan


async def create_loan(session: AsyncSession, data: LoanCreate) -> Loan:
    if data.category_id is not None:
        await get_category(session, data.category_id)
    slug = data.slug or slugify(data.name)
    await _ensure_unique(session, Loan, Loan.name, data.name)
    await _ensure_unique(session, Loan, Loan.slug, slug)

    payload = data.model_dump(
        mode="json", exclude={"slug", "interest_rate", "eligibility_criteria", "loan_type"},
    )
    loan = Loan(
        **payload,
        slug=slug,
        loan_type=data.loan_type,
        interest_rate_min=data.interest_rate.min,
        interest_rate_max=data.interest_rate.max,
        interest_rate_default=data.interest_rate.default,
        eligibility_criteria=(data.eligibility_criteria or EligibilityCriteria()).model_dump(mode="json"),
    )
    session.add(loan)
    await _commit_or_conflict(session, f"Loan '{data.name}'")
    await session.refresh(loan)
    logger.info("Loan %s created (slug=%s)", loan.id, loan.slug)
    return loan


async def update_loan(session: AsyncSession, loan_id: int, data: LoanUpdate) -> Loan:
    loan = await get_loan(session, loan_id)
    changes = data.model_dump(exclude_unset=True)

    if "category_id" in changes and changes["category_id"] is not None:
        await get_category(session, changes["category_id"])
    if changes.get("name") and changes["name"] != loan.name:
        await _ensure_unique(session, Loan, Loan.name, changes["name"], exclude_id=loan.id)
    if changes.get("slug") and changes["slug"] != loan.slug:
        await _ensure_unique(session, Loan, Loan.slug, changes["slug"], exclude_id=loan.id)

    rate = changes.pop("interest_rate", None)
    if rate is not None:
        loan.interest_rate_min = rate["min"]
        loan.interest_rate_max = rate["max"]
        loan.interest_rate_default = rate["default"]

    for attr, value in changes.items():
        if value is None and attr != "category_id":
            continue
        if attr in _JSON_LIST_FIELDS:
            value = [item.model_dump(mode="json") for item in getattr(data, attr)]
        elif attr == "eligibility_criteria":
            value = data.eligibility_criteria.model_dump(mode="json")
        setattr(loan, attr, value)

    _check_loan_bounds(loan)
    await _commit_or_conflict(session, f"Loan '{loan.name}'")
    await session.refresh(loan)
    return loan


async def delete_loan(session: AsyncSession, loan_id: int) -> None:
    """Delete a loan product.

    Raises:
        Conflict: an application references the loan.
    """
    loan = await get_loan(session, loan_id)
    referenced = await session.scalar(
        select(func.count(Application.id)).where(Application.loan_id == loan_id)
    )
    if referenced:
        raise Conflict(f"Loan {loan_id} has {referenced} application(s) and cannot be deleted")
    await session.delete(loan)
    await session.commit()
    logger.info("Loan %s deleted", loan_id)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


async def get_category(session: AsyncSession, category_id: int) -> LoanCategory:
    category = await session.get(LoanCategory, category_id)
    if category is None:
        raise NotFound(f"Category {category_id} not found")
    return category


async def list_categories(session: AsyncSession, *, with_counts: bool = False) -> list[CategoryResponse]:
    """Categories ordered by name, optionally with the number of linked loans."""
    categories = (
        await session.execute(select(LoanCategory).order_by(LoanCategory.name))
    ).scalars().all()
    out = [CategoryResponse.model_validate(c) for c in categories]
    if with_counts:
        stmt = (
            select(Loan.category_id, func.count(Loan.id))
            .where(Loan.category_id.is_not(None))
            .group_by(Loan.category_id)
        )
        counts = dict((await session.execute(stmt)).all())
        for item in out:
            item.loan_count = counts.get(item.id, 0)
    return out


async def create_category(session: AsyncSession, data: CategoryCreate) -> LoanCategory:
    name = data.name.strip()
    if not name:
        raise ValidationFailed([FieldError("name", "Name required")])
    slug = slugify(name)
    await _ensure_unique(session, LoanCategory, LoanCategory.name, name)
    await _ensure_unique(session, LoanCategory, LoanCategory.slug, slug)
    category = LoanCategory(name=name, slug=slug, description=data.description)
    session.add(category)
    await _commit_or_conflict(session, f"Category '{name}'")
    await session.refresh(category)
    logger.info("Category %s created (slug=%s)", category.id, category.slug)
    return category


async def update_category(session: AsyncSession, category_id: int, data: CategoryUpdate) -> LoanCategory:
    category = await get_category(session, category_id)
    if data.name and data.name.strip() != category.name:
        name = data.name.strip()
        await _ensure_unique(session, LoanCategory, LoanCategory.name, name, exclude_id=category.id)
        category.name = name
        category.slug = slugify(name)
    if data.description is not None:
        category.description = data.description
    if data.active is not None:
        category.active = data.active
    await _commit_or_conflict(session, f"Category '{category.name}'")
    await session.refresh(category)
    return category


async def delete_category(session: AsyncSession, category_id: int) -> None:
    """Delete a category.

    Raises:
        Conflict: loans are still linked to it.
    """
    category = await get_category(session, category_id)
    linked = await session.scalar(
        select(func.count(Loan.id)).where(Loan.category_id == category_id)
    )
    if linked:
        raise Conflict("Category has linked loans")
    await session.delete(category)
    await session.commit()
    logger.info("Category %s deleted", category_id)


async def list_category_loans(session: AsyncSession, category_id: int) -> tuple[LoanCategory, list[Loan]]:
    """All loans in a category, newest first."""
    category = await get_category(session, category_id)
    stmt = (
        select(Loan)
        .where(Loan.category_id == category_id)
        .order_by(Loan.created_at.desc(), Loan.id.desc())
    )
    loans = (await session.execute(stmt)).scalars().all()
    return category, list(loans)


async def create_category_loan(
    session: AsyncSession, category_id: int, data: CategoryLoanCreate,
) -> Loan:
    """Create a loan under a category from the flat admin payload.

    Missing max/default rates fall back to the minimum rate.
    """
    await get_category(session, category_id)
    rate_min = data.interest_rate_min
    try:
        rate = InterestRate(
            min=rate_min,
            max=data.interest_rate_max if data.interest_rate_max is not None else rate_min,
            default=data.interest_rate_default if data.interest_rate_default is not None else rate_min,
        )
        payload = LoanCreate(
            name=data.name,
            description=data.description,
            loan_type=data.loan_type,
            category_id=category_id,
            interest_rate=rate,
            min_loan_amount=data.min_loan_amount,
            max_loan_amount=data.max_loan_amount,
            min_tenure=data.min_tenure,
            max_tenure=data.max_tenure,
        )
    except ValueError as exc:
        raise ValidationFailed([FieldError("loan", str(exc))]) from exc
    return await create_loan(session, payload)
