# This project was developed with assistance from AI tools.
"""Loan category routes."""

from fastapi import APIRouter, Depends, Query, status
from loandesk_db import get_db
from loandesk_db.enums import UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.catalog import (
    CategoryCreate,
    CategoryListResponse,
    CategoryLoanCreate,
    CategoryLoansResponse,
    CategoryResponse,
    CategoryUpdate,
    LoanResponse,
)
from ..services import catalog

router = APIRouter()


@router.get("/", response_model=CategoryListResponse)
async def list_categories(
    session: AsyncSession = Depends(get_db),
    with_counts: bool = Query(default=False, alias="withCounts"),
) -> CategoryListResponse:
    """All categories by name. ``withCounts=1`` adds the number of linked loans."""
    data = await catalog.list_categories(session, with_counts=with_counts)
    return CategoryListResponse(data=data, count=len(data))


@router.post(
    "/",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def create_category(
    body: CategoryCreate,
    session: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    return CategoryResponse.model_validate(await catalog.create_category(session, body))


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    return CategoryResponse.model_validate(await catalog.get_category(session, category_id))


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def update_category(
    category_id: int,
    body: CategoryUpdate,
    session: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    return CategoryResponse.model_validate(await catalog.update_category(session, category_id, body))


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def delete_category(
    category_id: int,
    session: AsyncSession = Depends(get_db),
) -> None:
    """Delete a category. Blocked while loans are linked to it."""
    await catalog.delete_category(session, category_id)


@router.get("/{category_id}/loans", response_model=CategoryLoansResponse)
async def list_category_loans(
    category_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CategoryLoansResponse:
    category, loans = await catalog.list_category_loans(session, category_id)
    data = [catalog.loan_to_response(loan) for loan in loans]
    return CategoryLoansResponse(
        category_id=category.id, category_name=category.name, data=data, count=len(data),
    )


@router.post(
    "/{category_id}/loans",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def create_category_loan(
    category_id: int,
    body: CategoryLoanCreate,
    session: AsyncSession = Depends(get_db),
) -> LoanResponse:
    """Create a loan in this category from the flat admin payload."""
    loan = await catalog.create_category_loan(session, category_id, body)
    return catalog.loan_to_response(loan)
