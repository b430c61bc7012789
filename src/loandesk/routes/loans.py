# This project was developed with assistance from AI tools.
"""Loan catalog routes: public reads, EMI preview, admin writes."""

from fastapi import APIRouter, Depends, Query, status
from loandesk_db import get_db
from loandesk_db.enums import LoanType, UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import OptionalUser, require_roles
from ..schemas.calculator import EmiRequest, EmiResponse
from ..schemas.catalog import LoanCreate, LoanListResponse, LoanResponse, LoanUpdate
from ..services import catalog
from ..services.calculator import calculate_emi

router = APIRouter()


@router.get("/", response_model=LoanListResponse)
async def list_loans(
    user: OptionalUser,
    session: AsyncSession = Depends(get_db),
    loan_type: LoanType | None = Query(default=None, alias="type"),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
) -> LoanListResponse:
    """Active loans in display order. Admins may include inactive ones."""
    show_inactive = include_inactive and user is not None and user.is_admin
    loans = await catalog.list_loans(session, loan_type=loan_type, include_inactive=show_inactive)
    data = [catalog.loan_to_response(loan) for loan in loans]
    return LoanListResponse(data=data, count=len(data))


@router.post("/calculate-emi", response_model=EmiResponse)
async def emi_preview(req: EmiRequest) -> EmiResponse:
    """EMI, total payable and total interest for the given terms."""
    return calculate_emi(req)


@router.get("/type/{loan_type}", response_model=LoanListResponse)
async def list_loans_by_type(
    loan_type: LoanType,
    session: AsyncSession = Depends(get_db),
) -> LoanListResponse:
    loans = await catalog.list_loans(session, loan_type=loan_type)
    data = [catalog.loan_to_response(loan) for loan in loans]
    return LoanListResponse(data=data, count=len(data))


@router.get("/{slug}", response_model=LoanResponse)
async def get_loan(
    slug: str,
    session: AsyncSession = Depends(get_db),
) -> LoanResponse:
    """Active loan by slug."""
    return catalog.loan_to_response(await catalog.get_loan_by_slug(session, slug))


@router.post(
    "/",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def create_loan(
    body: LoanCreate,
    session: AsyncSession = Depends(get_db),
) -> LoanResponse:
    return catalog.loan_to_response(await catalog.create_loan(session, body))


@router.put(
    "/{loan_id}",
    response_model=LoanResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def update_loan(
    loan_id: int,
    body: LoanUpdate,
    session: AsyncSession = Depends(get_db),
) -> LoanResponse:
    return catalog.loan_to_response(await catalog.update_loan(session, loan_id, body))


@router.delete(
    "/{loan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def delete_loan(
    loan_id: int,
    session: AsyncSession = Depends(get_db),
) -> None:
    """Delete a loan. Blocked while applications reference it."""
    await catalog.delete_loan(session, loan_id)
