# This project was developed with assistance from AI tools.
"""Eligibility pre-screen routes."""

from fastapi import APIRouter, Depends, Query, status
from loandesk_db import get_db
from loandesk_db.enums import UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import OptionalUser, require_roles
from ..schemas import Pagination
from ..schemas.eligibility import EligibilityCreate, EligibilityListResponse, EligibilityResponse
from ..services import eligibility as eligibility_service

router = APIRouter()


@router.post(
    "/",
    response_model=EligibilityResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_eligibility(
    body: EligibilityCreate,
    user: OptionalUser,
    session: AsyncSession = Depends(get_db),
) -> EligibilityResponse:
    """Record a pre-screen. Anonymous callers are allowed."""
    check = await eligibility_service.submit_check(session, body, user)
    return eligibility_service.to_response(check)


@router.get(
    "/",
    response_model=EligibilityListResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def list_eligibility(
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    email: str | None = Query(default=None),
    loan_id: int | None = Query(default=None, alias="loanId"),
) -> EligibilityListResponse:
    checks, total = await eligibility_service.list_checks(
        session, offset=offset, limit=limit, email=email, loan_id=loan_id,
    )
    return EligibilityListResponse(
        data=[eligibility_service.to_response(c) for c in checks],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit) < total,
        ),
    )


@router.get(
    "/{check_id}",
    response_model=EligibilityResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def get_eligibility(
    check_id: int,
    session: AsyncSession = Depends(get_db),
) -> EligibilityResponse:
    check = await eligibility_service.get_check(session, check_id)
    return eligibility_service.to_response(check)
