# This project was developed with assistance from AI tools.
"""Dynamic form field routes."""

from fastapi import APIRouter, Depends, Query, status
from loandesk_db import get_db
from loandesk_db.enums import UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import OptionalUser, require_roles
from ..schemas.form_field import (
    FormFieldCreate,
    FormFieldListResponse,
    FormFieldResponse,
    FormFieldUpdate,
)
from ..services import form_schema

router = APIRouter()


def _show_inactive(user, include_inactive: bool) -> bool:
    return include_inactive and user is not None and user.is_admin


@router.get("/category/{category_id}", response_model=FormFieldListResponse)
async def list_category_fields(
    category_id: int,
    user: OptionalUser,
    session: AsyncSession = Depends(get_db),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
) -> FormFieldListResponse:
    """Ordered field definitions for a category with their render contract."""
    admin_view = _show_inactive(user, include_inactive)
    fields = await form_schema.list_fields(
        session, category_id=category_id, include_inactive=admin_view,
    )
    data = form_schema.describe_fields(fields, renderable_only=not admin_view)
    return FormFieldListResponse(data=data, count=len(data))


@router.get("/loan/{loan_id}", response_model=FormFieldListResponse)
async def list_loan_fields(
    loan_id: int,
    user: OptionalUser,
    session: AsyncSession = Depends(get_db),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
) -> FormFieldListResponse:
    """Category fields merged with the loan's own, loan-level definitions winning."""
    admin_view = _show_inactive(user, include_inactive)
    fields = await form_schema.list_fields(session, loan_id=loan_id, include_inactive=admin_view)
    data = form_schema.describe_fields(fields, renderable_only=not admin_view)
    return FormFieldListResponse(data=data, count=len(data))


@router.post(
    "/",
    response_model=FormFieldResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def create_field(
    body: FormFieldCreate,
    session: AsyncSession = Depends(get_db),
) -> FormFieldResponse:
    return form_schema.to_response(await form_schema.create_field(session, body))


@router.put(
    "/{field_id}",
    response_model=FormFieldResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def update_field(
    field_id: int,
    body: FormFieldUpdate,
    session: AsyncSession = Depends(get_db),
) -> FormFieldResponse:
    return form_schema.to_response(await form_schema.update_field(session, field_id, body))


@router.delete(
    "/{field_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def delete_field(
    field_id: int,
    session: AsyncSession = Depends(get_db),
) -> None:
    await form_schema.delete_field(session, field_id)
