# This project was developed with assistance from AI tools.
"""Application intake and read/edit routes."""

import json
import logging

from fastapi import APIRouter, Depends, Form, Query, Request, status
from loandesk_db import get_db
from loandesk_db.enums import ApplicationStatus
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from ..middleware.auth import CurrentUser
from ..schemas import Pagination
from ..schemas.application import ApplicationListResponse, ApplicationResponse, ApplicationUpdate
from ..services import application as app_service
from ..services.errors import FieldError, ValidationFailed
from ..services.intake import DYNAMIC_FILE_PREFIX, FIXED_CHANNELS, IncomingFile, submit_application

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_json_part(name: str, raw: str | None) -> dict:
    """Decode one JSON-encoded multipart section into an object."""
    if raw is None or not raw.strip():
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationFailed([FieldError(name, "must be valid JSON")]) from exc
    if not isinstance(value, dict):
        raise ValidationFailed([FieldError(name, "must be a JSON object")])
    return value


async def _collect_uploads(request: Request) -> list[IncomingFile]:
    form = await request.form()
    uploads = []
    for channel, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        if channel not in FIXED_CHANNELS and not channel.startswith(DYNAMIC_FILE_PREFIX):
            continue
        uploads.append(IncomingFile(
            channel=channel,
            filename=value.filename or channel,
            content_type=value.content_type,
            data=await value.read(),
        ))
    return uploads


@router.post(
    "/",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_application(
    request: Request,
    user: CurrentUser,
    loan_id: int = Form(alias="loanId"),
    personal_info: str = Form(alias="personalInfo"),
    address: str | None = Form(default=None),
    employment_info: str | None = Form(default=None, alias="employmentInfo"),
    loan_details: str = Form(alias="loanDetails"),
    dynamic_fields: str | None = Form(default=None, alias="dynamicFields"),
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Submit a loan application with its documents.

    JSON sections arrive as form fields; files arrive on ``idProof``,
    ``addressProof``, ``incomeProof``, ``bankStatement``,
    ``otherDocuments`` and ``dynamicFiles_<fieldName>``.
    """
    sections = {
        "personalInfo": _parse_json_part("personalInfo", personal_info),
        "address": _parse_json_part("address", address),
        "employmentInfo": _parse_json_part("employmentInfo", employment_info),
        "loanDetails": _parse_json_part("loanDetails", loan_details),
        "dynamicFields": _parse_json_part("dynamicFields", dynamic_fields),
    }
    uploads = await _collect_uploads(request)

    app, warnings = await submit_application(
        session,
        user,
        loan_id=loan_id,
        personal_info=sections["personalInfo"],
        address=sections["address"],
        employment_info=sections["employmentInfo"],
        loan_details=sections["loanDetails"],
        dynamic_fields=sections["dynamicFields"],
        uploads=uploads,
    )
    return app_service.to_response(app, warnings)


@router.get("/", response_model=ApplicationListResponse)
async def list_applications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: ApplicationStatus | None = Query(default=None, alias="status"),
) -> ApplicationListResponse:
    """List the caller's applications, or all of them for admins."""
    applications, total = await app_service.list_applications(
        session, user, offset=offset, limit=limit, filter_status=filter_status,
    )
    return ApplicationListResponse(
        data=[app_service.to_response(a) for a in applications],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit) < total,
        ),
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Get one application (owner or admin)."""
    app = await app_service.get_application(session, user, application_id)
    return app_service.to_response(app)


@router.put("/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: int,
    body: ApplicationUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Edit an application: owner while Draft, or any admin."""
    app = await app_service.update_application(session, user, application_id, body)
    return app_service.to_response(app)
