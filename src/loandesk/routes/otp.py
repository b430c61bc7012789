# This project was developed with assistance from AI tools.
"""One-time passcode routes (public)."""

import logging

from fastapi import APIRouter, Depends
from loandesk_db import get_db
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.otp import OtpSendRequest, OtpSendResponse, OtpVerifyRequest, OtpVerifyResponse
from ..services import otp as otp_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/send", response_model=OtpSendResponse)
async def send_otp(
    body: OtpSendRequest,
    session: AsyncSession = Depends(get_db),
) -> OtpSendResponse:
    """Issue a code and try to email it.

    The code is only echoed back when delivery failed and
    OTP_EXPOSE_ON_DELIVERY_FAILURE is enabled.
    """
    challenge, code, delivered = await otp_service.issue(
        session, email=body.email, phone=body.phone, purpose=body.purpose,
    )
    expose = not delivered and settings.OTP_EXPOSE_ON_DELIVERY_FAILURE
    if expose:
        logger.warning("OTP %s delivery failed; returning code in response", challenge.id)
    return OtpSendResponse(
        delivered=delivered,
        expires_at=challenge.expires_at,
        otp=code if expose else None,
    )


@router.post("/verify", response_model=OtpVerifyResponse)
async def verify_otp(
    body: OtpVerifyRequest,
    session: AsyncSession = Depends(get_db),
) -> OtpVerifyResponse:
    """Consume a code. Any failure is a generic 400."""
    await otp_service.verify(
        session, email=body.email, phone=body.phone, purpose=body.purpose, code=body.otp,
    )
    return OtpVerifyResponse(verified=True)
