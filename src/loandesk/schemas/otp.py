# This project was developed with assistance from AI tools.
"""One-time passcode request/response schemas."""

from datetime import datetime

from loandesk_db.enums import OtpPurpose
from pydantic import BaseModel, EmailStr, Field, model_validator


class _Identifier(BaseModel):
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=32)
    purpose: OtpPurpose = OtpPurpose.VERIFICATION

    @model_validator(mode="after")
    def _require_identifier(self):
        if not (self.email or self.phone):
            raise ValueError("email or phone is required")
        return self


class OtpSendRequest(_Identifier):
    pass


class OtpSendResponse(BaseModel):
    sent: bool = True
    delivered: bool
    expires_at: datetime
    otp: str | None = Field(
        default=None,
        description="Only present in degraded mode when delivery failed.",
    )


class OtpVerifyRequest(_Identifier):
    otp: str = Field(min_length=1, max_length=10)


class OtpVerifyResponse(BaseModel):
    verified: bool
