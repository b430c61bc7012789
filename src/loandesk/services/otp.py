# This project was developed with assistance from AI tools.
"""One-time passcode issue and verification.

Challenges are keyed by (email, phone, purpose). Only a SHA-256 digest of
the code is stored. Issuing a new challenge expires every earlier open one
for the same key, and verification consumes a challenge with a conditional
UPDATE so a code can succeed at most once even under concurrent requests.

Failures are reported as a single generic ``InvalidOTP``. There is no
attempt counter or lockout.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime, timedelta

from loandesk_db import OtpChallenge
from loandesk_db.enums import OtpPurpose
from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from .errors import InvalidOTP
from .notifier import get_notifier, otp_message

logger = logging.getLogger(__name__)


def _hash_code(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()


def _generate_code(length: int) -> str:
    return f"{secrets.randbelow(10**length):0{length}d}"


def normalize_email(email: str | None) -> str | None:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


def _normalize_phone(phone: str | None) -> str | None:
    if phone is None:
        return None
    phone = phone.strip()
    return phone or None


def _identifier_clause(email: str | None, phone: str | None, purpose: OtpPurpose):
    return and_(
        OtpChallenge.email.is_(None) if email is None else OtpChallenge.email == email,
        OtpChallenge.phone.is_(None) if phone is None else OtpChallenge.phone == phone,
        OtpChallenge.purpose == purpose,
    )


async def issue(
    session: AsyncSession,
    *,
    email: str | None,
    phone: str | None,
    purpose: OtpPurpose,
    now: datetime | None = None,
) -> tuple[OtpChallenge, str, bool]:
    """Create a challenge and try to deliver its code.

    Returns ``(challenge, code, delivered)``. Delivery failure does not
    undo the challenge; the caller decides whether to surface the code.
    """
    email, phone = normalize_email(email), _normalize_phone(phone)
    if email is None and phone is None:
        raise ValueError("email or phone is required")
    now = now or datetime.now(UTC)

    await session.execute(
        update(OtpChallenge)
        .where(
            _identifier_clause(email, phone, purpose),
            OtpChallenge.consumed_at.is_(None),
            OtpChallenge.expires_at > now,
        )
        .values(expires_at=now)
    )

    code = _generate_code(settings.OTP_LENGTH)
    challenge = OtpChallenge(
        email=email,
        phone=phone,
        purpose=purpose,
        code_hash=_hash_code(code),
        expires_at=now + timedelta(minutes=settings.OTP_TTL_MINUTES),
        created_at=now,
    )
    session.add(challenge)
    await session.commit()

    delivered = False
    if email is not None:
        subject, body = otp_message(code, settings.OTP_TTL_MINUTES)
        delivered = await get_notifier().notify(email, subject, body)
    else:
        logger.warning("OTP %s issued for phone only; no SMS channel configured", challenge.id)

    logger.info("OTP challenge %s issued (purpose=%s, delivered=%s)", challenge.id, purpose.value, delivered)
    return challenge, code, delivered


async def verify(
    session: AsyncSession,
    *,
    email: str | None,
    phone: str | None,
    purpose: OtpPurpose,
    code: str,
    now: datetime | None = None,
) -> OtpChallenge:
    """Consume the open challenge matching ``code``.

    Raises:
        InvalidOTP: no open, unexpired challenge matches, or it was already
            consumed by a concurrent request.
    """
    email, phone = normalize_email(email), _normalize_phone(phone)
    now = now or datetime.now(UTC)
    digest = _hash_code(code.strip())

    stmt = (
        select(OtpChallenge)
        .where(
            _identifier_clause(email, phone, purpose),
            OtpChallenge.consumed_at.is_(None),
            OtpChallenge.expires_at > now,
        )
        .order_by(OtpChallenge.id.desc())
    )
    candidates = (await session.execute(stmt)).scalars().all()
    match = next((c for c in candidates if hmac.compare_digest(c.code_hash, digest)), None)
    if match is None:
        raise InvalidOTP()

    result = await session.execute(
        update(OtpChallenge)
        .where(OtpChallenge.id == match.id, OtpChallenge.consumed_at.is_(None))
        .values(consumed_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await session.rollback()
        raise InvalidOTP()
    await session.commit()
    await session.refresh(match)
    logger.info("OTP challenge %s verified", match.id)
    return match


async def has_recent_verification(
    session: AsyncSession,
    *,
    email: str,
    purpose: OtpPurpose = OtpPurpose.APPLICATION,
    window_minutes: int | None = None,
    now: datetime | None = None,
) -> bool:
    """True when a challenge for ``email`` was consumed within the window."""
    email = normalize_email(email)
    if email is None:
        return False
    now = now or datetime.now(UTC)
    window = window_minutes if window_minutes is not None else settings.APPLICATION_OTP_WINDOW_MINUTES
    stmt = (
        select(OtpChallenge.id)
        .where(
            OtpChallenge.email == email,
            OtpChallenge.purpose == purpose,
            OtpChallenge.consumed_at.is_not(None),
            OtpChallenge.consumed_at >= now - timedelta(minutes=window),
        )
        .limit(1)
    )
    return (await session.execute(stmt)).first() is not None
