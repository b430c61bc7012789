# This project was developed with assistance from AI tools.
"""Application intake pipeline.

Turns one multipart submission into a durable ``Application``:

1. Resolve the loan product (NotFound when unknown or inactive).
2. Normalize the loan details (``loanAmount``/``loanTenure`` or the older
   ``principal``/``tenureMonths`` naming) and check them against the
   product's bounds.
3. Validate applicant info, dynamic field values and uploads. Nothing is
   written until all of this has passed.
4. Snapshot the rate (default, else minimum) and compute the EMI.
5. Store the blobs, then persist the application and its documents in one
   commit. If anything fails after the first blob write, the written blobs
   are deleted before the error propagates.
6. Email a confirmation. A failed email becomes a response warning.
"""

import logging
import math
import mimetypes
import os
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from loandesk_db import Application, ApplicationDocument, Loan
from loandesk_db.enums import ApplicationStatus, DocumentStatus, DocumentType, OtpPurpose
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.application import PersonalInfoIn
from ..schemas.auth import UserContext
from . import form_schema
from .application import load_application
from .calculator import compute_emi
from .catalog import effective_rate
from .errors import FieldError, InvalidAmount, InvalidOTP, InvalidTenure, NotFound, ValidationFailed
from .notifier import confirmation_message, get_notifier
from .otp import has_recent_verification
from .storage import ALLOWED_CONTENT_TYPES, ALLOWED_EXTENSIONS, build_object_key, get_storage_service

logger = logging.getLogger(__name__)

DYNAMIC_FILE_PREFIX = "dynamicFiles_"

FIXED_CHANNELS: dict[str, DocumentType] = {
    "idProof": DocumentType.ID,
    "addressProof": DocumentType.ADDRESS,
    "incomeProof": DocumentType.INCOME,
    "bankStatement": DocumentType.BANK_STATEMENT,
    "otherDocuments": DocumentType.OTHER,
}


@dataclass(frozen=True)
class IncomingFile:
    """One uploaded file, fully read, tagged with the form channel it came in on."""

    channel: str
    filename: str
    content_type: str | None
    data: bytes


@dataclass(frozen=True)
class LoanTerms:
    amount: float
    tenure_months: int
    purpose: str | None = None


@dataclass(frozen=True)
class ClassifiedFile:
    file: IncomingFile
    doc_type: str
    content_type: str
    dynamic_field: str | None = None


# ---------------------------------------------------------------------------
# Input adapters
# ---------------------------------------------------------------------------


def _first_present(data: dict, *keys: str):
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_number(value) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_loan_details(loan_details: dict) -> LoanTerms:
    """Map either naming onto canonical loan terms.

    Accepts ``loanAmount``/``loanTenure`` or ``principal``/``tenureMonths``
    (either member of each pair is enough).

    Raises:
        InvalidAmount: the amount is missing, non-numeric, non-finite or not positive.
        InvalidTenure: the tenure is missing or not a positive whole number of months.
    """
    amount = _as_number(_first_present(loan_details, "loanAmount", "principal"))
    if amount is None or amount <= 0:
        raise InvalidAmount()

    tenure = _as_number(_first_present(loan_details, "loanTenure", "tenureMonths"))
    if tenure is None or tenure <= 0 or not float(tenure).is_integer():
        raise InvalidTenure()

    purpose = loan_details.get("loanPurpose") or loan_details.get("purpose")
    return LoanTerms(amount=amount, tenure_months=int(tenure), purpose=str(purpose) if purpose else None)


def check_loan_bounds(loan: Loan, terms: LoanTerms) -> None:
    low, high = float(loan.min_loan_amount), float(loan.max_loan_amount)
    if not (low <= terms.amount <= high):
        raise InvalidAmount(f"Loan amount must be between {low:g} and {high:g}")
    if not (loan.min_tenure <= terms.tenure_months <= loan.max_tenure):
        raise InvalidTenure(
            f"Loan tenure must be between {loan.min_tenure} and {loan.max_tenure} months"
        )


def _validate_personal_info(personal_info: dict) -> dict:
    try:
        parsed = PersonalInfoIn.model_validate(personal_info)
    except ValidationError as exc:
        errors = [
            FieldError("personalInfo." + ".".join(str(p) for p in err["loc"]), err["msg"])
            for err in exc.errors()
        ]
        raise ValidationFailed(errors) from exc
    return parsed.model_dump(by_alias=True, exclude_none=True)


def generate_application_number(now: datetime | None = None) -> str:
    """``APP-<yyyymmdd>-<12 hex>``, random rather than counted."""
    now = now or datetime.now(UTC)
    return f"APP-{now:%Y%m%d}-{uuid.uuid4().hex[:12].upper()}"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def _resolve_content_type(upload: IncomingFile) -> str | None:
    ctype = (upload.content_type or "").split(";")[0].strip().lower()
    if ctype in ALLOWED_CONTENT_TYPES:
        return ctype
    if ctype in ("", "application/octet-stream"):
        guessed, _ = mimetypes.guess_type(upload.filename or "")
        if guessed in ALLOWED_CONTENT_TYPES:
            return guessed
    return None


def classify_files(uploads: list[IncomingFile]) -> list[ClassifiedFile]:
    """Tag every upload with its document type and check it is acceptable.

    Fixed channels map onto ``DocumentType``; ``dynamicFiles_<name>``
    channels are tagged with the field name.

    Raises:
        ValidationFailed: unknown channel, unsupported type, empty or oversized file.
    """
    max_bytes = settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    classified: list[ClassifiedFile] = []
    errors: list[FieldError] = []

    for upload in uploads:
        dynamic_field = None
        if upload.channel in FIXED_CHANNELS:
            doc_type = FIXED_CHANNELS[upload.channel].value
        elif upload.channel.startswith(DYNAMIC_FILE_PREFIX) and len(upload.channel) > len(DYNAMIC_FILE_PREFIX):
            dynamic_field = upload.channel[len(DYNAMIC_FILE_PREFIX):]
            doc_type = dynamic_field
        else:
            errors.append(FieldError(upload.channel, "unknown upload field"))
            continue

        ext = os.path.splitext(upload.filename or "")[1].lower()
        content_type = _resolve_content_type(upload)
        if content_type is None or ext not in ALLOWED_EXTENSIONS:
            errors.append(FieldError(
                upload.channel,
                f"{upload.filename}: only {', '.join(ALLOWED_EXTENSIONS)} files are accepted",
            ))
            continue
        if not upload.data:
            errors.append(FieldError(upload.channel, f"{upload.filename}: file is empty"))
            continue
        if len(upload.data) > max_bytes:
            errors.append(FieldError(
                upload.channel,
                f"{upload.filename}: exceeds maximum of {settings.UPLOAD_MAX_SIZE_MB}MB",
            ))
            continue

        classified.append(ClassifiedFile(upload, doc_type, content_type, dynamic_field))

    if errors:
        raise ValidationFailed(errors)
    return classified


async def _store_blobs(classified: list[ClassifiedFile], written: list[str]) -> list[str]:
    storage = get_storage_service()
    urls = []
    for item in classified:
        key = build_object_key(item.file.channel, item.file.filename)
        url = await storage.upload_file(item.file.data, key, item.content_type)
        written.append(url)
        urls.append(url)
    return urls


async def _discard_blobs(references: list[str], application_number: str) -> None:
    storage = get_storage_service()
    for ref in references:
        try:
            await storage.delete_file(ref)
        except Exception:
            logger.warning("Could not remove blob %s for failed submission %s", ref, application_number, exc_info=True)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


async def submit_application(
    session: AsyncSession,
    user: UserContext,
    *,
    loan_id: int,
    personal_info: dict,
    address: dict,
    employment_info: dict,
    loan_details: dict,
    dynamic_fields: dict,
    uploads: list[IncomingFile],
) -> tuple[Application, list[str]]:
    """Validate, store and persist one application.

    Returns the created application and a list of non-fatal warnings.
    """
    loan = await session.get(Loan, loan_id)
    if loan is None or not loan.is_active:
        raise NotFound(f"Loan {loan_id} not found")

    terms = normalize_loan_details(loan_details)
    check_loan_bounds(loan, terms)
    personal = _validate_personal_info(personal_info)

    if settings.APPLICATION_OTP_REQUIRED and not await has_recent_verification(
        session, email=personal["email"], purpose=OtpPurpose.APPLICATION,
    ):
        raise InvalidOTP()

    classified = classify_files(uploads)
    fields = await form_schema.list_fields(session, loan_id=loan.id)
    file_counts = Counter(c.dynamic_field for c in classified if c.dynamic_field)
    form_schema.validate(fields, dynamic_fields, file_counts)

    rate = effective_rate(loan)
    emi = compute_emi(terms.amount, rate, terms.tenure_months)
    now = datetime.now(UTC)
    number = generate_application_number(now)

    written: list[str] = []
    try:
        urls = await _store_blobs(classified, written)

        stored_dynamic = dict(dynamic_fields)
        documents = []
        for item, url in zip(classified, urls):
            documents.append(ApplicationDocument(
                doc_type=item.doc_type,
                name=item.file.filename,
                url=url,
                content_type=item.content_type,
                size_bytes=len(item.file.data),
                status=DocumentStatus.PENDING,
            ))
            if item.dynamic_field:
                refs = stored_dynamic.get(item.dynamic_field)
                refs = list(refs) if isinstance(refs, list) else []
                stored_dynamic[item.dynamic_field] = refs + [url]

        app = Application(
            application_number=number,
            user_id=user.user_id,
            user_email=user.email or personal["email"],
            loan_id=loan.id,
            loan_type=loan.loan_type,
            personal_info=personal,
            address=address,
            employment_info=employment_info,
            loan_amount=Decimal(str(terms.amount)),
            tenure_months=terms.tenure_months,
            interest_rate=Decimal(str(rate)),
            emi=emi,
            loan_purpose=terms.purpose,
            dynamic_fields=stored_dynamic,
            status=ApplicationStatus.SUBMITTED,
            submitted_at=now,
            documents=documents,
        )
        session.add(app)
        await session.commit()
        app_id = app.id
    except BaseException:
        await session.rollback()
        await _discard_blobs(written, number)
        raise

    logger.info(
        "Application %s submitted by %s (loan=%s, amount=%s, tenure=%s, emi=%s, documents=%d)",
        number, user.user_id, loan.slug, terms.amount, terms.tenure_months, emi, len(classified),
    )

    app = await load_application(session, app_id)
    warnings: list[str] = []
    subject, body = confirmation_message(number, loan.loan_type.value, terms.amount)
    if not await get_notifier().notify(app.user_email, subject, body):
        logger.warning("Confirmation email for application %s was not delivered", number)
        warnings.append("Confirmation email could not be sent")
    return app, warnings
