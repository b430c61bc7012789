# This project was developed with assistance from AI tools.
"""Tests for the application intake pipeline."""

import asyncio
import re
from types import SimpleNamespace

import pytest
import pytest_asyncio
from loandesk_db import Application, ApplicationDocument, Base
from loandesk_db.enums import ApplicationStatus, FieldKind, OtpPurpose
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from loandesk.core.config import settings
from loandesk.services import otp
from loandesk.services.errors import InvalidAmount, InvalidOTP, InvalidTenure, NotFound, ValidationFailed
from loandesk.services.intake import (
    IncomingFile,
    classify_files,
    generate_application_number,
    normalize_loan_details,
    submit_application,
)

from .factories import PNG_BYTES, applicant, make_field, make_loan, pdf_upload
from .functional.personas import borrower_priya


async def _count(session, model):
    return await session.scalar(select(func.count(model.id)))


async def _submit(session, loan, *, loan_details=None, dynamic_fields=None, uploads=None, user=None):
    return await submit_application(
        session,
        user or borrower_priya(),
        loan_id=loan.id,
        personal_info=applicant(),
        address={"current": {"city": "Pune"}, "permanent": {"city": "Nagpur"}},
        employment_info={"employer": "Acme", "monthlyIncome": 90000},
        loan_details=loan_details or {"loanAmount": 50000, "loanTenure": 12},
        dynamic_fields=dynamic_fields or {},
        uploads=uploads or [],
    )


# ---------------------------------------------------------------------------
# Loan details
# ---------------------------------------------------------------------------


def test_normalize_accepts_both_namings():
    current = normalize_loan_details({"loanAmount": "50000", "loanTenure": "12", "loanPurpose": "Wedding"})
    legacy = normalize_loan_details({"principal": 50000, "tenureMonths": 12})

    assert (current.amount, current.tenure_months, current.purpose) == (50000.0, 12, "Wedding")
    assert (legacy.amount, legacy.tenure_months) == (50000.0, 12)


@pytest.mark.parametrize("amount", [None, "", "abc", 0, -100, "nan", "inf", True])
def test_normalize_rejects_bad_amount(amount):
    with pytest.raises(InvalidAmount):
        normalize_loan_details({"loanAmount": amount, "loanTenure": 12})


@pytest.mark.parametrize("tenure", [None, 0, -3, 12.5, "twelve"])
def test_normalize_rejects_bad_tenure(tenure):
    with pytest.raises(InvalidTenure):
        normalize_loan_details({"loanAmount": 50000, "loanTenure": tenure})


# ---------------------------------------------------------------------------
# Application numbers
# ---------------------------------------------------------------------------


def test_application_number_format():
    assert re.fullmatch(r"APP-\d{8}-[0-9A-F]{12}", generate_application_number())


async def test_application_numbers_unique_under_concurrency():
    numbers = await asyncio.gather(
        *(asyncio.to_thread(generate_application_number) for _ in range(1000))
    )
    assert len(set(numbers)) == 1000


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """Sessions on a file-backed SQLite database, one connection each."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'intake.db'}",
        connect_args={"timeout": 30},
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def test_concurrent_submissions_store_distinct_numbers(file_session_factory):
    async with file_session_factory() as session:
        loan_id = (await make_loan(session)).id

    async def submit_one():
        async with file_session_factory() as session:
            app, _ = await _submit(session, SimpleNamespace(id=loan_id))
            return app.application_number

    numbers = await asyncio.gather(*(submit_one() for _ in range(25)))

    async with file_session_factory() as session:
        stored = (await session.scalars(select(Application.application_number))).all()
    assert len(set(numbers)) == 25
    assert sorted(stored) == sorted(numbers)


# ---------------------------------------------------------------------------
# Document classification
# ---------------------------------------------------------------------------


def test_classify_fixed_and_dynamic_channels():
    classified = classify_files([
        pdf_upload("idProof"),
        IncomingFile("bankStatement", "stmt.png", "image/png", PNG_BYTES),
        pdf_upload("dynamicFiles_salarySlip", "slip.pdf"),
    ])

    assert [c.doc_type for c in classified] == ["ID", "Bank Statement", "salarySlip"]
    assert classified[2].dynamic_field == "salarySlip"


def test_classify_guesses_type_for_octet_stream():
    [item] = classify_files([pdf_upload(content_type="application/octet-stream")])
    assert item.content_type == "application/pdf"


@pytest.mark.parametrize(
    "upload",
    [
        IncomingFile("idProof", "id.exe", "application/pdf", b"MZ"),
        IncomingFile("idProof", "id.gif", "image/gif", b"GIF89a"),
        IncomingFile("idProof", "id.pdf", "application/pdf", b""),
        IncomingFile("selfie", "me.png", "image/png", PNG_BYTES),
    ],
)
def test_classify_rejects_bad_uploads(upload):
    with pytest.raises(ValidationFailed) as exc_info:
        classify_files([upload])
    assert exc_info.value.fields == [upload.channel]


def test_classify_rejects_oversized_files(monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_MAX_SIZE_MB", 0)
    with pytest.raises(ValidationFailed, match="idProof"):
        classify_files([pdf_upload()])


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


async def test_submit_end_to_end(db_session, mock_notifier, mock_storage):
    """50000 over 12 months at an 18% default rate."""
    loan = await make_loan(db_session, rate_min=15, rate_max=24, rate_default=18)
    await make_field(db_session, "salarySlip", FieldKind.FILE, loan=loan, required=True)
    await make_field(db_session, "employerType", FieldKind.SELECT, loan=loan, options=["Private", "Government"])
    uploads = [
        pdf_upload("idProof"),
        IncomingFile("addressProof", "bill.png", "image/png", PNG_BYTES),
        pdf_upload("dynamicFiles_salarySlip", "slip-jan.pdf"),
        pdf_upload("dynamicFiles_salarySlip", "slip-feb.pdf"),
    ]

    app, warnings = await _submit(
        db_session, loan, dynamic_fields={"employerType": "Private", "referral": "friend"}, uploads=uploads,
    )

    assert warnings == []
    assert app.status == ApplicationStatus.SUBMITTED
    assert app.emi == 4584
    assert float(app.interest_rate) == 18.0
    assert app.tenure_months == 12
    assert app.user_id == "priya-sharma-001"
    assert app.application_number.startswith("APP-")
    assert len(app.documents) == len(uploads)
    assert [d.doc_type for d in app.documents] == ["ID", "Address", "salarySlip", "salarySlip"]
    assert len(app.dynamic_fields["salarySlip"]) == 2
    assert app.dynamic_fields["referral"] == "friend"
    assert mock_storage.upload_file.await_count == len(uploads)
    mock_notifier.notify.assert_awaited_once()
    assert mock_notifier.notify.await_args.args[0] == "priya@example.com"


async def test_rate_falls_back_to_minimum(db_session):
    loan = await make_loan(db_session, rate_min=12, rate_max=20, rate_default=None)

    app, _ = await _submit(db_session, loan, loan_details={"principal": 100000, "tenureMonths": 12})

    assert float(app.interest_rate) == 12.0
    assert app.emi == 8885


async def test_unknown_loan_writes_nothing(db_session, mock_storage, mock_notifier):
    await make_loan(db_session)
    loan = SimpleNamespace(id=999)

    with pytest.raises(NotFound):
        await _submit(db_session, loan, uploads=[pdf_upload()])

    mock_storage.upload_file.assert_not_awaited()
    mock_notifier.notify.assert_not_awaited()


async def test_inactive_loan_is_not_found(db_session):
    loan = await make_loan(db_session, is_active=False)

    with pytest.raises(NotFound):
        await _submit(db_session, loan)
    assert await _count(db_session, Application) == 0


async def test_amount_outside_bounds(db_session):
    loan = await make_loan(db_session, min_amount=10000, max_amount=500000)

    with pytest.raises(InvalidAmount):
        await _submit(db_session, loan, loan_details={"loanAmount": 600000, "loanTenure": 12})
    with pytest.raises(InvalidTenure):
        await _submit(db_session, loan, loan_details={"loanAmount": 50000, "loanTenure": 48})


async def test_validation_failure_stores_nothing(db_session, mock_storage):
    loan = await make_loan(db_session)
    await make_field(db_session, "employerType", FieldKind.SELECT, loan=loan, required=True, options=["Private"])

    with pytest.raises(ValidationFailed) as exc_info:
        await _submit(db_session, loan, uploads=[pdf_upload()])

    assert exc_info.value.fields == ["employerType"]
    mock_storage.upload_file.assert_not_awaited()
    assert await _count(db_session, Application) == 0


async def test_upload_on_a_select_field_is_rejected(db_session, mock_storage):
    loan = await make_loan(db_session)
    await make_field(
        db_session, "employerType", FieldKind.SELECT, loan=loan, required=True, options=["Private", "Government"],
    )

    with pytest.raises(ValidationFailed) as exc_info:
        await _submit(
            db_session, loan,
            dynamic_fields={"employerType": "Private"},
            uploads=[pdf_upload("dynamicFiles_employerType", "employer.pdf")],
        )

    assert exc_info.value.fields == ["employerType"]
    mock_storage.upload_file.assert_not_awaited()
    assert await _count(db_session, Application) == 0


async def test_missing_applicant_email_is_reported(db_session):
    loan = await make_loan(db_session)

    with pytest.raises(ValidationFailed) as exc_info:
        await submit_application(
            db_session, borrower_priya(), loan_id=loan.id, personal_info={"fullName": "Priya"},
            address={}, employment_info={}, loan_details={"loanAmount": 50000, "loanTenure": 12},
            dynamic_fields={}, uploads=[],
        )
    assert exc_info.value.fields == ["personalInfo.email"]


async def test_malformed_applicant_email_is_reported(db_session):
    loan = await make_loan(db_session)

    with pytest.raises(ValidationFailed) as exc_info:
        await submit_application(
            db_session, borrower_priya(), loan_id=loan.id,
            personal_info={"fullName": "Priya", "email": "priya@example.com\r\nBcc: evil@x.io"},
            address={}, employment_info={}, loan_details={"loanAmount": 50000, "loanTenure": 12},
            dynamic_fields={}, uploads=[],
        )
    assert exc_info.value.fields == ["personalInfo.email"]
    assert await _count(db_session, Application) == 0


async def test_storage_failure_removes_written_blobs(db_session, mock_storage, mock_notifier):
    loan = await make_loan(db_session)
    mock_storage.upload_file.side_effect = ["/uploads/idProof-1.pdf", OSError("disk full")]

    with pytest.raises(OSError):
        await _submit(db_session, loan, uploads=[pdf_upload("idProof"), pdf_upload("incomeProof")])

    mock_storage.delete_file.assert_awaited_once_with("/uploads/idProof-1.pdf")
    mock_notifier.notify.assert_not_awaited()
    assert await _count(db_session, Application) == 0
    assert await _count(db_session, ApplicationDocument) == 0


async def test_failed_confirmation_becomes_warning(db_session, mock_notifier):
    loan = await make_loan(db_session)
    mock_notifier.notify.return_value = False

    app, warnings = await _submit(db_session, loan)

    assert warnings == ["Confirmation email could not be sent"]
    assert app.status == ApplicationStatus.SUBMITTED
    assert await _count(db_session, Application) == 1


async def test_otp_gate(db_session, monkeypatch):
    monkeypatch.setattr(settings, "APPLICATION_OTP_REQUIRED", True)
    loan = await make_loan(db_session)

    with pytest.raises(InvalidOTP):
        await _submit(db_session, loan)

    _, code, _ = await otp.issue(
        db_session, email="priya@example.com", phone=None, purpose=OtpPurpose.APPLICATION,
    )
    await otp.verify(
        db_session, email="priya@example.com", phone=None, purpose=OtpPurpose.APPLICATION, code=code,
    )
    app, _ = await _submit(db_session, loan)
    assert app.status == ApplicationStatus.SUBMITTED
