# This project was developed with assistance from AI tools.
"""Tests for application reads and edits with ownership rules."""

import pytest
from loandesk_db import Application
from loandesk_db.enums import ApplicationStatus
from sqlalchemy import select

from loandesk.schemas.application import ApplicationUpdate
from loandesk.schemas.auth import DataScope
from loandesk.services import application as app_service
from loandesk.services.errors import NotAuthorized, NotFound
from loandesk.services.scope import apply_data_scope

from .factories import make_application, make_loan
from .functional.personas import PRIYA_USER_ID, RAHUL_USER_ID, admin, borrower_priya, borrower_rahul

# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def test_owner_can_read(db_session):
    loan = await make_loan(db_session)
    app = await make_application(db_session, loan, user_id=PRIYA_USER_ID, documents=2)

    found = await app_service.get_application(db_session, borrower_priya(), app.id)

    assert found.id == app.id
    assert len(found.documents) == 2


async def test_other_user_is_forbidden_not_hidden(db_session):
    loan = await make_loan(db_session)
    app = await make_application(db_session, loan, user_id=PRIYA_USER_ID)

    with pytest.raises(NotAuthorized):
        await app_service.get_application(db_session, borrower_rahul(), app.id)


async def test_admin_can_read_any(db_session):
    loan = await make_loan(db_session)
    app = await make_application(db_session, loan, user_id=RAHUL_USER_ID)

    found = await app_service.get_application(db_session, admin(), app.id)
    assert found.user_id == RAHUL_USER_ID


async def test_missing_application_is_not_found(db_session):
    with pytest.raises(NotFound):
        await app_service.get_application(db_session, admin(), 404)


async def test_list_is_scoped_to_owner(db_session):
    loan = await make_loan(db_session)
    await make_application(db_session, loan, user_id=PRIYA_USER_ID)
    await make_application(db_session, loan, user_id=PRIYA_USER_ID, status=ApplicationStatus.APPROVED)
    await make_application(db_session, loan, user_id=RAHUL_USER_ID)

    mine, total = await app_service.list_applications(db_session, borrower_priya())
    everything, admin_total = await app_service.list_applications(db_session, admin())
    approved, approved_total = await app_service.list_applications(
        db_session, borrower_priya(), filter_status=ApplicationStatus.APPROVED,
    )

    assert total == 2 and {a.user_id for a in mine} == {PRIYA_USER_ID}
    assert admin_total == 3 and len(everything) == 3
    assert approved_total == 1 and approved[0].status == ApplicationStatus.APPROVED


async def test_list_paginates(db_session):
    loan = await make_loan(db_session)
    for _ in range(5):
        await make_application(db_session, loan)

    page, total = await app_service.list_applications(db_session, admin(), offset=3, limit=2)

    assert total == 5
    assert len(page) == 2


async def test_unrecognised_scope_matches_nothing(db_session):
    loan = await make_loan(db_session)
    await make_application(db_session, loan)

    stmt = apply_data_scope(select(Application), DataScope())
    assert (await db_session.execute(stmt)).scalars().all() == []


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


async def test_owner_can_edit_draft(db_session):
    loan = await make_loan(db_session)
    app = await make_application(db_session, loan, status=ApplicationStatus.DRAFT)

    updated = await app_service.update_application(
        db_session, borrower_priya(), app.id,
        ApplicationUpdate.model_validate({"address": {"city": "Mumbai"}}),
    )

    assert updated.address == {"city": "Mumbai"}
    assert updated.emi == 4584


async def test_owner_cannot_edit_submitted(db_session):
    loan = await make_loan(db_session)
    app = await make_application(db_session, loan)

    with pytest.raises(NotAuthorized):
        await app_service.update_application(
            db_session, borrower_priya(), app.id, ApplicationUpdate(address={"city": "Mumbai"}),
        )


async def test_admin_can_edit_any_status(db_session):
    loan = await make_loan(db_session)
    app = await make_application(db_session, loan, status=ApplicationStatus.APPROVED)

    updated = await app_service.update_application(
        db_session, admin(), app.id,
        ApplicationUpdate.model_validate({"employmentInfo": {"employer": "Globex"}}),
    )

    assert updated.employment_info == {"employer": "Globex"}
    assert updated.status == ApplicationStatus.APPROVED


async def test_to_response_shapes_loan_details(db_session):
    loan = await make_loan(db_session)
    app = await make_application(db_session, loan, documents=1)
    loaded = await app_service.load_application(db_session, app.id)

    resp = app_service.to_response(loaded, ["note"])

    assert resp.loan_details.loan_amount == 50000.0
    assert resp.loan_details.loan_tenure == 12
    assert resp.loan_details.emi == 4584
    assert resp.documents[0].doc_type == "ID"
    assert resp.warnings == ["note"]
