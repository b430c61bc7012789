# This project was developed with assistance from AI tools.
"""Tests for the eligibility pre-screen service."""

from datetime import date, timedelta

import pytest
from loandesk_db.enums import EligibilityStatus, EmploymentType
from pydantic import ValidationError

from loandesk.schemas.eligibility import EligibilityCreate
from loandesk.services import eligibility
from loandesk.services.errors import NotFound, ValidationFailed

from .factories import make_loan
from .functional.personas import borrower_priya


def _form(**overrides) -> EligibilityCreate:
    data = {
        "email": "Priya@Example.com",
        "pancard": "abcde1234f",
        "dob": "1992-04-17",
        "gender": "FEMALE",
        "personalEmail": "priya.personal@example.com",
        "employmentType": "SALARIED",
        "companyName": "Acme Infotech",
        "nextSalaryDate": "2026-11-01",
        "netMonthlyIncome": 85000,
        "pinCode": "411001",
        "state": "Maharashtra",
        "city": "Pune",
    }
    data.update(overrides)
    return EligibilityCreate.model_validate(data)


async def test_submit_records_pending_check(db_session):
    loan = await make_loan(db_session)

    check = await eligibility.submit_check(db_session, _form(loanId=loan.id), borrower_priya())

    assert check.id is not None
    assert check.status == EligibilityStatus.PENDING
    assert check.email == "priya@example.com"
    assert check.pan == "ABCDE1234F"
    assert check.user_id == "priya-sharma-001"
    assert check.loan.slug == "quick-personal-loan"
    assert eligibility.to_response(check).net_monthly_income == 85000.0


async def test_anonymous_submit_has_no_user(db_session):
    check = await eligibility.submit_check(db_session, _form())
    assert check.user_id is None
    assert check.loan is None


async def test_salaried_needs_company_and_salary_date(db_session):
    form = _form(companyName="  ", nextSalaryDate=None)

    with pytest.raises(ValidationFailed) as exc:
        await eligibility.submit_check(db_session, form)

    assert exc.value.fields == ["companyName", "nextSalaryDate"]
    assert (await eligibility.list_checks(db_session))[1] == 0


async def test_self_employed_skips_employer_details(db_session):
    form = _form(employmentType="SELF EMPLOYED", companyName=None, nextSalaryDate=None)

    check = await eligibility.submit_check(db_session, form)

    assert check.employment_type == EmploymentType.SELF_EMPLOYED
    assert check.company_name is None


async def test_unknown_or_inactive_loan_is_not_found(db_session):
    hidden = await make_loan(db_session, "Retired Loan", is_active=False)

    with pytest.raises(NotFound):
        await eligibility.submit_check(db_session, _form(loanId=9999))
    with pytest.raises(NotFound):
        await eligibility.submit_check(db_session, _form(loanId=hidden.id))


@pytest.mark.parametrize(
    "overrides",
    [
        {"pancard": "ABC123"},
        {"pinCode": "41100"},
        {"dob": (date.today() + timedelta(days=1)).isoformat()},
        {"netMonthlyIncome": -1},
        {"gender": "UNKNOWN"},
        {"personalEmail": "not-an-email"},
    ],
)
def test_schema_rejects_malformed_input(overrides):
    with pytest.raises(ValidationError):
        _form(**overrides)


async def test_list_filters_by_email_and_loan(db_session):
    loan = await make_loan(db_session)
    await eligibility.submit_check(db_session, _form(loanId=loan.id))
    await eligibility.submit_check(db_session, _form(email="rahul@example.com"))
    await eligibility.submit_check(db_session, _form(email="rahul@example.com", loanId=loan.id))

    by_email, total = await eligibility.list_checks(db_session, email=" RAHUL@example.com ")
    assert total == 2
    assert {c.email for c in by_email} == {"rahul@example.com"}

    by_loan, total = await eligibility.list_checks(db_session, loan_id=loan.id)
    assert total == 2

    both, total = await eligibility.list_checks(db_session, email="rahul@example.com", loan_id=loan.id)
    assert total == 1
    assert both[0].loan_id == loan.id


async def test_list_pages_newest_first(db_session):
    ids = [(await eligibility.submit_check(db_session, _form())).id for _ in range(3)]

    page, total = await eligibility.list_checks(db_session, offset=1, limit=1)

    assert total == 3
    assert [c.id for c in page] == [ids[1]]


async def test_get_check(db_session):
    created = await eligibility.submit_check(db_session, _form())

    assert (await eligibility.get_check(db_session, created.id)).pan == "ABCDE1234F"
    with pytest.raises(NotFound):
        await eligibility.get_check(db_session, created.id + 100)
