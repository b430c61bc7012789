# This project was developed with assistance from AI tools.
"""Functional tests: eligibility pre-screen over HTTP."""

import pytest
import pytest_asyncio

from ..factories import make_loan
from .personas import admin, borrower_priya

pytestmark = pytest.mark.functional

FORM = {
    "email": "priya@example.com",
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


@pytest_asyncio.fixture
async def loan_id(session_factory):
    async with session_factory() as session:
        return (await make_loan(session)).id


async def test_anonymous_submit_is_recorded(client_factory, loan_id):
    client = await client_factory()

    resp = await client.post("/api/eligibility/", json={**FORM, "loanId": loan_id})

    assert resp.status_code == 201
    body = resp.json()
    assert body["pan"] == "ABCDE1234F"
    assert body["status"] == "Pending"
    assert body["user_id"] is None
    assert body["loan"]["slug"] == "quick-personal-loan"


async def test_signed_in_submit_records_user(client_factory):
    client = await client_factory(borrower_priya())
    resp = await client.post("/api/eligibility/", json=FORM)
    assert resp.json()["user_id"] == "priya-sharma-001"


@pytest.mark.parametrize("overrides", [{"pinCode": "4110"}, {"pancard": "SHORT"}, {"gender": None}])
async def test_malformed_form_is_422(client_factory, overrides):
    client = await client_factory()
    resp = await client.post("/api/eligibility/", json={**FORM, **overrides})
    assert resp.status_code == 422


async def test_salaried_without_employer_details_is_400(client_factory):
    client = await client_factory()
    form = {k: v for k, v in FORM.items() if k not in ("companyName", "nextSalaryDate")}

    resp = await client.post("/api/eligibility/", json=form)

    assert resp.status_code == 400
    assert {e["field"] for e in resp.json()["errors"]} == {"companyName", "nextSalaryDate"}


async def test_unknown_loan_is_404(client_factory):
    client = await client_factory()
    resp = await client.post("/api/eligibility/", json={**FORM, "loanId": 4242})
    assert resp.status_code == 404


async def test_listing_is_admin_only(client_factory):
    borrower = await client_factory(borrower_priya())
    assert (await borrower.get("/api/eligibility/")).status_code == 403


async def test_admin_lists_and_filters(client_factory, loan_id):
    client = await client_factory(admin())
    await client.post("/api/eligibility/", json={**FORM, "loanId": loan_id})
    await client.post("/api/eligibility/", json={**FORM, "email": "rahul@example.com"})

    everything = (await client.get("/api/eligibility/")).json()
    assert everything["pagination"]["total"] == 2
    assert everything["pagination"]["has_more"] is False

    by_email = (await client.get("/api/eligibility/", params={"email": "RAHUL@example.com"})).json()
    assert [c["email"] for c in by_email["data"]] == ["rahul@example.com"]

    by_loan = (await client.get("/api/eligibility/", params={"loanId": loan_id})).json()
    assert [c["loan_id"] for c in by_loan["data"]] == [loan_id]

    paged = (await client.get("/api/eligibility/", params={"limit": 1})).json()
    assert len(paged["data"]) == 1
    assert paged["pagination"]["has_more"] is True


async def test_admin_reads_one_check(client_factory):
    client = await client_factory(admin())
    check_id = (await client.post("/api/eligibility/", json=FORM)).json()["id"]

    resp = await client.get(f"/api/eligibility/{check_id}")
    assert resp.status_code == 200
    assert resp.json()["city"] == "Pune"

    missing = await client.get(f"/api/eligibility/{check_id + 1}")
    assert missing.status_code == 404
