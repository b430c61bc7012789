# This project was developed with assistance from AI tools.
"""Functional tests: loan catalog, categories and form field admin over HTTP."""

import pytest
import pytest_asyncio

from ..factories import make_application, make_category, make_loan
from .personas import admin, borrower_priya

pytestmark = pytest.mark.functional

LOAN_BODY = {
    "name": "Business Booster",
    "loan_type": "Business",
    "interest_rate": {"min": 14, "max": 20, "default": 16},
    "min_loan_amount": 100000,
    "max_loan_amount": 5000000,
    "min_tenure": 12,
    "max_tenure": 60,
    "features": [{"title": "Collateral free"}],
}


@pytest_asyncio.fixture
async def loans(session_factory):
    async with session_factory() as session:
        category = await make_category(session, "Personal Loans")
        active = await make_loan(session, "Quick Personal Loan", category=category)
        hidden = await make_loan(session, "Retired Loan", is_active=False)
        return {"category_id": category.id, "active_id": active.id, "hidden_id": hidden.id}


# ---------------------------------------------------------------------------
# Public reads
# ---------------------------------------------------------------------------


async def test_list_loans_is_public_and_hides_inactive(client_factory, loans):
    client = await client_factory()

    resp = await client.get("/api/loans/")

    assert resp.status_code == 200
    assert [loan["slug"] for loan in resp.json()["data"]] == ["quick-personal-loan"]


async def test_admin_can_include_inactive(client_factory, loans):
    client = await client_factory(admin())
    resp = await client.get("/api/loans/", params={"includeInactive": "true"})
    assert resp.json()["count"] == 2


async def test_borrower_cannot_include_inactive(client_factory, loans):
    client = await client_factory(borrower_priya())
    resp = await client.get("/api/loans/", params={"includeInactive": "true"})
    assert resp.json()["count"] == 1


async def test_get_loan_by_slug(client_factory, loans):
    client = await client_factory()

    found = await client.get("/api/loans/quick-personal-loan")
    hidden = await client.get("/api/loans/retired-loan")

    assert found.status_code == 200
    assert found.json()["interest_rate"] == {"min": 18.0, "max": 24.0, "default": None}
    assert hidden.status_code == 404


async def test_loans_by_type(client_factory, loans):
    client = await client_factory()
    assert (await client.get("/api/loans/type/Personal")).json()["count"] == 1
    assert (await client.get("/api/loans/type/Home")).json()["count"] == 0
    assert (await client.get("/api/loans/type/Spaceship")).status_code == 422


async def test_emi_preview(client_factory):
    client = await client_factory()

    resp = await client.post(
        "/api/loans/calculate-emi",
        json={"loan_amount": 100000, "interest_rate": 12, "tenure_months": 12},
    )

    assert resp.status_code == 200
    assert resp.json() == {"emi": 8885, "total_payable": 106620, "total_interest": 6620}


# ---------------------------------------------------------------------------
# Admin writes
# ---------------------------------------------------------------------------


async def test_admin_creates_updates_and_deletes_loan(client_factory, loans):
    client = await client_factory(admin())

    created = await client.post("/api/loans/", json=LOAN_BODY)
    assert created.status_code == 201, created.text
    loan_id = created.json()["id"]
    assert created.json()["slug"] == "business-booster"

    updated = await client.put(f"/api/loans/{loan_id}", json={"is_active": False, "display_order": 5})
    assert updated.json()["is_active"] is False

    deleted = await client.delete(f"/api/loans/{loan_id}")
    assert deleted.status_code == 204


async def test_borrower_cannot_write_catalog(client_factory, loans):
    client = await client_factory(borrower_priya())

    assert (await client.post("/api/loans/", json=LOAN_BODY)).status_code == 403
    assert (await client.post("/api/categories/", json={"name": "Gold"})).status_code == 403
    assert (await client.delete(f"/api/loans/{loans['active_id']}")).status_code == 403


async def test_invalid_rate_triple_is_422(client_factory):
    client = await client_factory(admin())
    body = dict(LOAN_BODY, interest_rate={"min": 20, "max": 10})

    resp = await client.post("/api/loans/", json=body)

    assert resp.status_code == 422


async def test_delete_loan_with_applications_conflicts(client_factory, session_factory, loans):
    async with session_factory() as session:
        loan = await make_loan(session, "Referenced Loan")
        await make_application(session, loan)
        loan_id = loan.id

    client = await client_factory(admin())
    resp = await client.delete(f"/api/loans/{loan_id}")

    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


async def test_category_lifecycle(client_factory, loans):
    client = await client_factory(admin())

    created = await client.post("/api/categories/", json={"name": "Education Loans"})
    assert created.status_code == 201
    category_id = created.json()["id"]

    listed = await client.get("/api/categories/", params={"withCounts": "1"})
    counts = {c["name"]: c["loan_count"] for c in listed.json()["data"]}
    assert counts == {"Education Loans": 0, "Personal Loans": 1}

    loan = await client.post(
        f"/api/categories/{category_id}/loans",
        json={
            "name": "Study Abroad",
            "loan_type": "Education",
            "interest_rate_min": 9.5,
            "min_loan_amount": 100000,
            "max_loan_amount": 4000000,
            "min_tenure": 12,
            "max_tenure": 120,
        },
    )
    assert loan.status_code == 201
    assert loan.json()["interest_rate"]["default"] == 9.5

    in_category = await client.get(f"/api/categories/{category_id}/loans")
    assert in_category.json()["category_name"] == "Education Loans"
    assert in_category.json()["count"] == 1

    blocked = await client.delete(f"/api/categories/{category_id}")
    assert blocked.status_code == 409
    assert blocked.json()["detail"] == "Category has linked loans"


async def test_category_detail_requires_login(client_factory, loans):
    anonymous = await client_factory()
    assert (await anonymous.get(f"/api/categories/{loans['category_id']}")).status_code == 401

    client = await client_factory(borrower_priya())
    resp = await client.get(f"/api/categories/{loans['category_id']}")
    assert resp.json()["slug"] == "personal-loans"


# ---------------------------------------------------------------------------
# Form field admin
# ---------------------------------------------------------------------------


async def test_form_field_admin(client_factory, loans):
    client = await client_factory(admin())

    created = await client.post(
        "/api/form-fields/",
        json={
            "category_id": loans["category_id"],
            "name": "employerType",
            "kind": "Radio",
            "options": ["Private", "Government"],
            "required": True,
        },
    )
    assert created.status_code == 201, created.text
    field_id = created.json()["id"]
    assert created.json()["input"]["control"] == "radio"

    duplicate = await client.post(
        "/api/form-fields/",
        json={"category_id": loans["category_id"], "name": "employerType"},
    )
    assert duplicate.status_code == 409

    updated = await client.put(f"/api/form-fields/{field_id}", json={"is_active": False})
    assert updated.json()["is_active"] is False

    public = await client.get(f"/api/form-fields/category/{loans['category_id']}")
    assert public.json()["count"] == 0

    assert (await client.delete(f"/api/form-fields/{field_id}")).status_code == 204


async def test_select_without_options_is_rejected(client_factory, loans):
    client = await client_factory(admin())

    resp = await client.post(
        "/api/form-fields/",
        json={"category_id": loans["category_id"], "name": "tier", "kind": "Select"},
    )

    assert resp.status_code == 422
