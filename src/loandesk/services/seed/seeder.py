# This project was developed with assistance from AI tools.
"""Demo catalog seeding service.

Seeds categories, loan products and dynamic form fields so the application
wizard has something to show immediately after deployment.

Simulated for demonstration purposes -- not real financial products.
"""

import logging

from loandesk_db import Application, FormField, Loan, LoanCategory
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...schemas.catalog import EligibilityCriteria
from ..catalog import slugify
from .fixtures import CATEGORIES, FORM_FIELDS, LOANS, REQUIRED_DOCUMENTS

logger = logging.getLogger(__name__)


async def _clear_catalog(session: AsyncSession) -> None:
    """Delete the whole catalog. Refuses while applications exist."""
    app_count = await session.scalar(select(func.count(Application.id)))
    if app_count:
        raise RuntimeError(f"Cannot re-seed: {app_count} application(s) reference the catalog")
    await session.execute(delete(FormField))
    await session.execute(delete(Loan))
    await session.execute(delete(LoanCategory))
    logger.info("Cleared existing catalog")


async def seed_catalog(session: AsyncSession, *, force: bool = False) -> dict:
    """Seed the demo catalog.

    Returns a summary dict. When categories already exist and ``force`` is
    False, nothing is written and ``status`` is ``already_seeded``.
    """
    existing = await session.scalar(select(func.count(LoanCategory.id)))
    if existing and not force:
        return {"status": "already_seeded", "categories": existing}
    if existing:
        await _clear_catalog(session)

    categories: dict[str, LoanCategory] = {}
    for cat_def in CATEGORIES:
        category = LoanCategory(slug=slugify(cat_def["name"]), **cat_def)
        session.add(category)
        categories[cat_def["name"]] = category
    await session.flush()

    loans: dict[str, Loan] = {}
    for loan_def in LOANS:
        loan_def = dict(loan_def)
        category = categories[loan_def.pop("category")]
        loan = Loan(
            slug=slugify(loan_def["name"]),
            category_id=category.id,
            eligibility_criteria=EligibilityCriteria().model_dump(mode="json"),
            required_documents=REQUIRED_DOCUMENTS,
            **loan_def,
        )
        session.add(loan)
        loans[loan.name] = loan
    await session.flush()

    for field_def in FORM_FIELDS:
        field_def = dict(field_def)
        category = categories[field_def.pop("category")]
        session.add(FormField(category_id=category.id, **field_def))

    await session.commit()
    summary = {
        "status": "seeded",
        "categories": len(categories),
        "loans": len(loans),
        "form_fields": len(FORM_FIELDS),
    }
    logger.info("Demo catalog seeded: %s", summary)
    return summary
