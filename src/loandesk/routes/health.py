# This project was developed with assistance from AI tools.
"""Liveness and database connectivity check."""

import logging

from fastapi import APIRouter, Depends
from loandesk_db import get_db
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import __version__
from ..schemas.health import HealthItem

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[HealthItem])
async def health(session: AsyncSession = Depends(get_db)) -> list[HealthItem]:
    """Report API and database status."""
    api = HealthItem(name="API", status="healthy", message="API is running", version=__version__)
    try:
        await session.execute(text("SELECT 1"))
        dialect = session.get_bind().dialect.name
        db = HealthItem(name="Database", status="healthy", message=f"{dialect} connection ok")
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        db = HealthItem(name="Database", status="unhealthy", message="Database unreachable")
    return [api, db]
