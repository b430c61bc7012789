# This project was developed with assistance from AI tools.
"""Application review: approve and reject.

Both transitions are a single compare-and-swap UPDATE guarded on the
current status being non-terminal, so status, timestamp and actor are
written together and two concurrent decisions cannot both win. A decision
on an already Approved or Rejected application raises InvalidTransition.

The applicant is emailed after the transition commits; a failed email is
reported as a warning and never undoes the decision.
"""

import logging
from datetime import UTC, datetime

from loandesk_db import Application
from loandesk_db.enums import ApplicationStatus
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .application import load_application
from .errors import InvalidTransition, NotAuthorized, NotFound
from .notifier import approval_message, get_notifier, rejection_message

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "Application did not meet eligibility criteria"

_REVIEWABLE = sorted(ApplicationStatus.reviewable_statuses(), key=lambda s: s.name)


def _recipient(app: Application) -> str | None:
    return app.user_email or (app.personal_info or {}).get("email")


async def _transition(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    new_status: ApplicationStatus,
    values: dict,
) -> Application:
    if not user.is_admin:
        logger.warning(
            "Decision denied: user=%s role=%s tried to set application %s to %s",
            user.user_id, user.role.value, application_id, new_status.value,
        )
        raise NotAuthorized("Only admins can review applications")

    app = await load_application(session, application_id)
    if app is None:
        raise NotFound(f"Application {application_id} not found")

    result = await session.execute(
        update(Application)
        .where(Application.id == application_id, Application.status.in_(_REVIEWABLE))
        .values(status=new_status, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await session.rollback()
        current = await load_application(session, application_id)
        raise InvalidTransition(
            f"Cannot move application {app.application_number} from "
            f"'{current.status.value}' to '{new_status.value}' (terminal status)"
        )
    await session.commit()

    logger.info(
        "Application %s %s by %s", app.application_number, new_status.value.lower(), user.user_id,
    )
    return await load_application(session, application_id)


async def _notify(app: Application, subject: str, body: str) -> list[str]:
    to = _recipient(app)
    if await get_notifier().notify(to, subject, body):
        return []
    logger.warning("Decision email for application %s was not delivered", app.application_number)
    return ["Status email to the applicant could not be sent"]


async def approve_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> tuple[Application, list[str]]:
    """Approve a non-terminal application. Returns the application and any warnings."""
    now = datetime.now(UTC)
    app = await _transition(
        session, user, application_id, ApplicationStatus.APPROVED,
        {"approved_at": now, "approved_by": user.user_id},
    )
    subject, body = approval_message(app.application_number, app.loan.name if app.loan else app.loan_type.value)
    return app, await _notify(app, subject, body)


async def reject_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    reason: str | None = None,
) -> tuple[Application, list[str]]:
    """Reject a non-terminal application, storing ``reason`` or the default text."""
    reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
    now = datetime.now(UTC)
    app = await _transition(
        session, user, application_id, ApplicationStatus.REJECTED,
        {"rejected_at": now, "rejected_by": user.user_id, "rejection_reason": reason},
    )
    subject, body = rejection_message(
        app.application_number, app.loan.name if app.loan else app.loan_type.value, reason,
    )
    return app, await _notify(app, subject, body)
