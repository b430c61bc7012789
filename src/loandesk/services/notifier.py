# This project was developed with assistance from AI tools.
"""Email notifications.

Best-effort delivery over SMTP. ``notify()`` never raises: failures are
logged and reported through its boolean result so that the caller's
primary action (OTP issue, intake, approve/reject) is never rolled back
because a mail server was unreachable.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from functools import partial

from ..core.config import Settings
from .errors import NotificationFailed

logger = logging.getLogger(__name__)


class Notifier:
    """Sends plain-text email through a single SMTP relay."""

    def __init__(
        self,
        host: str | None,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        timeout: float = 10.0,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender or username or "no-reply@localhost"
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._host)

    def _send(self, to: str, subject: str, body: str) -> None:
        if not self._host:
            raise NotificationFailed("EMAIL_HOST is not configured")

        try:
            msg = EmailMessage()
            msg["From"] = self._sender
            msg["To"] = to
            msg["Subject"] = subject
            msg.set_content(body)
        except ValueError as exc:
            raise NotificationFailed(f"invalid message header: {exc}") from exc

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls()
                    smtp.ehlo()
                if self._username and self._password:
                    smtp.login(self._username, self._password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationFailed(str(exc)) from exc

    async def notify(self, to: str, subject: str, body: str) -> bool:
        """Deliver one message. Returns False instead of raising on failure."""
        if not to:
            logger.warning("Notification '%s' skipped: no recipient", subject)
            return False
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, partial(self._send, to, subject, body))
        except NotificationFailed as exc:
            logger.warning("Notification '%s' to %r failed: %s", subject, to, exc)
            return False
        except Exception:
            logger.exception("Unexpected error sending notification '%s' to %r", subject, to)
            return False
        logger.info("Notification '%s' sent to %s", subject, to)
        return True


# ---------------------------------------------------------------------------
# Message templates
# ---------------------------------------------------------------------------


def otp_message(code: str, ttl_minutes: int) -> tuple[str, str]:
    subject = "Your verification code"
    body = (
        f"Your one-time verification code is {code}.\n\n"
        f"It will expire in {ttl_minutes} minutes. If you did not request this "
        "code, you can ignore this email."
    )
    return subject, body


def confirmation_message(application_number: str, loan_type: str, loan_amount) -> tuple[str, str]:
    subject = f"Application {application_number} received"
    body = (
        "Thank you for your loan application.\n\n"
        f"Application number: {application_number}\n"
        f"Loan type: {loan_type}\n"
        f"Amount: {loan_amount}\n\n"
        "We will notify you once it has been reviewed."
    )
    return subject, body


def approval_message(application_number: str, loan_name: str) -> tuple[str, str]:
    subject = f"Application {application_number} approved"
    body = (
        f"Good news! Your application {application_number} for {loan_name} "
        "has been approved. Our team will contact you with the next steps."
    )
    return subject, body


def rejection_message(application_number: str, loan_name: str, reason: str) -> tuple[str, str]:
    subject = f"Application {application_number} update"
    body = (
        f"We regret to inform you that your application {application_number} "
        f"for {loan_name} was not approved.\n\nReason: {reason}"
    )
    return subject, body


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_notifier: Notifier | None = None


def init_notifier(cfg: Settings) -> Notifier:
    """Initialise the singleton (called once from app lifespan)."""
    global _notifier  # noqa: PLW0603
    _notifier = Notifier(
        host=cfg.EMAIL_HOST,
        port=cfg.EMAIL_PORT,
        username=cfg.EMAIL_USER,
        password=cfg.EMAIL_PASS,
        sender=cfg.EMAIL_FROM,
        timeout=cfg.EMAIL_TIMEOUT,
    )
    return _notifier


def get_notifier() -> Notifier:
    """Return the initialised Notifier singleton."""
    if _notifier is None:
        raise RuntimeError("Notifier not initialised -- call init_notifier() first")
    return _notifier


def log_notifier_status(cfg: Settings) -> None:
    """Log whether email delivery is configured (startup diagnostics)."""
    if cfg.EMAIL_HOST:
        logger.info("Email notifications enabled via %s:%s", cfg.EMAIL_HOST, cfg.EMAIL_PORT)
    else:
        logger.warning("EMAIL_HOST not set -- notifications will be logged and skipped")
