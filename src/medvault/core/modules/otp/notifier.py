"""Email dispatch of vault one-time codes."""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Protocol

import structlog

from medvault.config import Config

logger = structlog.get_logger(__name__)


class EmailNotifier(Protocol):
    """Delivers a one-time code to an address.

    Returns:
        Tuple of (success: bool, error_message: str | None)
    """

    async def send(self, address: str, code: str) -> tuple[bool, str | None]: ...


def build_otp_message(sender: str, address: str, code: str, ttl_minutes: int) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = "Your Medical Vault verification code"
    message["From"] = sender
    message["To"] = address
    message.set_content(
        f"Your Medical Vault verification code is {code}.\n\n"
        f"It expires in {ttl_minutes} minutes. If you did not request it, you can ignore this email."
    )
    return message


class SmtpEmailNotifier:
    """Sends codes through an SMTP relay; the blocking client runs in a worker thread."""

    def __init__(self, config: Config) -> None:
        self._config = config

    async def send(self, address: str, code: str) -> tuple[bool, str | None]:
        message = build_otp_message(self._config.smtp_from, address, code, self._config.otp_ttl_seconds // 60)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            error_msg = str(e)
            logger.exception("otp_email_failed", address=address, error=error_msg)
            return False, error_msg
        else:
            logger.debug("otp_email_sent", address=address)
            return True, None

    def _deliver(self, message: EmailMessage) -> None:
        config = self._config
        if config.smtp_host is None:
            raise smtplib.SMTPException("SMTP host is not configured")
        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=config.otp_send_timeout_seconds) as server:
            if config.smtp_starttls:
                server.starttls()
            if config.smtp_user and config.smtp_password:
                server.login(config.smtp_user, config.smtp_password)
            server.send_message(message)


class LogEmailNotifier:
    """Used when no SMTP relay is configured.

    In debug mode the code is written to the log, which stands in for the mailbox.
    Otherwise nothing can reach the owner and the dispatch fails.
    """

    def __init__(self, debug: bool) -> None:
        self._debug = debug

    async def send(self, address: str, code: str) -> tuple[bool, str | None]:
        if not self._debug:
            logger.error("otp_email_not_delivered", address=address, reason="smtp_host not configured")
            return False, "SMTP host is not configured"
        logger.warning("otp_email_logged", address=address, code=code)
        return True, None


def create_email_notifier(config: Config) -> EmailNotifier:
    if config.smtp_host:
        return SmtpEmailNotifier(config)
    return LogEmailNotifier(debug=config.debug)
