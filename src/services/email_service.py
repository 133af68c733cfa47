"""Email service for delivering password-reset OTPs."""

import aiosmtplib
import structlog

from src.config import Settings, get_settings

logger = structlog.get_logger(__name__)


class EmailService:
    """Hands OTP messages to the configured SMTP relay."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def build_otp_message(self, to_email: str, code: str) -> str:
        """Render the raw RFC 5322 message carrying ``code``."""
        minutes = max(1, self.settings.otp_ttl_seconds // 60)
        body = (
            f"Your password reset code is: {code}\n\n"
            f"The code expires in {minutes} minutes and can be used once.\n"
            f"If you did not request a password reset, ignore this email."
        )
        return (
            f"From: {self.settings.email_from}\r\n"
            f"To: {to_email}\r\n"
            f"Subject: Your password reset code\r\n"
            f"Content-Type: text/plain; charset=utf-8\r\n"
            f"\r\n"
            f"{body}"
        )

    async def send_otp_email(self, to_email: str, code: str) -> bool:
        """Send an OTP email via SMTP.

        Returns True on success, False on failure or when email is disabled.
        """
        if not self.settings.otp_email_enabled:
            logger.info("otp_email_skipped", to=to_email, reason="email disabled")
            return False

        try:
            await aiosmtplib.send(
                self.build_otp_message(to_email, code),
                sender=self.settings.email_from,
                recipients=[to_email],
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_username or None,
                password=self.settings.smtp_password or None,
                use_tls=self.settings.smtp_use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("otp_email_failed", to=to_email, error=str(e))
            return False

        logger.info("otp_email_sent", to=to_email)
        return True
