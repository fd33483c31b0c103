"""
Resend email service adapter.
"""

import logging
from html import escape

import resend

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)


class ResendEmailService:
    """Transactional email through the Resend API.

    Without an API key every message is logged instead of sent, and the
    send methods report success so callers behave the same locally.
    """

    def __init__(self, api_key: str | None = None, from_email: str | None = None):
        self._api_key = api_key if api_key is not None else settings.resend_api_key
        if self._api_key:
            resend.api_key = self._api_key
        self._from_email = from_email or settings.resend_from_email
        self._frontend_url = settings.frontend_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _send(self, to_email: str, subject: str, html: str, dev_note: str = "") -> bool:
        if not self.is_configured:
            logger.info(f"[DEV] Email to {to_email}: {subject} {dev_note}".rstrip())
            return True

        try:
            resend.Emails.send({
                "from": self._from_email,
                "to": to_email,
                "subject": subject,
                "html": html,
            })
            return True
        except Exception as e:
            logger.error(f"Failed to send '{subject}' email to {to_email}: {e}")
            return False

    async def send_password_reset_email(
        self,
        to_email: str,
        user_name: str,
        reset_token: str,
    ) -> bool:
        """
        Send password reset email.

        Args:
            to_email: Recipient email address
            user_name: User's name for personalization
            reset_token: JWT password reset token

        Returns:
            True if sent successfully, False otherwise
        """
        reset_url = f"{self._frontend_url}/reset-password/{reset_token}"
        body = f"""
            <p style="color: #37474F; line-height: 1.6;">
                Hi {escape(user_name)},<br><br>
                Forgot your password? Use the button below to choose a new one.
                If you didn't ask for this, ignore this email and your password stays the same.
            </p>
            {self._button(reset_url, "Reset Password")}
            <p style="color: #90A4AE; font-size: 12px; text-align: center;">
                This link is valid for {settings.password_reset_expire_minutes} minutes.
            </p>
        """
        return self._send(
            to_email,
            "Your password reset token",
            self._layout("Reset your password", body),
            dev_note=reset_url,
        )

    async def send_welcome_email(self, to_email: str, user_name: str) -> bool:
        body = f"""
            <p style="color: #37474F; line-height: 1.6;">
                Hi {escape(user_name)},<br><br>
                Welcome aboard. Pick a newspaper, choose a plan, and your morning paper
                will be delivered by a distributor near you.
            </p>
            {self._button(self._frontend_url, "Browse newspapers")}
        """
        return self._send(
            to_email, "Welcome to Paperboy!", self._layout("Welcome to Paperboy", body)
        )

    async def send_payment_confirmation_email(
        self,
        to_email: str,
        user_name: str,
        newspaper_name: str,
        amount: float,
        currency: str,
        end_date: str,
    ) -> bool:
        """Receipt sent once a subscription payment is verified."""
        body = f"""
            <p style="color: #37474F; line-height: 1.6;">
                Hi {escape(user_name)},<br><br>
                We received your payment of <strong>{escape(currency)} {amount:.2f}</strong>
                for <strong>{escape(newspaper_name)}</strong>. Deliveries start right away
                and your subscription runs until {escape(end_date)}.
            </p>
        """
        return self._send(
            to_email,
            f"Payment received for {newspaper_name}",
            self._layout("Payment confirmed", body),
        )

    @staticmethod
    def _button(url: str, label: str) -> str:
        return f"""
            <div style="text-align: center; margin: 32px 0;">
                <a href="{escape(url, quote=True)}" style="display: inline-block; background: #1565C0; color: white; text-decoration: none; padding: 14px 32px; border-radius: 8px; font-weight: 500;">
                    {escape(label)}
                </a>
            </div>
        """

    @staticmethod
    def _layout(heading: str, body: str) -> str:
        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #ECEFF1; padding: 40px 20px;">
            <div style="max-width: 560px; margin: 0 auto; background: white; border-radius: 12px; padding: 40px;">
                <h1 style="color: #0D47A1; font-size: 22px; margin: 0 0 24px;">Paperboy</h1>
                <h2 style="color: #263238; font-size: 18px; margin-bottom: 16px;">{escape(heading)}</h2>
                {body}
            </div>
        </body>
        </html>
        """


# Singleton instance
email_service = ResendEmailService()
