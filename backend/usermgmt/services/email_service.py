"""Service for sending verification emails through SendGrid."""

import logging
from typing import Optional
from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail, To
from usermgmt.core.config import settings
from usermgmt.core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Sends transactional email with the SendGrid SDK."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.SENDGRID_APIKEY
        self.from_email = from_email or settings.SENDGRID_FROM_EMAIL
        self.from_name = from_name or settings.SENDGRID_FROM_NAME
        self.base_url = (base_url or settings.VERIFY_BASE_URL).rstrip("/")

    def verification_link(self, token: str) -> str:
        return f"{self.base_url}/verify?token={token}"

    def build_verification_message(self, to_email: str, token: str) -> Mail:
        link = self.verification_link(token)
        return Mail(
            from_email=From(self.from_email, self.from_name),
            to_emails=To(to_email, "New User"),
            subject="Please verify your email address",
            plain_text_content=f"Please click the following link to verify your email: {link}",
            html_content=(
                "<p>Please click the following link to verify your email:</p>"
                f'<a href="{link}">Verify Email</a>'
            ),
        )

    def send_verification_email(self, to_email: str, token: str) -> None:
        """
        Send the verification link to to_email.

        Raises EmailDeliveryError when the API key is missing, the request
        fails, or SendGrid answers with an error status.
        """
        if not self.api_key:
            logger.error("SendGrid API key not found in environment variables")
            raise EmailDeliveryError("SendGrid API key not configured")

        client = SendGridAPIClient(self.api_key)
        try:
            response = client.send(self.build_verification_message(to_email, token))
        except HTTPError as e:
            # SDK raises on 4xx/5xx
            logger.error(f"SendGrid rejected verification email to {to_email}: {str(e)}")
            raise EmailDeliveryError()
        except OSError as e:
            # urllib URLError and socket failures
            logger.error(f"Failed to send verification email to {to_email}: {str(e)}")
            raise EmailDeliveryError()

        if response.status_code >= 300:
            logger.error(f"SendGrid rejected verification email to {to_email}: {response.status_code}")
            raise EmailDeliveryError()

        logger.info(f"Verification email sent to {to_email}, status code: {response.status_code}")
