# =============================================================================
# Email Delivery Integration (AWS SES)
# =============================================================================
#
# Setup:
#   1. Verify your sending email in AWS SES console
#   2. Set env vars:
#      - AWS_SES_FROM_EMAIL=noreply@yourdomain.com
#      - AWS_ACCESS_KEY_ID=...
#      - AWS_SECRET_ACCESS_KEY=...
#      - AWS_REGION=us-east-1
#
# Sending is best effort: failures are logged and reported as False,
# never raised, so a mail outage cannot fail a registration or login.
#
# =============================================================================

from __future__ import annotations

import html
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from blogapi.config import Settings, get_settings

logger = logging.getLogger(__name__)


# =============================================================================
# Email Templates
# =============================================================================

TEMPLATES = {
    "verify_email": {
        "subject": "Verify Your Email",
        "html": """
        <div>
            <p>Hi {username}, click on the link below to verify your email</p>
            <a href="{link}">Verify</a>
        </div>
        """,
    },

    "password_reset": {
        "subject": "Reset Password",
        "html": """
        <div>
            <p>Click on the link below to reset your password</p>
            <a href="{link}">Reset Password</a>
            <p>If you didn't request this, you can safely ignore this email.</p>
        </div>
        """,
    },
}


# =============================================================================
# Email Service
# =============================================================================

class EmailService:
    """Send emails via AWS SES."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._client = None

    @property
    def client(self):
        """Lazy-load SES client."""
        if self._client is None and self.settings.use_aws:
            self._client = boto3.client(
                'ses',
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
            )
        return self._client

    @property
    def is_configured(self) -> bool:
        """Check if email sending is properly configured."""
        return self.settings.use_aws and bool(self.settings.aws_ses_from_email)

    async def send(self, to: str, subject: str, html_body: str) -> bool:
        """
        Send one email.

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.is_configured:
            logger.warning(f"Email not configured - would send '{subject}' to {to}")
            logger.info(f"Email content: {html_body.strip()}")
            return False

        try:
            response = self.client.send_email(
                Source=self.settings.aws_ses_from_email,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": html_body, "Charset": "UTF-8"},
                    },
                },
            )
            logger.info(f"Email sent to {to}: {subject} (MessageId: {response['MessageId']})")
            return True

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

    async def send_template(self, to: str, template: str, **data: str) -> bool:
        """Render a named template and send it."""
        tpl = TEMPLATES[template]
        values = {key: html.escape(value) for key, value in data.items()}
        return await self.send(to, tpl["subject"], tpl["html"].format(**values))

    async def send_verification(self, email: str, username: str, user_id: str, token: str) -> bool:
        """Send the account verification link."""
        link = f"{self.settings.client_domain}/users/{user_id}/verify/{token}"
        return await self.send_template(email, "verify_email", username=username, link=link)

    async def send_password_reset(self, email: str, user_id: str, token: str) -> bool:
        """Send the password reset link."""
        link = f"{self.settings.client_domain}/reset-password/{user_id}/{token}"
        return await self.send_template(email, "password_reset", link=link)

