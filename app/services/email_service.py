"""
Email Service
Registration confirmation emails
"""

import html
import logging
from dataclasses import dataclass
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

import aiosmtplib

from app.config import settings
from app.errors import NotificationError

logger = logging.getLogger(__name__)


@dataclass
class ConfirmationEmail:
    """Template data for a registration confirmation"""
    trans_id: str
    email: str
    contact_person: str
    province: str
    lgu: str
    contact_number: str
    regdate: datetime
    participant_count: int
    conference_name: Optional[str] = None
    view_url: Optional[str] = None

    @property
    def resolved_conference_name(self) -> str:
        return self.conference_name or settings.DEFAULT_CONFERENCE_NAME

    @property
    def resolved_view_url(self) -> str:
        return self.view_url or f"{settings.APP_URL.rstrip('/')}/view/{self.trans_id}"


def format_regdate(regdate: datetime) -> str:
    return regdate.strftime("%B %d, %Y %I:%M %p")


class EmailService:
    """Service for sending emails"""

    @staticmethod
    def build_confirmation_message(data: ConfirmationEmail) -> MIMEMultipart:
        conference_name = data.resolved_conference_name
        view_url = data.resolved_view_url
        registered_at = format_regdate(data.regdate)
        hotline = (
            f"please contact the registration team at {settings.REGISTRATION_HOTLINE}"
            if settings.REGISTRATION_HOTLINE else "please reply to this email"
        )

        message = MIMEMultipart("alternative")
        message["Subject"] = f"Registration Confirmation - {conference_name}"
        message["From"] = settings.EMAIL_FROM
        message["To"] = data.email

        html_body = f"""
        <html>
          <body style="font-family: Arial, sans-serif; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
              <h2 style="color: #2c3e50;">{html.escape(conference_name)}</h2>
              <p>Dear {html.escape(data.contact_person)},</p>

              <p>Your registration has been successfully submitted. Please upload your proof of payment within 24 hours.</p>

              <div style="background-color: #f8f9fa; padding: 15px; border-left: 4px solid #667eea; margin: 20px 0;">
                <p><strong>REGISTRATION ID</strong></p>
                <p style="font-size: 24px; letter-spacing: 2px;"><strong>{html.escape(data.trans_id)}</strong></p>
              </div>

              <table style="width: 100%; border-collapse: collapse;">
                <tr><td>Registration Date &amp; Time:</td><td>{html.escape(registered_at)}</td></tr>
                <tr><td>Province:</td><td>{html.escape(data.province)}</td></tr>
                <tr><td>LGU:</td><td>{html.escape(data.lgu)}</td></tr>
                <tr><td>Contact Number:</td><td>{html.escape(data.contact_number)}</td></tr>
                <tr><td>Number of Participants:</td><td>{data.participant_count}</td></tr>
                <tr><td>Status:</td><td>PENDING</td></tr>
              </table>

              <p>
                <a href="{html.escape(view_url)}" style="background-color: #667eea; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px; display: inline-block;">
                  View Registration Details
                </a>
              </p>

              <p>If you have any questions or need to make changes to your registration, {html.escape(hotline)}.</p>

              <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">
              <p style="color: #999; font-size: 12px;">This is an automated confirmation email. Please do not reply to this message.</p>
            </div>
          </body>
        </html>
        """

        text_body = f"""
{conference_name} - Registration Confirmation

Dear {data.contact_person},

Your registration has been successfully submitted. Please upload your proof of payment within 24 hours.

REGISTRATION ID: {data.trans_id}

Registration Date & Time: {registered_at}
Province: {data.province}
LGU: {data.lgu}
Contact Number: {data.contact_number}
Number of Participants: {data.participant_count}
Status: PENDING

View your registration: {view_url}

If you have any questions or need to make changes to your registration, {hotline}.
        """

        message.attach(MIMEText(text_body, "plain"))
        message.attach(MIMEText(html_body, "html"))
        return message

    @staticmethod
    async def send_registration_confirmation(data: ConfirmationEmail) -> bool:
        """
        Send the confirmation email for a new registration

        Returns:
            True if sent, False if SMTP is not configured

        Raises:
            NotificationError: SMTP delivery failed
        """
        message = EmailService.build_confirmation_message(data)

        if not (settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASSWORD):
            logger.info(
                "SMTP not configured, skipping confirmation email to %s (subject: %s)",
                data.email, message["Subject"]
            )
            return False

        try:
            async with aiosmtplib.SMTP(hostname=settings.SMTP_HOST, port=settings.SMTP_PORT) as smtp:
                await smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                await smtp.sendmail(settings.EMAIL_FROM, data.email, message.as_string())
        except Exception as e:
            raise NotificationError(f"Confirmation email to {data.email} failed: {e}") from e

        logger.info("Confirmation email sent for %s", data.trans_id)
        return True


# Create singleton instance
email_service = EmailService()
