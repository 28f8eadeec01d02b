"""Service for sending emails."""

import logging
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "SignDesk",
        base_url: str = "http://localhost:3000",
    ):
        self.smtp_host = smtp_host or os.getenv("SMTP_HOST", "")
        self.smtp_port = smtp_port or int(os.getenv("SMTP_PORT", "587"))
        self.smtp_username = smtp_username or os.getenv("SMTP_USERNAME", "")
        self.smtp_password = smtp_password or os.getenv("SMTP_PASSWORD", "")
        self.from_email = from_email or os.getenv("SMTP_FROM_EMAIL", "")
        self.from_name = from_name
        self.base_url = base_url.rstrip("/")
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def send_review_appreciation_email(self, to_email: str, name: str) -> bool:
        """
        Thank a participant who rated the signing experience highly.

        Args:
            to_email: Recipient email
            name: Recipient display name

        Returns:
            True if sent (or logged while SMTP is disabled), False otherwise
        """
        subject = "Thank you for your feedback - SignDesk"
        text_body = f"""
        Hi {name},

        Thank you for taking the time to review your signing experience.
        We are glad everything went smoothly.

        If SignDesk helped you, tell a colleague about it: {self.base_url}

        The SignDesk team
        """
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #1e293b;">Thank you, {name}!</h2>
                <p style="color: #475569; line-height: 1.6;">
                    Thank you for taking the time to review your signing experience.
                    We are glad everything went smoothly.
                </p>
                <p style="color: #475569; line-height: 1.6;">
                    If SignDesk helped you, tell a colleague about it:
                    <a href="{self.base_url}">{self.base_url}</a>
                </p>
                <p style="color: #94a3b8; font-size: 12px;">The SignDesk team</p>
            </body>
        </html>
        """
        return self._deliver(to_email, subject, html_body, text_body)

    def send_review_improvement_email(self, to_email: str, name: str) -> bool:
        """Follow up with a participant who gave a low rating."""
        subject = "Help us improve SignDesk"
        text_body = f"""
        Hi {name},

        Thank you for your review. We are sorry your signing experience was not
        everything it should have been. Reply to this email and tell us what went
        wrong; a member of our team reads every answer.

        The SignDesk team
        """
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #1e293b;">Hi {name},</h2>
                <p style="color: #475569; line-height: 1.6;">
                    Thank you for your review. We are sorry your signing experience was not
                    everything it should have been.
                </p>
                <p style="color: #475569; line-height: 1.6;">
                    Reply to this email and tell us what went wrong; a member of our team reads
                    every answer.
                </p>
                <p style="color: #94a3b8; font-size: 12px;">The SignDesk team</p>
            </body>
        </html>
        """
        return self._deliver(to_email, subject, html_body, text_body)

    def _deliver(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        if not self.enabled:
            # Development mode: no SMTP server configured
            logger.info("[EMAIL] %s -> %s", subject, to_email)
            return True
        return self._send_email(to_email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        """
        Send an email via SMTP.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML body
            text_body: Plain text body

        Returns:
            True if sent successfully, False otherwise
        """
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            part1 = MIMEText(text_body, "plain", "utf-8")
            part2 = MIMEText(html_body, "html", "utf-8")

            msg.attach(part1)
            msg.attach(part2)

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to_email, e)
            return False
