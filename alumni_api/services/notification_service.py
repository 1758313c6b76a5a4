"""
Notification Service
====================
Bulk email over SMTP (aiosmtplib) and bulk SMS over an HTTP gateway (httpx).

Both bulk senders return ``{"successful": n, "failed": m}``; the counts are
passed through to API clients unchanged. A delivery failure for a single
recipient is logged and counted, never raised.
"""

import asyncio
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, List, Optional

import aiosmtplib
import httpx

from alumni_api.core.config import settings
from alumni_api.core.logging_config import logger
from alumni_api.models.user import User
from alumni_api.schemas.common import NotificationChannel


class NotificationService:
    """Async email + SMS delivery"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.smtp_use_tls = settings.SMTP_USE_TLS
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME

        self.sms_gateway_url = settings.SMS_GATEWAY_URL
        self.sms_api_key = settings.SMS_GATEWAY_API_KEY
        self.sms_sender_id = settings.SMS_SENDER_ID
        self.sms_timeout = settings.SMS_REQUEST_TIMEOUT

    @property
    def email_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    @property
    def sms_configured(self) -> bool:
        return bool(self.sms_gateway_url and self.sms_api_key)

    # ==========================================
    # Email
    # ==========================================

    async def send_email(
        self,
        to_email: str,
        subject: str,
        text_content: str,
        html_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if successful, False otherwise.
        """
        if not self.email_configured:
            logger.warning("[Email] Email service not configured, skipping email send")
            return False

        try:
            message = MIMEMultipart("alternative")
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = to_email
            message["Subject"] = subject

            message.attach(MIMEText(text_content, "plain"))
            if html_content:
                message.attach(MIMEText(html_content, "html"))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=self.smtp_use_tls
            )

            logger.info(f"[Email/SMTP] Successfully sent email to {to_email}: {subject}")
            return True

        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return False

    async def send_bulk_email(
        self,
        recipients: List[Dict[str, str]],  # [{"email": "...", "name": "..."}]
        subject: str,
        message: str,
    ) -> Dict[str, int]:
        """
        Send the same message to many recipients.

        ``{{name}}`` in the message is replaced with each recipient's name.
        """
        successful = 0
        failed = 0

        for recipient in recipients:
            email = recipient.get("email")
            if not email:
                failed += 1
                continue

            body = message.replace("{{name}}", recipient.get("name", "Alumni"))
            if await self.send_email(email, subject, body):
                successful += 1
            else:
                failed += 1

            # Small delay to avoid provider throttling
            await asyncio.sleep(0.1)

        logger.info(f"[Email] Bulk send complete: {successful} successful, {failed} failed")
        return {"successful": successful, "failed": failed}

    # ==========================================
    # SMS
    # ==========================================

    async def send_sms(self, client: httpx.AsyncClient, phone: str, message: str) -> bool:
        if not self.sms_configured:
            logger.warning("[SMS] SMS gateway not configured, skipping SMS send")
            return False

        try:
            response = await client.post(
                self.sms_gateway_url,
                json={"to": phone, "from": self.sms_sender_id, "message": message},
                headers={"Authorization": f"Bearer {self.sms_api_key}"},
            )
            response.raise_for_status()
            logger.info(f"[SMS] Successfully sent SMS to {phone}")
            return True
        except httpx.HTTPError as e:
            logger.error(f"[SMS] Failed to send SMS to {phone}: {e}")
            return False

    async def send_bulk_sms(self, phone_numbers: List[str], message: str) -> Dict[str, int]:
        successful = 0
        failed = 0

        async with httpx.AsyncClient(timeout=self.sms_timeout) as client:
            for phone in phone_numbers:
                if not phone:
                    failed += 1
                    continue
                if await self.send_sms(client, phone, message):
                    successful += 1
                else:
                    failed += 1

        logger.info(f"[SMS] Bulk send complete: {successful} successful, {failed} failed")
        return {"successful": successful, "failed": failed}


async def notify_users(
    service: NotificationService,
    users: List[User],
    channel: NotificationChannel,
    message: str,
    subject: Optional[str] = None,
    sms_message: Optional[str] = None,
) -> Dict[str, Dict[str, int]]:
    """
    Deliver ``message`` to ``users`` over the requested channel(s).

    Users who disabled the matching notification preference are skipped;
    SMS additionally requires a phone number. Both channels are always
    reported, with zero counts for a channel that was not used.
    """
    results = {
        "email": {"successful": 0, "failed": 0},
        "sms": {"successful": 0, "failed": 0},
    }

    if channel in (NotificationChannel.EMAIL, NotificationChannel.BOTH):
        recipients = [
            {"email": u.email, "name": u.first_name}
            for u in users
            if u.email_notifications is not False
        ]
        if recipients:
            results["email"] = await service.send_bulk_email(recipients, subject or "", message)

    if channel in (NotificationChannel.SMS, NotificationChannel.BOTH):
        phones = [u.phone for u in users if u.phone and u.sms_notifications is not False]
        if phones:
            results["sms"] = await service.send_bulk_sms(phones, sms_message or message)

    return results


notification_service = NotificationService()


def get_notification_service() -> NotificationService:
    """FastAPI dependency; overridden in tests"""
    return notification_service
