# This project was developed with assistance from AI tools.
"""Outbound email over the Resend HTTP API.

Email is a side channel: every public function returns a bool and logs
failures instead of raising, so a mail outage never fails a submission.
Without ``RESEND_API_KEY`` sending is disabled and calls return False.
"""

import base64
import logging
from dataclasses import dataclass

import httpx

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailAttachment:
    filename: str
    content: bytes


def log_email_status(cfg: Settings = settings) -> None:
    """Log whether outbound email is configured. Called once at startup."""
    if cfg.RESEND_API_KEY:
        logger.info("Email: enabled (from=%s)", cfg.RESEND_FROM_EMAIL)
    else:
        logger.warning("Email: DISABLED (RESEND_API_KEY not set), receipts will not be mailed")


class EmailService:
    """Minimal Resend client."""

    def __init__(self, cfg: Settings = settings):
        self._cfg = cfg

    @property
    def enabled(self) -> bool:
        return bool(self._cfg.RESEND_API_KEY)

    def build_payload(
        self,
        to: str,
        subject: str,
        text: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> dict:
        payload = {
            "from": self._cfg.RESEND_FROM_EMAIL,
            "to": [to],
            "subject": subject,
            "text": text,
        }
        if attachments:
            payload["attachments"] = [
                {
                    "filename": a.filename,
                    "content": base64.b64encode(a.content).decode("ascii"),
                }
                for a in attachments
            ]
        return payload

    async def send(
        self,
        to: str,
        subject: str,
        text: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> bool:
        if not self.enabled:
            logger.info("Email disabled; skipping '%s' to %s", subject, to)
            return False

        payload = self.build_payload(to, subject, text, attachments)
        try:
            async with httpx.AsyncClient(
                base_url=self._cfg.RESEND_BASE_URL,
                timeout=self._cfg.EMAIL_TIMEOUT_SECONDS,
            ) as client:
                response = await client.post(
                    "/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self._cfg.RESEND_API_KEY}"},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Email send failed (to=%s subject=%s): %s", to, subject, exc)
            return False

        logger.info("Email sent: '%s' to %s", subject, to)
        return True


def get_email_service() -> EmailService:
    return EmailService(settings)


def portal_url(token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/invite/{token}"


async def send_client_receipt(
    *,
    to: str,
    client_name: str,
    receipt_number: str,
    summary_lines: list[str],
    receipt_pdf: bytes | None = None,
    update_url: str | None = None,
    service: EmailService | None = None,
) -> bool:
    """Send the registration confirmation with the receipt PDF attached."""
    service = service or get_email_service()
    summary = "\n".join(f"  - {line}" for line in summary_lines) or "  - Registration completed"
    text = (
        f"Hello {client_name or 'there'},\n\n"
        "Your life insurance policy information has been registered in the "
        "HeirVault private registry.\n\n"
        f"Receipt number: {receipt_number}\n\n"
        f"Summary:\n{summary}\n"
    )
    if update_url:
        text += f"\nTo update your information later, visit:\n{update_url}\n"
    text += "\nThank you for using HeirVault."

    attachments = None
    if receipt_pdf:
        attachments = [EmailAttachment(filename=f"{receipt_number}.pdf", content=receipt_pdf)]
    return await service.send(
        to,
        f"Your HeirVault Registration Confirmation - Receipt {receipt_number}",
        text,
        attachments,
    )


async def send_attorney_notification(
    *,
    client_name: str,
    action: str,
    details: dict[str, str] | None = None,
    to: str | None = None,
    service: EmailService | None = None,
) -> bool:
    """Tell the firm that a client registered, uploaded, or changed something."""
    to = to or settings.ATTORNEY_NOTIFICATION_EMAIL
    if not to:
        logger.debug("No attorney notification address configured")
        return False

    service = service or get_email_service()
    lines = [f"{client_name} submitted an update in HeirVault.", "", f"Action: {action}"]
    for key, value in (details or {}).items():
        lines.append(f"{key}: {value}")
    return await service.send(
        to,
        f"HeirVault Notification: {action} - {client_name}",
        "\n".join(lines),
    )


async def send_client_invite(
    *,
    to: str,
    client_name: str,
    token: str,
    service: EmailService | None = None,
) -> bool:
    service = service or get_email_service()
    text = (
        f"Hello {client_name},\n\n"
        "Your attorney has invited you to register your life insurance policies "
        "with HeirVault. Use the secure link below to get started:\n\n"
        f"{portal_url(token)}\n\n"
        "This link is personal to you. Do not forward it."
    )
    return await service.send(to, "You're invited to register your policies with HeirVault", text)
