"""Outbound email through the Resend HTTP API. Best-effort: failures are logged, never raised."""

import html
import logging
from typing import TYPE_CHECKING

import httpx

from blogai.models import Post, User

if TYPE_CHECKING:
    from blogai.core.config import Settings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SEC = 15.0

WELCOME_TEXT = (
    "Hello {name},\n\n"
    "Thank you for joining BlogAI! We're excited to have you on board.\n\n"
    "With BlogAI, you can create engaging blog posts with AI assistance, manage your "
    "writing projects in one place, and get inspiration when you need it.\n\n"
    "Happy writing!\nThe BlogAI Team"
)


class Mailer:
    def __init__(self, api_key: str | None, base_url: str, sender: str) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.sender = sender

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Mailer":
        api_key = settings.RESEND_API_KEY.get_secret_value() if settings.RESEND_API_KEY else None
        return cls(api_key=api_key, base_url=settings.RESEND_BASE_URL, sender=settings.EMAIL_FROM)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def send(
        self,
        to: str,
        subject: str,
        text: str,
        html_body: str | None = None,
    ) -> bool:
        """Send one email; returns True on success."""
        if not self.enabled:
            logger.info("Email skipped (RESEND_API_KEY unset)", extra={"subject": subject})
            return False
        payload: dict[str, object] = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "text": text,
        }
        if html_body:
            payload["html"] = html_body
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(REQUEST_TIMEOUT_SEC)) as client:
                response = await client.post(
                    f"{self.base_url}/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.warning(
                "Email send failed",
                extra={"subject": subject, "reason": type(e).__name__},
            )
            return False
        if response.status_code >= 400:
            logger.warning(
                "Email send rejected",
                extra={"subject": subject, "status_code": response.status_code},
            )
            return False
        logger.info("Email sent", extra={"subject": subject})
        return True

    async def send_welcome(self, account: User) -> bool:
        name = account.name or account.email
        return await self.send(
            to=account.email,
            subject="Welcome to BlogAI!",
            text=WELCOME_TEXT.format(name=name),
        )

    async def send_publication_notice(self, account: User, post: Post) -> bool:
        subject = f"New Blog Published: {post.title}"
        text = (
            f"Hello {account.name or account.email},\n\n"
            f'Your post "{post.title}" is now published.\n\n{post.excerpt}\n'
        )
        html_body = (
            "<div style=\"font-family: Arial, sans-serif; max-width: 600px;\">"
            f"<h2>{html.escape(post.title)}</h2>"
            f"<p>{html.escape(post.excerpt)}</p>"
            "</div>"
        )
        return await self.send(to=account.email, subject=subject, text=text, html_body=html_body)
