import logging
from typing import Optional

from ..core.config import Settings, get_settings
from ..core.exceptions import DependencyFailure
from .email_service import EmailService, render_template

logger = logging.getLogger(__name__)


class ContactService:
    """Forwards the public contact form to the operator inbox"""

    def __init__(self, settings: Optional[Settings] = None, email: Optional[EmailService] = None):
        self.settings = settings or get_settings()
        self.email = email or EmailService(self.settings)

    async def send_message(
        self,
        *,
        name: str,
        email: str,
        message: str,
        phone: Optional[str] = None,
        page_url: Optional[str] = None,
    ) -> str:
        ctx = {
            "name": name, "email": email, "message": message,
            "phone": phone, "page_url": page_url, "brand": self.settings.BRAND_NAME,
        }
        try:
            return await self.email.send(
                to=[self.settings.CONTACT_TO],
                bcc=self.settings.CONTACT_BCC,
                subject=f"Nuevo contacto web: {name}",
                html=render_template("emails/contact.html", **ctx),
                text=render_template("emails/contact.txt", **ctx),
                reply_to=self.settings.SMTP_REPLY_TO or email,
            )
        except Exception as exc:
            logger.exception("Contact email from %s failed", email)
            raise DependencyFailure("mail", "Could not send the message") from exc
