from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from ..core.config import Settings, get_settings
from ..timeutils import parse_timezone
from .email_service import EmailService, Attachment, render_template
from .pdf_service import render_booking_pdf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingNotice:
    """Everything a notifier needs about a fresh booking, detached from the ORM."""

    booking_id: str
    status: str
    date: datetime
    adults: int
    children: int
    customer_name: str
    customer_email: str
    customer_phone: Optional[str]
    customer_country: Optional[str]
    customer_language: str
    notes: Optional[str]
    total_price: Decimal
    currency: str
    package_id: str
    package_title: str
    package_slug: str
    package_city: Optional[str] = None


class Notifier(ABC):
    """Receives booking events; implementations may raise, callers log."""

    @abstractmethod
    async def booking_created(self, notice: BookingNotice) -> None:
        ...


class EmailNotifier(Notifier):
    """Customer confirmation and operator alert, each with the PDF attached."""

    def __init__(self, settings: Optional[Settings] = None, email: Optional[EmailService] = None):
        self.settings = settings or get_settings()
        self.email = email or EmailService(self.settings)
        self.tz = parse_timezone(self.settings.BUSINESS_TIMEZONE)

    def _context(self, notice: BookingNotice) -> dict:
        return {
            "notice": notice,
            "brand": self.settings.BRAND_NAME,
            "company": self.settings.COMPANY_NAME,
            "when": notice.date.astimezone(self.tz).strftime("%d/%m/%Y %H:%M"),
            "total": f"{notice.total_price:,.2f}",
        }

    async def booking_created(self, notice: BookingNotice) -> None:
        s = self.settings
        ctx = self._context(notice)
        pdf = Attachment(
            filename=f"reserva-{notice.package_slug or 'paquete'}.pdf",
            content=await asyncio.to_thread(
                render_booking_pdf, notice, brand=s.BRAND_NAME, company=s.COMPANY_NAME, tz=self.tz
            ),
            mime_type="application/pdf",
        )

        to_customer = self.email.send(
            to=[notice.customer_email],
            subject=f"Reserva recibida: {notice.package_title}",
            html=render_template("emails/booking_confirmation.html", audience="customer", **ctx),
            text=render_template("emails/booking_confirmation.txt", audience="customer", **ctx),
            reply_to=s.SMTP_REPLY_TO or s.CONTACT_TO,
            attachments=[pdf],
        )
        to_operator = self.email.send(
            to=[s.CONTACT_TO],
            bcc=s.CONTACT_BCC,
            subject=f"Nueva reserva: {notice.package_title} ({notice.customer_name})",
            html=render_template("emails/booking_confirmation.html", audience="operator", **ctx),
            text=render_template("emails/booking_confirmation.txt", audience="operator", **ctx),
            reply_to=notice.customer_email,
            attachments=[pdf],
        )

        results = await asyncio.gather(to_customer, to_operator, return_exceptions=True)
        failures = 0
        for audience, result in zip(("customer", "operator"), results):
            if isinstance(result, BaseException):
                failures += 1
                logger.error(
                    "Booking %s %s email failed: %s", notice.booking_id, audience, result
                )
            else:
                logger.info("Booking %s %s email: %s", notice.booking_id, audience, result)
        if failures == len(results):
            raise RuntimeError(f"All booking emails failed for {notice.booking_id}")


@lru_cache()
def get_notifier() -> Notifier:
    """Process-wide notifier used by the API"""
    return EmailNotifier()
