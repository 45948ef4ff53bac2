"""WhatsApp hand-off links.

The platform never takes payment.  Checkout and certificate requests end
in a ``wa.me`` link with a prefilled message; staff finish the sale or
issue the certificate in the chat.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from urllib.parse import quote

from inspira.core.config import SETTINGS
from inspira.models.course import Course
from inspira.services.completion import CourseCompleted
from inspira.services.coupon_service import final_price

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CheckoutQuote:
    course_id: str
    price: Decimal
    discount_percentage: int
    discount_amount: Decimal
    final_price: Decimal
    whatsapp_url: str


def whatsapp_link(number: str, message: str) -> str:
    return f"https://wa.me/{number}?text={quote(message)}"


def _brl(amount: Decimal) -> str:
    return f"R$ {amount:.2f}".replace(".", ",")


def build_quote(
    course: Course, discount_percentage: int = 0, *, number: str | None = None
) -> CheckoutQuote:
    price = course.price
    total = final_price(price, discount_percentage) if discount_percentage else price
    message = (
        f'Olá! Tenho interesse no curso "{course.title}". '
        f"O valor final, com o desconto que apliquei, ficou em {_brl(total)}. "
        "Poderia me ajudar a finalizar a matrícula?"
    )
    return CheckoutQuote(
        course_id=course.id,
        price=price,
        discount_percentage=discount_percentage,
        discount_amount=price - total,
        final_price=total,
        whatsapp_url=whatsapp_link(number or SETTINGS.checkout_whatsapp_number, message),
    )


def certificate_request_link(
    course_title: str, student_name: str, *, number: str | None = None
) -> str:
    message = (
        f'Olá! Concluí o curso "{course_title}" e gostaria de solicitar '
        f"meu certificado. Meu nome é {student_name}."
    )
    return whatsapp_link(number or SETTINGS.support_whatsapp_number, message)


def log_certificate_due(event: CourseCompleted) -> None:
    """Completion listener: leave staff a record of a certificate to issue.

    The learner asks for it over WhatsApp; this line is what support
    matches the request against.
    """
    logger.info(
        "Certificate due  student=%s course=%s title=%r performance=%.1f",
        event.student_id,
        event.course_id,
        event.course_title,
        event.performance,
        extra={"student_id": event.student_id, "course_id": event.course_id},
    )
