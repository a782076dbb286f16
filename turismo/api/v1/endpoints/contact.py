from fastapi import APIRouter, Request

from turismo.api.v1.schemas import ContactIn, ContactOut
from turismo.core import get_settings
from turismo.rate_limit import limiter
from turismo.services import ContactService


router = APIRouter()


@router.post("", response_model=ContactOut)
@limiter.limit(get_settings().RATE_LIMIT_CONTACT)
async def contact(request: Request, payload: ContactIn):
    """Forward a contact form message to the operator"""
    await ContactService().send_message(
        name=payload.name.strip(),
        email=payload.email,
        message=payload.message.strip(),
        phone=payload.phone,
        page_url=payload.page_url,
    )
    return ContactOut(message="Message sent")
