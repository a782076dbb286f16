from typing import Optional
from pydantic import EmailStr, Field

from .common import CamelModel


class ContactIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    message: str = Field(..., min_length=5, max_length=5000)
    phone: Optional[str] = Field(None, max_length=40)
    page_url: Optional[str] = Field(None, max_length=500)


class ContactOut(CamelModel):
    ok: bool = True
    message: str
