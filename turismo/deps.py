from typing import Annotated, Optional
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from turismo.core import get_settings
from turismo.infrastructure import get_session
from turismo.services.notification_service import Notifier, get_notifier
from turismo.timeutils import Clock, utcnow


def get_clock() -> Clock:
    """Current-time source; tests override it with a fixed clock"""
    return utcnow


def get_base_url(request: Request) -> str:
    """Base for absolute media URLs: PUBLIC_BASE_URL or the request's own origin"""
    return get_settings().PUBLIC_BASE_URL or str(request.base_url).rstrip("/")


# Type alias for dependency injection
SessionDep = Annotated[AsyncSession, Depends(get_session)]
ClockDep = Annotated[Clock, Depends(get_clock)]
NotifierDep = Annotated[Optional[Notifier], Depends(get_notifier)]
BaseUrlDep = Annotated[str, Depends(get_base_url)]
