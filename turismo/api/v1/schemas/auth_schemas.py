from typing import Optional
from pydantic import EmailStr, Field

from .common import CamelModel


class LoginRequest(CamelModel):
    """Schema for login request"""
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserOut(CamelModel):
    """Schema for user response"""
    id: int
    name: str
    email: str
    role: str


class LoginResponse(CamelModel):
    """Schema for login response; the refresh token travels in a cookie"""
    token: str
    user: UserOut


class RefreshTokenRequest(CamelModel):
    """Fallback for clients that cannot send the refresh cookie"""
    refresh_token: Optional[str] = None


class TokenResponse(CamelModel):
    token: str
