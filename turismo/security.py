from __future__ import annotations

import time
from typing import Annotated, Callable, Iterable, Optional

from fastapi import Depends, Request, Response
from jose import JWTError, jwt

from .core.config import get_settings
from .core.exceptions import AuthenticationError, AuthorizationError
from .roles import Role, role_satisfies

REFRESH_COOKIE = "refresh_token"
REFRESH_COOKIE_PATH = "/api/v1/auth"
REFRESH_TOKEN_TYPE = "refresh"


def _now() -> int:
    return int(time.time())


def _refresh_audience(audience: str) -> str:
    return f"{audience}:refresh"


# ---------------------------------------------------------------------------
#  Basic JWT helpers
# ---------------------------------------------------------------------------
def create_token(
    sub: int | str,
    role: str,
    *,
    expires_in: Optional[int] = None,
    refresh: bool = False,
    **extra_claims,
) -> str:
    """Return a signed JWT including any *extra_claims*.

    Standard claims:
    • sub  – user identifier
    • role – user role string
    • iss / aud – issuer and audience from settings; refresh tokens get
      their own audience so they are never accepted as access tokens
    • exp  – expiry (unix epoch)
    """
    settings = get_settings()
    if expires_in is None:
        expires_in = (
            settings.REFRESH_TOKEN_EXPIRE_SECONDS if refresh else settings.ACCESS_TOKEN_EXPIRE_SECONDS
        )
    payload = {
        "sub": str(sub),
        "role": role,
        "iss": settings.JWT_ISSUER,
        "aud": _refresh_audience(settings.JWT_AUDIENCE) if refresh else settings.JWT_AUDIENCE,
        "exp": _now() + expires_in,
    }
    if refresh:
        payload["token_type"] = REFRESH_TOKEN_TYPE
    payload.update(extra_claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, *, refresh: bool = False) -> dict:
    """Verify *token* and return its payload."""
    settings = get_settings()
    audience = _refresh_audience(settings.JWT_AUDIENCE) if refresh else settings.JWT_AUDIENCE
    try:
        payload: dict = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=audience,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as exc:
        raise AuthenticationError("Invalid token") from exc
    if refresh and payload.get("token_type") != REFRESH_TOKEN_TYPE:
        raise AuthenticationError("Invalid token")
    return payload


# Convenience helper: returns *(access, refresh)* tokens pair
def mint_tokens(sub: int | str, role: str, **extra_claims) -> tuple[str, str]:
    """Return *(access, refresh)* pair embedding *extra_claims* in both."""
    access = create_token(sub, role, **extra_claims)
    refresh = create_token(sub, role, refresh=True, **extra_claims)
    return access, refresh


def set_refresh_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        REFRESH_COOKIE,
        token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_SECONDS,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path=REFRESH_COOKIE_PATH,
        domain=settings.COOKIE_DOMAIN,
    )


def clear_refresh_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(REFRESH_COOKIE, path=REFRESH_COOKIE_PATH, domain=settings.COOKIE_DOMAIN)


# ---------------------------------------------------------------------------
#  Dependencies
# ---------------------------------------------------------------------------
def _extract_token(req: Request) -> str | None:
    """Return JWT from Authorization header *or* the access_token cookie."""
    auth: str | None = req.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return req.cookies.get("access_token")


async def current_user(req: Request) -> dict:
    """FastAPI dependency returning the JWT payload or raises 401."""
    token = _extract_token(req)
    if not token:
        raise AuthenticationError("Missing credentials")
    return decode_token(token)


async def optional_user(req: Request) -> dict | None:
    """Like *current_user* but yields ``None`` for anonymous or invalid credentials."""
    token = _extract_token(req)
    if not token:
        return None
    try:
        return decode_token(token)
    except AuthenticationError:
        return None


def _to_role_str(value: "str | Role") -> str:
    """Return the *string* value of a Role or raw str."""
    if isinstance(value, Role):
        return value.value
    return str(value)


def role_required(*allowed: "str | Role | Iterable[str | Role]") -> Callable[[dict], dict]:
    """Return a dependency that checks *current_user* holds one of *allowed*.

    Roles are ranked, so an admin passes an agent check.

    Usage:
        @router.delete("/x", dependencies=[Depends(role_required(Role.admin))])
        async def admin_only():
            ...
    """
    # Flatten iterables (allow role_required([Role.admin, Role.agent]))
    if len(allowed) == 1 and isinstance(allowed[0], (list, tuple, set)):
        allowed = tuple(allowed[0])
    allowed_set = {_to_role_str(a) for a in allowed}

    async def _dep(user: Annotated[dict, Depends(current_user)]):
        role: str | None = user.get("role")
        if not any(role_satisfies(role, required) for required in allowed_set):
            raise AuthorizationError("Forbidden")
        return user

    return _dep
