from typing import Optional
from fastapi import APIRouter, Body, Depends, Request, Response

from turismo.api.v1.schemas import (
    LoginRequest, LoginResponse, RefreshTokenRequest, TokenResponse, UserOut, OkResponse,
)
from turismo.core import get_settings
from turismo.deps import SessionDep
from turismo.rate_limit import limiter
from turismo.security import (
    REFRESH_COOKIE, current_user, set_refresh_cookie, clear_refresh_cookie,
)
from turismo.services import AuthService


router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit(get_settings().RATE_LIMIT_LOGIN)
async def login(
    request: Request,
    payload: LoginRequest,
    response: Response,
    sess: SessionDep
):
    """Login with email and password; the refresh token is set as an HttpOnly cookie"""
    service = AuthService(sess)
    user, access_token, refresh_token = await service.authenticate_user(
        email=payload.email,
        password=payload.password
    )
    set_refresh_cookie(response, refresh_token)
    return LoginResponse(token=access_token, user=UserOut.model_validate(user))


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    request: Request,
    sess: SessionDep,
    payload: Optional[RefreshTokenRequest] = Body(None),
):
    """New access token from the refresh cookie, or ``refreshToken`` in the body"""
    token = request.cookies.get(REFRESH_COOKIE) or (payload.refresh_token if payload else None)
    access_token = await AuthService(sess).refresh_access_token(token)
    return TokenResponse(token=access_token)


@router.post("/logout", response_model=OkResponse)
async def logout(response: Response):
    clear_refresh_cookie(response)
    return OkResponse()


@router.get("/me", response_model=UserOut)
async def me(sess: SessionDep, user=Depends(current_user)):
    return await AuthService(sess).get_me(user.get("sub"))
