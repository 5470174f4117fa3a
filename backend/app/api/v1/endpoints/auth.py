from fastapi import APIRouter, Depends, Request, status

from app.core.rate_limiter import auth_rate_limit, strict_rate_limit
from app.modules.auth.dependencies import get_auth_service, get_current_principal
from app.schemas.auth import (
    AuthResponse,
    Principal,
    RefreshTokenRequest,
    UserLogin,
    UserRegister,
)
from app.services.auth_service import AuthService


router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@strict_rate_limit()
async def register(
    request: Request,
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new principal and sign it in (rate limited: 3/min)"""
    result = await auth_service.register(user_data)
    return {"success": True, "data": result}


@router.post("/login", response_model=AuthResponse)
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login with email and password (rate limited: 5/min)"""
    result = await auth_service.login(
        credentials.email,
        credentials.password,
        role=credentials.role,
        admin_code=credentials.admin_code,
    )
    return {"success": True, "data": result}


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(
    body: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange a refresh token for a new token pair"""
    result = await auth_service.refresh(body.refresh_token)
    return {"success": True, "data": result}


@router.get("/verify")
async def verify(principal: Principal = Depends(get_current_principal)):
    """Echo the claims of a valid access token"""
    return {"success": True, "user": principal.model_dump()}


@router.get("/me")
async def get_me(
    principal: Principal = Depends(get_current_principal),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Get current principal's profile"""
    user = await auth_service.get_user(principal.id)
    return {"success": True, "data": user}
