import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials

from poolladder.api.deps import bearer, client_ip, decode_admin_token, get_login_limiter
from poolladder.core.config import settings
from poolladder.core.security import create_access_token, password_hash_is_usable, verify_password
from poolladder.schemas.auth import LoginIn, LoginOut, VerifyIn, VerifyOut
from poolladder.services.rate_limit import LoginRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, request: Request, limiter: LoginRateLimiter = Depends(get_login_limiter)):
    ip = client_ip(request)
    retry_after = limiter.hit(ip)
    if retry_after is not None:
        minutes = max(1, -(-retry_after // 60))
        return JSONResponse(
            status_code=429,
            content={
                "detail": f"Too many login attempts. Please try again in {minutes} minute{'s' if minutes != 1 else ''}.",
                "retry_after": limiter.window,
            },
            headers={"Retry-After": str(retry_after)},
        )

    if not payload.password:
        raise HTTPException(400, "Password is required")

    if not password_hash_is_usable(settings.ADMIN_PASSWORD_HASH) or not settings.JWT_SECRET:
        logger.error("Login attempted but ADMIN_PASSWORD_HASH or JWT_SECRET is not configured")
        raise HTTPException(503, "Server configuration incomplete")

    if not verify_password(payload.password, settings.ADMIN_PASSWORD_HASH):
        logger.info("Failed login attempt from %s", ip)
        raise HTTPException(401, "Invalid password")

    token, expires_at = create_access_token(ip=ip)
    return LoginOut(token=token, expires_at=expires_at)

@router.post("/verify", response_model=VerifyOut)
def verify(
    payload: VerifyIn | None = None,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
):
    token = (payload.token if payload else None) or (creds.credentials if creds else None)
    if not token:
        raise HTTPException(401, "No token provided")
    decoded = decode_admin_token(token)
    return VerifyOut(
        role=decoded["role"],
        expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
    )
