from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError

from poolladder.core.config import settings
from poolladder.core.security import ADMIN_ROLE, decode_token
from poolladder.services.ladder import LadderStore
from poolladder.services.rate_limit import LoginRateLimiter
from poolladder.storage.repository import LadderRepository

bearer = HTTPBearer(auto_error=False)


def get_store(request: Request) -> LadderStore:
    return request.app.state.store


def get_repository(request: Request) -> LadderRepository:
    return request.app.state.repository


def get_login_limiter(request: Request) -> LoginRateLimiter:
    return request.app.state.login_limiter


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def decode_admin_token(token: str) -> dict:
    if not settings.JWT_SECRET:
        raise HTTPException(status_code=503, detail="Server configuration incomplete")
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type")
    if payload.get("role") != ADMIN_ROLE:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return payload


def require_admin(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> dict:
    if creds is None:
        raise HTTPException(status_code=401, detail="No token provided")
    return decode_admin_token(creds.credentials)
