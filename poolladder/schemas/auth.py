from datetime import datetime

from pydantic import BaseModel, Field


class LoginIn(BaseModel):
    password: str | None = Field(default=None, max_length=256)


class LoginOut(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    expires_at: datetime


class VerifyIn(BaseModel):
    token: str | None = None


class VerifyOut(BaseModel):
    valid: bool = True
    role: str
    expires_at: datetime

