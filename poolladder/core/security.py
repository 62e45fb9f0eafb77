import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt

from poolladder.core.config import settings

ALGO = "HS256"
ADMIN_ROLE = "admin"

PBKDF2_ITERATIONS = 10_000
PBKDF2_KEY_LENGTH = 64

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def create_access_token(role: str = ADMIN_ROLE, ip: str | None = None) -> tuple[str, datetime]:
    issued = now_utc()
    exp = issued + timedelta(hours=settings.JWT_ACCESS_HOURS)
    payload = {"sub": role, "role": role, "type": "access", "iat": issued, "exp": exp}
    if ip is not None:
        payload["ip"] = ip
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGO), exp

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGO])

def hash_password(password: str) -> str:
    raw = password.encode("utf-8")
    return bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")

def pbkdf2_hex(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac(
        "sha512", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS, PBKDF2_KEY_LENGTH
    ).hex()

def verify_password(password: str, password_hash: str) -> bool:
    # bcrypt hashes start with "$2"; anything else is the "salt:hex" PBKDF2 format
    if password_hash.startswith("$2"):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False
    salt, sep, stored = password_hash.partition(":")
    if not sep or not salt or not stored:
        return False
    return hmac.compare_digest(pbkdf2_hex(password, salt), stored)

def password_hash_is_usable(password_hash: str | None) -> bool:
    if not password_hash or password_hash == "defaulthash":
        return False
    if password_hash.startswith("$2"):
        return True
    salt, sep, stored = password_hash.partition(":")
    return bool(sep and salt and stored)
