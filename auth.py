"""
Token service: stateless, signed, time-bound identity tokens.

There is no server-side revocation list. Logging out is the client discarding
its token; a token stays valid until it expires.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi.security import OAuth2PasswordBearer

from config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from errors import TokenExpired, TokenInvalid

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Decodes and checks a token, returning its payload.

    Raises TokenExpired past the expiration instant and TokenInvalid for a bad
    signature or a malformed payload.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], options={"require": ["exp", "sub"]})
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidTokenError:
        raise TokenInvalid()
    if not isinstance(payload.get("sub"), str) or not payload["sub"]:
        raise TokenInvalid()
    return payload


def issue_token(user_id: str) -> str:
    return create_access_token(data={"sub": user_id})


def resolve_user_id(token: str) -> str:
    return verify_token(token)["sub"]
