from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import jwt
from fastapi import Cookie, Depends, Header, HTTPException, status
from pydantic import ValidationError

from .config import Settings, get_settings
from .schemas import TokenIdentity

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(days=7)
TOKEN_COOKIE_NAME = "token"

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenError(Exception):
    """Base class for session token verification failures."""


class TokenExpiredError(TokenError):
    pass


class InvalidTokenError(TokenError):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Stored value is not a hash this context recognises
        return False


def create_access_token(
    identity: TokenIdentity,
    secret: str,
    ttl: timedelta = ACCESS_TOKEN_EXPIRE,
    algorithm: str = ALGORITHM,
    issued_at: Optional[datetime] = None,
) -> str:
    issued_at = issued_at or datetime.now(timezone.utc)
    payload = identity.model_dump()
    payload.update({"iat": issued_at, "exp": issued_at + ttl})
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str = ALGORITHM) -> TokenIdentity:
    """
    Verify a session token and return the identity it carries.

    Raises:
        TokenExpiredError: the signature is valid but ``exp`` has passed
        InvalidTokenError: any other failure (signature, format, claims)
    """
    try:
        data = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired") from exc
    except jwt.PyJWTError as exc:
        raise InvalidTokenError("Invalid token") from exc

    try:
        return TokenIdentity.model_validate(data)
    except ValidationError as exc:
        raise InvalidTokenError("Invalid token") from exc


def get_current_identity(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    token_cookie: Optional[str] = Cookie(default=None, alias=TOKEN_COOKIE_NAME),
    settings: Settings = Depends(get_settings),
) -> TokenIdentity:
    """
    Resolve the caller's identity from a Bearer header or the session cookie.

    A present but malformed Authorization header is rejected outright; the
    cookie is only consulted when no header was sent.
    """
    if authorization is not None:
        scheme, _, token = authorization.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            logger.info("Rejected request with malformed Authorization header")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    elif token_cookie:
        token = token_cookie
    else:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        return decode_access_token(token, settings.JWT_SECRET, settings.JWT_ALGORITHM)
    except TokenError as exc:
        logger.info("Rejected session token: %s", exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
