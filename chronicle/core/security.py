import hashlib

from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.security import HTTPBearer


BEARER_TOKEN_REQUIRED = "Authorization Bearer token is required"

bearer_scheme = HTTPBearer(auto_error=False)


def parse_bearer_header(value: str | None) -> str | None:
    """Return the token of an `Authorization: Bearer <token>` header value."""

    if not value:
        return None
    scheme, _, token = value.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def extract_bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    """Return the GitHub token the caller wants stats for.

    Raises:
        HTTPException: 401 if credentials are missing, use another scheme or are blank.
    """

    token = None
    if credentials is not None:
        token = parse_bearer_header(f"{credentials.scheme} {credentials.credentials}")
    if token is None:
        raise HTTPException(status_code=401, detail=BEARER_TOKEN_REQUIRED)
    return token


def token_fingerprint(token: str) -> str:
    """Short sha256 digest that identifies a token without keeping it."""

    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
