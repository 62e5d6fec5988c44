import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from openai import OpenAI
from blogsmith.core.config import settings
from blogsmith.core.exceptions import Unauthenticated
from blogsmith.core.security import InvalidToken, verify_access_token
from blogsmith.services.generation_service import GenerationGateway

logger = logging.getLogger(__name__)

# OAuth2 password bearer scheme - extracts token from "Authorization: Bearer <token>"
# auto_error=False returns None for a missing or non-Bearer header so we control the error body
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Verified caller identity taken from token claims."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


def _resolve_identity(token: str) -> Identity:
    payload = verify_access_token(token)
    return Identity(id=payload.sub, name=payload.name, email=payload.email)


async def get_current_identity(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
) -> Identity:
    """
    Require a valid bearer token.

    Missing or malformed headers are rejected without attempting verification.
    Expired and forged tokens get the same 401 response.
    """
    if not token:
        raise Unauthenticated("Not authorized, no token")

    try:
        identity = _resolve_identity(token)
    except InvalidToken as e:
        logger.info(f"Rejected bearer token: {e}")
        raise Unauthenticated("Not authorized, invalid token")

    request.state.identity = identity
    return identity


async def get_optional_identity(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
) -> Optional[Identity]:
    """Attach identity when a valid token is present; never rejects the request"""
    request.state.identity = None
    if not token:
        return None

    try:
        identity = _resolve_identity(token)
    except InvalidToken:
        logger.debug("Invalid token provided for public route")
        return None

    request.state.identity = identity
    return identity


@lru_cache
def get_generation_gateway() -> GenerationGateway:
    """
    Process-scoped generation gateway.

    The OpenAI client is built once; without an API key the gateway has no
    client and every generation fails cleanly.
    """
    client = None
    if settings.OPENAI_API_KEY:
        # Retries are driven by the model roster, not the SDK
        client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            max_retries=0,
        )
    else:
        logger.warning("OPENAI_API_KEY is not set; content generation is disabled")

    return GenerationGateway(
        client=client,
        models=settings.get_openai_models(),
        max_tokens=settings.GENERATION_MAX_TOKENS,
        temperature=settings.GENERATION_TEMPERATURE,
        timeout=settings.GENERATION_TIMEOUT_SECONDS,
        min_title_length=settings.GENERATION_MIN_TITLE_LENGTH,
        min_content_length=settings.GENERATION_MIN_CONTENT_LENGTH,
    )
