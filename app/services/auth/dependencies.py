"""FastAPI dependencies for authentication."""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import Unauthorized
from app.schemas.auth import Identity
from app.services.auth.base import AuthProvider

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_provider(request: Request) -> AuthProvider:
    """Return the provider constructed at application startup."""
    return request.app.state.auth_provider


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_provider: AuthProvider = Depends(get_auth_provider),
) -> Identity:
    """
    Resolve the caller from the Authorization: Bearer header.

    Raises Unauthorized (401) if the header is missing or the token is invalid.
    """
    if credentials is None:
        raise Unauthorized("Access token required")
    return auth_provider.verify_token(credentials.credentials)
