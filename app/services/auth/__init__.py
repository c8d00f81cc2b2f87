"""
Authentication service package.

Provides pluggable authentication. The local provider stores bcrypt password
hashes and issues stateless JWT bearer tokens.

Usage:
    from app.services.auth.dependencies import get_current_identity

    # In routes:
    @router.get("/protected")
    async def protected_route(identity: Identity = Depends(get_current_identity)):
        ...
"""
from app.services.auth.base import AuthProvider
from app.services.auth.local_provider import LocalAuthProvider

__all__ = [
    "AuthProvider",
    "LocalAuthProvider",
]
