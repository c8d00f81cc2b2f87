"""Abstract base class for authentication providers."""
from abc import ABC, abstractmethod
from typing import Tuple

from sqlalchemy.orm import Session as DBSession

from app.models.user import User
from app.schemas.auth import Identity


class AuthProvider(ABC):
    """
    Abstract authentication provider interface.

    Routes depend on this interface only, so the credential store and token
    format can change without touching route code.
    """

    @abstractmethod
    async def register(
        self, db: DBSession, email: str, password: str, name: str
    ) -> Tuple[User, str]:
        """
        Create a new user and issue a token for them.

        Raises Conflict if the email is already registered.
        """
        pass

    @abstractmethod
    async def login(self, db: DBSession, email: str, password: str) -> Tuple[User, str]:
        """
        Verify credentials and issue a token.

        Raises Unauthorized for an unknown email or a wrong password alike.
        """
        pass

    @abstractmethod
    def verify_token(self, token: str) -> Identity:
        """
        Verify a bearer token without touching the database.

        Raises Unauthorized if the token is malformed, tampered with or expired.
        """
        pass

    @abstractmethod
    async def get_profile(self, db: DBSession, identity: Identity) -> User:
        """Load the user row behind an identity. Raises NotFound if it is gone."""
        pass
