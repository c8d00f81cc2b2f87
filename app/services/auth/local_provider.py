"""Local password-based authentication provider with stateless JWT tokens."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from uuid import UUID

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from app.config import Settings
from app.errors import Conflict, NotFound, Unauthorized, ValidationError
from app.models.user import User
from app.schemas.auth import Identity, is_valid_email, normalize_email
from app.services.auth.base import AuthProvider

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

# bcrypt only uses the first 72 bytes and newer releases refuse anything longer
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


class LocalAuthProvider(AuthProvider):
    """
    Local authentication provider using bcrypt password hashes and JWTs.

    Tokens are signed with the configured secret and carry the caller's id,
    email and name, so verifying one needs no session table.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.token_ttl = timedelta(minutes=settings.access_token_expire_minutes)
        self.password_min_length = settings.password_min_length
        self._dummy_hash: Optional[str] = None

    def _hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def _verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))

    def _burn_password_check(self, password: str) -> bool:
        """Spend the same bcrypt work as a real check when there is no user. Always False."""
        if self._dummy_hash is None:
            self._dummy_hash = self._hash_password("not-a-real-password")
        self._verify_password(password, self._dummy_hash)
        return False

    def create_access_token(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        """Issue a signed token carrying the user's identity."""
        expire = datetime.now(timezone.utc) + (expires_delta or self.token_ttl)
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "exp": expire,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Identity:
        """Decode a token into an Identity."""
        if not token:
            raise Unauthorized("Access token required")
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise Unauthorized("Invalid or expired token")

        subject = payload.get("sub")
        email = payload.get("email")
        if not subject or not email:
            raise Unauthorized("Invalid or expired token")
        try:
            user_id = UUID(subject)
        except ValueError:
            raise Unauthorized("Invalid or expired token")

        return Identity(id=user_id, email=email, name=payload.get("name") or "")

    async def register(
        self, db: DBSession, email: str, password: str, name: str
    ) -> Tuple[User, str]:
        """Create a user with a hashed password and issue a token."""
        email = normalize_email(email or "")
        name = (name or "").strip()
        if not email or not password or not name:
            raise ValidationError("Email, password, and name are required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")
        if len(password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters"
            )
        if password_too_long(password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        existing = db.query(User).filter(User.email == email).first()
        if existing:
            raise Conflict("User with this email already exists")

        user = User(email=email, password_hash=self._hash_password(password), name=name)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            db.rollback()
            raise Conflict("User with this email already exists")
        db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user, self.create_access_token(user)

    async def login(self, db: DBSession, email: str, password: str) -> Tuple[User, str]:
        """Authenticate with email and password."""
        if not email or not password:
            raise ValidationError("Email and password are required")

        if password_too_long(password):
            # Could never have been registered
            logger.warning("Failed login attempt")
            raise Unauthorized(INVALID_CREDENTIALS)

        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if user:
            valid = self._verify_password(password, user.password_hash)
        else:
            valid = self._burn_password_check(password)
        if not valid:
            logger.warning("Failed login attempt")
            raise Unauthorized(INVALID_CREDENTIALS)

        return user, self.create_access_token(user)

    async def get_profile(self, db: DBSession, identity: Identity) -> User:
        user = db.query(User).filter(User.id == identity.id).first()
        if not user:
            raise NotFound("User not found")
        return user
