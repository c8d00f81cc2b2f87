"""
Unit tests for LocalAuthProvider.

Tests authentication logic including:
- Password hashing and verification
- Registration validation and duplicate handling
- Login failure indistinguishability
- Token issuing and verification
"""
from datetime import timedelta
from unittest.mock import patch
from uuid import uuid4

import pytest
from jose import jwt
from sqlalchemy.orm import Session

from app.errors import Conflict, NotFound, Unauthorized, ValidationError
from app.models import User
from app.services.auth import LocalAuthProvider
from tests.factories import create_user, identity_for


class TestPasswordHashing:
    """Tests for password hashing."""

    def test_hash_is_not_plaintext(self, auth_provider: LocalAuthProvider):
        """Test that the stored hash differs from the password."""
        hashed = auth_provider._hash_password("mypassword123")

        assert hashed != "mypassword123"
        assert hashed.startswith("$2")

    def test_verify_correct_password(self, auth_provider: LocalAuthProvider):
        """Test that the right password verifies."""
        hashed = auth_provider._hash_password("mypassword123")

        assert auth_provider._verify_password("mypassword123", hashed) is True

    def test_verify_wrong_password(self, auth_provider: LocalAuthProvider):
        """Test that a wrong password does not verify."""
        hashed = auth_provider._hash_password("mypassword123")

        assert auth_provider._verify_password("wrongpassword", hashed) is False

    def test_same_password_different_hashes(self, auth_provider: LocalAuthProvider):
        """Test that salts make hashes unique."""
        assert auth_provider._hash_password("samepassword") != auth_provider._hash_password(
            "samepassword"
        )


class TestRegister:
    """Tests for user registration."""

    @pytest.mark.asyncio
    async def test_register_creates_user_and_token(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test successful registration returns the user and a usable token."""
        user, token = await auth_provider.register(
            db, "new@example.com", "password123", "New User"
        )

        assert user.id is not None
        assert user.email == "new@example.com"
        assert user.name == "New User"
        assert user.password_hash != "password123"

        identity = auth_provider.verify_token(token)
        assert identity.id == user.id
        assert identity.email == "new@example.com"

    @pytest.mark.asyncio
    async def test_register_normalizes_email(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that emails are stored lower-cased and trimmed."""
        user, _ = await auth_provider.register(
            db, "  Mixed.Case@Example.COM ", "password123", "Mixed"
        )

        assert user.email == "mixed.case@example.com"

    @pytest.mark.asyncio
    async def test_register_duplicate_email(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that a second registration with the same email conflicts."""
        create_user(db, email="taken@example.com")

        with pytest.raises(Conflict, match="already exists"):
            await auth_provider.register(db, "taken@example.com", "password123", "Again")

    @pytest.mark.asyncio
    async def test_register_duplicate_email_case_insensitive(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that case differences do not create a second account."""
        create_user(db, email="taken@example.com")

        with pytest.raises(Conflict):
            await auth_provider.register(db, "TAKEN@example.com", "password123", "Again")

        assert db.query(User).count() == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,password,name",
        [
            ("", "password123", "Name"),
            ("a@example.com", "", "Name"),
            ("a@example.com", "password123", ""),
            ("a@example.com", "password123", "   "),
        ],
    )
    async def test_register_missing_fields(
        self, db: Session, auth_provider: LocalAuthProvider, email, password, name
    ):
        """Test that all three fields are required."""
        with pytest.raises(ValidationError, match="required"):
            await auth_provider.register(db, email, password, name)

    @pytest.mark.asyncio
    async def test_register_short_password(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that passwords below the minimum length are rejected."""
        with pytest.raises(ValidationError, match="at least 8"):
            await auth_provider.register(db, "a@example.com", "short", "Name")

        assert db.query(User).count() == 0

    @pytest.mark.asyncio
    async def test_register_invalid_email(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that malformed emails are rejected."""
        with pytest.raises(ValidationError, match="Invalid email"):
            await auth_provider.register(db, "not-an-email", "password123", "Name")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["a..b@x.y", "a@-x-.y", "\"@x.y"])
    async def test_register_rejects_malformed_addresses(
        self, db: Session, auth_provider: LocalAuthProvider, email
    ):
        with pytest.raises(ValidationError, match="Invalid email"):
            await auth_provider.register(db, email, "password123", "Name")

    @pytest.mark.asyncio
    async def test_register_password_over_bcrypt_limit(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that passwords bcrypt cannot hash are rejected up front."""
        with pytest.raises(ValidationError, match="at most 72 bytes"):
            await auth_provider.register(db, "a@example.com", "x" * 100, "Name")

        assert db.query(User).count() == 0

    @pytest.mark.asyncio
    async def test_register_password_limit_counts_bytes(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that multi-byte characters count by their UTF-8 length."""
        with pytest.raises(ValidationError, match="at most 72 bytes"):
            await auth_provider.register(db, "a@example.com", "\u00e9" * 40, "Name")

        user, _ = await auth_provider.register(db, "a@example.com", "x" * 72, "Name")
        assert user.email == "a@example.com"


class TestLogin:
    """Tests for login."""

    @pytest.mark.asyncio
    async def test_login_success(self, db: Session, auth_provider: LocalAuthProvider):
        """Test that correct credentials return the user and a token."""
        created = create_user(db, email="login@example.com", password="password123")

        user, token = await auth_provider.login(db, "login@example.com", "password123")

        assert user.id == created.id
        assert auth_provider.verify_token(token).id == created.id

    @pytest.mark.asyncio
    async def test_login_email_case_insensitive(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that login matches email regardless of case."""
        create_user(db, email="login@example.com", password="password123")

        user, _ = await auth_provider.login(db, "LOGIN@Example.com", "password123")

        assert user.email == "login@example.com"

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_identical(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that both failure modes raise the same error and message."""
        create_user(db, email="login@example.com", password="password123")

        with pytest.raises(Unauthorized) as wrong_password:
            await auth_provider.login(db, "login@example.com", "wrongpassword")
        with pytest.raises(Unauthorized) as unknown_email:
            await auth_provider.login(db, "nobody@example.com", "password123")

        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    @pytest.mark.asyncio
    async def test_overlong_password_is_invalid_credentials(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that an over-long password fails the same way for known and unknown emails."""
        create_user(db, email="login@example.com", password="password123")

        with pytest.raises(Unauthorized) as known:
            await auth_provider.login(db, "login@example.com", "y" * 100)
        with pytest.raises(Unauthorized) as unknown:
            await auth_provider.login(db, "nobody@example.com", "y" * 100)

        assert known.value.message == unknown.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email_still_runs_bcrypt(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that a missing account costs a password check like a wrong password."""
        with patch.object(
            auth_provider, "_verify_password", wraps=auth_provider._verify_password
        ) as verify:
            with pytest.raises(Unauthorized):
                await auth_provider.login(db, "nobody@example.com", "password123")

        verify.assert_called_once()

    async def test_login_missing_fields(self, db: Session, auth_provider: LocalAuthProvider):
        """Test that email and password are required."""
        with pytest.raises(ValidationError):
            await auth_provider.login(db, "", "password123")
        with pytest.raises(ValidationError):
            await auth_provider.login(db, "a@example.com", "")


class TestTokens:
    """Tests for token issuing and verification."""

    def test_token_round_trip(self, db: Session, auth_provider: LocalAuthProvider):
        """Test that a token verifies back to the same identity."""
        user = create_user(db, email="tok@example.com", name="Tok")

        identity = auth_provider.verify_token(auth_provider.create_access_token(user))

        assert identity == identity_for(user)

    def test_expired_token_rejected(self, db: Session, auth_provider: LocalAuthProvider):
        """Test that tokens past their expiry are rejected."""
        user = create_user(db)
        token = auth_provider.create_access_token(user, expires_delta=timedelta(seconds=-10))

        with pytest.raises(Unauthorized, match="Invalid or expired"):
            auth_provider.verify_token(token)

    def test_wrong_secret_rejected(self, db: Session, auth_provider: LocalAuthProvider):
        """Test that tokens signed with another key are rejected."""
        user = create_user(db)
        forged = jwt.encode(
            {"sub": str(user.id), "email": user.email, "name": user.name},
            "some-other-secret",
            algorithm="HS256",
        )

        with pytest.raises(Unauthorized):
            auth_provider.verify_token(forged)

    def test_garbage_token_rejected(self, auth_provider: LocalAuthProvider):
        """Test that malformed tokens are rejected."""
        with pytest.raises(Unauthorized):
            auth_provider.verify_token("not.a.jwt")

    def test_empty_token_rejected(self, auth_provider: LocalAuthProvider):
        """Test that an empty token is reported as missing."""
        with pytest.raises(Unauthorized, match="required"):
            auth_provider.verify_token("")

    def test_token_without_subject_rejected(self, auth_provider: LocalAuthProvider):
        """Test that a validly signed token lacking a subject is rejected."""
        token = jwt.encode(
            {"email": "a@example.com"}, auth_provider.secret_key, algorithm="HS256"
        )

        with pytest.raises(Unauthorized):
            auth_provider.verify_token(token)

    def test_token_with_non_uuid_subject_rejected(self, auth_provider: LocalAuthProvider):
        """Test that a non-UUID subject is rejected."""
        token = jwt.encode(
            {"sub": "42", "email": "a@example.com"},
            auth_provider.secret_key,
            algorithm="HS256",
        )

        with pytest.raises(Unauthorized):
            auth_provider.verify_token(token)


class TestGetProfile:
    """Tests for profile lookup."""

    @pytest.mark.asyncio
    async def test_get_profile(self, db: Session, auth_provider: LocalAuthProvider):
        """Test that the profile is loaded for the identity's id."""
        user = create_user(db, name="Profile User")

        profile = await auth_provider.get_profile(db, identity_for(user))

        assert profile.id == user.id
        assert profile.name == "Profile User"

    @pytest.mark.asyncio
    async def test_get_profile_deleted_user(
        self, db: Session, auth_provider: LocalAuthProvider
    ):
        """Test that a token for a user who no longer exists yields NotFound."""
        from app.schemas.auth import Identity

        ghost = Identity(id=uuid4(), email="ghost@example.com", name="Ghost")

        with pytest.raises(NotFound):
            await auth_provider.get_profile(db, ghost)
