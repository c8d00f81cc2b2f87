"""Authentication routes: registration, login and current profile."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.auth import Identity, LoginRequest, RegisterRequest, UserOut
from app.services.auth.base import AuthProvider
from app.services.auth.dependencies import get_auth_provider, get_current_identity


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    auth_provider: AuthProvider = Depends(get_auth_provider),
):
    """Create an account and return it with a bearer token."""
    user, token = await auth_provider.register(
        db, request.email, request.password, request.name
    )
    return {
        "message": "User registered successfully",
        "user": UserOut.model_validate(user),
        "token": token,
    }


@router.post("/login")
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    auth_provider: AuthProvider = Depends(get_auth_provider),
):
    """Exchange email and password for a bearer token."""
    user, token = await auth_provider.login(db, request.email, request.password)
    return {
        "message": "Login successful",
        "user": UserOut.model_validate(user),
        "token": token,
    }


@router.get("/me")
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
    auth_provider: AuthProvider = Depends(get_auth_provider),
):
    """Current user's profile."""
    user = await auth_provider.get_profile(db, identity)
    return {"user": UserOut.model_validate(user)}
