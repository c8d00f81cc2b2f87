"""System routes."""

from fastapi import APIRouter, Request

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(request: Request):
    """Liveness plus a database connectivity check."""
    db_ok = request.app.state.database.check_connection()
    return {
        "status": "ok" if db_ok else "degraded",
        "message": "Health Wallet API is running",
        "database": {"connected": db_ok},
    }
