"""API endpoints for sharing reports with other users by email."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.auth import Identity
from app.schemas.sharing import ShareCreate, ShareOut, ShareUpdate
from app.services.auth.dependencies import get_current_identity
from app.services.sharing_service import SharingService

router = APIRouter(prefix="/sharing", tags=["sharing"])


def get_sharing_service(db: Session = Depends(get_db)) -> SharingService:
    return SharingService(db)


@router.post("", status_code=201)
async def share_report(
    request: ShareCreate,
    identity: Identity = Depends(get_current_identity),
    service: SharingService = Depends(get_sharing_service),
):
    """Grant read or write access on one of the caller's reports."""
    grant = service.share_report(identity, request)
    return {"message": "Report shared successfully", "share": ShareOut.model_validate(grant)}


@router.get("/report/{report_id}")
async def list_report_shares(
    report_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: SharingService = Depends(get_sharing_service),
):
    """Who has access to a report (owner only)."""
    grants = service.list_grants_for_report(identity, report_id)
    return {"shares": [ShareOut.model_validate(g) for g in grants]}


@router.get("/by-me")
async def list_shared_by_me(
    identity: Identity = Depends(get_current_identity),
    service: SharingService = Depends(get_sharing_service),
):
    return {"shares": service.list_granted_by_me(identity)}


@router.get("/with-me")
async def list_shared_with_me(
    identity: Identity = Depends(get_current_identity),
    service: SharingService = Depends(get_sharing_service),
):
    return {"shares": service.list_granted_to_me(identity)}


@router.put("/{share_id}")
async def update_share(
    share_id: UUID,
    request: ShareUpdate,
    identity: Identity = Depends(get_current_identity),
    service: SharingService = Depends(get_sharing_service),
):
    """Change a grant's access type to read or write."""
    grant = service.update_access_type(identity, share_id, request.access_type)
    return {"message": "Access updated successfully", "share": ShareOut.model_validate(grant)}


@router.delete("/{share_id}")
async def revoke_share(
    share_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: SharingService = Depends(get_sharing_service),
):
    service.revoke(identity, share_id)
    return {"message": "Access revoked successfully"}
