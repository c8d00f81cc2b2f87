"""API endpoints for vital-sign readings."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.auth import Identity
from app.schemas.vitals import VitalCreate, VitalFilters, VitalOut, VitalUpdate
from app.services.auth.dependencies import get_current_identity
from app.services.vital_service import VitalService

router = APIRouter(prefix="/vitals", tags=["vitals"])


def get_vital_service(request: Request, db: Session = Depends(get_db)) -> VitalService:
    app_settings = request.app.state.settings
    return VitalService(
        db,
        default_trend_days=app_settings.default_trend_days,
        max_trend_days=app_settings.max_trend_days,
    )


@router.get("/types")
async def get_vital_types(identity: Identity = Depends(get_current_identity)):
    """Supported vital types with unit and label."""
    return {"vital_types": VitalService.get_vital_types()}


@router.post("", status_code=201)
async def create_vital(
    request: VitalCreate,
    identity: Identity = Depends(get_current_identity),
    service: VitalService = Depends(get_vital_service),
):
    vital = service.create_vital(identity, request)
    return {"message": "Vital recorded successfully", "vital": VitalOut.model_validate(vital)}


@router.get("")
async def list_vitals(
    type: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    identity: Identity = Depends(get_current_identity),
    service: VitalService = Depends(get_vital_service),
):
    filters = VitalFilters(type=type, start_date=start_date, end_date=end_date)
    vitals = service.list_vitals(identity, filters)
    return {"vitals": [VitalOut.model_validate(v) for v in vitals]}


@router.get("/trends")
async def get_trends(
    days: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_identity),
    service: VitalService = Depends(get_vital_service),
):
    """
    Per-type avg/min/max/count over the last N days (configured default), plus the
    raw readings in ascending time order for charting.
    """
    return service.get_trends(identity, days)


@router.get("/{vital_id}")
async def get_vital(
    vital_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: VitalService = Depends(get_vital_service),
):
    return {"vital": VitalOut.model_validate(service.get_vital(identity, vital_id))}


@router.put("/{vital_id}")
async def update_vital(
    vital_id: UUID,
    request: VitalUpdate,
    identity: Identity = Depends(get_current_identity),
    service: VitalService = Depends(get_vital_service),
):
    """Partial update: omitted fields are left unchanged."""
    vital = service.update_vital(identity, vital_id, request)
    return {"message": "Vital updated successfully", "vital": VitalOut.model_validate(vital)}


@router.delete("/{vital_id}")
async def delete_vital(
    vital_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: VitalService = Depends(get_vital_service),
):
    service.delete_vital(identity, vital_id)
    return {"message": "Vital deleted successfully"}
