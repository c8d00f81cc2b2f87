"""API endpoints for medical report upload, retrieval and deletion."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.auth import Identity
from app.schemas.reports import ReportDetailOut, ReportFilters, ReportOut
from app.services.auth.dependencies import get_current_identity
from app.services.file_service import FileService, get_file_service
from app.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
) -> ReportService:
    return ReportService(db, files)


@router.post("", status_code=201)
async def upload_report(
    file: Optional[UploadFile] = File(None),
    type: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    identity: Identity = Depends(get_current_identity),
    service: ReportService = Depends(get_report_service),
):
    """
    Upload a report file (PDF, JPEG or PNG, max 10MB) with its metadata.

    Form fields: file, type, title, date (YYYY-MM-DD), notes (optional).
    """
    report = await service.create_report(
        identity, file, type=type, title=title, date=date, notes=notes
    )
    return {
        "message": "Report uploaded successfully",
        "report": ReportOut.model_validate(report),
    }


@router.get("")
async def list_reports(
    type: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None),
    identity: Identity = Depends(get_current_identity),
    service: ReportService = Depends(get_report_service),
):
    """List the caller's reports, optionally filtered."""
    filters = ReportFilters(
        type=type, start_date=start_date, end_date=end_date, search=search
    )
    reports = service.list_reports(identity, filters)
    return {"reports": [ReportOut.model_validate(r) for r in reports]}


@router.get("/shared")
async def list_shared_reports(
    identity: Identity = Depends(get_current_identity),
    service: ReportService = Depends(get_report_service),
):
    """Reports other users have shared with the caller."""
    return {"reports": service.list_shared_with_me(identity)}


@router.get("/{report_id}")
async def get_report(
    report_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: ReportService = Depends(get_report_service),
):
    """Single report, visible to its owner and to share recipients."""
    report, role = service.get_report(identity, report_id)
    detail = ReportDetailOut.model_validate(
        {**ReportOut.model_validate(report).model_dump(), "access_role": role}
    )
    return {"report": detail}


@router.get("/{report_id}/download")
async def download_report(
    report_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: ReportService = Depends(get_report_service),
):
    """Stream the stored file under its original filename."""
    report, path = service.get_download(identity, report_id)
    return FileResponse(
        path,
        media_type=report.content_type or "application/octet-stream",
        filename=report.original_filename or path.name,
    )


@router.delete("/{report_id}")
async def delete_report(
    report_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: ReportService = Depends(get_report_service),
):
    """Delete a report (owner only)."""
    service.delete_report(identity, report_id)
    return {"message": "Report deleted successfully"}
