"""Business logic for medical report storage and retrieval."""
import logging
from pathlib import Path
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.errors import NotFound, ValidationError
from app.models import Report, SharedAccess, User
from app.schemas.auth import Identity, normalize_email
from app.schemas.reports import ReportFilters, ReportMetadata, SharedReportOut
from app.services.file_service import FileService
from app.services.sharing_service import SharingService

logger = logging.getLogger(__name__)


def _like_pattern(term: str) -> str:
    """Build a substring LIKE pattern with the user's wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def parse_report_metadata(
    type: Optional[str],
    title: Optional[str],
    date: Optional[str],
    notes: Optional[str],
) -> ReportMetadata:
    """Validate raw form fields into ReportMetadata."""
    type = (type or "").strip()
    title = (title or "").strip()
    date = (date or "").strip()
    if not type or not title or not date:
        raise ValidationError("Type, title, and date are required")

    try:
        return ReportMetadata(type=type, title=title, date=date, notes=(notes or None))
    except PydanticValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ValidationError(f"Invalid report metadata: {fields}")


class ReportService:
    """Service for report files and their metadata, scoped to the caller."""

    def __init__(self, db: Session, files: FileService):
        self.db = db
        self.files = files
        self.access = SharingService(db)

    async def create_report(
        self,
        identity: Identity,
        file: Optional[UploadFile],
        type: Optional[str] = None,
        title: Optional[str] = None,
        date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Report:
        """
        Store an uploaded report file and its metadata.

        The file is validated and written first. Any failure after the write
        removes the file again so no orphan is left on disk.

        Raises:
            ValidationError: Missing/invalid file or missing type, title or date
        """
        stored = await self.files.save_report_file(file)

        try:
            metadata = parse_report_metadata(type, title, date, notes)
            report = Report(
                user_id=identity.id,
                type=metadata.type,
                title=metadata.title,
                date=metadata.date,
                notes=metadata.notes,
                file_path=stored.name,
                original_filename=stored.original_filename,
                content_type=stored.content_type,
                file_size=stored.size,
            )
            self.db.add(report)
            self.db.commit()
        except Exception:
            self.db.rollback()
            if self.files.delete_file(stored.name):
                logger.warning("Removed orphaned upload %s after failed save", stored.name)
            raise

        self.db.refresh(report)
        logger.info("Report %s stored for user %s", report.id, identity.id)
        return report

    def list_reports(self, identity: Identity, filters: ReportFilters) -> List[Report]:
        """Caller's own reports, newest logical date first."""
        query = self.db.query(Report).filter(Report.user_id == identity.id)

        if filters.type:
            query = query.filter(Report.type == filters.type)
        if filters.start_date:
            query = query.filter(Report.date >= filters.start_date)
        if filters.end_date:
            query = query.filter(Report.date <= filters.end_date)
        if filters.search:
            pattern = _like_pattern(filters.search)
            query = query.filter(
                or_(
                    Report.title.ilike(pattern, escape="\\"),
                    Report.notes.ilike(pattern, escape="\\"),
                )
            )

        return query.order_by(Report.date.desc(), Report.created_at.desc()).all()

    def list_shared_with_me(self, identity: Identity) -> List[SharedReportOut]:
        """Reports other users have shared with the caller's email."""
        rows = (
            self.db.query(Report, User.name, User.email, SharedAccess.access_type)
            .join(SharedAccess, SharedAccess.report_id == Report.id)
            .join(User, Report.user_id == User.id)
            .filter(SharedAccess.shared_with_email == normalize_email(identity.email))
            .order_by(Report.date.desc())
            .all()
        )
        results = []
        for report, owner_name, owner_email, access_type in rows:
            item = SharedReportOut.model_validate(
                {
                    **_report_fields(report),
                    "owner_name": owner_name,
                    "owner_email": owner_email,
                    "access_type": access_type,
                }
            )
            results.append(item)
        return results

    def get_report(self, identity: Identity, report_id: UUID) -> Tuple[Report, str]:
        """
        Fetch a report the caller owns or has been granted.

        Returns:
            (report, role) where role is "owner" or "viewer"

        Raises:
            NotFound: Report missing or not visible to the caller
        """
        resolved = self.access.resolve_access(identity, report_id)
        if resolved is None:
            raise NotFound("Report not found or access denied")
        return resolved

    def get_download(self, identity: Identity, report_id: UUID) -> Tuple[Report, Path]:
        """
        Resolve a report's stored file for download.

        Raises:
            NotFound: Report not visible, or its file is missing from storage
        """
        report, _ = self.get_report(identity, report_id)
        try:
            path = self.files.resolve_path(report.file_path)
        except NotFound:
            logger.warning("Report %s has metadata but no stored file", report.id)
            raise
        return report, path

    def delete_report(self, identity: Identity, report_id: UUID) -> None:
        """
        Delete one of the caller's reports.

        Removes the file, then the row. Grants cascade; linked vitals keep
        their data with report_id cleared.
        """
        report = (
            self.db.query(Report)
            .filter(Report.id == report_id, Report.user_id == identity.id)
            .first()
        )
        if not report:
            raise NotFound("Report not found or access denied")

        self.files.delete_file(report.file_path)
        self.db.delete(report)
        self.db.commit()
        logger.info("Report %s deleted by user %s", report_id, identity.id)


def _report_fields(report: Report) -> dict:
    return {
        "id": report.id,
        "user_id": report.user_id,
        "type": report.type,
        "title": report.title,
        "date": report.date,
        "notes": report.notes,
        "original_filename": report.original_filename,
        "content_type": report.content_type,
        "file_size": report.file_size,
        "created_at": report.created_at,
    }
