"""Report sharing and access control.

A report has exactly one owner and zero or more grants, each giving one
recipient email read or write access. Only the owner may create, change or
revoke grants. Failures caused by missing ownership are reported as NotFound,
the same as a missing record.
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import Conflict, NotFound, ValidationError
from app.models import AccessType, Report, SharedAccess, User
from app.schemas.auth import Identity, is_valid_email, normalize_email
from app.schemas.sharing import ShareByMeOut, ShareCreate, ShareWithMeOut

logger = logging.getLogger(__name__)

OWNER_ROLE = "owner"
VIEWER_ROLE = "viewer"


def parse_access_type(value: Optional[str]) -> AccessType:
    """Convert a request value to AccessType, rejecting anything but read/write."""
    try:
        return AccessType((value or "").strip().lower())
    except ValueError:
        raise ValidationError("Valid access_type (read/write) is required")


class SharingService:
    """Service for share grants and report access resolution."""

    def __init__(self, db: Session):
        self.db = db

    def resolve_access(
        self, identity: Identity, report_id: UUID
    ) -> Optional[Tuple[Report, str]]:
        """
        Decide whether the caller may see a report.

        Access is granted if the caller owns the report, or a grant exists
        for the caller's email.

        Returns:
            (report, role) with role "owner" or "viewer", or None when the
            report is absent or not visible to the caller
        """
        report = self.db.query(Report).filter(Report.id == report_id).first()
        if report is None:
            return None
        if report.user_id == identity.id:
            return report, OWNER_ROLE

        grant = (
            self.db.query(SharedAccess.id)
            .filter(
                SharedAccess.report_id == report_id,
                SharedAccess.shared_with_email == normalize_email(identity.email),
            )
            .first()
        )
        if grant:
            return report, VIEWER_ROLE
        return None

    def _get_owned_report(self, identity: Identity, report_id: UUID) -> Report:
        report = (
            self.db.query(Report)
            .filter(Report.id == report_id, Report.user_id == identity.id)
            .first()
        )
        if not report:
            raise NotFound("Report not found or access denied")
        return report

    def _get_owned_grant(self, identity: Identity, grant_id: UUID) -> SharedAccess:
        grant = (
            self.db.query(SharedAccess)
            .filter(SharedAccess.id == grant_id, SharedAccess.owner_id == identity.id)
            .first()
        )
        if not grant:
            raise NotFound("Share not found or access denied")
        return grant

    def share_report(self, identity: Identity, request: ShareCreate) -> SharedAccess:
        """
        Grant a recipient email access to one of the caller's reports.

        Raises:
            ValidationError: Bad email or access type, or sharing with yourself
            NotFound: Report missing or not owned by the caller
            Conflict: The report is already shared with this email
        """
        email = normalize_email(request.shared_with_email or "")
        if not email or not is_valid_email(email):
            raise ValidationError("A valid recipient email is required")
        access_type = parse_access_type(request.access_type)

        report = self._get_owned_report(identity, request.report_id)
        if email == normalize_email(identity.email):
            raise ValidationError("You cannot share a report with yourself")

        existing = (
            self.db.query(SharedAccess.id)
            .filter(
                SharedAccess.report_id == report.id,
                SharedAccess.shared_with_email == email,
            )
            .first()
        )
        if existing:
            raise Conflict("Report already shared with this email")

        grant = SharedAccess(
            report_id=report.id,
            owner_id=report.user_id,
            shared_with_email=email,
            access_type=access_type,
        )
        self.db.add(grant)
        try:
            self.db.commit()
        except IntegrityError:
            # The unique constraint is authoritative if a concurrent share won
            self.db.rollback()
            raise Conflict("Report already shared with this email")
        self.db.refresh(grant)

        logger.info(
            "Report %s shared by %s (%s access)", report.id, identity.id, access_type.value
        )
        return grant

    def list_grants_for_report(self, identity: Identity, report_id: UUID) -> List[SharedAccess]:
        """List who has access to one of the caller's reports."""
        report = self._get_owned_report(identity, report_id)
        return (
            self.db.query(SharedAccess)
            .filter(SharedAccess.report_id == report.id)
            .order_by(SharedAccess.created_at.desc())
            .all()
        )

    def list_granted_by_me(self, identity: Identity) -> List[ShareByMeOut]:
        """All grants the caller has created, with report title and type."""
        rows = (
            self.db.query(SharedAccess, Report.title, Report.type)
            .join(Report, SharedAccess.report_id == Report.id)
            .filter(SharedAccess.owner_id == identity.id)
            .order_by(SharedAccess.created_at.desc())
            .all()
        )
        return [
            ShareByMeOut(
                **_grant_fields(grant),
                report_title=title,
                report_type=report_type,
            )
            for grant, title, report_type in rows
        ]

    def list_granted_to_me(self, identity: Identity) -> List[ShareWithMeOut]:
        """All grants addressed to the caller's email, with report and owner details."""
        rows = (
            self.db.query(
                SharedAccess, Report.title, Report.type, Report.date, User.name, User.email
            )
            .join(Report, SharedAccess.report_id == Report.id)
            .join(User, SharedAccess.owner_id == User.id)
            .filter(SharedAccess.shared_with_email == normalize_email(identity.email))
            .order_by(SharedAccess.created_at.desc())
            .all()
        )
        return [
            ShareWithMeOut(
                **_grant_fields(grant),
                report_title=title,
                report_type=report_type,
                report_date=report_date,
                owner_name=owner_name,
                owner_email=owner_email,
            )
            for grant, title, report_type, report_date, owner_name, owner_email in rows
        ]

    def revoke(self, identity: Identity, grant_id: UUID) -> None:
        """Delete a grant the caller owns."""
        grant = self._get_owned_grant(identity, grant_id)
        self.db.delete(grant)
        self.db.commit()
        logger.info("Share %s revoked by %s", grant_id, identity.id)

    def update_access_type(
        self, identity: Identity, grant_id: UUID, access_type: Optional[str]
    ) -> SharedAccess:
        """Change a grant's access level. The value is validated before any lookup."""
        new_type = parse_access_type(access_type)
        grant = self._get_owned_grant(identity, grant_id)
        grant.access_type = new_type
        self.db.commit()
        self.db.refresh(grant)
        return grant


def _grant_fields(grant: SharedAccess) -> dict:
    return {
        "id": grant.id,
        "report_id": grant.report_id,
        "owner_id": grant.owner_id,
        "shared_with_email": grant.shared_with_email,
        "access_type": grant.access_type,
        "created_at": grant.created_at,
    }
