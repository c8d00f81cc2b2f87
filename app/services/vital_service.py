"""Business logic for vital-sign readings and trends."""
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import NotFound, ValidationError
from app.models import Report, Vital
from app.schemas.auth import Identity
from app.schemas.vitals import (
    ChartPoint,
    TrendsResponse,
    TrendSummary,
    VitalCreate,
    VitalFilters,
    VitalUpdate,
)

logger = logging.getLogger(__name__)

# Supported vital types. The unit is always taken from here, never from the caller.
VITAL_TYPES: Dict[str, Dict[str, str]] = {
    "blood_pressure_systolic": {"unit": "mmHg", "label": "Blood Pressure (Systolic)"},
    "blood_pressure_diastolic": {"unit": "mmHg", "label": "Blood Pressure (Diastolic)"},
    "heart_rate": {"unit": "bpm", "label": "Heart Rate"},
    "blood_sugar": {"unit": "mg/dL", "label": "Blood Sugar"},
    "body_temperature": {"unit": "°F", "label": "Body Temperature"},
    "weight": {"unit": "kg", "label": "Weight"},
    "oxygen_saturation": {"unit": "%", "label": "Oxygen Saturation (SpO2)"},
    "cholesterol": {"unit": "mg/dL", "label": "Cholesterol"},
    "hemoglobin": {"unit": "g/dL", "label": "Hemoglobin"},
}


def unit_for(vital_type: Optional[str]) -> str:
    """Return the unit for a vital type, rejecting unknown types."""
    if vital_type not in VITAL_TYPES:
        raise ValidationError("Invalid vital type")
    return VITAL_TYPES[vital_type]["unit"]


def to_utc(value: datetime) -> datetime:
    """Normalize a timestamp to UTC. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class VitalService:
    """Service for a user's own vital readings. Vitals are never shared."""

    def __init__(self, db: Session, default_trend_days: int = 30, max_trend_days: int = 3650):
        self.db = db
        self.default_trend_days = default_trend_days
        self.max_trend_days = max_trend_days

    @staticmethod
    def get_vital_types() -> Dict[str, Dict[str, str]]:
        """Supported vital types mapped to their unit and display label."""
        return {key: dict(info) for key, info in VITAL_TYPES.items()}

    def _check_report_link(self, identity: Identity, report_id: Optional[UUID]) -> None:
        if report_id is None:
            return
        owned = (
            self.db.query(Report.id)
            .filter(Report.id == report_id, Report.user_id == identity.id)
            .first()
        )
        if not owned:
            raise ValidationError("report_id must reference one of your reports")

    def _get_own_vital(self, identity: Identity, vital_id: UUID) -> Vital:
        vital = (
            self.db.query(Vital)
            .filter(Vital.id == vital_id, Vital.user_id == identity.id)
            .first()
        )
        if not vital:
            raise NotFound("Vital not found")
        return vital

    def create_vital(self, identity: Identity, data: VitalCreate) -> Vital:
        """
        Record a new reading.

        Raises:
            ValidationError: Unknown type, or report_id not owned by the caller
        """
        unit = unit_for(data.type)
        self._check_report_link(identity, data.report_id)

        vital = Vital(
            user_id=identity.id,
            type=data.type,
            value=data.value,
            unit=unit,
            recorded_at=to_utc(data.recorded_at),
            report_id=data.report_id,
        )
        self.db.add(vital)
        self.db.commit()
        self.db.refresh(vital)
        return vital

    def list_vitals(self, identity: Identity, filters: VitalFilters) -> List[Vital]:
        """Caller's readings, most recent first."""
        query = self.db.query(Vital).filter(Vital.user_id == identity.id)

        if filters.type:
            query = query.filter(Vital.type == filters.type)
        if filters.start_date:
            start = datetime.combine(filters.start_date, time.min, tzinfo=timezone.utc)
            query = query.filter(Vital.recorded_at >= start)
        if filters.end_date:
            # Inclusive of the whole end day
            end = datetime.combine(filters.end_date, time.min, tzinfo=timezone.utc) + timedelta(days=1)
            query = query.filter(Vital.recorded_at < end)

        return query.order_by(Vital.recorded_at.desc()).all()

    def get_vital(self, identity: Identity, vital_id: UUID) -> Vital:
        return self._get_own_vital(identity, vital_id)

    def update_vital(self, identity: Identity, vital_id: UUID, changes: VitalUpdate) -> Vital:
        """
        Apply a partial update. Fields absent from the request keep their value.

        Changing the type recomputes the unit.
        """
        vital = self._get_own_vital(identity, vital_id)
        updates = changes.model_dump(exclude_unset=True)

        # Validate everything before touching the loaded row
        unit = unit_for(updates["type"]) if "type" in updates else vital.unit
        if "value" in updates and updates["value"] is None:
            raise ValidationError("value cannot be null")
        if "recorded_at" in updates and updates["recorded_at"] is None:
            raise ValidationError("recorded_at cannot be null")
        if "report_id" in updates:
            self._check_report_link(identity, updates["report_id"])

        if "type" in updates:
            vital.type = updates["type"]
            vital.unit = unit
        if "value" in updates:
            vital.value = updates["value"]
        if "recorded_at" in updates:
            vital.recorded_at = to_utc(updates["recorded_at"])
        if "report_id" in updates:
            vital.report_id = updates["report_id"]

        self.db.commit()
        self.db.refresh(vital)
        return vital

    def delete_vital(self, identity: Identity, vital_id: UUID) -> None:
        vital = self._get_own_vital(identity, vital_id)
        self.db.delete(vital)
        self.db.commit()

    def get_trends(self, identity: Identity, days: Optional[int] = None) -> TrendsResponse:
        """
        Aggregate the caller's readings per type over the trailing window.

        Args:
            identity: Caller
            days: Window length; readings with recorded_at >= now - days count

        Returns:
            Per-type avg/min/max/count plus the raw readings (oldest first)
            for charting
        """
        if days is None:
            days = self.default_trend_days
        if days < 1 or days > self.max_trend_days:
            raise ValidationError(f"days must be between 1 and {self.max_trend_days}")

        cutoff = datetime.now(timezone.utc) - timedelta(days=days)

        rows = (
            self.db.query(
                Vital.type,
                func.avg(Vital.value),
                func.min(Vital.value),
                func.max(Vital.value),
                func.count(Vital.id),
            )
            .filter(Vital.user_id == identity.id, Vital.recorded_at >= cutoff)
            .group_by(Vital.type)
            .order_by(Vital.type)
            .all()
        )
        trends = [
            TrendSummary(
                type=vital_type,
                avg=round(float(avg_value), 2),
                min=float(min_value),
                max=float(max_value),
                count=count,
                unit=VITAL_TYPES.get(vital_type, {}).get("unit", ""),
            )
            for vital_type, avg_value, min_value, max_value, count in rows
        ]

        readings = (
            self.db.query(Vital.type, Vital.value, Vital.recorded_at)
            .filter(Vital.user_id == identity.id, Vital.recorded_at >= cutoff)
            .order_by(Vital.recorded_at.asc())
            .all()
        )
        chart_data: Dict[str, List[ChartPoint]] = {}
        for vital_type, value, recorded_at in readings:
            chart_data.setdefault(vital_type, []).append(
                ChartPoint(value=value, recorded_at=recorded_at)
            )

        return TrendsResponse(days=days, trends=trends, chart_data=chart_data)
