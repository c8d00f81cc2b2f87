"""Vital reading models."""
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class VitalCreate(BaseModel):
    type: str
    value: float = Field(allow_inf_nan=False)
    recorded_at: datetime
    report_id: Optional[UUID] = None


class VitalUpdate(BaseModel):
    """Partial update: only fields present in the request are changed."""

    type: Optional[str] = None
    value: Optional[float] = Field(default=None, allow_inf_nan=False)
    recorded_at: Optional[datetime] = None
    report_id: Optional[UUID] = None


class VitalFilters(BaseModel):
    type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class VitalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    value: float
    unit: str
    recorded_at: datetime
    report_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


class TrendSummary(BaseModel):
    type: str
    avg: float
    min: float
    max: float
    count: int
    unit: str


class ChartPoint(BaseModel):
    value: float
    recorded_at: datetime


class TrendsResponse(BaseModel):
    days: int
    trends: List[TrendSummary]
    chart_data: Dict[str, List[ChartPoint]]
