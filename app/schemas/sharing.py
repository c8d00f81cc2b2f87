"""Share grant models."""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr

from app.models.shared_access import AccessType


class ShareCreate(BaseModel):
    report_id: UUID
    shared_with_email: EmailStr
    access_type: str = AccessType.READ.value


class ShareUpdate(BaseModel):
    access_type: Optional[str] = None


class ShareOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    report_id: UUID
    owner_id: UUID
    shared_with_email: str
    access_type: AccessType
    created_at: Optional[datetime] = None


class ShareByMeOut(ShareOut):
    report_title: str
    report_type: str


class ShareWithMeOut(ShareOut):
    report_title: str
    report_type: str
    report_date: date
    owner_name: str
    owner_email: str
