"""
Database models for Health Wallet.

Import all models here so Alembic can detect them for migrations.
"""

from app.database import Base
from app.models.user import User
from app.models.report import Report
from app.models.vital import Vital
from app.models.shared_access import SharedAccess, AccessType

__all__ = [
    "Base",
    "User",
    "Report",
    "Vital",
    "SharedAccess",
    "AccessType",
]
