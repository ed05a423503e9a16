# app/schemas/claim.py

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.models.claim import ClaimStatus


class AttachmentOut(BaseModel):
    file_name: str
    saved_as: str
    size: int

    class Config:
        from_attributes = True


class ClaimOut(BaseModel):
    id: UUID
    lecturer_name: str
    lecturer_email: str
    hours_worked: int
    hourly_rate: Decimal
    notes: Optional[str]
    total: Decimal
    status: ClaimStatus
    created_utc: datetime
    attachments: List[AttachmentOut] = []

    class Config:
        from_attributes = True


class CoordinatorDashboard(BaseModel):
    pending_count: int
    rejected_count: int
    oldest_pending: Optional[datetime]
    last_action: Optional[str]
    claims: List[ClaimOut]


class ManagerDashboard(BaseModel):
    verified_count: int
    total_awaiting: Decimal
    last_action: Optional[str]
    claims: List[ClaimOut]


class LecturerDashboard(BaseModel):
    pending_count: int
    approved_count: int
    total_approved: Decimal
    claims: List[ClaimOut]
