from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from app.core.roles import UserRole


class UserOut(BaseModel):
    id: UUID
    name: str
    email: str
    role: UserRole
    hourly_rate: Decimal
    is_approved: bool

    class Config:
        from_attributes = True


class LecturerCreate(BaseModel):
    name: str
    email: str
    password: str
    hourly_rate: Optional[Decimal] = None


class UserUpdate(BaseModel):
    role: Optional[UserRole] = None
    hourly_rate: Optional[Decimal] = None
