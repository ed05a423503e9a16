from decimal import Decimal

from pydantic import BaseModel


class ReportRowOut(BaseModel):
    lecturer_name: str
    lecturer_email: str
    total_hours: int
    total_amount: Decimal

    class Config:
        from_attributes = True


class HrDashboard(BaseModel):
    total_users: int
    total_claims: int
    approved_count: int
    rejected_count: int
