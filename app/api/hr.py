# app/api/hr.py

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from app.api.auth import get_current_actor
from app.api.deps import get_services
from app.core.container import Services
from app.core.permissions import require_roles
from app.core.roles import ROLE_HR, Actor
from app.models.claim import ClaimStatus
from app.schemas.claim import ClaimOut
from app.schemas.report import HrDashboard, ReportRowOut
from app.schemas.user import LecturerCreate, UserOut, UserUpdate
from app.services.report_export import render_lecturers_csv, render_report_pdf

router = APIRouter(
    prefix="/api/hr",
    tags=["hr"],
    dependencies=[Depends(require_roles([ROLE_HR]))],
)


@router.get("", response_model=HrDashboard)
def dashboard(services: Services = Depends(get_services)):
    return services.claims.hr_summary()


# --------------------------------------------------
# USERS
# --------------------------------------------------
@router.get("/users", response_model=List[UserOut])
def list_users(services: Services = Depends(get_services)):
    return services.users.list_users()


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_lecturer(
    payload: LecturerCreate,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return services.users.create_lecturer(
        actor,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        hourly_rate=payload.hourly_rate,
    )


@router.put("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return services.users.update_user(
        actor,
        user_id,
        role=payload.role,
        hourly_rate=payload.hourly_rate,
    )


@router.post("/users/{user_id}/approve", response_model=UserOut)
def approve_lecturer(
    user_id: UUID,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return services.users.approve(actor, user_id)


@router.get("/users/export")
def export_lecturers(services: Services = Depends(get_services)):
    return Response(
        content=render_lecturers_csv(services.users.list_lecturers()),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=lecturers.csv"},
    )


# --------------------------------------------------
# CLAIMS & REPORTS
# --------------------------------------------------
@router.get("/claims", response_model=List[ClaimOut])
def all_claims(
    status: Optional[ClaimStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    services: Services = Depends(get_services),
):
    return services.claims.history(status=status, date_from=date_from, date_to=date_to)


@router.get("/reports", response_model=List[ReportRowOut])
def approved_report(services: Services = Depends(get_services)):
    return services.claims.hr_report()


@router.get("/reports/pdf")
def approved_report_pdf(services: Services = Depends(get_services)):
    return Response(
        content=render_report_pdf(services.claims.hr_report()),
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=ApprovedClaimsReport.pdf"},
    )
