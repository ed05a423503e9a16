from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.auth import get_current_actor
from app.api.deps import get_services
from app.core.container import Services
from app.core.permissions import require_roles
from app.core.roles import ROLE_MANAGER, Actor
from app.models.claim import ClaimStatus
from app.schemas.claim import ClaimOut, ManagerDashboard

router = APIRouter(
    prefix="/api/manager",
    tags=["manager"],
    dependencies=[Depends(require_roles([ROLE_MANAGER]))],
)


@router.get("", response_model=ManagerDashboard)
def verified_claims(
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    summary = services.claims.manager_summary(actor)
    return {
        "verified_count": summary.verified_count,
        "total_awaiting": summary.total_awaiting,
        "last_action": summary.last_action,
        "claims": services.claims.verified_queue(),
    }


@router.get("/history", response_model=List[ClaimOut])
def history(
    status: Optional[ClaimStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    services: Services = Depends(get_services),
):
    return services.claims.history(status=status, date_from=date_from, date_to=date_to)


@router.post("/claims/{claim_id}/approve", response_model=ClaimOut)
def approve_claim(
    claim_id: UUID,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return services.claims.approve(actor, claim_id)


@router.post("/claims/{claim_id}/reject", response_model=ClaimOut)
def reject_claim(
    claim_id: UUID,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return services.claims.reject(actor, claim_id)
