from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.auth import get_current_actor
from app.api.deps import get_services
from app.core.container import Services
from app.core.permissions import require_roles
from app.core.roles import ROLE_COORDINATOR, Actor
from app.models.claim import ClaimStatus
from app.schemas.claim import ClaimOut, CoordinatorDashboard

router = APIRouter(
    prefix="/api/coordinator",
    tags=["coordinator"],
    dependencies=[Depends(require_roles([ROLE_COORDINATOR]))],
)


@router.get("", response_model=CoordinatorDashboard)
def pending_claims(
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    summary = services.claims.coordinator_summary(actor)
    return {
        "pending_count": summary.pending_count,
        "rejected_count": summary.rejected_count,
        "oldest_pending": summary.oldest_pending,
        "last_action": summary.last_action,
        "claims": services.claims.pending_queue(),
    }


@router.get("/history", response_model=List[ClaimOut])
def history(
    status: Optional[ClaimStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    services: Services = Depends(get_services),
):
    return services.claims.history(status=status, date_from=date_from, date_to=date_to)


@router.post("/claims/{claim_id}/verify", response_model=ClaimOut)
def verify_claim(
    claim_id: UUID,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return services.claims.verify(actor, claim_id)


@router.post("/claims/{claim_id}/reject", response_model=ClaimOut)
def reject_claim(
    claim_id: UUID,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return services.claims.reject(actor, claim_id)
