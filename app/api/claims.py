# app/api/claims.py

import os
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse

from app.api.auth import get_current_actor
from app.api.deps import get_services
from app.core.container import Services
from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.core.permissions import require_roles
from app.core.roles import ALL_ROLES, ROLE_LECTURER, Actor, UserRole
from app.schemas.claim import ClaimOut, LecturerDashboard
from app.services.claim_lifecycle import UploadCandidate

router = APIRouter(tags=["Claims"])


def _candidates(files: List[UploadFile]) -> List[UploadCandidate]:
    candidates = []
    for f in files or []:
        f.file.seek(0, os.SEEK_END)
        size = f.file.tell()
        f.file.seek(0)
        candidates.append(UploadCandidate(filename=f.filename or "", size=size, stream=f.file))
    return candidates


# --------------------------------------------------
# SUBMIT CLAIM
# --------------------------------------------------
@router.post(
    "",
    response_model=ClaimOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles([ROLE_LECTURER]))],
)
def submit_claim(
    hours_worked: int = Form(...),
    notes: Optional[str] = Form(None),
    files: List[UploadFile] = File(default=[]),
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return services.claims.submit_claim(
        actor,
        hours_worked=hours_worked,
        notes=notes,
        uploads=_candidates(files),
    )


# --------------------------------------------------
# MY CLAIMS
# --------------------------------------------------
@router.get(
    "/mine",
    response_model=LecturerDashboard,
    dependencies=[Depends(require_roles([ROLE_LECTURER]))],
)
def my_claims(
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    summary = services.claims.lecturer_summary(actor)
    return {
        "pending_count": summary.pending_count,
        "approved_count": summary.approved_count,
        "total_approved": summary.total_approved,
        "claims": services.claims.claims_for_lecturer(actor.email),
    }


# --------------------------------------------------
# GET ONE CLAIM
# --------------------------------------------------
def _visible_claim(services: Services, actor: Actor, claim_id: UUID):
    claim = services.claims.get_claim(claim_id)
    if actor.role == UserRole.lecturer and claim.lecturer_email != actor.email:
        raise PermissionDeniedError("You can only view your own claims.")
    return claim


@router.get(
    "/{claim_id}",
    response_model=ClaimOut,
    dependencies=[Depends(require_roles(ALL_ROLES))],
)
def get_claim(
    claim_id: UUID,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    return _visible_claim(services, actor, claim_id)


# --------------------------------------------------
# DOWNLOAD ATTACHMENT
# --------------------------------------------------
@router.get(
    "/{claim_id}/attachments/{saved_as}",
    dependencies=[Depends(require_roles(ALL_ROLES))],
)
def download_attachment(
    claim_id: UUID,
    saved_as: str,
    services: Services = Depends(get_services),
    actor: Actor = Depends(get_current_actor),
):
    _visible_claim(services, actor, claim_id)
    attachment = services.claims.find_attachment(claim_id, saved_as)

    if not services.storage.exists(attachment.saved_as):
        raise NotFoundError("File", attachment.saved_as)

    return FileResponse(
        path=services.storage.path_for(attachment.saved_as),
        media_type="application/octet-stream",
        filename=attachment.file_name,
    )
