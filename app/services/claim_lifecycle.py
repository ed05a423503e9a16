# app/services/claim_lifecycle.py
"""
Claim lifecycle: submission, role-authorised status transitions and the
read-side views the role dashboards are built from.

Allowed transitions live in ``TRANSITIONS`` and nowhere else. A transition
holds the claim's lock from the read through the write, so two actors
racing on one claim cannot both move it; the loser re-reads the winner's
status and fails with InvalidTransitionError.
"""

import enum
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import BinaryIO, Iterable, List, Optional

from app.core.constants import HOURS_MAX, HOURS_MIN, NOTES_MAX_LENGTH, RATE_MAX, RATE_MIN
from app.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from app.core.roles import Actor, UserRole
from app.db.base import utcnow
from app.db.record_store import RecordStore
from app.models.attachment import Attachment
from app.models.claim import Claim, ClaimStatus
from app.services.activity_log import ActivityLog
from app.services.upload_guard import UploadGuard
from app.utils.calculations import LecturerReportRow, build_report_rows, sum_claim_totals

logger = logging.getLogger(__name__)


class ClaimAction(str, enum.Enum):
    verify = "verify"
    approve = "approve"
    reject = "reject"


TRANSITIONS = {
    (ClaimStatus.pending, ClaimAction.verify, UserRole.coordinator): ClaimStatus.verified,
    (ClaimStatus.pending, ClaimAction.reject, UserRole.coordinator): ClaimStatus.rejected,
    (ClaimStatus.verified, ClaimAction.approve, UserRole.manager): ClaimStatus.approved,
    (ClaimStatus.verified, ClaimAction.reject, UserRole.manager): ClaimStatus.rejected,
}

PAST_TENSE = {
    ClaimAction.verify: "Verified",
    ClaimAction.approve: "Approved",
    ClaimAction.reject: "Rejected",
}


@dataclass(frozen=True)
class UploadCandidate:
    filename: str
    size: int
    stream: BinaryIO


@dataclass(frozen=True)
class CoordinatorSummary:
    pending_count: int
    rejected_count: int
    oldest_pending: Optional[datetime]
    last_action: Optional[str]


@dataclass(frozen=True)
class ManagerSummary:
    verified_count: int
    total_awaiting: Decimal
    last_action: Optional[str]


@dataclass(frozen=True)
class LecturerSummary:
    pending_count: int
    approved_count: int
    total_approved: Decimal


@dataclass(frozen=True)
class HrSummary:
    total_users: int
    total_claims: int
    approved_count: int
    rejected_count: int


def _newest_first(claims: Iterable[Claim]) -> List[Claim]:
    return sorted(claims, key=lambda c: c.created_utc, reverse=True)


class ClaimLifecycle:
    def __init__(
        self,
        claims: RecordStore,
        users: RecordStore,
        activity: ActivityLog,
        guard: UploadGuard,
        storage,
    ):
        self._claims = claims
        self._users = users
        self._activity = activity
        self._guard = guard
        self._storage = storage

    # --------------------------------------------------
    # SUBMISSION
    # --------------------------------------------------
    def submit_claim(
        self,
        actor: Actor,
        hours_worked: int,
        notes: Optional[str] = None,
        uploads: Iterable[UploadCandidate] = (),
    ) -> Claim:
        if actor.role != UserRole.lecturer:
            raise PermissionDeniedError("Only lecturers can submit claims.")

        lecturer = self._users.find_one(email=actor.email)
        if lecturer is None:
            raise NotFoundError("User", actor.email)

        notes = (notes or "").strip() or None
        rate = Decimal(lecturer.hourly_rate)

        errors = self._field_errors(hours_worked, rate, notes)

        # empty files are dropped before the guard sees them
        accepted = [u for u in uploads if u.size > 0]
        for upload in accepted:
            ok, reason = self._guard.is_allowed(upload.filename, upload.size)
            if not ok:
                errors.append(f"{upload.filename}: {reason}")

        if errors:
            logger.info("Rejected claim from %s: %s", actor.email, errors)
            raise ValidationError(errors)

        claim = Claim(
            id=uuid.uuid4(),
            lecturer_name=lecturer.name,
            lecturer_email=lecturer.email,
            hours_worked=hours_worked,
            hourly_rate=rate,
            notes=notes,
            status=ClaimStatus.pending,
            attachments=[],
        )

        saved = []
        try:
            for upload in accepted:
                saved_as = f"{uuid.uuid4().hex}{os.path.splitext(upload.filename)[1].lower()}"
                self._storage.save(saved_as, upload.stream)
                saved.append(saved_as)
                claim.attachments.append(
                    Attachment(file_name=upload.filename, saved_as=saved_as, size=upload.size)
                )
            claim = self._claims.upsert(claim)
        except Exception:
            for saved_as in saved:
                self._storage.delete(saved_as)
            raise

        logger.info(
            "Claim %s submitted by %s (%s h x %s, %d attachments)",
            claim.id, claim.lecturer_email, claim.hours_worked, claim.hourly_rate, len(saved),
        )
        return claim

    @staticmethod
    def _field_errors(hours_worked, rate: Decimal, notes: Optional[str]) -> List[str]:
        errors = []
        if (
            isinstance(hours_worked, bool)
            or not isinstance(hours_worked, int)
            or not HOURS_MIN <= hours_worked <= HOURS_MAX
        ):
            errors.append(f"Policy allows between {HOURS_MIN} and {HOURS_MAX} hours per month.")
        if not RATE_MIN <= rate <= RATE_MAX:
            errors.append(f"Hourly rate must be between {RATE_MIN} and {RATE_MAX}.")
        if notes is not None and len(notes) > NOTES_MAX_LENGTH:
            errors.append(f"Notes cannot be longer than {NOTES_MAX_LENGTH} characters.")
        return errors

    # --------------------------------------------------
    # TRANSITIONS
    # --------------------------------------------------
    def transition(self, actor: Actor, claim_id, action) -> Claim:
        try:
            action = ClaimAction(action)
        except ValueError:
            raise ValidationError(f"Unknown claim action: {action}")

        with self._claims.lock(claim_id):
            claim = self._claims.get_by_id(claim_id)
            target = TRANSITIONS.get((claim.status, action, actor.role))
            if target is None:
                logger.warning(
                    "Refused %s on claim %s by %s (%s): status is %s",
                    action.value, claim_id, actor.email, actor.role.value, claim.status.value,
                )
                raise InvalidTransitionError(
                    claim_id, action.value, actor.role.value, claim.status.value
                )

            claim.status = target
            claim = self._claims.upsert(claim)

        self._activity.record(
            actor,
            action.value,
            f"{PAST_TENSE[action]} claim {claim.id} at {utcnow():%Y-%m-%d %H:%M} UTC",
            claim_id=claim.id,
        )
        logger.info("Claim %s -> %s by %s", claim.id, target.value, actor.email)
        return claim

    def verify(self, actor: Actor, claim_id) -> Claim:
        return self.transition(actor, claim_id, ClaimAction.verify)

    def approve(self, actor: Actor, claim_id) -> Claim:
        return self.transition(actor, claim_id, ClaimAction.approve)

    def reject(self, actor: Actor, claim_id) -> Claim:
        return self.transition(actor, claim_id, ClaimAction.reject)

    # --------------------------------------------------
    # LOOKUPS
    # --------------------------------------------------
    def get_claim(self, claim_id) -> Claim:
        return self._claims.get_by_id(claim_id)

    def find_attachment(self, claim_id, saved_as: str) -> Attachment:
        claim = self._claims.get_by_id(claim_id)
        for attachment in claim.attachments:
            if attachment.saved_as == saved_as:
                return attachment
        raise NotFoundError("Attachment", saved_as)

    # --------------------------------------------------
    # PROJECTIONS
    # --------------------------------------------------
    def pending_queue(self) -> List[Claim]:
        return _newest_first(self._claims.find(status=ClaimStatus.pending))

    def verified_queue(self) -> List[Claim]:
        return _newest_first(self._claims.find(status=ClaimStatus.verified))

    def history(
        self,
        status: Optional[ClaimStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Claim]:
        claims = self._claims.get_all()

        if status is not None:
            claims = [c for c in claims if c.status == ClaimStatus(status)]
        if date_from is not None:
            claims = [c for c in claims if c.created_utc.date() >= date_from]
        if date_to is not None:
            claims = [c for c in claims if c.created_utc.date() <= date_to]

        return _newest_first(claims)

    def claims_for_lecturer(self, email: str) -> List[Claim]:
        return _newest_first(self._claims.find(lecturer_email=email.strip().lower()))

    def hr_report(self) -> List[LecturerReportRow]:
        return build_report_rows(self._claims.find(status=ClaimStatus.approved))

    # --------------------------------------------------
    # DASHBOARDS
    # --------------------------------------------------
    def coordinator_summary(self, actor: Actor) -> CoordinatorSummary:
        pending = self.pending_queue()
        return CoordinatorSummary(
            pending_count=len(pending),
            rejected_count=len(self._claims.find(status=ClaimStatus.rejected)),
            oldest_pending=min((c.created_utc for c in pending), default=None),
            last_action=self._last_action(actor),
        )

    def manager_summary(self, actor: Actor) -> ManagerSummary:
        verified = self.verified_queue()
        return ManagerSummary(
            verified_count=len(verified),
            total_awaiting=sum_claim_totals(verified),
            last_action=self._last_action(actor),
        )

    def lecturer_summary(self, actor: Actor) -> LecturerSummary:
        mine = self.claims_for_lecturer(actor.email)
        approved = [c for c in mine if c.status == ClaimStatus.approved]
        return LecturerSummary(
            pending_count=sum(1 for c in mine if c.status == ClaimStatus.pending),
            approved_count=len(approved),
            total_approved=sum_claim_totals(approved),
        )

    def hr_summary(self) -> HrSummary:
        claims = self._claims.get_all()
        return HrSummary(
            total_users=len(self._users.get_all()),
            total_claims=len(claims),
            approved_count=sum(1 for c in claims if c.status == ClaimStatus.approved),
            rejected_count=sum(1 for c in claims if c.status == ClaimStatus.rejected),
        )

    def _last_action(self, actor: Actor) -> Optional[str]:
        entry = self._activity.last_for(actor.id)
        return entry.message if entry else None
