import io
import os
from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)
from app.core.roles import Actor, UserRole
from app.models.claim import ClaimStatus
from app.services.claim_lifecycle import TRANSITIONS, ClaimAction, UploadCandidate


def _upload(name, data):
    return UploadCandidate(filename=name, size=len(data), stream=io.BytesIO(data))


def _actor_for(role, staff, lecturer):
    return lecturer if role == UserRole.lecturer else staff[role]


def test_full_pipeline_lands_in_hr_report(services, submit, coordinator, manager, lecturer):
    claim = submit(hours=10)
    assert claim.total == Decimal("3500")
    assert claim.status == ClaimStatus.pending

    claim = services.claims.verify(coordinator, claim.id)
    assert claim.status == ClaimStatus.verified

    claim = services.claims.approve(manager, claim.id)
    assert claim.status == ClaimStatus.approved

    [row] = services.claims.hr_report()
    assert row.lecturer_email == lecturer.email
    assert row.total_hours == 10
    assert row.total_amount == Decimal("3500")


def test_total_is_recomputed_on_every_read(services, submit):
    claim = submit(hours=7)

    totals = {services.claims.get_claim(claim.id).total for _ in range(3)}
    assert totals == {Decimal("2450")}


def test_claim_snapshots_lecturer_identity_and_rate(services, submit, hr, lecturer):
    claim = submit(hours=2)

    services.users.update_user(hr, lecturer.id, hourly_rate=Decimal("900"))

    stored = services.claims.get_claim(claim.id)
    assert stored.hourly_rate == Decimal("350")
    assert stored.lecturer_name == "Lerato Lecturer"
    assert stored.total == Decimal("700")


@pytest.mark.parametrize("hours", [0, 181, -5])
def test_hours_outside_policy_are_rejected(services, submit, hours):
    with pytest.raises(ValidationError) as exc:
        submit(hours=hours)
    assert "hours" in exc.value.errors[0]
    assert services.claims.history() == []


def test_notes_longer_than_limit_are_rejected(submit):
    with pytest.raises(ValidationError):
        submit(notes="x" * 251)


def test_lecturer_rate_outside_claim_range_blocks_submission(services, submit, hr, lecturer):
    services.users.update_user(hr, lecturer.id, hourly_rate=Decimal("10"))

    with pytest.raises(ValidationError) as exc:
        submit(hours=5)
    assert "between 50 and 2000" in exc.value.errors[0]


def test_only_lecturers_submit(services, coordinator):
    with pytest.raises(PermissionDeniedError):
        services.claims.submit_claim(coordinator, 5)


ALL_CASES = [
    (status, action, role)
    for status in ClaimStatus
    for action in ClaimAction
    for role in UserRole
]


@pytest.mark.parametrize(
    "status,action,role",
    [case for case in ALL_CASES if case not in TRANSITIONS],
)
def test_transitions_outside_the_table_are_refused(
    services, submit, staff, lecturer, status, action, role
):
    claim = submit(hours=3)
    # drive the claim to the starting state through legal moves
    if status == ClaimStatus.verified:
        services.claims.verify(staff[UserRole.coordinator], claim.id)
    elif status == ClaimStatus.approved:
        services.claims.verify(staff[UserRole.coordinator], claim.id)
        services.claims.approve(staff[UserRole.manager], claim.id)
    elif status == ClaimStatus.rejected:
        services.claims.reject(staff[UserRole.coordinator], claim.id)
    before = services.claims.get_claim(claim.id)

    with pytest.raises(InvalidTransitionError):
        services.claims.transition(_actor_for(role, staff, lecturer), claim.id, action)

    after = services.claims.get_claim(claim.id)
    assert after.status == status
    assert after.version == before.version


def test_manager_cannot_approve_pending_claim(services, submit, manager):
    claim = submit()

    with pytest.raises(InvalidTransitionError) as exc:
        services.claims.approve(manager, claim.id)

    assert exc.value.current_status == "Pending"
    assert services.claims.get_claim(claim.id).status == ClaimStatus.pending


@pytest.mark.parametrize("terminal_path", ["approved", "rejected_by_coordinator", "rejected_by_manager"])
def test_terminal_states_never_move(services, submit, staff, lecturer, terminal_path):
    claim = submit()
    coordinator, manager = staff[UserRole.coordinator], staff[UserRole.manager]

    if terminal_path == "rejected_by_coordinator":
        services.claims.reject(coordinator, claim.id)
    else:
        services.claims.verify(coordinator, claim.id)
        if terminal_path == "approved":
            services.claims.approve(manager, claim.id)
        else:
            services.claims.reject(manager, claim.id)

    final = services.claims.get_claim(claim.id).status
    for action in ClaimAction:
        for role in UserRole:
            with pytest.raises(InvalidTransitionError):
                services.claims.transition(_actor_for(role, staff, lecturer), claim.id, action)

    assert services.claims.get_claim(claim.id).status == final


def test_transition_changes_only_status(services, submit, coordinator):
    claim = submit(hours=12, notes="Marking for PROG6212")

    services.claims.verify(coordinator, claim.id)

    after = services.claims.get_claim(claim.id)
    assert (after.hours_worked, after.hourly_rate, after.notes, after.lecturer_email) == (
        12, Decimal("350"), "Marking for PROG6212", claim.lecturer_email,
    )
    assert after.created_utc == claim.created_utc


def test_unknown_claim_is_not_found(services, coordinator):
    import uuid

    with pytest.raises(NotFoundError):
        services.claims.verify(coordinator, uuid.uuid4())


def test_unknown_action_is_a_validation_error(services, submit, coordinator):
    claim = submit()
    with pytest.raises(ValidationError):
        services.claims.transition(coordinator, claim.id, "pay")


# --------------------------------------------------
# ATTACHMENTS
# --------------------------------------------------
def test_accepted_files_are_stored_under_unique_names(services, submit):
    claim = submit(uploads=[
        _upload("timesheet.pdf", b"%PDF-1.4 one"),
        _upload("timesheet.pdf", b"%PDF-1.4 two"),
    ])

    names = [a.saved_as for a in claim.attachments]
    assert len(set(names)) == 2
    assert all(n.endswith(".pdf") for n in names)
    assert [a.file_name for a in claim.attachments] == ["timesheet.pdf", "timesheet.pdf"]
    assert [a.size for a in claim.attachments] == [12, 12]
    for name in names:
        assert services.storage.exists(name)

    found = services.claims.find_attachment(claim.id, names[0])
    assert found.file_name == "timesheet.pdf"


def test_zero_byte_file_is_skipped_without_consulting_guard(services, submit, monkeypatch):
    seen = []
    original = services.guard.is_allowed

    def spy(filename, size):
        seen.append(filename)
        return original(filename, size)

    monkeypatch.setattr(services.guard, "is_allowed", spy)

    claim = submit(uploads=[_upload("empty.exe", b""), _upload("hours.docx", b"data")])

    assert seen == ["hours.docx"]
    assert [a.file_name for a in claim.attachments] == ["hours.docx"]


def test_oversize_file_rejects_whole_submission(services, submit, tmp_path):
    with pytest.raises(ValidationError) as exc:
        submit(uploads=[
            _upload("ok.pdf", b"fine"),
            _upload("huge.pdf", b"x" * 2048),
            _upload("virus.exe", b"MZ"),
        ])

    assert exc.value.errors == [
        "huge.pdf: File exceeds the 1 KB limit",
        "virus.exe: '.exe' files are not allowed (allowed: .docx, .pdf, .xlsx)",
    ]
    assert services.claims.history() == []
    assert os.listdir(services.storage.upload_dir) == []


def test_saved_files_are_removed_when_claim_cannot_be_written(services, submit, monkeypatch):
    def broken_upsert(entity):
        raise StorageError("disk full")

    monkeypatch.setattr(services.claim_store, "upsert", broken_upsert)

    with pytest.raises(StorageError):
        submit(uploads=[_upload("ok.pdf", b"fine")])

    assert os.listdir(services.storage.upload_dir) == []


def test_missing_attachment_is_not_found(services, submit):
    claim = submit()
    with pytest.raises(NotFoundError):
        services.claims.find_attachment(claim.id, "nope.pdf")


# --------------------------------------------------
# PROJECTIONS
# --------------------------------------------------
def test_queues_are_newest_first(services, submit, coordinator):
    first = submit(hours=1)
    second = submit(hours=2)
    third = submit(hours=3)
    services.claims.verify(coordinator, first.id)
    services.claims.verify(coordinator, third.id)

    assert [c.id for c in services.claims.pending_queue()] == [second.id]
    assert [c.id for c in services.claims.verified_queue()] == [third.id, first.id]


def test_history_filters_by_status_and_inclusive_dates(services, submit, coordinator):
    kept = submit(hours=1)
    rejected = submit(hours=2)
    services.claims.reject(coordinator, rejected.id)
    today = kept.created_utc.date()

    assert [c.id for c in services.claims.history()] == [rejected.id, kept.id]
    assert [c.id for c in services.claims.history(status=ClaimStatus.rejected)] == [rejected.id]
    assert len(services.claims.history(date_from=today, date_to=today)) == 2
    assert services.claims.history(date_from=today + timedelta(days=1)) == []
    assert services.claims.history(date_to=today - timedelta(days=1)) == []


def test_hr_report_groups_per_lecturer_by_amount(services, submit, hr, coordinator, manager, lecturer):
    other = Actor.from_user(
        services.users.create_lecturer(hr, "Bongani", "bongani@cmcs.test", "pass-word", Decimal("1000"))
    )

    def approved(actor, hours):
        claim = submit(hours=hours, actor=actor)
        services.claims.verify(coordinator, claim.id)
        return services.claims.approve(manager, claim.id)

    approved(lecturer, 10)
    approved(lecturer, 5)
    approved(other, 4)
    # pending and rejected claims stay out of the report
    submit(hours=100)
    services.claims.reject(coordinator, submit(hours=50).id)

    rows = services.claims.hr_report()
    assert [(r.lecturer_email, r.total_hours, r.total_amount) for r in rows] == [
        ("lerato@cmcs.test", 15, Decimal("5250")),
        ("bongani@cmcs.test", 4, Decimal("4000")),
    ]


def test_dashboards_read_activity_log(services, submit, coordinator, manager, lecturer):
    claim = submit(hours=4)
    other = submit(hours=6)
    services.claims.verify(coordinator, claim.id)
    services.claims.reject(coordinator, other.id)

    summary = services.claims.coordinator_summary(coordinator)
    assert summary.pending_count == 0
    assert summary.rejected_count == 1
    assert summary.oldest_pending is None
    assert summary.last_action.startswith(f"Rejected claim {other.id}")

    manager_view = services.claims.manager_summary(manager)
    assert manager_view.verified_count == 1
    assert manager_view.total_awaiting == Decimal("1400")
    assert manager_view.last_action is None

    services.claims.approve(manager, claim.id)
    mine = services.claims.lecturer_summary(lecturer)
    assert (mine.pending_count, mine.approved_count, mine.total_approved) == (0, 1, Decimal("1400"))

    hr_view = services.claims.hr_summary()
    assert (hr_view.total_users, hr_view.total_claims) == (4, 2)
    assert (hr_view.approved_count, hr_view.rejected_count) == (1, 1)


def test_claim_without_files_has_empty_attachment_list(services, submit):
    claim = submit(hours=6)

    assert claim.attachments == []
    assert services.claims.get_claim(claim.id).attachments == []


def test_transition_stands_when_activity_write_fails(services, submit, coordinator, monkeypatch):
    claim = submit()

    def broken_upsert(entry):
        raise StorageError("activity storage is unavailable")

    monkeypatch.setattr(services.activity_store, "upsert", broken_upsert)

    verified = services.claims.verify(coordinator, claim.id)

    assert verified.status == ClaimStatus.verified
    assert services.claims.get_claim(claim.id).status == ClaimStatus.verified
    assert services.activity.last_for(coordinator.id) is None
