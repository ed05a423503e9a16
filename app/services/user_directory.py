# app/services/user_directory.py
"""
Lecturer registration, credential checks and the HR approval gate.

Self-registered lecturers are stored unapproved and cannot sign in until
HR approves them. Every write touches exactly one user through
``RecordStore.upsert``, including ``seed_staff``, which only adds
accounts whose email is still free.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from app.core.constants import (
    AWAITING_APPROVAL_MESSAGE,
    EMAIL_MAX_LENGTH,
    INVALID_CREDENTIALS_MESSAGE,
    NAME_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
)
from app.core.exceptions import (
    AuthFailure,
    AwaitingApprovalError,
    DuplicateEmailError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)
from app.core.roles import Actor, UserRole
from app.core.security import hash_password, verify_password
from app.db.record_store import RecordStore
from app.models.user import User
from app.services.activity_log import ActivityLog

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserDirectory:
    def __init__(
        self,
        users: RecordStore,
        activity: ActivityLog,
        default_hourly_rate: Decimal = Decimal("350"),
    ):
        self._users = users
        self._activity = activity
        self.default_hourly_rate = default_hourly_rate

    # --------------------------------------------------
    # LOOKUPS
    # --------------------------------------------------
    def list_users(self) -> List[User]:
        return self._users.get_all()

    def list_lecturers(self) -> List[User]:
        return self._users.find(role=UserRole.lecturer)

    def get_user(self, user_id) -> User:
        return self._users.get_by_id(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self._users.find_one(email=normalize_email(email))

    # --------------------------------------------------
    # REGISTRATION
    # --------------------------------------------------
    def register(self, name: str, email: str, password: str) -> User:
        """Self-service lecturer signup. The account stays inert until approved."""
        user = self._new_lecturer(name, email, password, self.default_hourly_rate, approved=False)
        logger.info("Lecturer %s registered, awaiting HR approval", user.email)
        return user

    def create_lecturer(
        self,
        actor: Actor,
        name: str,
        email: str,
        password: str,
        hourly_rate=None,
    ) -> User:
        self._require_hr(actor, "create lecturers")
        rate = self.default_hourly_rate if hourly_rate is None else hourly_rate
        user = self._new_lecturer(name, email, password, rate, approved=True)

        self._activity.record(
            actor,
            "create_lecturer",
            f"Created and activated lecturer {user.email}",
            user_id=user.id,
        )
        logger.info("HR %s created lecturer %s", actor.email, user.email)
        return user

    def _new_lecturer(self, name, email, password, hourly_rate, approved: bool) -> User:
        email = normalize_email(email)
        name = (name or "").strip()
        rate = self._validate_rate(hourly_rate)

        errors = self._identity_errors(name, email)
        if not password or len(password) < PASSWORD_MIN_LENGTH:
            errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
        if errors:
            raise ValidationError(errors)

        if self._users.find_one(email=email) is not None:
            raise DuplicateEmailError(email)

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=UserRole.lecturer,
            hourly_rate=rate,
            is_approved=approved,
        )
        # the unique index on email settles a race between two signups
        try:
            return self._users.upsert(user)
        except StorageError:
            if self._users.find_one(email=email) is not None:
                raise DuplicateEmailError(email)
            raise

    # --------------------------------------------------
    # SIGN-IN GATE
    # --------------------------------------------------
    def authenticate(self, email: str, password: str, role) -> User:
        role = self._parse_role(role)
        user = self._users.find_one(email=normalize_email(email), role=role)

        if user is None or not verify_password(password or "", user.password_hash):
            raise AuthFailure(INVALID_CREDENTIALS_MESSAGE)

        # not a credential failure, so it gets its own message
        if not user.can_sign_in:
            raise AwaitingApprovalError(AWAITING_APPROVAL_MESSAGE)

        return user

    # --------------------------------------------------
    # HR MAINTENANCE
    # --------------------------------------------------
    def approve(self, actor: Actor, user_id) -> User:
        self._require_hr(actor, "approve lecturers")

        with self._users.lock(user_id):
            user = self._users.get_by_id(user_id)
            if user.is_approved:
                return user

            user.is_approved = True
            user = self._users.upsert(user)

        self._activity.record(
            actor,
            "approve_user",
            f"{user.name} has been approved and can now log in.",
            user_id=user.id,
        )
        logger.info("HR %s approved %s", actor.email, user.email)
        return user

    def update_user(self, actor: Actor, user_id, role=None, hourly_rate=None) -> User:
        self._require_hr(actor, "edit users")

        with self._users.lock(user_id):
            user = self._users.get_by_id(user_id)
            if role is not None:
                user.role = self._parse_role(role)
            if hourly_rate is not None:
                user.hourly_rate = self._validate_rate(hourly_rate)
            user = self._users.upsert(user)

        self._activity.record(
            actor,
            "update_user",
            f"Updated {user.email}: role={user.role.value}, rate={user.hourly_rate}",
            user_id=user.id,
        )
        return user

    def seed_staff(self, password: str, accounts) -> int:
        """Create any staff account whose email is not taken yet.

        ``accounts`` is an iterable of (name, email, role). Existing users
        are never touched. Returns how many accounts were written.
        """
        written = 0
        for name, email, role in accounts:
            email = normalize_email(email)
            if self._users.find_one(email=email) is not None:
                continue

            user = User(
                name=name,
                email=email,
                password_hash=hash_password(password),
                role=UserRole(role),
                hourly_rate=Decimal("0"),
                is_approved=True,
            )
            try:
                self._users.upsert(user)
            except StorageError:
                # another worker seeded the same account first
                if self._users.find_one(email=email) is None:
                    raise
                continue
            written += 1

        if written:
            logger.info("Seeded %d staff accounts", written)
        return written

    # --------------------------------------------------
    # HELPERS
    # --------------------------------------------------
    @staticmethod
    def _require_hr(actor: Actor, what: str) -> None:
        if actor.role != UserRole.hr:
            raise PermissionDeniedError(f"Only HR can {what}.")

    @staticmethod
    def _parse_role(value) -> UserRole:
        try:
            return UserRole(value)
        except ValueError:
            raise ValidationError(f"Unknown role: {value}")

    @staticmethod
    def _identity_errors(name: str, email: str) -> List[str]:
        errors = []
        if not name:
            errors.append("Please enter your full name.")
        elif len(name) > NAME_MAX_LENGTH:
            errors.append(f"Name cannot be longer than {NAME_MAX_LENGTH} characters.")
        if not EMAIL_PATTERN.match(email) or len(email) > EMAIL_MAX_LENGTH:
            errors.append("Please enter a valid email address.")
        return errors

    @staticmethod
    def _validate_rate(value) -> Decimal:
        try:
            rate = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("Hourly rate must be a number.")
        if not rate.is_finite() or rate < 0:
            raise ValidationError("Hourly rate cannot be negative.")
        return rate
