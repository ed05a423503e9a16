# app/core/roles.py

import enum
from dataclasses import dataclass
from uuid import UUID


class UserRole(str, enum.Enum):
    lecturer = "Lecturer"
    coordinator = "Coordinator"
    manager = "Manager"
    hr = "HR"


ROLE_LECTURER = UserRole.lecturer
ROLE_COORDINATOR = UserRole.coordinator
ROLE_MANAGER = UserRole.manager
ROLE_HR = UserRole.hr

ALL_ROLES = [ROLE_LECTURER, ROLE_COORDINATOR, ROLE_MANAGER, ROLE_HR]


@dataclass(frozen=True)
class Actor:
    """The authenticated identity a request acts as."""

    id: UUID
    email: str
    role: UserRole

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, email=user.email, role=user.role)
