# app/core/exceptions.py
"""
Error taxonomy for the claim system.

Every failure raised by the stores and services derives from
ClaimSystemError and carries a machine-readable ``code`` plus a
human-readable ``message``. The API layer maps each class to an HTTP
status in app.api.errors; the services never build HTTP responses.
"""

from typing import List, Optional


class ClaimSystemError(Exception):
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClaimSystemError):
    """Malformed or out-of-range input. One message per violated rule."""

    code = "validation_error"

    def __init__(self, errors: List[str]):
        if isinstance(errors, str):
            errors = [errors]
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class ConflictError(ClaimSystemError):
    code = "conflict"


class DuplicateEmailError(ConflictError):
    code = "duplicate_email"

    def __init__(self, email: str):
        super().__init__("An account with this email already exists.")
        self.email = email


class AuthFailure(ClaimSystemError):
    code = "auth_failure"


class AwaitingApprovalError(AuthFailure):
    """Credentials are correct but HR has not activated the lecturer yet."""

    code = "awaiting_approval"


class PermissionDeniedError(ClaimSystemError):
    code = "permission_denied"


class NotFoundError(ClaimSystemError):
    code = "not_found"

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidTransitionError(ClaimSystemError):
    code = "invalid_transition"

    def __init__(
        self,
        claim_id,
        action: str,
        role: str,
        current_status: Optional[str] = None,
    ):
        super().__init__(
            f"{role} cannot {action} claim {claim_id} while it is {current_status}"
        )
        self.claim_id = claim_id
        self.action = action
        self.role = role
        self.current_status = current_status


class StaleVersionError(ClaimSystemError):
    """A write was derived from a read that another writer has since replaced."""

    code = "stale_version"


class StorageError(ClaimSystemError):
    code = "storage_error"
