# app/services/upload_guard.py

import os
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from app.core.config import settings


@dataclass(frozen=True)
class UploadPolicy:
    max_bytes: int
    allowed_extensions: FrozenSet[str]

    @classmethod
    def from_settings(cls) -> "UploadPolicy":
        return cls(
            max_bytes=settings.MAX_UPLOAD_BYTES,
            allowed_extensions=frozenset(settings.ALLOWED_UPLOAD_EXTENSIONS),
        )


def _format_limit(max_bytes: int) -> str:
    if max_bytes >= 1024 * 1024 and max_bytes % (1024 * 1024) == 0:
        return f"{max_bytes // (1024 * 1024)} MB"
    if max_bytes >= 1024 and max_bytes % 1024 == 0:
        return f"{max_bytes // 1024} KB"
    return f"{max_bytes} bytes"


class UploadGuard:
    """Decides whether a proposed attachment may be accepted. No I/O."""

    def __init__(self, policy: UploadPolicy):
        self.policy = policy

    def is_allowed(self, filename: str, size: int) -> Tuple[bool, Optional[str]]:
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in self.policy.allowed_extensions:
            allowed = ", ".join(sorted(self.policy.allowed_extensions))
            if not ext:
                return False, f"Files without an extension are not allowed (allowed: {allowed})"
            return False, f"'{ext}' files are not allowed (allowed: {allowed})"

        if size > self.policy.max_bytes:
            return False, f"File exceeds the {_format_limit(self.policy.max_bytes)} limit"

        return True, None
