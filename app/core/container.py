# app/core/container.py

from decimal import Decimal

from app.core.config import settings
from app.db.record_store import RecordStore
from app.models.activity import ActivityEntry
from app.models.claim import Claim
from app.models.user import User
from app.services.activity_log import ActivityLog
from app.services.claim_lifecycle import ClaimLifecycle
from app.services.file_storage import LocalFileStorage
from app.services.upload_guard import UploadGuard, UploadPolicy
from app.services.user_directory import UserDirectory


class Services:
    """Stores and services shared by every request."""

    def __init__(
        self,
        session_factory,
        upload_dir: str = None,
        upload_policy: UploadPolicy = None,
        lock_timeout: float = None,
        default_hourly_rate: Decimal = None,
    ):
        timeout = settings.STORE_LOCK_TIMEOUT if lock_timeout is None else lock_timeout

        self.user_store = RecordStore(User, session_factory, timeout, order_by=User.name)
        self.claim_store = RecordStore(Claim, session_factory, timeout, order_by=Claim.created_utc)
        self.activity_store = RecordStore(
            ActivityEntry, session_factory, timeout, order_by=ActivityEntry.created_utc
        )

        self.activity = ActivityLog(self.activity_store)
        self.storage = LocalFileStorage(upload_dir or settings.UPLOAD_DIR)
        self.guard = UploadGuard(upload_policy or UploadPolicy.from_settings())

        self.users = UserDirectory(
            self.user_store,
            self.activity,
            default_hourly_rate=(
                settings.DEFAULT_HOURLY_RATE if default_hourly_rate is None else default_hourly_rate
            ),
        )
        self.claims = ClaimLifecycle(
            self.claim_store,
            self.user_store,
            self.activity,
            self.guard,
            self.storage,
        )
