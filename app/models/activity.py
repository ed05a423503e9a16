import uuid

from sqlalchemy import Column, DateTime, Enum, String, Uuid

from app.core.roles import UserRole
from app.db.base import Base, utcnow


class ActivityEntry(Base):
    """Append-only record of what an actor did, read back by dashboards."""

    __tablename__ = "activity_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    actor_id = Column(Uuid, index=True, nullable=False)
    actor_role = Column(Enum(UserRole), nullable=False)
    action = Column(String(40), nullable=False)

    claim_id = Column(Uuid, nullable=True)
    user_id = Column(Uuid, nullable=True)

    message = Column(String(250), nullable=False)
    created_utc = Column(DateTime, default=utcnow, nullable=False)
