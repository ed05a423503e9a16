# app/models/claim.py

import enum
import uuid
from decimal import Decimal

from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base, utcnow


class ClaimStatus(str, enum.Enum):
    pending = "Pending"
    verified = "Verified"
    approved = "Approved"
    rejected = "Rejected"


TERMINAL_STATUSES = frozenset({ClaimStatus.approved, ClaimStatus.rejected})


class Claim(Base):
    __tablename__ = "claims"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # copied from the lecturer at submission time
    lecturer_name = Column(String(80), nullable=False)
    lecturer_email = Column(String(100), index=True, nullable=False)

    hours_worked = Column(Integer, nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    notes = Column(String(250), nullable=True)

    status = Column(
        Enum(ClaimStatus),
        default=ClaimStatus.pending,
        nullable=False,
    )

    created_utc = Column(DateTime, default=utcnow, nullable=False)

    version = Column(Integer, nullable=False)

    attachments = relationship(
        "Attachment",
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="Attachment.id",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def total(self) -> Decimal:
        # never stored, always hours * rate at read time
        return Decimal(self.hours_worked) * Decimal(self.hourly_rate)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
