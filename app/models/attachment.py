from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)

    claim_id = Column(
        Uuid,
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
    )

    file_name = Column(String, nullable=False)  # original filename
    saved_as = Column(String, unique=True, nullable=False)  # name in file storage
    size = Column(BigInteger, nullable=False)

    claim = relationship("Claim", back_populates="attachments")
