import uuid

from sqlalchemy import Boolean, Column, Enum, Integer, Numeric, String, Uuid

from app.core.roles import UserRole
from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(80), nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False)

    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)

    # controls login permission for lecturers
    is_approved = Column(Boolean, nullable=False, default=False)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def can_sign_in(self) -> bool:
        return self.role != UserRole.lecturer or bool(self.is_approved)
