"""
User model - identities resolved from sessions
"""
from sqlalchemy import Column, String, DateTime, Uuid, CheckConstraint
from learnhub.database import Base, utcnow
from learnhub.models.enums import UserRole, UserStatus
import uuid


class User(Base):
    """
    Users table - owned by the identity provider, read by the core
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'instructor', 'learner')", name="ck_users_role"),
        CheckConstraint("status IN ('active', 'inactive', 'suspended')", name="ck_users_status"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.LEARNER.value, index=True)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)
    created_at = Column(DateTime, default=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_learner(self) -> bool:
        return self.role == UserRole.LEARNER.value

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
