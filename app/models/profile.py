from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base, utc_now


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the identity-provider account
    id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    user = relationship("User", back_populates="profile")
    memberships = relationship("WorkspaceMember", back_populates="profile", passive_deletes=True)
