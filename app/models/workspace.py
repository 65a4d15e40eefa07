import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base, utc_now


class Workspace(Base):
    __tablename__ = "workspaces"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships; rows go away with the workspace through ON DELETE CASCADE
    owner = relationship("Profile")
    members = relationship("WorkspaceMember", back_populates="workspace", cascade="all, delete-orphan", passive_deletes=True)
    notes = relationship("Note", back_populates="workspace", cascade="all, delete-orphan", passive_deletes=True)
