import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Boolean, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base, utc_now


class Note(Base):
    __tablename__ = "notes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id = Column(Uuid, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False, default="")
    is_shared = Column(Boolean, nullable=False, default=False)
    shared_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    workspace = relationship("Workspace", back_populates="notes")
    author = relationship("Profile")
    shares = relationship("NoteShare", back_populates="note", cascade="all, delete-orphan", passive_deletes=True)
