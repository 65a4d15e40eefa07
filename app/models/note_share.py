import uuid

from sqlalchemy import CheckConstraint, Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base, utc_now


class NoteShare(Base):
    __tablename__ = "note_shares"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    note_id = Column(Uuid, ForeignKey("notes.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_with_user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    permission_level = Column(String(20), nullable=False, default="view")  # view, edit
    created_at = Column(DateTime(timezone=True), default=utc_now)

    # Relationships
    note = relationship("Note", back_populates="shares")
    shared_with = relationship("Profile")

    __table_args__ = (
        UniqueConstraint("note_id", "shared_with_user_id", name="uq_note_share_target"),
        CheckConstraint("permission_level IN ('view', 'edit')", name="ck_note_share_permission_level"),
    )
