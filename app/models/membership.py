import uuid

from sqlalchemy import CheckConstraint, Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base, utc_now


class WorkspaceMember(Base):
    __tablename__ = "workspace_members"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id = Column(Uuid, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="member")  # owner, admin, member
    status = Column(String(20), nullable=False, default="active")  # active, pending, inactive
    invited_email = Column(String(320), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    workspace = relationship("Workspace", back_populates="members")
    profile = relationship("Profile", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="uq_workspace_member"),
        CheckConstraint("role IN ('owner', 'admin', 'member')", name="ck_workspace_member_role"),
        CheckConstraint("status IN ('active', 'pending', 'inactive')", name="ck_workspace_member_status"),
    )
