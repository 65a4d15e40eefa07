import uuid
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from app.domain.records import MembershipStatus, Role
from app.schemas.user import ProfileResponse


class WorkspaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class WorkspaceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class WorkspaceResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    owner_id: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkspaceSummaryResponse(WorkspaceResponse):
    current_user_role: Role
    member_count: int


class WorkspaceDetailResponse(WorkspaceResponse):
    current_user_role: Role
    can_manage_members: bool
    can_delete: bool


class WorkspaceStats(BaseModel):
    workspace_count: int
    unique_member_count: int


class MemberInvite(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    role: Role = Role.MEMBER


class MemberRoleUpdate(BaseModel):
    role: Role


class MemberStatusUpdate(BaseModel):
    status: MembershipStatus


class MemberResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    user_id: uuid.UUID
    role: Role
    status: MembershipStatus
    invited_email: Optional[str] = None
    profile: Optional[ProfileResponse] = None
    is_current_user: bool = False
    can_manage: bool = False
