import uuid
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from app.domain.records import PermissionLevel
from app.schemas.user import ProfileResponse


class NoteBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: Optional[str] = ""
    is_shared: bool = False


class NoteCreate(NoteBase):
    pass


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = None
    is_shared: Optional[bool] = None


class NoteShareCreate(BaseModel):
    user_id: uuid.UUID
    permission_level: PermissionLevel = PermissionLevel.VIEW


class NoteShareResponse(BaseModel):
    shared_with_user_id: uuid.UUID
    permission_level: PermissionLevel


class NotePermissionsResponse(BaseModel):
    can_view: bool
    can_edit: bool
    can_delete: bool
    can_share: bool


class NoteResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    author_id: uuid.UUID
    author: Optional[ProfileResponse] = None
    title: str
    content: str
    is_shared: bool
    shared_at: Optional[datetime] = None
    shares: List[NoteShareResponse] = []
    permissions: NotePermissionsResponse
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NoteListResponse(BaseModel):
    """A workspace's notes as seen by one viewer."""
    own: List[NoteResponse] = []
    team: List[NoteResponse] = []
    shared: List[NoteResponse] = []
