from .user import UserCreate, UserResponse, ProfileResponse
from .note import (
    NoteCreate, NoteUpdate, NoteResponse, NoteListResponse,
    NoteShareCreate, NoteShareResponse, NotePermissionsResponse,
)
from .auth import Token, RefreshRequest
from .workspace import (
    WorkspaceCreate, WorkspaceUpdate, WorkspaceResponse, WorkspaceSummaryResponse,
    WorkspaceDetailResponse, WorkspaceStats,
    MemberInvite, MemberRoleUpdate, MemberStatusUpdate, MemberResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "ProfileResponse",
    "NoteCreate", "NoteUpdate", "NoteResponse", "NoteListResponse",
    "NoteShareCreate", "NoteShareResponse", "NotePermissionsResponse",
    "Token", "RefreshRequest",
    "WorkspaceCreate", "WorkspaceUpdate", "WorkspaceResponse", "WorkspaceSummaryResponse",
    "WorkspaceDetailResponse", "WorkspaceStats",
    "MemberInvite", "MemberRoleUpdate", "MemberStatusUpdate", "MemberResponse",
]
