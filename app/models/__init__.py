from .user import User
from .profile import Profile
from .workspace import Workspace
from .membership import WorkspaceMember
from .note import Note
from .note_share import NoteShare

__all__ = ["User", "Profile", "Workspace", "WorkspaceMember", "Note", "NoteShare"]
