"""Store adapter.

Every query the access-control core depends on lives here, and every joined
row leaves this module as a fixed-shape record from ``app.domain.records``.
"""

import uuid
from typing import List, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import Conflict, StoreUnavailable
from app.core.logging_config import get_logger
from app.domain.records import (
    MemberRecord,
    MembershipStatus,
    NoteRecord,
    PermissionLevel,
    ProfileRecord,
    Role,
    ShareRecord,
)
from app.models.membership import WorkspaceMember
from app.models.note import Note
from app.models.profile import Profile
from app.models.user import User
from app.models.workspace import Workspace

logger = get_logger(__name__)


# --- Normalisation ---

def to_profile_record(profile: Optional[Profile]) -> Optional[ProfileRecord]:
    if profile is None:
        return None
    return ProfileRecord(id=profile.id, email=profile.email, full_name=profile.full_name)


def to_member_record(member: WorkspaceMember, profile: Optional[Profile] = None) -> MemberRecord:
    return MemberRecord(
        id=member.id,
        workspace_id=member.workspace_id,
        user_id=member.user_id,
        role=Role(member.role),
        status=MembershipStatus(member.status),
        invited_email=member.invited_email,
        profile=to_profile_record(profile),
    )


def to_note_record(note: Note) -> NoteRecord:
    return NoteRecord(
        id=note.id,
        workspace_id=note.workspace_id,
        author_id=note.author_id,
        title=note.title,
        content=note.content or "",
        is_shared=bool(note.is_shared),
        shared_at=note.shared_at,
        created_at=note.created_at,
        updated_at=note.updated_at,
        author=to_profile_record(note.author),
        shares=tuple(
            ShareRecord(
                note_id=share.note_id,
                shared_with_user_id=share.shared_with_user_id,
                permission_level=PermissionLevel(share.permission_level),
            )
            for share in note.shares
        ),
    )


# --- Transactions ---

async def commit(db: AsyncSession, conflict_error: Type[Conflict] = Conflict) -> None:
    """Commit the unit of work; uniqueness violations become ``conflict_error``."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Store rejected write: {e.orig}")
        raise conflict_error() from e
    except (OperationalError, InterfaceError) as e:
        await db.rollback()
        logger.error(f"Store unavailable during commit: {e}")
        raise StoreUnavailable() from e


# --- Profiles ---

async def get_profile(db: AsyncSession, user_id: uuid.UUID) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def find_profile_by_email(db: AsyncSession, email: str) -> Optional[ProfileRecord]:
    result = await db.execute(
        select(Profile).where(func.lower(Profile.email) == email.strip().lower())
    )
    return to_profile_record(result.scalar_one_or_none())


async def ensure_profile(db: AsyncSession, user: User, full_name: Optional[str] = None) -> Profile:
    """Return the account's profile, adding one to the session if it is missing."""
    profile = await get_profile(db, user.id)
    if profile is None:
        profile = Profile(
            id=user.id,
            email=user.email,
            full_name=full_name or user.email.split("@")[0],
        )
        db.add(profile)
        logger.info("Profile created", extra={"user_id": str(user.id)})
    return profile


# --- Workspaces and memberships ---

async def get_workspace(db: AsyncSession, workspace_id: uuid.UUID) -> Optional[Workspace]:
    result = await db.execute(select(Workspace).where(Workspace.id == workspace_id))
    return result.scalar_one_or_none()


async def get_membership_row(
    db: AsyncSession, workspace_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[WorkspaceMember]:
    result = await db.execute(
        select(WorkspaceMember).where(
            WorkspaceMember.workspace_id == workspace_id,
            WorkspaceMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def get_membership(
    db: AsyncSession, workspace_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[MemberRecord]:
    """Any membership row of the user in the workspace, whatever its status."""
    member = await get_membership_row(db, workspace_id, user_id)
    return to_member_record(member) if member else None


async def get_active_membership(
    db: AsyncSession, workspace_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[MemberRecord]:
    member = await get_membership(db, workspace_id, user_id)
    if member is None or not member.is_active:
        return None
    return member


async def get_member_row(db: AsyncSession, member_id: uuid.UUID) -> Optional[WorkspaceMember]:
    result = await db.execute(
        select(WorkspaceMember)
        .options(selectinload(WorkspaceMember.profile))
        .where(WorkspaceMember.id == member_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_active_memberships(db: AsyncSession, user_id: uuid.UUID) -> List[MemberRecord]:
    result = await db.execute(
        select(WorkspaceMember).where(
            WorkspaceMember.user_id == user_id,
            WorkspaceMember.status == MembershipStatus.ACTIVE.value,
        )
    )
    return [to_member_record(member) for member in result.scalars().all()]


async def list_members(db: AsyncSession, workspace_id: uuid.UUID) -> List[MemberRecord]:
    """Active members of a workspace with their profiles, owner first."""
    result = await db.execute(
        select(WorkspaceMember, Profile)
        .join(Profile, Profile.id == WorkspaceMember.user_id)
        .where(
            WorkspaceMember.workspace_id == workspace_id,
            WorkspaceMember.status == MembershipStatus.ACTIVE.value,
        )
        .order_by(WorkspaceMember.created_at)
    )
    members = [to_member_record(member, profile) for member, profile in result.all()]
    return sorted(members, key=lambda m: m.role != Role.OWNER)


async def count_active_members(db: AsyncSession, workspace_ids: List[uuid.UUID]) -> dict:
    if not workspace_ids:
        return {}
    result = await db.execute(
        select(WorkspaceMember.workspace_id, func.count(WorkspaceMember.id))
        .where(
            WorkspaceMember.workspace_id.in_(workspace_ids),
            WorkspaceMember.status == MembershipStatus.ACTIVE.value,
        )
        .group_by(WorkspaceMember.workspace_id)
    )
    return {workspace_id: count for workspace_id, count in result.all()}


async def list_active_member_ids(db: AsyncSession, workspace_ids: List[uuid.UUID]) -> set:
    if not workspace_ids:
        return set()
    result = await db.execute(
        select(WorkspaceMember.user_id).where(
            WorkspaceMember.workspace_id.in_(workspace_ids),
            WorkspaceMember.status == MembershipStatus.ACTIVE.value,
        )
    )
    return {row[0] for row in result.all()}


# --- Notes ---

def _note_query():
    return (
        select(Note)
        .options(selectinload(Note.author), selectinload(Note.shares))
        .execution_options(populate_existing=True)
    )


async def get_note_row(db: AsyncSession, note_id: uuid.UUID) -> Optional[Note]:
    result = await db.execute(_note_query().where(Note.id == note_id))
    return result.scalar_one_or_none()


async def get_note(db: AsyncSession, note_id: uuid.UUID) -> Optional[NoteRecord]:
    note = await get_note_row(db, note_id)
    return to_note_record(note) if note else None


async def list_notes(db: AsyncSession, workspace_id: uuid.UUID) -> List[NoteRecord]:
    """All notes of a workspace with author and explicit shares, most recently updated first."""
    result = await db.execute(
        _note_query()
        .where(Note.workspace_id == workspace_id)
        .order_by(Note.updated_at.desc())
    )
    return [to_note_record(note) for note in result.scalars().all()]
