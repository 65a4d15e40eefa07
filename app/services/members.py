import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AlreadyMember, AppError, NotFound
from app.core.logging_config import get_logger
from app.domain.access_control import check_workspace_permission
from app.domain.membership import (
    InviteAction,
    authorize_invite,
    authorize_removal,
    authorize_role_change,
    authorize_status_change,
    normalize_email,
    plan_invite,
)
from app.domain.records import MemberRecord, MembershipStatus, Role
from app.models.membership import WorkspaceMember
from app.services import store

logger = get_logger(__name__)


async def list_members(db: AsyncSession, actor: MemberRecord) -> List[MemberRecord]:
    check_workspace_permission(actor.role, "read")
    return await store.list_members(db, actor.workspace_id)


async def invite_member(db: AsyncSession, actor: MemberRecord, email: str, role: Role) -> MemberRecord:
    """Add an existing account to the workspace as an active member."""
    try:
        authorize_invite(actor.role, role)
        email = normalize_email(email)

        profile = await store.find_profile_by_email(db, email)
        existing = await store.get_membership_row(db, actor.workspace_id, profile.id) if profile else None
        action = plan_invite(profile, store.to_member_record(existing) if existing else None)
    except AppError as e:
        logger.warning(
            f"Invite rejected: {e.detail}",
            extra={"workspace_id": str(actor.workspace_id), "invited_by": str(actor.user_id)},
        )
        raise

    if action == InviteAction.REACTIVATE:
        existing.role = role.value
        existing.status = MembershipStatus.ACTIVE.value
        existing.invited_email = email
        member = existing
    else:
        member = WorkspaceMember(
            workspace_id=actor.workspace_id,
            user_id=profile.id,
            role=role.value,
            status=MembershipStatus.ACTIVE.value,
            invited_email=email,
        )
        db.add(member)

    # A concurrent invite of the same user trips the (workspace, user) constraint
    await store.commit(db, AlreadyMember)

    logger.info(
        "Member invited",
        extra={
            "workspace_id": str(actor.workspace_id),
            "user_id": str(profile.id),
            "role": role.value,
            "reactivated": action == InviteAction.REACTIVATE,
        },
    )
    return store.to_member_record(member, await store.get_profile(db, profile.id))


async def _load_target(db: AsyncSession, actor: MemberRecord, member_id: uuid.UUID) -> WorkspaceMember:
    target = await store.get_member_row(db, member_id)
    if target is None or target.workspace_id != actor.workspace_id:
        raise NotFound("Member not found")
    return target


async def change_role(
    db: AsyncSession, actor: MemberRecord, member_id: uuid.UUID, new_role: Role
) -> MemberRecord:
    target = await _load_target(db, actor, member_id)
    try:
        authorize_role_change(actor, store.to_member_record(target), new_role)
    except AppError as e:
        logger.warning(f"Role change rejected: {e.detail}", extra={"member_id": str(member_id)})
        raise

    target.role = new_role.value
    await store.commit(db)

    logger.info("Member role updated", extra={"member_id": str(member_id), "role": new_role.value})
    return store.to_member_record(target, target.profile)


async def change_status(
    db: AsyncSession, actor: MemberRecord, member_id: uuid.UUID, new_status: MembershipStatus
) -> MemberRecord:
    target = await _load_target(db, actor, member_id)
    try:
        authorize_status_change(actor, store.to_member_record(target), new_status)
    except AppError as e:
        logger.warning(f"Status change rejected: {e.detail}", extra={"member_id": str(member_id)})
        raise

    target.status = new_status.value
    await store.commit(db)

    logger.info("Member status updated", extra={"member_id": str(member_id), "status": new_status.value})
    return store.to_member_record(target, target.profile)


async def remove_member(db: AsyncSession, actor: MemberRecord, member_id: uuid.UUID) -> None:
    target = await _load_target(db, actor, member_id)
    try:
        authorize_removal(actor, store.to_member_record(target))
    except AppError as e:
        logger.warning(f"Removal rejected: {e.detail}", extra={"member_id": str(member_id)})
        raise

    await db.delete(target)
    await store.commit(db)

    logger.info(
        "Member removed",
        extra={"workspace_id": str(actor.workspace_id), "user_id": str(target.user_id)},
    )
