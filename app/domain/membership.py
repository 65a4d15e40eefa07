"""Membership Lifecycle Manager

Guards for the membership transitions: owner creation, invite, role change,
status change and removal. Pure functions over records; the caller applies
the decision to the store.
"""

import enum
from typing import Optional

from app.core.errors import AlreadyMember, NotFound, Unauthorized, UserNotFound, ValidationError
from app.domain.access_control import check_workspace_permission
from app.domain.records import MemberRecord, MembershipStatus, ProfileRecord, Role


INVITABLE_ROLES = (Role.MEMBER, Role.ADMIN)
ASSIGNABLE_STATUSES = (MembershipStatus.ACTIVE, MembershipStatus.INACTIVE)


class InviteAction(str, enum.Enum):
    INSERT = "insert"
    REACTIVATE = "reactivate"


def normalize_email(email: Optional[str]) -> str:
    normalized = (email or "").strip().lower()
    if not normalized or "@" not in normalized:
        raise ValidationError("A valid email address is required")
    return normalized


def owner_membership_fields(email: str) -> dict:
    """Fields of the membership created together with a workspace."""
    return {
        "role": Role.OWNER,
        "status": MembershipStatus.ACTIVE,
        "invited_email": email,
    }


def authorize_invite(actor_role: Optional[Role], target_role: Role) -> None:
    """Owners and admins may invite members; only the owner may hand out admin."""
    check_workspace_permission(actor_role, "invite")
    if target_role not in INVITABLE_ROLES:
        raise ValidationError("Invited members can only be given the member or admin role")
    if target_role == Role.ADMIN and actor_role != Role.OWNER:
        raise Unauthorized("Only the workspace owner can assign the admin role")


def plan_invite(profile: Optional[ProfileRecord], existing: Optional[MemberRecord]) -> InviteAction:
    """
    Decide how an invite lands in the store.

    The target must already have a profile. An active membership is a
    conflict; an inactive one is brought back instead of duplicated.
    """
    if profile is None:
        raise UserNotFound()
    if existing is None:
        return InviteAction.INSERT
    if existing.status == MembershipStatus.ACTIVE:
        raise AlreadyMember()
    return InviteAction.REACTIVATE


def _authorize_member_change(actor: Optional[MemberRecord], target: MemberRecord, verb: str) -> None:
    check_workspace_permission(actor.role if actor else None, "manage_members")
    if target.workspace_id != actor.workspace_id:
        raise NotFound("Member not found")
    if target.user_id == actor.user_id:
        raise Unauthorized(f"You cannot {verb} your own membership")
    if target.role == Role.OWNER:
        raise Unauthorized(f"The workspace owner's membership cannot be {verb}d")


def authorize_role_change(actor: Optional[MemberRecord], target: MemberRecord, new_role: Role) -> None:
    _authorize_member_change(actor, target, "change")
    if new_role not in INVITABLE_ROLES:
        raise ValidationError("Ownership cannot be assigned; choose member or admin")


def authorize_status_change(actor: Optional[MemberRecord], target: MemberRecord, new_status: MembershipStatus) -> None:
    _authorize_member_change(actor, target, "change")
    if new_status not in ASSIGNABLE_STATUSES:
        raise ValidationError("Membership status can only be set to active or inactive")


def authorize_removal(actor: Optional[MemberRecord], target: MemberRecord) -> None:
    _authorize_member_change(actor, target, "remove")
