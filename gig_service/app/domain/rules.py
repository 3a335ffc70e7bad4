# app/domain/rules.py
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Protocol

from app.domain.entities import BandMemberRole, BandPermission, InvitationStatus

DEFAULT_PERMISSIONS: dict[BandMemberRole, list[BandPermission]] = {
    BandMemberRole.LEADER: list(BandPermission),
    BandMemberRole.ADMIN: [
        BandPermission.MANAGE_MEMBERS,
        BandPermission.MANAGE_VIDEOS,
        BandPermission.MANAGE_PROFILE,
        BandPermission.VIEW_ANALYTICS,
    ],
    BandMemberRole.MEMBER: [BandPermission.MANAGE_VIDEOS],
    BandMemberRole.GUEST: [],
}


class MemberLike(Protocol):
    user_id: str
    role: str
    permissions: list[str]
    is_active: bool


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def default_permissions(role: BandMemberRole | str) -> list[str]:
    return [p.value for p in DEFAULT_PERMISSIONS[BandMemberRole(role)]]


def has_permission(
    members: Iterable[MemberLike], user_id: str, permission: BandPermission
) -> bool:
    member = next((m for m in members if m.user_id == user_id and m.is_active), None)
    if member is None:
        return False
    if member.role == BandMemberRole.LEADER.value:
        return True
    return permission.value in (member.permissions or [])


def is_expired(status: str, expires_at: datetime, now: datetime | None = None) -> bool:
    now = now or datetime.now(UTC)
    return status == InvitationStatus.PENDING.value and as_utc(now) > as_utc(expires_at)


def effective_status(
    status: str, expires_at: datetime, now: datetime | None = None
) -> InvitationStatus:
    """Stored status, except that an overdue pending record reads as expired."""
    if is_expired(status, expires_at, now):
        return InvitationStatus.EXPIRED
    return InvitationStatus(status)


def display_name(username: str, first_name: str | None, last_name: str | None) -> str:
    if first_name and last_name:
        return f"{first_name} {last_name}"
    return username
