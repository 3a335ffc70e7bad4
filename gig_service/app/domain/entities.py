# app/domain/entities.py
from enum import Enum


class UserRole(str, Enum):
    MUSICIAN = "musician"
    MANAGER = "manager"
    ADMIN = "admin"


class ArtistKind(str, Enum):
    MUSICIAN = "musician"
    BAND = "band"


class PartyKind(str, Enum):
    VENUE_MANAGER = "venue_manager"
    ARTIST = "artist"

    @property
    def counterpart(self) -> "PartyKind":
        if self is PartyKind.VENUE_MANAGER:
            return PartyKind.ARTIST
        return PartyKind.VENUE_MANAGER


class MessageKind(str, Enum):
    TEXT = "text"
    SYSTEM = "system"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    # never stored, derived from expires_at at read time
    EXPIRED = "expired"


# Band applications share the invitation vocabulary and expiry rules.
ApplicationStatus = InvitationStatus


class BandMemberRole(str, Enum):
    LEADER = "leader"
    ADMIN = "admin"
    MEMBER = "member"
    GUEST = "guest"


class BandPermission(str, Enum):
    MANAGE_MEMBERS = "manage_members"
    MANAGE_VIDEOS = "manage_videos"
    MANAGE_PROFILE = "manage_profile"
    MANAGE_GIGS = "manage_gigs"
    VIEW_ANALYTICS = "view_analytics"


class GigStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class GigApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
