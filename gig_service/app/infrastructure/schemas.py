# app/infrastructure/schemas.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from app.domain.entities import (
    ArtistKind,
    BandMemberRole,
    GigApplicationStatus,
    GigStatus,
    InvitationStatus,
    MessageKind,
    PartyKind,
    UserRole,
)
from app.domain.rules import display_name, effective_status, is_expired

HH_MM = r"^([01]\d|2[0-3]):[0-5]\d$"


class UserProfileBase(BaseModel):
    email: str
    username: str = Field(..., min_length=1)
    first_name: str | None = None
    last_name: str | None = None
    role: UserRole


class UserProfileUpdate(UserProfileBase):
    pass


class UserProfile(UserProfileBase):
    id: str
    bands: list[str] = Field(default_factory=list)
    band_invitations: list[str] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        return display_name(self.username, self.first_name, self.last_name)


class ConversationCreate(BaseModel):
    gig_id: str
    artist_id: str
    artist_kind: ArtistKind
    # display name for band artists; musicians default to their profile name
    artist_name: str | None = None


class UnreadCount(BaseModel):
    venue_manager: int = 0
    artist: int = 0


class Conversation(BaseModel):
    id: str
    gig_id: str
    gig_title: str
    venue_manager_id: str
    venue_manager_name: str
    artist_id: str
    artist_name: str
    artist_kind: ArtistKind
    last_message: str | None = None
    last_message_timestamp: datetime | None = None
    last_message_sender_id: str | None = None
    unread_venue_manager: int = Field(0, exclude=True)
    unread_artist: int = Field(0, exclude=True)
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def unread_count(self) -> UnreadCount:
        return UnreadCount(
            venue_manager=self.unread_venue_manager, artist=self.unread_artist
        )

    def party_of(self, user_id: str) -> PartyKind | None:
        if user_id == self.venue_manager_id:
            return PartyKind.VENUE_MANAGER
        if user_id == self.artist_id:
            return PartyKind.ARTIST
        return None


class MessageCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=5000)
    sender_kind: PartyKind | None = None
    # client-generated id; resending with the same id never double counts
    message_id: str | None = Field(None, min_length=1, max_length=64)


class Message(BaseModel):
    id: str
    conversation_id: str
    gig_id: str
    sender_id: str
    sender_name: str
    sender_kind: PartyKind
    recipient_id: str
    recipient_name: str
    body: str
    kind: MessageKind
    is_read: bool
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class TotalUnread(BaseModel):
    total: int


class BandCreate(BaseModel):
    name: str = Field(..., min_length=1)
    bio: str | None = None
    genres: list[str] = Field(default_factory=list)
    instruments: list[str] = Field(default_factory=list)


class BandMember(BaseModel):
    user_id: str
    role: BandMemberRole
    instruments: list[str]
    permissions: list[str]
    joined_at: datetime
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class Band(BaseModel):
    id: str
    name: str
    bio: str | None = None
    genres: list[str]
    created_by: str
    is_active: bool
    members: list[BandMember] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class BandInvitationCreate(BaseModel):
    invited_user_id: str
    role: BandMemberRole = BandMemberRole.MEMBER
    instruments: list[str] = Field(default_factory=list)
    message: str | None = None


class BandApplicationCreate(BaseModel):
    role: BandMemberRole = BandMemberRole.MEMBER
    instruments: list[str] = Field(default_factory=list)
    message: str | None = None


class _ExpiringRecord(BaseModel):
    id: str
    band_id: str
    band_name: str
    role: BandMemberRole
    instruments: list[str]
    message: str | None = None
    status: InvitationStatus
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def effective_status(self) -> InvitationStatus:
        return effective_status(self.status.value, self.expires_at)

    @computed_field
    @property
    def is_expired(self) -> bool:
        return is_expired(self.status.value, self.expires_at)


class BandInvitation(_ExpiringRecord):
    invited_user_id: str
    invited_by: str


class BandApplication(_ExpiringRecord):
    applicant_user_id: str
    applicant_name: str


class PendingNotifications(BaseModel):
    invitations: list[BandInvitation] = Field(default_factory=list)
    applications: list[BandApplication] = Field(default_factory=list)

    @computed_field
    @property
    def total(self) -> int:
        return len(self.invitations) + len(self.applications)


class GigCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    venue_id: str = Field(..., min_length=1)
    venue_name: str = Field(..., min_length=1)
    date: datetime
    start_time: str = Field(..., pattern=HH_MM)
    end_time: str = Field(..., pattern=HH_MM)
    genres: list[str] = Field(default_factory=list)
    payment_amount: float | None = Field(None, ge=0)
    payment_currency: str | None = Field(None, min_length=3, max_length=3)
    requirements: str | None = None
    max_applicants: int | None = Field(None, ge=1)
    application_deadline: datetime | None = None
    status: GigStatus = GigStatus.DRAFT

    @model_validator(mode="after")
    def check_consistency(self) -> "GigCreate":
        if self.payment_amount is not None and self.payment_currency is None:
            raise ValueError("payment_currency is required when payment_amount is set")
        if self.application_deadline and self.application_deadline > self.date:
            raise ValueError("application_deadline must not be after the gig date")
        return self


class Gig(BaseModel):
    id: str
    title: str
    description: str
    venue_id: str
    venue_name: str
    date: datetime
    start_time: str
    end_time: str
    genres: list[str]
    payment_amount: float | None = None
    payment_currency: str | None = None
    requirements: str | None = None
    max_applicants: int | None = None
    application_deadline: datetime | None = None
    status: GigStatus
    created_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GigApplicationCreate(BaseModel):
    applicant_kind: ArtistKind = ArtistKind.MUSICIAN
    # required when applying on behalf of a band
    band_id: str | None = None
    message: str | None = None


class GigApplicationResponse(BaseModel):
    accepted: bool
    response_message: str | None = None


class GigApplication(BaseModel):
    id: str
    gig_id: str
    applicant_id: str
    applicant_kind: ArtistKind
    applicant_name: str
    band_id: str | None = None
    message: str | None = None
    status: GigApplicationStatus
    applied_at: datetime
    responded_at: datetime | None = None
    response_message: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BackfillReport(BaseModel):
    created: int
    skipped: int
    failed: int
