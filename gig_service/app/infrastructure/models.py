# app/infrastructure/models.py
import uuid
from datetime import UTC, datetime
from typing import List, Optional

from app.infrastructure.database import Base
from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    __tablename__ = "users"

    # uid issued by the identity provider
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String, index=True)
    username: Mapped[str] = mapped_column(String, index=True)
    first_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(String(16))
    bands: Mapped[List[str]] = mapped_column(JSON, default=list)
    band_invitations: Mapped[List[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Gig(Base):
    __tablename__ = "gigs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(String)
    venue_id: Mapped[str] = mapped_column(String(128))
    venue_name: Mapped[str] = mapped_column(String)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    start_time: Mapped[str] = mapped_column(String(5))
    end_time: Mapped[str] = mapped_column(String(5))
    genres: Mapped[List[str]] = mapped_column(JSON, default=list)
    payment_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    payment_currency: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    requirements: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    max_applicants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    application_deadline: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status: Mapped[str] = mapped_column(String(16), index=True)
    created_by: Mapped[str] = mapped_column(String(128), ForeignKey("users.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class GigApplication(Base):
    __tablename__ = "gig_applications"

    __table_args__ = (
        Index("ix_gig_applications_gig_applicant", "gig_id", "applicant_id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    gig_id: Mapped[str] = mapped_column(String(32), ForeignKey("gigs.id"), index=True)
    applicant_id: Mapped[str] = mapped_column(String(128))
    applicant_kind: Mapped[str] = mapped_column(String(16))
    applicant_name: Mapped[str] = mapped_column(String)
    band_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String(16), index=True)
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    responded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    response_message: Mapped[Optional[str]] = mapped_column(String, nullable=True)


class Conversation(Base):
    __tablename__ = "gig_conversations"

    __table_args__ = (
        Index("ix_conversations_gig_artist", "gig_id", "artist_id", "is_active"),
        Index("ix_conversations_manager_active", "venue_manager_id", "is_active"),
        Index("ix_conversations_artist_active", "artist_id", "is_active"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    gig_id: Mapped[str] = mapped_column(String(32), ForeignKey("gigs.id"))
    # snapshot fields, refreshed only by later writes
    gig_title: Mapped[str] = mapped_column(String)
    venue_manager_id: Mapped[str] = mapped_column(String(128))
    venue_manager_name: Mapped[str] = mapped_column(String)
    artist_id: Mapped[str] = mapped_column(String(128))
    artist_name: Mapped[str] = mapped_column(String)
    artist_kind: Mapped[str] = mapped_column(String(16))
    last_message: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_message_timestamp: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_message_sender_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    unread_venue_manager: Mapped[int] = mapped_column(Integer, default=0)
    unread_artist: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    messages: Mapped[List["Message"]] = relationship(
        "Message", back_populates="conversation", lazy="raise"
    )


class Message(Base):
    __tablename__ = "gig_messages"

    __table_args__ = (
        Index("ix_messages_conversation_timestamp", "conversation_id", "timestamp"),
        Index("ix_messages_recipient_unread", "conversation_id", "recipient_id", "is_read"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    conversation_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("gig_conversations.id"), index=True
    )
    gig_id: Mapped[str] = mapped_column(String(32))
    sender_id: Mapped[str] = mapped_column(String(128))
    sender_name: Mapped[str] = mapped_column(String)
    sender_kind: Mapped[str] = mapped_column(String(16))
    recipient_id: Mapped[str] = mapped_column(String(128))
    recipient_name: Mapped[str] = mapped_column(String)
    body: Mapped[str] = mapped_column(String)
    kind: Mapped[str] = mapped_column(String(16), default="text")
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    conversation: Mapped[Conversation] = relationship(
        "Conversation", back_populates="messages", lazy="raise"
    )


class Band(Base):
    __tablename__ = "bands"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String, index=True)
    bio: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    genres: Mapped[List[str]] = mapped_column(JSON, default=list)
    created_by: Mapped[str] = mapped_column(String(128))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    members: Mapped[List["BandMember"]] = relationship(
        "BandMember", back_populates="band", lazy="selectin"
    )


class BandMember(Base):
    __tablename__ = "band_members"

    __table_args__ = (UniqueConstraint("band_id", "user_id", name="uq_band_member"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    band_id: Mapped[str] = mapped_column(String(32), ForeignKey("bands.id"), index=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    role: Mapped[str] = mapped_column(String(16))
    instruments: Mapped[List[str]] = mapped_column(JSON, default=list)
    permissions: Mapped[List[str]] = mapped_column(JSON, default=list)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    band: Mapped[Band] = relationship("Band", back_populates="members", lazy="raise")


class BandInvitation(Base):
    __tablename__ = "band_invitations"

    __table_args__ = (
        Index("ix_invitations_user_status", "invited_user_id", "status"),
        Index("ix_invitations_band_user_status", "band_id", "invited_user_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    band_id: Mapped[str] = mapped_column(String(32), ForeignKey("bands.id"))
    band_name: Mapped[str] = mapped_column(String)
    invited_user_id: Mapped[str] = mapped_column(String(128))
    invited_by: Mapped[str] = mapped_column(String(128))
    role: Mapped[str] = mapped_column(String(16))
    instruments: Mapped[List[str]] = mapped_column(JSON, default=list)
    message: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class BandApplication(Base):
    __tablename__ = "band_applications"

    __table_args__ = (
        Index("ix_applications_user_status", "applicant_user_id", "status"),
        Index("ix_applications_band_status", "band_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    band_id: Mapped[str] = mapped_column(String(32), ForeignKey("bands.id"))
    band_name: Mapped[str] = mapped_column(String)
    applicant_user_id: Mapped[str] = mapped_column(String(128))
    applicant_name: Mapped[str] = mapped_column(String)
    role: Mapped[str] = mapped_column(String(16))
    instruments: Mapped[List[str]] = mapped_column(JSON, default=list)
    message: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
