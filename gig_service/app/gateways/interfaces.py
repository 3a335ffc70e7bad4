# app/gateways/interfaces.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from app.domain.entities import InvitationStatus, PartyKind
from app.infrastructure.uow import UoWModel


class IConversationGateway(ABC):
    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def find_active(self, gig_id: str, artist_id: str) -> List[UoWModel]:
        pass

    @abstractmethod
    async def create_conversation(
        self,
        gig_id: str,
        gig_title: str,
        venue_manager_id: str,
        venue_manager_name: str,
        artist_id: str,
        artist_name: str,
        artist_kind: str,
    ) -> UoWModel:
        pass

    @abstractmethod
    async def reconcile_duplicates(
        self, gig_id: str, artist_id: str
    ) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str, kind: PartyKind) -> List[UoWModel]:
        pass

    @abstractmethod
    async def total_unread(self, user_id: str, kind: PartyKind) -> int:
        pass

    @abstractmethod
    async def record_message(
        self,
        conversation_id: str,
        sender_id: str,
        recipient_kind: PartyKind,
        preview: str,
        timestamp: datetime,
    ) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def reset_unread(
        self, conversation_id: str, kind: PartyKind
    ) -> Optional[UoWModel]:
        pass


class IMessageGateway(ABC):
    @abstractmethod
    async def discard(self) -> None:
        pass

    @abstractmethod
    async def get_message(self, message_id: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def create_message(
        self,
        message_id: str,
        conversation_id: str,
        gig_id: str,
        sender_id: str,
        sender_name: str,
        sender_kind: str,
        recipient_id: str,
        recipient_name: str,
        body: str,
        kind: str,
        timestamp: datetime,
    ) -> UoWModel:
        pass

    @abstractmethod
    async def get_all(
        self, conversation_id: str, limit: Optional[int] = None
    ) -> List[UoWModel]:
        pass

    @abstractmethod
    async def mark_read(self, conversation_id: str, recipient_id: str) -> List[str]:
        pass


class IBandGateway(ABC):
    @abstractmethod
    async def get_band(self, band_id: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_member(self, band_id: str, user_id: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def upsert_member(
        self, band_id: str, user_id: str, role: str, instruments: List[str]
    ) -> Tuple[UoWModel, bool]:
        pass

    @abstractmethod
    async def get_invitation(self, invitation_id: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def find_pending_invitations(
        self, band_id: str, user_id: str
    ) -> List[UoWModel]:
        pass

    @abstractmethod
    async def pending_invitations_for_user(self, user_id: str) -> List[UoWModel]:
        pass

    @abstractmethod
    async def set_invitation_status(
        self, invitation: UoWModel, status: InvitationStatus
    ) -> UoWModel:
        pass

    @abstractmethod
    async def pending_applications_for_user(self, user_id: str) -> List[UoWModel]:
        pass

    @abstractmethod
    async def find_pending_applications(
        self, band_id: str, user_id: str
    ) -> List[UoWModel]:
        pass

    @abstractmethod
    async def create_band(
        self,
        name: str,
        created_by: str,
        bio: Optional[str],
        genres: List[str],
        instruments: List[str],
    ) -> UoWModel:
        pass

    @abstractmethod
    async def create_invitation(
        self,
        band_id: str,
        band_name: str,
        invited_user_id: str,
        invited_by: str,
        role: str,
        instruments: List[str],
        message: Optional[str],
        expires_at: datetime,
    ) -> UoWModel:
        pass

    @abstractmethod
    async def create_application(
        self,
        band_id: str,
        band_name: str,
        applicant_user_id: str,
        applicant_name: str,
        role: str,
        instruments: List[str],
        message: Optional[str],
        expires_at: datetime,
    ) -> UoWModel:
        pass
