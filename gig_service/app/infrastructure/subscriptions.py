# app/infrastructure/subscriptions.py
import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities import PartyKind
from app.domain.errors import TransientIOError
from app.domain.events import ConversationChanged, Event, MessageCreated, MessagesRead
from app.gateways.conversation_gateway import ConversationGateway
from app.gateways.message_gateway import MessageGateway
from app.infrastructure import schemas
from app.infrastructure.database import Database
from app.infrastructure.event_dispatcher import EventDispatcher
from app.infrastructure.uow import UnitOfWork

Callback = Callable[[Any], Any]


class LiveSubscription:
    """
    Re-reads a view from the database whenever a matching event is dispatched
    and hands the fresh value to the callback.

    Refreshes are serialized, so callbacks arrive in event order. Once
    unsubscribed, queued refreshes neither query nor call back.
    """

    event_types: tuple[type[Event], ...] = ()

    def __init__(self, service: "SubscriptionService", callback: Callback):
        self.service = service
        self.callback = callback
        self.active = True
        self.last_value: Any = None
        self._lock = asyncio.Lock()

    def matches(self, event: Event) -> bool:
        raise NotImplementedError

    async def load(self, database: Database) -> Any:
        raise NotImplementedError

    async def handle(self, event: Event) -> None:
        if self.matches(event):
            await self.refresh()

    async def refresh(self) -> None:
        async with self._lock:
            if not self.active:
                return
            try:
                value = await self.load(self.service.database)
            except (TransientIOError, SQLAlchemyError):
                # keep the last value rather than reporting a misleading one
                self.service.logger.exception(
                    f"{type(self).__name__} refresh failed, keeping last value"
                )
                return
            if not self.active:
                return
            self.last_value = value
            try:
                result = self.callback(value)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self.service.logger.exception(f"{type(self).__name__} callback raised")

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self.service.detach(self)


class UnreadSubscription(LiveSubscription):
    event_types = (ConversationChanged,)

    def __init__(self, service, callback, user_id: str, user_kind: PartyKind):
        super().__init__(service, callback)
        self.user_id = user_id
        self.user_kind = user_kind

    def matches(self, event: ConversationChanged) -> bool:
        if self.user_kind is PartyKind.VENUE_MANAGER:
            return event.venue_manager_id == self.user_id
        return event.artist_id == self.user_id

    async def load(self, database: Database) -> int:
        async with database.session() as session:
            gateway = ConversationGateway(session, UnitOfWork(session))
            return await gateway.total_unread(self.user_id, self.user_kind)


class MessageSubscription(LiveSubscription):
    event_types = (MessageCreated, MessagesRead)

    def __init__(self, service, callback, conversation_id: str):
        super().__init__(service, callback)
        self.conversation_id = conversation_id

    def matches(self, event: MessageCreated | MessagesRead) -> bool:
        return event.conversation_id == self.conversation_id

    async def load(self, database: Database) -> list[schemas.Message]:
        async with database.session() as session:
            gateway = MessageGateway(session, UnitOfWork(session))
            messages = await gateway.get_all(self.conversation_id)
            return [schemas.Message.model_validate(m) for m in messages]


class SubscriptionService:
    def __init__(
        self,
        database: Database,
        event_dispatcher: EventDispatcher,
        logger: logging.Logger | None = None,
    ):
        self.database = database
        self.event_dispatcher = event_dispatcher
        self.logger = logger or logging.getLogger(__name__)
        self.subscriptions: list[LiveSubscription] = []
        self.unread_feeds: dict[tuple[str, PartyKind], UnreadSubscription] = {}

    async def _attach(self, subscription: LiveSubscription) -> LiveSubscription:
        for event_type in subscription.event_types:
            self.event_dispatcher.register(event_type.__name__, subscription.handle)
        self.subscriptions.append(subscription)
        await subscription.refresh()
        return subscription

    def detach(self, subscription: LiveSubscription) -> None:
        for event_type in subscription.event_types:
            self.event_dispatcher.unregister(event_type.__name__, subscription.handle)
        if subscription in self.subscriptions:
            self.subscriptions.remove(subscription)

    async def subscribe_to_total_unread_count(
        self, user_id: str, user_kind: PartyKind, callback: Callback
    ) -> UnreadSubscription:
        """Deliver the current total now, then again after every relevant change."""
        return await self._attach(UnreadSubscription(self, callback, user_id, user_kind))

    async def subscribe_to_messages(
        self, conversation_id: str, callback: Callback
    ) -> MessageSubscription:
        return await self._attach(MessageSubscription(self, callback, conversation_id))

    async def open_unread_feed(
        self, user_id: str, user_kind: PartyKind, callback: Callback
    ) -> UnreadSubscription:
        """
        Keep one live total per user and side.

        Opening an already open feed delivers the current total again instead
        of stacking a second subscription.
        """
        key = (user_id, user_kind)
        feed = self.unread_feeds.get(key)
        if feed is not None and feed.active:
            await feed.refresh()
            return feed
        feed = await self.subscribe_to_total_unread_count(user_id, user_kind, callback)
        if feed.last_value is None:
            feed.unsubscribe()
            raise TransientIOError(f"Unread total for {user_id} is unavailable")
        self.unread_feeds[key] = feed
        self.logger.info(f"Unread feed opened for {user_kind.value} {user_id}")
        return feed

    def close_unread_feed(self, user_id: str, user_kind: PartyKind) -> bool:
        feed = self.unread_feeds.pop((user_id, user_kind), None)
        if feed is None:
            return False
        feed.unsubscribe()
        return True

    def close_all(self) -> None:
        for subscription in list(self.subscriptions):
            subscription.unsubscribe()
        self.unread_feeds.clear()
        self.logger.info("Live subscriptions closed")
