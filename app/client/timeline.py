"""Ordered, de-duplicated message list for the open conversation.

One ``MessageTimeline`` per signed-in client. Selecting a conversation
subscribes to its inserts first and then loads the history, so nothing sent in
between is missed; events arriving during the load are held back and merged
after the history. Every append is keyed on the message id, which is what
keeps a message from showing twice when it arrives from the history, the send
response and the realtime echo.

Order is whatever the backend's ``created_at`` gives: history comes oldest
first and later messages are appended at the tail. The list is never re-sorted,
so a server timestamp that goes backwards shows out of order.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional, Protocol

from app.chat.schemas import MessageData
from app.core.errors import AppError, InvalidRequest

from .inbox import ConversationInbox
from .realtime import MessageSubscription


logger = logging.getLogger(__name__)


class MessageBackend(Protocol):
    async def list_messages_oldest_first(self, conversation_id: str) -> list[MessageData]: ...

    async def insert_message(
        self, conversation_id: str, sender_id: str, content: str
    ) -> MessageData: ...


class RealtimeFeed(Protocol):
    async def subscribe(self, conversation_id: str) -> MessageSubscription: ...


class TimelineState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LIVE = "live"


class MessageTimeline:
    def __init__(
        self,
        backend: MessageBackend,
        feed: RealtimeFeed,
        user_id: str,
        inbox: Optional[ConversationInbox] = None,
    ):
        self.backend = backend
        self.feed = feed
        self.user_id = user_id
        self.inbox = inbox

        self.state = TimelineState.IDLE
        self.conversation_id: Optional[str] = None
        self.error: Optional[str] = None

        self._messages: list[MessageData] = []
        self._ids: set[str] = set()
        self._pending: list[MessageData] = []
        self._subscription: Optional[MessageSubscription] = None
        self._listener: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def messages(self) -> list[MessageData]:
        return list(self._messages)

    def is_from_me(self, message: MessageData) -> bool:
        return message.sender_id == self.user_id

    async def select_conversation(self, conversation_id: str) -> None:
        """
        Open ``conversation_id``. On failure the list is emptied, ``error`` is
        set and the timeline goes back to idle. If another conversation is
        selected before this one finishes loading, this load is discarded.
        """
        self._generation += 1
        generation = self._generation

        await self._teardown()
        if generation != self._generation:
            return

        self._reset()
        self.conversation_id = conversation_id
        self.state = TimelineState.LOADING
        self.error = None

        try:
            subscription = await self.feed.subscribe(conversation_id)
        except AppError as e:
            if generation == self._generation:
                self._fail(e)
            return

        if generation != self._generation:
            await subscription.unsubscribe()
            return

        self._subscription = subscription
        self._listener = asyncio.create_task(self._listen(subscription))

        try:
            history = await self.backend.list_messages_oldest_first(conversation_id)
        except AppError as e:
            if generation == self._generation:
                await self._teardown()
                self._fail(e)
            return

        # A newer selection already tore down this subscription.
        if generation != self._generation:
            return

        for message in history:
            self._append(message)
        pending, self._pending = self._pending, []
        for message in pending:
            self._append(message)

        self.state = TimelineState.LIVE
        logger.info(
            f"timeline_live conversation={conversation_id} messages={len(self._messages)}"
        )

    def apply_event(self, message: MessageData) -> bool:
        """Merge one realtime insert. Returns True if it was appended."""
        if self.inbox is not None:
            self.inbox.record_message(message)

        if message.conversation_id != self.conversation_id:
            return False

        return self._accept(message)

    async def send_message(self, text: Optional[str]) -> MessageData:
        """Insert a message and show it without waiting for the realtime echo."""
        if self.conversation_id is None or self.state == TimelineState.IDLE:
            raise InvalidRequest("No conversation selected.")

        content = (text or "").strip()
        if not content:
            raise InvalidRequest("Message text cannot be empty.")

        conversation_id = self.conversation_id

        try:
            message = await self.backend.insert_message(
                conversation_id, self.user_id, content
            )
        except AppError as e:
            self.error = e.message
            raise

        self.error = None
        if self.conversation_id == conversation_id:
            self._accept(message)
        if self.inbox is not None:
            self.inbox.record_message(message)

        return message

    async def close(self) -> None:
        self._generation += 1
        await self._teardown()
        self._reset()
        self.conversation_id = None
        self.state = TimelineState.IDLE

    async def _listen(self, subscription: MessageSubscription) -> None:
        async for message in subscription:
            self.apply_event(message)

    def _accept(self, message: MessageData) -> bool:
        if self.state == TimelineState.LOADING:
            self._pending.append(message)
            return False
        if self.state == TimelineState.LIVE:
            return self._append(message)
        return False

    def _append(self, message: MessageData) -> bool:
        if message.id in self._ids:
            return False
        self._ids.add(message.id)
        self._messages.append(message)
        return True

    def _reset(self) -> None:
        self._messages = []
        self._ids = set()
        self._pending = []

    def _fail(self, error: AppError) -> None:
        logger.warning(
            f"timeline_load_failed conversation={self.conversation_id} error={error.message}"
        )
        self._reset()
        self.error = error.message
        self.conversation_id = None
        self.state = TimelineState.IDLE

    async def _teardown(self) -> None:
        subscription, self._subscription = self._subscription, None
        listener, self._listener = self._listener, None

        if subscription is not None:
            await subscription.unsubscribe()
        if listener is not None:
            listener.cancel()
            await asyncio.gather(listener, return_exceptions=True)
