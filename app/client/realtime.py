"""Live message inserts as cancellable async streams.

A ``MessageSubscription`` is what the timeline consumes::

    subscription = await feed.subscribe(conversation_id)
    async for message in subscription:
        ...
    await subscription.unsubscribe()   # from anywhere; ends the loop

Events are yielded in the order the realtime channel delivered them.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError
from supabase import AsyncClient

from app.chat.schemas import MessageData
from app.core.errors import UpstreamFailure, upstream_message


logger = logging.getLogger(__name__)

_CLOSED = object()


class MessageSubscription:
    def __init__(
        self,
        conversation_id: str,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self.conversation_id = conversation_id
        self._queue: asyncio.Queue = asyncio.Queue()
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, message: MessageData) -> None:
        if not self._closed:
            self._queue.put_nowait(message)

    def __aiter__(self):
        return self

    async def __anext__(self) -> MessageData:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        if self._on_close is not None:
            await self._on_close()


def extract_record(payload) -> Optional[dict]:
    """The inserted row from a postgres_changes payload."""
    if not isinstance(payload, dict):
        return None
    # supabase-js style ``new`` and realtime-py ``data.record``
    if isinstance(payload.get("new"), dict):
        return payload["new"]
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("record"), dict):
        return data["record"]
    return None


class SupabaseRealtimeFeed:
    """Subscribes to ``messages`` inserts for one conversation at a time."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def subscribe(self, conversation_id: str) -> MessageSubscription:
        channel = self.client.channel(f"messages-{conversation_id}")

        async def remove_channel():
            try:
                await self.client.remove_channel(channel)
            except Exception as e:
                logger.warning(f"remove_channel_failed conversation={conversation_id} error={e}")

        subscription = MessageSubscription(conversation_id, on_close=remove_channel)

        def on_insert(payload):
            record = extract_record(payload)
            if record is None:
                logger.warning(f"realtime_payload_without_record conversation={conversation_id}")
                return
            try:
                message = MessageData(**record)
            except ValidationError as e:
                logger.warning(f"realtime_row_rejected conversation={conversation_id} error={e}")
                return
            subscription.push(message)

        try:
            channel.on_postgres_changes(
                "INSERT",
                schema="public",
                table="messages",
                filter=f"conversation_id=eq.{conversation_id}",
                callback=on_insert,
            )
            await channel.subscribe()
        except Exception as e:
            raise UpstreamFailure("Failed to subscribe to new messages.", upstream_message(e))

        logger.info(f"realtime_subscribed conversation={conversation_id}")
        return subscription
