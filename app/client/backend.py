import logging

from pydantic import ValidationError
from supabase import AsyncClient

from app.chat.schemas import MessageData
from app.chat.store import MESSAGE_COLUMNS
from app.core.errors import UpstreamFailure, upstream_message


logger = logging.getLogger(__name__)


class SupabaseMessageBackend:
    """Message reads and writes made with the signed-in user's session."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def list_messages_oldest_first(self, conversation_id: str) -> list[MessageData]:
        try:
            result = await (
                self.client.table("messages")
                .select(MESSAGE_COLUMNS)
                .eq("conversation_id", conversation_id)
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as e:
            raise UpstreamFailure("Failed to load messages.", upstream_message(e))

        try:
            return [MessageData(**row) for row in result.data or []]
        except ValidationError as e:
            raise UpstreamFailure("Failed to load messages.", f"Malformed message row: {e}")

    async def insert_message(
        self, conversation_id: str, sender_id: str, content: str
    ) -> MessageData:
        try:
            result = await (
                self.client.table("messages")
                .insert(
                    {
                        "conversation_id": conversation_id,
                        "sender_id": sender_id,
                        "content": content,
                    }
                )
                .execute()
            )
        except Exception as e:
            raise UpstreamFailure("Failed to send message.", upstream_message(e))

        if not result.data:
            raise UpstreamFailure("Failed to send message.", "Insert returned no row.")

        try:
            return MessageData(**result.data[0])
        except ValidationError as e:
            raise UpstreamFailure("Failed to send message.", f"Malformed message row: {e}")
