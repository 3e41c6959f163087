from typing import Optional

import httpx
from supabase import AsyncClient

from .api import SoulMatchApi
from .backend import SupabaseMessageBackend
from .inbox import ConversationInbox
from .realtime import SupabaseRealtimeFeed
from .session import SessionStore
from .timeline import MessageTimeline


class ChatClient:
    """
    Messages screen state for one signed-in user: the inbox from the API and
    the live timeline of the selected conversation.

        client = ChatClient(supabase, httpx.AsyncClient(base_url=API_URL))
        await client.start()
        await client.open_with(partner_id)
        await client.timeline.send_message("hai!")
    """

    def __init__(
        self,
        supabase: AsyncClient,
        http: httpx.AsyncClient,
        session: Optional[SessionStore] = None,
    ):
        self.supabase = supabase
        self.session = session or SessionStore(supabase)
        self.api = SoulMatchApi(http, self.session)
        self.inbox = ConversationInbox()
        self.timeline: Optional[MessageTimeline] = None

    async def start(self) -> None:
        if self.session.session is None:
            await self.session.hydrate()
        self.session.start()

        self.timeline = MessageTimeline(
            SupabaseMessageBackend(self.supabase),
            SupabaseRealtimeFeed(self.supabase),
            self.session.require_user_id(),
            self.inbox,
        )
        await self.refresh_inbox()

    async def refresh_inbox(self) -> None:
        self.inbox.load(await self.api.list_conversations())

    async def select(self, conversation_id: str) -> None:
        await self.timeline.select_conversation(conversation_id)

    async def open_with(self, target_user_id: str) -> str:
        """Get or create the conversation with ``target_user_id`` and open it."""
        opened = await self.api.open_conversation(target_user_id)
        if opened.is_new or self.inbox.get(opened.conversation_id) is None:
            await self.refresh_inbox()
        await self.select(opened.conversation_id)
        return opened.conversation_id

    async def close(self) -> None:
        if self.timeline is not None:
            await self.timeline.close()
        self.session.stop()
