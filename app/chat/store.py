import logging

from supabase import Client

from app.core.errors import UpstreamFailure, upstream_message
from app.profiles.schemas import PROFILE_SUMMARY_COLUMNS, ProfileSummary

from .schemas import ConversationMeta, MessageData, ParticipantRow


logger = logging.getLogger(__name__)

MESSAGE_COLUMNS = "id, conversation_id, sender_id, content, created_at"


class ChatStore:
    """
    Conversation, participant and message queries against Supabase.

    Every method returns typed rows. Any exception raised by the client is
    re-raised as ``UpstreamFailure`` carrying ``message`` as the user facing
    text and the Supabase error as ``details``.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _execute(self, query, message: str):
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"supabase_error message={message!r} error={e}")
            raise UpstreamFailure(message, upstream_message(e))

    def list_participant_conversation_ids(self, user_id: str) -> list[str]:
        result = self._execute(
            self.supabase.table("conversation_participants")
            .select("conversation_id")
            .eq("user_id", user_id),
            "Failed to check the user's conversations.",
        )
        ids = []
        for row in result.data or []:
            if row["conversation_id"] not in ids:
                ids.append(row["conversation_id"])
        return ids

    def find_shared_conversation(
        self, user_id: str, conversation_ids: list[str]
    ) -> str | None:
        """The first of ``conversation_ids`` that ``user_id`` also participates in."""
        if not conversation_ids:
            return None

        result = self._execute(
            self.supabase.table("conversation_participants")
            .select("conversation_id")
            .eq("user_id", user_id)
            .in_("conversation_id", conversation_ids)
            .limit(1),
            "Failed to check for an existing conversation.",
        )
        if not result.data:
            return None
        return result.data[0]["conversation_id"]

    def list_participants(self, conversation_ids: list[str]) -> list[ParticipantRow]:
        if not conversation_ids:
            return []

        result = self._execute(
            self.supabase.table("conversation_participants")
            .select("conversation_id, user_id")
            .in_("conversation_id", conversation_ids),
            "Failed to load conversation participants.",
        )
        return [ParticipantRow(**row) for row in result.data or []]

    def is_participant(self, conversation_id: str, user_id: str) -> bool:
        result = self._execute(
            self.supabase.table("conversation_participants")
            .select("conversation_id")
            .eq("conversation_id", conversation_id)
            .eq("user_id", user_id)
            .limit(1),
            "Failed to verify conversation membership.",
        )
        return bool(result.data)

    def get_profile_summaries(self, user_ids: list[str]) -> dict[str, ProfileSummary]:
        if not user_ids:
            return {}

        result = self._execute(
            self.supabase.table("profiles")
            .select(PROFILE_SUMMARY_COLUMNS)
            .in_("id", user_ids),
            "Failed to load participant profiles.",
        )
        profiles = [ProfileSummary(**row) for row in result.data or []]
        return {profile.id: profile for profile in profiles}

    def get_conversation_meta(
        self, conversation_ids: list[str]
    ) -> dict[str, ConversationMeta]:
        if not conversation_ids:
            return {}

        result = self._execute(
            self.supabase.table("conversations")
            .select("id, created_at")
            .in_("id", conversation_ids),
            "Failed to load conversations.",
        )
        metas = [ConversationMeta(**row) for row in result.data or []]
        return {meta.id: meta for meta in metas}

    def list_messages_newest_first(self, conversation_ids: list[str]) -> list[MessageData]:
        if not conversation_ids:
            return []

        result = self._execute(
            self.supabase.table("messages")
            .select(MESSAGE_COLUMNS)
            .in_("conversation_id", conversation_ids)
            .order("created_at", desc=True),
            "Failed to load latest messages.",
        )
        return [MessageData(**row) for row in result.data or []]

    def list_messages_oldest_first(self, conversation_id: str) -> list[MessageData]:
        result = self._execute(
            self.supabase.table("messages")
            .select(MESSAGE_COLUMNS)
            .eq("conversation_id", conversation_id)
            .order("created_at", desc=False),
            "Failed to load messages.",
        )
        return [MessageData(**row) for row in result.data or []]

    def create_conversation(self) -> str:
        result = self._execute(
            self.supabase.table("conversations").insert({}),
            "Failed to create a new conversation.",
        )
        if not result.data:
            raise UpstreamFailure(
                "Failed to create a new conversation.", "Insert returned no row."
            )
        return result.data[0]["id"]

    def insert_participants(self, rows: list[ParticipantRow]) -> None:
        self._execute(
            self.supabase.table("conversation_participants").insert(
                [row.model_dump() for row in rows]
            ),
            "Failed to add conversation participants.",
        )

    def insert_message(
        self, conversation_id: str, sender_id: str, content: str
    ) -> MessageData:
        result = self._execute(
            self.supabase.table("messages").insert(
                {
                    "conversation_id": conversation_id,
                    "sender_id": sender_id,
                    "content": content,
                }
            ),
            "Failed to send message.",
        )
        if not result.data:
            raise UpstreamFailure("Failed to send message.", "Insert returned no row.")
        return MessageData(**result.data[0])
