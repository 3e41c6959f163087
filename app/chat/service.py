"""Conversation logic shared by the chat routes.

``open_conversation`` keeps one conversation per pair of users on a best
effort basis: lookups and inserts are separate calls, so two clients opening
the same pair at the same moment can both create one. Nothing is rolled back
if the participant insert fails after the conversation row was created.
"""

import logging

from app.core.errors import Forbidden, InvalidRequest
from app.utils.display_hash import compute_compatibility, pair_seed
from app.profiles.schemas import ProfileSummary

from .schemas import ConversationSummary, LastMessage, MessageData, ParticipantRow
from .store import ChatStore


logger = logging.getLogger(__name__)

DEFAULT_STAGE = "pdkt"


def open_conversation(
    store: ChatStore, caller_id: str, target_id: str | None
) -> tuple[str, bool]:
    """Return ``(conversation_id, is_new)`` for the caller and target."""
    target_id = (target_id or "").strip()

    if not target_id:
        raise InvalidRequest("target_user_id is required.")

    if target_id == caller_id:
        raise InvalidRequest("You cannot open a conversation with yourself.")

    conversation_ids = store.list_participant_conversation_ids(caller_id)

    if conversation_ids:
        shared = store.find_shared_conversation(target_id, conversation_ids)
        if shared:
            return shared, False

    conversation_id = store.create_conversation()
    store.insert_participants(
        [
            ParticipantRow(conversation_id=conversation_id, user_id=caller_id),
            ParticipantRow(conversation_id=conversation_id, user_id=target_id),
        ]
    )

    logger.info(
        f"conversation_created id={conversation_id} caller={caller_id} target={target_id}"
    )
    return conversation_id, True


def list_conversations(store: ChatStore, caller_id: str) -> list[ConversationSummary]:
    """
    Inbox for ``caller_id``: one summary per conversation, in the order the
    caller's participant rows came back.
    """
    conversation_ids = store.list_participant_conversation_ids(caller_id)
    if not conversation_ids:
        return []

    partners: dict[str, str] = {}
    for row in store.list_participants(conversation_ids):
        if row.user_id != caller_id:
            partners[row.conversation_id] = row.user_id

    partner_ids = list(dict.fromkeys(partners.values()))
    profiles = store.get_profile_summaries(partner_ids)
    metas = store.get_conversation_meta(conversation_ids)

    last_messages: dict[str, LastMessage] = {}
    for message in store.list_messages_newest_first(conversation_ids):
        if message.conversation_id not in last_messages:
            last_messages[message.conversation_id] = last_message_of(message)

    summaries = []
    for conversation_id in conversation_ids:
        partner_id = partners.get(conversation_id)
        partner = profiles.get(partner_id) if partner_id else None
        meta = metas.get(conversation_id)

        seed = pair_seed(caller_id, partner_id or conversation_id)

        summaries.append(
            ConversationSummary(
                id=conversation_id,
                partner=partner or ProfileSummary.placeholder(partner_id),
                compatibility=compute_compatibility(seed),
                stage=DEFAULT_STAGE,
                created_at=meta.created_at if meta else None,
                last_message=last_messages.get(conversation_id),
            )
        )

    return summaries


def last_message_of(message: MessageData) -> LastMessage:
    return LastMessage(
        sender_id=message.sender_id,
        content=message.content,
        created_at=message.created_at,
    )


def require_shared_conversation(store: ChatStore, caller_id: str, partner_id: str) -> str:
    conversation_ids = store.list_participant_conversation_ids(caller_id)
    shared = store.find_shared_conversation(partner_id, conversation_ids)
    if not shared:
        raise Forbidden("You do not share a conversation with this user.")
    return shared


def require_participant(store: ChatStore, conversation_id: str, user_id: str) -> None:
    if not store.is_participant(conversation_id, user_id):
        raise Forbidden("You are not a participant in this conversation.")


def get_messages(store: ChatStore, caller_id: str, conversation_id: str) -> list[MessageData]:
    require_participant(store, conversation_id, caller_id)
    return store.list_messages_oldest_first(conversation_id)


def send_message(
    store: ChatStore, caller_id: str, conversation_id: str, content: str | None
) -> MessageData:
    text = (content or "").strip()
    if not text:
        raise InvalidRequest("Message text cannot be empty.")

    require_participant(store, conversation_id, caller_id)
    return store.insert_message(conversation_id, caller_id, text)
