import logging

from fastapi import APIRouter, Depends, Query
from supabase import Client

from app.core.supabase_client import get_supabase
from app.core.dependencies import get_current_user_id
from app.core.errors import InvalidRequest
from app.profiles.service import get_profile

from . import service
from .store import ChatStore
from .schemas import (
    OpenConversationModel,
    OpenConversationResponseModel,
    GetConversationsResponseModel,
    PartnerProfileResponseModel,
    GetMessagesResponseModel,
    SendMessageModel,
    SendMessageResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()


def get_chat_store(supabase: Client = Depends(get_supabase)) -> ChatStore:
    return ChatStore(supabase)


@router.post(
    "/open",
    response_model=OpenConversationResponseModel,
    status_code=200,
)
def open_conversation(
    data: OpenConversationModel,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    """
    Get or create the conversation between the caller and another user.

    Used when a user presses "Message" on a match card. If the two users
    already share a conversation it is returned, otherwise a conversation
    is created with both users as participants.

    **Input**
    - `target_user_id`: id of the other user

    **Returns**
    - `conversation_id`: id of the shared conversation
    - `is_new`: whether it was created by this call

    **Errors**
    - 400: Missing target or target is the caller
    - 401: Unauthorized
    - 500: Database error
    """
    conversation_id, is_new = service.open_conversation(
        store, user_id, data.target_user_id
    )
    return {"conversation_id": conversation_id, "is_new": is_new}


@router.get(
    "/conversations",
    response_model=GetConversationsResponseModel,
    status_code=200,
)
def get_conversations(
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    """
    Retrieve the caller's inbox.

    Every conversation the caller participates in, with the other
    participant's profile summary, the latest message (or null), a cosmetic
    compatibility score and the relationship stage label.

    **Returns**
    - `conversations`: list of conversation summaries

    **Errors**
    - 401: Unauthorized
    - 500: Database error
    """
    return {"conversations": service.list_conversations(store, user_id)}


@router.get(
    "/profile",
    response_model=PartnerProfileResponseModel,
    status_code=200,
)
def get_partner_profile(
    partner_id: str | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    """
    Full profile of a chat partner.

    Only available for users the caller shares a conversation with.

    **Errors**
    - 400: Missing `partner_id`
    - 403: No shared conversation
    - 404: Profile not found
    """
    if not partner_id:
        raise InvalidRequest("partner_id is required.")

    service.require_shared_conversation(store, user_id, partner_id)
    return {"profile": get_profile(store.supabase, partner_id)}


@router.get(
    "/{conversation_id}",
    response_model=GetMessagesResponseModel,
    status_code=200,
)
def get_messages(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    """
    Retrieve the full history of a conversation, oldest first.

    **Errors**
    - 401: Unauthorized
    - 403: Caller is not a participant
    - 500: Database error
    """
    return {"messages": service.get_messages(store, user_id, conversation_id)}


@router.post(
    "/{conversation_id}",
    response_model=SendMessageResponseModel,
    status_code=201,
)
def send_message(
    conversation_id: str,
    data: SendMessageModel,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    """
    Send a message to a conversation the caller participates in.

    The text is trimmed before it is stored. The inserted row is returned so
    the client can append it without waiting for the realtime echo.

    **Errors**
    - 400: Empty message
    - 403: Caller is not a participant
    - 500: Database error
    """
    message = service.send_message(store, user_id, conversation_id, data.content)
    return {"message": message}
