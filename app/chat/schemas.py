from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

from app.profiles.schemas import ProfileSummary, Profile


# Rows
class MessageData(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime


class ParticipantRow(BaseModel):
    conversation_id: str
    user_id: str


class ConversationMeta(BaseModel):
    id: str
    created_at: Optional[datetime] = None


# Open (get or create) a conversation
class OpenConversationModel(BaseModel):
    target_user_id: Optional[str] = None


class OpenConversationResponseModel(BaseModel):
    conversation_id: str
    is_new: bool


# Conversation list
class LastMessage(BaseModel):
    sender_id: str
    content: str
    created_at: datetime


class ConversationSummary(BaseModel):
    id: str
    partner: ProfileSummary
    compatibility: int
    stage: str
    created_at: Optional[datetime] = None
    last_message: Optional[LastMessage] = None


class GetConversationsResponseModel(BaseModel):
    conversations: List[ConversationSummary]


# Partner profile
class PartnerProfileResponseModel(BaseModel):
    profile: Profile


# Messages
class SendMessageModel(BaseModel):
    content: str = ""


class SendMessageResponseModel(BaseModel):
    message: MessageData


class GetMessagesResponseModel(BaseModel):
    messages: List[MessageData]
