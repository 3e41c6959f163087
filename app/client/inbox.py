from typing import Iterable, Optional

from app.chat.schemas import ConversationSummary, MessageData
from app.chat.service import last_message_of


class ConversationInbox:
    """Client copy of ``GET /messages/conversations`` kept fresh by new messages."""

    def __init__(self, conversations: Iterable[ConversationSummary] = ()):
        self._conversations: list[ConversationSummary] = list(conversations)

    @property
    def conversations(self) -> list[ConversationSummary]:
        return list(self._conversations)

    def load(self, conversations: Iterable[ConversationSummary]) -> None:
        self._conversations = list(conversations)

    def get(self, conversation_id: str) -> Optional[ConversationSummary]:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    def record_message(self, message: MessageData) -> bool:
        """Make ``message`` the conversation's last message. False if unknown."""
        for index, conversation in enumerate(self._conversations):
            if conversation.id == message.conversation_id:
                self._conversations[index] = conversation.model_copy(
                    update={"last_message": last_message_of(message)}
                )
                return True
        return False
