import logging
from typing import List, Optional

from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.database.state import ChatState
from app.schemas.chat import Chat, Message, Reaction
from app.services.identity_service import IdentityRegistry, utcnow

logger = logging.getLogger(__name__)

CHAT_KEY_SEPARATOR = "__"


def chat_key(a: str, b: str) -> str:
    """Canonical key for the pair: both ids sorted and joined, so order never matters."""
    return CHAT_KEY_SEPARATOR.join(sorted([a, b]))


class ChatSessionStore:
    def __init__(self, state: ChatState, identity: IdentityRegistry):
        self.state = state
        self.identity = identity

    chat_key = staticmethod(chat_key)

    def open_chat(self, a: Optional[str], b: Optional[str]) -> Chat:
        """
        Create or get the chat between two users.

        Args:
            a: ID of the first user
            b: ID of the second user

        Returns:
            The chat for the pair, with its full message log

        Raises:
            ValidationError: If either id is missing
            NotFoundError: If either id is not a registered user
        """
        if not a or not b:
            raise ValidationError(detail="a and b required")
        self.identity.require_user(a)
        self.identity.require_user(b)

        key = chat_key(a, b)
        chat = self.state.chats.get(key)
        if chat is not None:
            return chat

        chat = Chat(id=key, users=sorted([a, b]), messages=[])
        self.state.chats[key] = chat
        self.state.touch()
        logger.info(f"Opened chat {key}")
        return chat

    def get_chat(self, chat_id: str) -> Chat:
        chat = self.state.chats.get(chat_id)
        if chat is None:
            raise NotFoundError(detail="Chat not found")
        return chat

    def list_user_chats(self, user_id: str) -> List[Chat]:
        """Chats the user takes part in, in the order they were opened."""
        self.identity.require_user(user_id)
        return [chat for chat in self.state.chats.values() if user_id in chat.users]

    def post_message(self, chat_id: str, sender: Optional[str], text) -> Message:
        """
        Append a message to a chat log.

        Raises:
            NotFoundError: If the chat does not exist
            ValidationError: If sender or text is missing, or text is not a string
            ForbiddenError: If the sender is not one of the two participants
        """
        chat = self.get_chat(chat_id)
        if not sender or text is None or text == "":
            raise ValidationError(detail="from and text required")
        if not isinstance(text, str):
            raise ValidationError(detail="text must be a string")
        if sender not in chat.users:
            raise ForbiddenError()

        now = utcnow()
        message = Message(sender=sender, text=text, ts=now, reactions=[])
        chat.messages.append(message)

        author = self.identity.get_by_id(sender)
        if author is not None:
            author.last_seen = now
        self.state.touch()
        return message

    def react(self, chat_id: str, index, emoji: Optional[str], sender: Optional[str]) -> None:
        """
        Append a reaction to the message at `index`.

        Positions are stable because messages are never removed or reordered.
        """
        chat = self.get_chat(chat_id)
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise ValidationError(detail="index must be a non-negative integer")
        if not emoji or not sender:
            raise ValidationError(detail="emoji and from required")
        if index >= len(chat.messages):
            raise NotFoundError(detail="Message not found")

        chat.messages[index].reactions.append(Reaction(sender=sender, emoji=emoji, ts=utcnow()))
        self.state.touch()
