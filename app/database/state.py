# app/database/state.py
from typing import Callable, Dict, List, Optional

from app.schemas.chat import Chat
from app.schemas.user import User


class ChatState:
    """
    In-memory store for users and chats.

    One instance is built at startup and shared by every service. Services
    mutate the records in place and call `touch()` afterwards so that change
    listeners (the persistence manager) can react.
    """

    def __init__(self, users: Optional[List[User]] = None, chats: Optional[Dict[str, Chat]] = None):
        self.users: Dict[str, User] = {user.id: user for user in users or []}
        self.chats: Dict[str, Chat] = dict(chats or {})
        self.version = 0
        self._listeners: List[Callable[[], None]] = []

    def add_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def touch(self) -> None:
        """Record that a mutation happened and notify listeners."""
        self.version += 1
        for listener in list(self._listeners):
            listener()

    def find_by_nickname(self, nickname: str) -> Optional[User]:
        for user in self.users.values():
            if user.nickname == nickname:
                return user
        return None

    def to_document(self) -> dict:
        """
        Serialize the full state into the snapshot layout:
        {"users": [...], "chats": {key: chat}}.
        """
        return {
            "users": [user.model_dump(mode="json", by_alias=True) for user in self.users.values()],
            "chats": {
                key: chat.model_dump(mode="json", by_alias=True)
                for key, chat in self.chats.items()
            },
        }

    @classmethod
    def from_document(cls, document: dict) -> "ChatState":
        """
        Rebuild a state from a snapshot document.
        Raises pydantic.ValidationError or TypeError on malformed input.
        """
        if not isinstance(document, dict):
            raise TypeError("snapshot document must be an object")
        users = [User.model_validate(item) for item in document.get("users") or []]
        chats = {
            key: Chat.model_validate(item)
            for key, item in (document.get("chats") or {}).items()
        }
        return cls(users=users, chats=chats)
