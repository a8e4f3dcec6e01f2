from datetime import datetime
from typing import List, Optional

from pydantic import Field, StrictInt

from .base import CamelModel


class Reaction(CamelModel):
    sender: str = Field(alias="from")
    emoji: str
    ts: datetime


class Message(CamelModel):
    sender: str = Field(alias="from")
    text: str
    ts: datetime
    reactions: List[Reaction] = Field(default_factory=list)


class Chat(CamelModel):
    id: str
    users: List[str]
    messages: List[Message] = Field(default_factory=list)


class OpenChatRequest(CamelModel):
    a: Optional[str] = None
    b: Optional[str] = None


class MessageCreateRequest(CamelModel):
    sender: Optional[str] = Field(default=None, alias="from")
    text: Optional[str] = Field(default=None, description="Message content")


class ReactionCreateRequest(CamelModel):
    index: Optional[StrictInt] = Field(default=None, description="Position of the message in the chat log")
    emoji: Optional[str] = None
    sender: Optional[str] = Field(default=None, alias="from")


class MessagePostedResponse(CamelModel):
    ok: bool = True
    message: Message


class OkResponse(CamelModel):
    ok: bool = True
