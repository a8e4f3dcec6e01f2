from fastapi import APIRouter, Depends

from app.dependencies.service_dependencies import get_chat_session_store
from app.schemas.chat import (
    Chat,
    MessageCreateRequest,
    MessagePostedResponse,
    OkResponse,
    OpenChatRequest,
    ReactionCreateRequest,
)
from app.services.chat_service import ChatSessionStore

router = APIRouter(prefix="/chats", tags=["chats"])

@router.post("/open", response_model=Chat)
async def open_chat(
    request: OpenChatRequest,
    chat_store: ChatSessionStore = Depends(get_chat_session_store)
):
    """
    Create or get the chat between two users.

    Args:
        request: The two participant ids
        chat_store: Chat session store instance

    Returns:
        The chat with its full message log
    """
    return chat_store.open_chat(request.a, request.b)

@router.get("/{chat_id}", response_model=Chat)
async def get_chat(
    chat_id: str,
    chat_store: ChatSessionStore = Depends(get_chat_session_store)
):
    return chat_store.get_chat(chat_id)

@router.post("/{chat_id}/messages", response_model=MessagePostedResponse)
async def post_message(
    chat_id: str,
    request: MessageCreateRequest,
    chat_store: ChatSessionStore = Depends(get_chat_session_store)
):
    """
    Append a message to a chat.

    Args:
        chat_id: Canonical chat key
        request: Sender id and message text
        chat_store: Chat session store instance

    Returns:
        The created message
    """
    message = chat_store.post_message(chat_id, request.sender, request.text)
    return MessagePostedResponse(ok=True, message=message)

@router.post("/{chat_id}/react", response_model=OkResponse)
async def react(
    chat_id: str,
    request: ReactionCreateRequest,
    chat_store: ChatSessionStore = Depends(get_chat_session_store)
):
    """
    React with an emoji to the message at the given position.
    """
    chat_store.react(chat_id, request.index, request.emoji, request.sender)
    return OkResponse()
