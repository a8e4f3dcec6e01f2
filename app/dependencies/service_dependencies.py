from fastapi import Depends, Request

from app.database.state import ChatState
from app.services.identity_service import IdentityRegistry
from app.services.search_service import PrivacySearch
from app.services.chat_service import ChatSessionStore

def get_chat_state(request: Request) -> ChatState:
    """
    Dependency that provides the ChatState built at startup.
    """
    return request.app.state.chat_state

def get_identity_registry(state: ChatState = Depends(get_chat_state)) -> IdentityRegistry:
    """
    Dependency that provides an IdentityRegistry over the shared state.
    """
    return IdentityRegistry(state)

def get_privacy_search(state: ChatState = Depends(get_chat_state)) -> PrivacySearch:
    """
    Dependency that provides a PrivacySearch over the shared state.
    """
    return PrivacySearch(state)

def get_chat_session_store(
    state: ChatState = Depends(get_chat_state),
    identity: IdentityRegistry = Depends(get_identity_registry),
) -> ChatSessionStore:
    """
    Dependency that provides a ChatSessionStore with required dependencies.
    """
    return ChatSessionStore(state=state, identity=identity)
