from fastapi import APIRouter, Depends, Query
from typing import List

from app.core.exceptions import NotFoundError
from app.dependencies.service_dependencies import (
    get_chat_session_store,
    get_identity_registry,
    get_privacy_search,
)
from app.schemas.chat import Chat
from app.schemas.user import ProfileUpdateRequest, PublicUser
from app.services.chat_service import ChatSessionStore
from app.services.identity_service import IdentityRegistry
from app.services.search_service import PrivacySearch

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/search", response_model=List[PublicUser])
async def search_users(
    q: str = Query("", description="@nickname, user id, or empty for the newest users"),
    privacy_search: PrivacySearch = Depends(get_privacy_search)
):
    """
    Look up users by exact nickname or id, honouring their privacy settings.
    """
    return privacy_search.search(q)

@router.get("/{user_id}", response_model=PublicUser)
async def get_user(
    user_id: str,
    identity: IdentityRegistry = Depends(get_identity_registry)
):
    user = identity.get_by_id(user_id)
    if user is None:
        raise NotFoundError(detail="User not found")
    return PublicUser.from_user(user)

@router.put("/{user_id}", response_model=PublicUser)
async def update_profile(
    user_id: str,
    request: ProfileUpdateRequest,
    identity: IdentityRegistry = Depends(get_identity_registry)
):
    """
    Update name, nickname, avatar or privacy flags. Omitted fields are left as they are.
    """
    return identity.update_profile(user_id, request)

@router.get("/{user_id}/chats", response_model=List[Chat])
async def get_user_chats(
    user_id: str,
    chat_store: ChatSessionStore = Depends(get_chat_session_store)
):
    """
    Gets all chats the user takes part in.
    """
    return chat_store.list_user_chats(user_id)
