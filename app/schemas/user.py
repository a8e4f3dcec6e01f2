from datetime import datetime
from typing import Optional

from pydantic import Field, StrictBool

from .base import CamelModel


class Privacy(CamelModel):
    show_online: bool = True
    allow_nick: bool = True
    allow_id: bool = True
    last_seen: datetime


class PrivacyUpdate(CamelModel):
    show_online: Optional[StrictBool] = None
    allow_nick: Optional[StrictBool] = None
    allow_id: Optional[StrictBool] = None


class User(CamelModel):
    id: str
    nickname: str
    name: str
    avatar: Optional[str] = None
    privacy: Privacy
    created_at: datetime
    last_seen: datetime


class PublicUser(CamelModel):
    """
    The part of a user record that is returned to API callers.
    Anything secret added to User later must stay out of this model.
    """
    id: str
    nickname: str
    name: str
    avatar: Optional[str] = None
    privacy: Privacy
    created_at: datetime
    last_seen: datetime

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            nickname=user.nickname,
            name=user.name,
            avatar=user.avatar,
            privacy=user.privacy.model_copy(),
            created_at=user.created_at,
            last_seen=user.last_seen,
        )


class RegisterRequest(CamelModel):
    nickname: Optional[str] = Field(default=None, description="Handle in the form @name")
    name: Optional[str] = Field(default=None, description="Display name")


class LoginRequest(CamelModel):
    id: Optional[str] = None
    nickname: Optional[str] = None


class ProfileUpdateRequest(CamelModel):
    """
    Partial profile update. Only the fields present in the body are applied;
    an explicit `avatar: null` clears the avatar.
    """
    name: Optional[str] = None
    nickname: Optional[str] = None
    avatar: Optional[str] = None
    privacy: Optional[PrivacyUpdate] = None
