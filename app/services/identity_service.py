import logging
import random
import re
import string
from datetime import datetime, timezone
from typing import Optional

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.database.state import ChatState
from app.schemas.user import Privacy, ProfileUpdateRequest, PublicUser, User

logger = logging.getLogger(__name__)

NICKNAME_RE = re.compile(r"^@[A-Za-z0-9_]{1,11}$")
USER_ID_RE = re.compile(r"^[A-Z]{2}[1-9][0-9]{7}$")
NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 20


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_nickname(nickname) -> str:
    if not isinstance(nickname, str) or not NICKNAME_RE.match(nickname):
        raise ValidationError(detail="Nickname must be @ followed by 1-11 letters, digits or underscores")
    return nickname


def validate_name(name) -> str:
    if not isinstance(name, str) or not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError(detail=f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters long")
    return name


class IdentityRegistry:
    def __init__(self, state: ChatState, rng: Optional[random.Random] = None):
        self.state = state
        self.rng = rng or random.Random()

    def generate_id(self) -> str:
        """
        Build a candidate id: two uppercase letters followed by eight digits.
        Not guaranteed unique; see allocate_unique_id.
        """
        letters = "".join(self.rng.choice(string.ascii_uppercase) for _ in range(2))
        digits = self.rng.randint(10_000_000, 99_999_999)
        return f"{letters}{digits}"

    def allocate_unique_id(self) -> str:
        candidate = self.generate_id()
        while candidate in self.state.users:
            candidate = self.generate_id()
        return candidate

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Direct lookup, no privacy filtering."""
        return self.state.users.get(user_id)

    def require_user(self, user_id: str) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError(detail="User not found")
        return user

    def register(self, nickname: Optional[str], name: Optional[str]) -> PublicUser:
        """
        Handles the logic for registering a user.

        Args:
            nickname: Handle in the form @name, must be unused
            name: Display name

        Returns:
            The public projection of the new user

        Raises:
            ValidationError: If a field is missing or malformed
            ConflictError: If the nickname is already taken
        """
        if not nickname or not name:
            raise ValidationError(detail="nickname and name required")
        validate_nickname(nickname)
        validate_name(name)
        if self.state.find_by_nickname(nickname) is not None:
            raise ConflictError(detail="Nickname already taken")

        now = utcnow()
        user = User(
            id=self.allocate_unique_id(),
            nickname=nickname,
            name=name,
            avatar=None,
            privacy=Privacy(last_seen=now),
            created_at=now,
            last_seen=now,
        )
        self.state.users[user.id] = user
        self.state.touch()
        logger.info(f"Registered user {user.id} as {user.nickname}")
        return PublicUser.from_user(user)

    def login(self, user_id: Optional[str], nickname: Optional[str]) -> PublicUser:
        """
        Handles the logic for logging in a user.
        The id and nickname pair is the only credential.
        """
        if not user_id or not nickname:
            raise ValidationError(detail="id and nickname required")
        user = self.get_by_id(user_id)
        if user is None or user.nickname != nickname:
            raise NotFoundError(detail="User not found")

        user.last_seen = utcnow()
        self.state.touch()
        return PublicUser.from_user(user)

    def update_profile(self, user_id: str, update: ProfileUpdateRequest) -> PublicUser:
        """
        Apply a partial profile update.

        Every provided field is validated before anything is written, so a
        rejected update leaves the user untouched.

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If the new name or nickname is malformed
            ConflictError: If the new nickname belongs to another user
        """
        user = self.require_user(user_id)
        provided = update.model_fields_set

        if "name" in provided and update.name is not None:
            validate_name(update.name)
        if "nickname" in provided and update.nickname is not None:
            validate_nickname(update.nickname)
            holder = self.state.find_by_nickname(update.nickname)
            if holder is not None and holder.id != user.id:
                raise ConflictError(detail="Nickname already taken")

        now = utcnow()
        if "name" in provided and update.name is not None:
            user.name = update.name
        if "nickname" in provided and update.nickname is not None:
            user.nickname = update.nickname
        if "avatar" in provided:
            user.avatar = update.avatar
        if "privacy" in provided and update.privacy is not None:
            changes = update.privacy.model_dump(exclude_unset=True, exclude_none=True)
            user.privacy = user.privacy.model_copy(update={**changes, "last_seen": now})
        user.last_seen = now

        self.state.touch()
        return PublicUser.from_user(user)
