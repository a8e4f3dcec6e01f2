from typing import List

from app.core.config import settings
from app.database.state import ChatState
from app.schemas.user import PublicUser


class PrivacySearch:
    def __init__(self, state: ChatState, feed_limit: int = None):
        self.state = state
        self.feed_limit = feed_limit if feed_limit is not None else settings.search_feed_limit

    def search(self, query: str = "") -> List[PublicUser]:
        """
        Look up users by exact nickname (`@handle`) or exact id.

        An empty query returns the newest users as a public directory, without
        applying privacy flags. Otherwise a user is only returned if their
        privacy settings allow lookup by the kind of key used.
        """
        q = (query or "").strip()
        if not q:
            # Newest first; reversing first keeps later registrations ahead on equal timestamps
            newest = sorted(reversed(list(self.state.users.values())), key=lambda u: u.created_at, reverse=True)
            return [PublicUser.from_user(user) for user in newest[: self.feed_limit]]

        if q.startswith("@"):
            user = self.state.find_by_nickname(q)
            if user is None or not user.privacy.allow_nick:
                return []
            return [PublicUser.from_user(user)]

        user = self.state.users.get(q)
        if user is None or not user.privacy.allow_id:
            return []
        return [PublicUser.from_user(user)]
