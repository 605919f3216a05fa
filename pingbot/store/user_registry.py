from __future__ import annotations

from typing import Dict, Iterable, List


class UserRegistry:
    """Subscribed user ids, unique and kept in subscription order."""

    def __init__(self) -> None:
        self._users: Dict[str, None] = {}

    def add(self, user_id: str) -> None:
        users = dict(self._users)
        users.setdefault(user_id, None)
        self._users = users

    def remove(self, user_id: str) -> None:
        self._users = {user: None for user in self._users if user != user_id}

    def clear(self) -> None:
        self._users = {}

    def replace_all(self, user_ids: Iterable[str]) -> None:
        self._users = dict.fromkeys(user_ids)

    def list_all(self) -> List[str]:
        return list(self._users)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._users

    def __len__(self) -> int:
        return len(self._users)
