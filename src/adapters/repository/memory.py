"""
In-memory repository adapter - Implements UserRepository protocol.

Process-local credential store for development and tests. A single lock
makes every operation atomic, so login/email uniqueness holds under
concurrent use the same way the database constraints do. Records are
copied on the way in and out; callers must save() to persist changes.
"""

import copy
import threading
from collections.abc import Callable
from datetime import datetime

from src.domain.exceptions import DuplicateEmail, DuplicateLogin
from src.domain.ports import User


class InMemoryUserRepository:
    """
    Implements UserRepository protocol with a dict keyed by login.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._lock = threading.Lock()

    def _find(self, predicate: Callable[[User], bool]) -> User | None:
        with self._lock:
            for user in self._users.values():
                if predicate(user):
                    return copy.deepcopy(user)
        return None

    def find_by_login(self, login: str) -> User | None:
        with self._lock:
            user = self._users.get(login)
            return copy.deepcopy(user) if user is not None else None

    def find_by_email(self, email: str) -> User | None:
        return self._find(lambda u: u.email == email)

    def find_by_activation_key(self, key: str) -> User | None:
        return self._find(lambda u: u.activation_key is not None and u.activation_key == key)

    def find_by_reset_key(self, key: str) -> User | None:
        return self._find(lambda u: u.reset_key is not None and u.reset_key == key)

    def count_by_ip_address_created_between(
        self, ip_address: str, start: datetime, end: datetime
    ) -> int:
        with self._lock:
            return sum(
                1
                for u in self._users.values()
                if u.ip_address == ip_address and start <= u.created_date <= end
            )

    def create(self, user: User) -> User:
        with self._lock:
            if user.login in self._users:
                raise DuplicateLogin(user.login)
            if any(u.email == user.email for u in self._users.values()):
                raise DuplicateEmail(user.email)
            self._users[user.login] = copy.deepcopy(user)
        return user

    def save(self, user: User) -> User:
        with self._lock:
            if any(u.email == user.email and u.login != user.login for u in self._users.values()):
                raise DuplicateEmail(user.email)
            self._users[user.login] = copy.deepcopy(user)
        return user

    def ping(self) -> None:
        """Always reachable."""

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)
