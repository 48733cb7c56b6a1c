# tests/conftest.py
import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from streamrent.core.errors import BackendUnavailable, RentalNotFound, UserNotFound
from streamrent.core.security import hash_password
from streamrent.models.rental import Rental, Replacement
from streamrent.models.user import User
from streamrent.repositories.session_store import FileSessionStore
from streamrent.services.session_manager import SessionManager

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
PASSWORD = "secret123"


class InMemoryUserStore:
    """
    UserStore fake.

    - `fail`: when True every call raises BackendUnavailable
    - `lookup_gate`: when set, find_user_by_username blocks until the event
      is set (simulates a slow backend)
    """

    def __init__(self):
        self.users: dict[uuid.UUID, User] = {}
        self.platforms: list[str] = []
        self.fail = False
        self.lookup_gate: asyncio.Event | None = None
        self.lookups = 0

    def _check(self):
        if self.fail:
            raise BackendUnavailable()

    def add(
        self,
        username: str,
        *,
        role: str = "user",
        password: str = PASSWORD,
        end_date: datetime | None = NOW + timedelta(days=60),
        currency: str = "$",
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            username=username,
            full_name=username.title(),
            role=role,
            currency=currency,
            password_hash=hash_password(password),
            subscription_start_date=NOW - timedelta(days=30),
            subscription_end_date=end_date,
        )
        self.users[user.id] = user
        return user

    async def find_user_by_username(self, username: str) -> User | None:
        self.lookups += 1
        if self.lookup_gate is not None:
            await self.lookup_gate.wait()
        self._check()
        for user in self.users.values():
            if user.username == username:
                return user.model_copy()
        return None

    async def list_users(self) -> list[User]:
        self._check()
        return [u.model_copy() for u in self.users.values()]

    async def save_user(self, user: User) -> User:
        self._check()
        target_id = user.id
        if target_id is None:
            for existing in self.users.values():
                if existing.username == user.username:
                    target_id = existing.id
                    break
        if target_id is None:
            user = user.model_copy(update={"id": uuid.uuid4()})
        elif target_id not in self.users:
            raise UserNotFound()
        else:
            user = user.model_copy(update={"id": target_id})
        self.users[user.id] = user
        return user.model_copy()

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        self._check()
        return self.users.pop(user_id, None) is not None

    async def list_custom_platform_names(self) -> list[str]:
        self._check()
        return sorted(self.platforms)

    async def add_custom_platform(self, name: str) -> bool:
        self._check()
        if name in self.platforms:
            return False
        self.platforms.append(name)
        return True


class InMemoryRentalStore:
    def __init__(self):
        self.rentals: dict[uuid.UUID, Rental] = {}
        self.replacements: list[Replacement] = []
        self.last_rental_id: str | None = None

    async def list_rentals(self, user_id: uuid.UUID | None = None) -> list[Rental]:
        rows = [r for r in self.rentals.values() if user_id is None or r.user_id == user_id]
        return list(reversed(rows))

    async def get_rental(self, rental_pk: uuid.UUID) -> Rental | None:
        rental = self.rentals.get(rental_pk)
        return rental.model_copy() if rental else None

    async def latest_rental_id(self) -> str | None:
        return self.last_rental_id

    async def save_rental(self, rental: Rental) -> Rental:
        if rental.id is None:
            rental = rental.model_copy(update={"id": uuid.uuid4()})
            self.last_rental_id = rental.rental_id
        elif rental.id not in self.rentals:
            raise RentalNotFound()
        self.rentals[rental.id] = rental
        return rental.model_copy()

    async def delete_rental(self, rental_pk: uuid.UUID) -> bool:
        return self.rentals.pop(rental_pk, None) is not None

    async def list_replacements(self, rental_pk: uuid.UUID) -> list[Replacement]:
        return [r for r in reversed(self.replacements) if r.rental_id == rental_pk]

    async def save_replacement(self, replacement: Replacement) -> Replacement:
        replacement = replacement.model_copy(update={"id": uuid.uuid4()})
        self.replacements.append(replacement)
        return replacement


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def rental_store() -> InMemoryRentalStore:
    return InMemoryRentalStore()


@pytest.fixture
def session_store(tmp_path) -> FileSessionStore:
    return FileSessionStore(tmp_path / "session.json")


@pytest.fixture
def manager(user_store, session_store) -> SessionManager:
    return SessionManager(
        user_store,
        session_store,
        clock=lambda: NOW,
        restore_timeout=0.05,
    )
