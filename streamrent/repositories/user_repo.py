# streamrent/repositories/user_repo.py
import uuid
from typing import Any, Protocol

from postgrest.exceptions import APIError
from supabase import AsyncClient

from streamrent.core.errors import UserNotFound
from streamrent.core.supabase_client import UNIQUE_VIOLATION, backend_errors
from streamrent.models.user import User

USERS_TABLE = "users"
PLATFORMS_TABLE = "custom_platforms"


class UserStore(Protocol):
    """
    Persistence interface for user records and custom platform names.

    All methods may raise BackendUnavailable.
    """

    async def find_user_by_username(self, username: str) -> User | None: ...

    async def list_users(self) -> list[User]: ...

    async def save_user(self, user: User) -> User: ...

    async def delete_user(self, user_id: uuid.UUID) -> bool: ...

    async def list_custom_platform_names(self) -> list[str]: ...

    async def add_custom_platform(self, name: str) -> bool: ...


def row_to_user(row: dict[str, Any]) -> User:
    """Map a `users` row to a User (`password` column -> password_hash)."""
    data = dict(row)
    data["password_hash"] = data.pop("password", "") or ""
    return User.model_validate(data)


def user_to_row(user: User) -> dict[str, Any]:
    """
    Map a User to the columns we write.

    id and created_at are owned by the backend and never sent.
    """
    data = user.model_dump(
        mode="json",
        exclude={"id", "created_at", "password_hash"},
    )
    data["password"] = user.password_hash
    return data


class SupabaseUserStore:
    """
    UserStore backed by Supabase tables `users` and `custom_platforms`.

    Responsibilities:
      - Pure data access (queries + row mapping)
      - No business rules (duplicates, admin protection) -> SessionManager
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    # ----- Users -----

    async def find_user_by_username(self, username: str) -> User | None:
        """Return the User with this exact username, or None."""
        with backend_errors("find user"):
            resp = (
                await self.client.table(USERS_TABLE)
                .select("*")
                .eq("username", username)
                .limit(1)
                .execute()
            )
        if not resp.data:
            return None
        return row_to_user(resp.data[0])

    async def list_users(self) -> list[User]:
        """All users, oldest first."""
        with backend_errors("list users"):
            resp = (
                await self.client.table(USERS_TABLE)
                .select("*")
                .order("created_at")
                .execute()
            )
        return [row_to_user(row) for row in resp.data or []]

    async def save_user(self, user: User) -> User:
        """
        Upsert a user and return the persisted row.

          - id set           -> update that row
          - username matches -> update the matching row
          - otherwise        -> insert
        """
        target_id = user.id
        if target_id is None:
            existing = await self.find_user_by_username(user.username)
            if existing is not None:
                target_id = existing.id

        data = user_to_row(user)
        with backend_errors("save user"):
            if target_id is not None:
                resp = (
                    await self.client.table(USERS_TABLE)
                    .update(data)
                    .eq("id", str(target_id))
                    .execute()
                )
            else:
                resp = await self.client.table(USERS_TABLE).insert(data).execute()

        if not resp.data:
            # update matched no row
            raise UserNotFound()
        return row_to_user(resp.data[0])

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        """Delete a user; False if no row had this id."""
        with backend_errors("delete user"):
            resp = (
                await self.client.table(USERS_TABLE)
                .delete()
                .eq("id", str(user_id))
                .execute()
            )
        return bool(resp.data)

    # ----- Custom platforms -----

    async def list_custom_platform_names(self) -> list[str]:
        """Custom platform names, alphabetical."""
        with backend_errors("list platforms"):
            resp = (
                await self.client.table(PLATFORMS_TABLE)
                .select("name")
                .order("name")
                .execute()
            )
        return [row["name"] for row in resp.data or []]

    async def add_custom_platform(self, name: str) -> bool:
        """
        Insert a platform name. Returns False if the exact name already
        exists (case-sensitive).
        """
        with backend_errors("find platform"):
            resp = (
                await self.client.table(PLATFORMS_TABLE)
                .select("name")
                .eq("name", name)
                .limit(1)
                .execute()
            )
        if resp.data:
            return False

        with backend_errors("add platform"):
            try:
                await self.client.table(PLATFORMS_TABLE).insert({"name": name}).execute()
            except APIError as exc:
                # Lost a race with another client inserting the same name
                if exc.code == UNIQUE_VIOLATION:
                    return False
                raise
        return True
