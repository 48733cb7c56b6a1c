# streamrent/repositories/rental_repo.py
import uuid
from typing import Any, Protocol

from supabase import AsyncClient

from streamrent.core.errors import RentalNotFound
from streamrent.core.supabase_client import backend_errors
from streamrent.models.rental import Rental, Replacement

RENTALS_TABLE = "rentals"
REPLACEMENTS_TABLE = "replacements"


class RentalStore(Protocol):
    async def list_rentals(self, user_id: uuid.UUID | None = None) -> list[Rental]: ...

    async def get_rental(self, rental_pk: uuid.UUID) -> Rental | None: ...

    async def latest_rental_id(self) -> str | None: ...

    async def save_rental(self, rental: Rental) -> Rental: ...

    async def delete_rental(self, rental_pk: uuid.UUID) -> bool: ...

    async def list_replacements(self, rental_pk: uuid.UUID) -> list[Replacement]: ...

    async def save_replacement(self, replacement: Replacement) -> Replacement: ...


def _rental_to_row(rental: Rental) -> dict[str, Any]:
    return rental.model_dump(mode="json", exclude={"id", "created_at"})


class SupabaseRentalStore:
    """
    Data access layer for `rentals` and `replacements`.

    NOTE:
      - Rows are returned newest first, matching how the dashboard lists them.
      - Visibility rules (admin vs owner) live in RentalService.
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    # ---- Rentals ----

    async def list_rentals(self, user_id: uuid.UUID | None = None) -> list[Rental]:
        with backend_errors("list rentals"):
            query = (
                self.client.table(RENTALS_TABLE)
                .select("*")
                .order("created_at", desc=True)
            )
            if user_id is not None:
                query = query.eq("user_id", str(user_id))
            resp = await query.execute()
        return [Rental.model_validate(row) for row in resp.data or []]

    async def get_rental(self, rental_pk: uuid.UUID) -> Rental | None:
        with backend_errors("get rental"):
            resp = (
                await self.client.table(RENTALS_TABLE)
                .select("*")
                .eq("id", str(rental_pk))
                .limit(1)
                .execute()
            )
        if not resp.data:
            return None
        return Rental.model_validate(resp.data[0])

    async def latest_rental_id(self) -> str | None:
        """Display id of the most recently created rental, if any."""
        with backend_errors("latest rental id"):
            resp = (
                await self.client.table(RENTALS_TABLE)
                .select("rental_id")
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        if not resp.data:
            return None
        return resp.data[0]["rental_id"]

    async def save_rental(self, rental: Rental) -> Rental:
        """Insert when id is None, otherwise update by id."""
        data = _rental_to_row(rental)
        with backend_errors("save rental"):
            if rental.id is None:
                resp = await self.client.table(RENTALS_TABLE).insert(data).execute()
            else:
                resp = (
                    await self.client.table(RENTALS_TABLE)
                    .update(data)
                    .eq("id", str(rental.id))
                    .execute()
                )
        if not resp.data:
            raise RentalNotFound()
        return Rental.model_validate(resp.data[0])

    async def delete_rental(self, rental_pk: uuid.UUID) -> bool:
        with backend_errors("delete rental"):
            resp = (
                await self.client.table(RENTALS_TABLE)
                .delete()
                .eq("id", str(rental_pk))
                .execute()
            )
        return bool(resp.data)

    # ---- Replacements ----

    async def list_replacements(self, rental_pk: uuid.UUID) -> list[Replacement]:
        with backend_errors("list replacements"):
            resp = (
                await self.client.table(REPLACEMENTS_TABLE)
                .select("*")
                .eq("rental_id", str(rental_pk))
                .order("replaced_at", desc=True)
                .execute()
            )
        return [Replacement.model_validate(row) for row in resp.data or []]

    async def save_replacement(self, replacement: Replacement) -> Replacement:
        data = replacement.model_dump(mode="json", exclude={"id", "replaced_at"})
        with backend_errors("save replacement"):
            resp = await self.client.table(REPLACEMENTS_TABLE).insert(data).execute()
        return Replacement.model_validate(resp.data[0])
