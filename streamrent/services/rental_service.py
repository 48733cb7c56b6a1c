# streamrent/services/rental_service.py
import logging
import re
import uuid
from collections.abc import Callable
from datetime import datetime

from streamrent.core.errors import RentalNotFound
from streamrent.models.rental import Rental, Replacement
from streamrent.models.session import SessionSnapshot
from streamrent.repositories.rental_repo import RentalStore
from streamrent.schemas.rental import RentalCreate, RentalStats, ReplacementCreate
from streamrent.services.subscription_service import (
    calculate_end_date,
    is_expired,
    is_expiring_soon,
    utcnow,
)

logger = logging.getLogger(__name__)

RENTAL_ID_PATTERN = re.compile(r"R-(\d+)")


class RentalService:
    """
    Business logic for rentals.

    Responsibilities:
      - visibility: admins see every rental, users only their own
      - sequential display ids (R-0001, R-0002, ...)
      - expiration_date = start_date + duration months
      - credential replacements with history
      - dashboard stats
    """

    def __init__(
        self,
        store: RentalStore,
        *,
        expiring_soon_days: int = 7,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.expiring_soon_days = expiring_soon_days
        self.clock = clock
        # Last issued display number; seeded lazily from the backend
        self._counter: int | None = None

    # ---- internal helpers ----

    async def _get_visible(self, current: SessionSnapshot, rental_pk: uuid.UUID) -> Rental:
        rental = await self.store.get_rental(rental_pk)
        if rental is None:
            raise RentalNotFound()
        if not current.is_admin and rental.user_id != current.user_id:
            # Do not reveal other users' rentals
            raise RentalNotFound()
        return rental

    # ---- public operations ----

    async def generate_rental_id(self) -> str:
        if self._counter is None:
            last = await self.store.latest_rental_id()
            match = RENTAL_ID_PATTERN.match(last or "")
            self._counter = int(match.group(1)) if match else 0
        self._counter += 1
        return f"R-{self._counter:04d}"

    async def list_rentals(self, current: SessionSnapshot) -> list[Rental]:
        """Rentals visible to `current`, newest first."""
        owner = None if current.is_admin else current.user_id
        return await self.store.list_rentals(owner)

    async def save_rental(
        self,
        current: SessionSnapshot,
        payload: RentalCreate,
        rental_pk: uuid.UUID | None = None,
    ) -> Rental:
        """
        Create a rental (rental_pk=None) or edit an existing one.

        New rentals belong to the current user and get the next display id.
        """
        data = payload.model_dump()
        data["expiration_date"] = calculate_end_date(payload.start_date, payload.duration)

        if rental_pk is None:
            rental = Rental(
                user_id=current.user_id,
                rental_id=await self.generate_rental_id(),
                **data,
            )
        else:
            existing = await self._get_visible(current, rental_pk)
            rental = existing.model_copy(update=data)

        saved = await self.store.save_rental(rental)
        logger.info("Saved rental %s (%s for %s)", saved.rental_id, saved.platform, saved.customer_name)
        return saved

    async def delete_rental(self, current: SessionSnapshot, rental_pk: uuid.UUID) -> None:
        rental = await self._get_visible(current, rental_pk)
        if not await self.store.delete_rental(rental_pk):
            raise RentalNotFound()
        logger.info("Deleted rental %s", rental.rental_id)

    async def replace_credentials(
        self,
        current: SessionSnapshot,
        rental_pk: uuid.UUID,
        payload: ReplacementCreate,
    ) -> Replacement:
        """
        Hand new credentials to the customer.

        Steps:
          1. Record the old/new pair in the replacement history.
          2. Update the rental with the new credentials.
        """
        rental = await self._get_visible(current, rental_pk)

        replacement = await self.store.save_replacement(
            Replacement(
                rental_id=rental.id,
                old_email=rental.account_email,
                old_password=rental.account_password,
                new_email=payload.new_email,
                new_password=payload.new_password,
                reason=payload.reason,
            )
        )

        rental.account_email = payload.new_email
        rental.account_password = payload.new_password
        await self.store.save_rental(rental)
        logger.info("Replaced credentials on rental %s", rental.rental_id)
        return replacement

    async def list_replacements(
        self,
        current: SessionSnapshot,
        rental_pk: uuid.UUID,
    ) -> list[Replacement]:
        """Replacement history of a rental, newest first."""
        rental = await self._get_visible(current, rental_pk)
        return await self.store.list_replacements(rental.id)

    async def get_stats(
        self,
        current: SessionSnapshot,
        now: datetime | None = None,
    ) -> RentalStats:
        now = now or self.clock()
        rentals = await self.list_rentals(current)

        active = 0
        expiring_soon = 0
        revenue = 0.0
        for r in rentals:
            revenue += r.price
            if not is_expired(r.expiration_date, now):
                active += 1
            if is_expiring_soon(r.expiration_date, now, self.expiring_soon_days):
                expiring_soon += 1

        return RentalStats(
            total=len(rentals),
            active=active,
            expiring_soon=expiring_soon,
            revenue=revenue,
        )
