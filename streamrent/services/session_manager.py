# streamrent/services/session_manager.py
import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from streamrent.core.errors import (
    BackendUnavailable,
    DuplicateUsername,
    InvalidCredentials,
    LastAdminProtected,
    SelfDeletionForbidden,
    StreamRentError,
    SubscriptionExpired,
    UserNotFound,
)
from streamrent.core.security import hash_password, verify_password
from streamrent.core.tasks import discard_result, first_completed
from streamrent.models.session import SessionSnapshot, SessionState, TrustLevel
from streamrent.models.user import User
from streamrent.repositories.session_store import SessionStore
from streamrent.repositories.user_repo import UserStore
from streamrent.schemas.subscription import SubscriptionStatus
from streamrent.schemas.user import UserCreate, UserUpdate
from streamrent.services.subscription_service import (
    calculate_end_date,
    get_subscription_status,
    is_subscription_expired_for_login,
    utcnow,
)

logger = logging.getLogger(__name__)

DEFAULT_RESTORE_TIMEOUT = 5.0


class SessionManager:
    """
    Owns the authentication/session lifecycle of one client process.

    States:
      LOGGED_OUT -> AUTHENTICATING -> LOGGED_IN(VERIFIED)
      LOGGED_OUT -> RESTORING      -> LOGGED_IN(VERIFIED | CACHED) | LOGGED_OUT

    Responsibilities:
      - login: credentials + subscription gate (regular users only)
      - restore: re-validate the cached snapshot within a time budget,
        falling back to the cached snapshot when the backend is slow/down
      - keep the persisted snapshot in sync (login, logout, edit-self)
      - admin user management rules (duplicates, self/last-admin deletion)

    Construct once per process and pass it to whoever needs it.
    """

    def __init__(
        self,
        user_store: UserStore,
        session_store: SessionStore,
        *,
        clock: Callable[[], datetime] = utcnow,
        restore_timeout: float = DEFAULT_RESTORE_TIMEOUT,
        default_currency: str = "$",
    ):
        self.user_store = user_store
        self.session_store = session_store
        self.clock = clock
        self.restore_timeout = restore_timeout
        self.default_currency = default_currency

        self.state = SessionState.LOGGED_OUT
        self.current_session: SessionSnapshot | None = None
        self.trust: TrustLevel | None = None

        # Bumped on every transition; a restore result computed under an older
        # generation is stale and must not be applied.
        self._generation = 0
        self._restored = False

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.LOGGED_IN

    def _transition(
        self,
        state: SessionState,
        session: SessionSnapshot | None = None,
        trust: TrustLevel | None = None,
    ) -> None:
        self._generation += 1
        logger.debug("Session state %s -> %s", self.state.value, state.value)
        self.state = state
        self.current_session = session
        self.trust = trust

    # ----- Login / logout -----

    async def login(self, username: str, password: str) -> SessionSnapshot:
        """
        Authenticate and open a verified session.

        Raises:
            UserNotFound, InvalidCredentials, SubscriptionExpired,
            BackendUnavailable. The previous session (if any) is kept, also
            when an unexpected error escapes the store.
        """
        previous = (self.state, self.current_session, self.trust)
        self._transition(SessionState.AUTHENTICATING)

        try:
            user = await self._authenticate(username, password)
        except StreamRentError as exc:
            logger.warning("Login failed for %r: %s", username, exc.detail)
            self._transition(*previous)
            raise
        except Exception:
            logger.exception("Login for %r failed unexpectedly", username)
            self._transition(*previous)
            raise

        snapshot = SessionSnapshot.from_user(user)
        self._transition(SessionState.LOGGED_IN, snapshot, TrustLevel.VERIFIED)
        self.session_store.save(snapshot)
        logger.info("User %r logged in (role=%s)", user.username, user.role)
        return snapshot

    async def _authenticate(self, username: str, password: str) -> User:
        user = await self.user_store.find_user_by_username(username)
        if user is None:
            raise UserNotFound()

        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        # Admins are never locked out by their own subscription.
        if not user.is_admin and is_subscription_expired_for_login(
            user.subscription_end_date, self.clock()
        ):
            raise SubscriptionExpired(user.subscription_end_date)

        return user

    def logout(self) -> None:
        """Drop the session in memory and on disk. Never fails."""
        if self.current_session is not None:
            logger.info("User %r logged out", self.current_session.username)
        self._transition(SessionState.LOGGED_OUT)
        self.session_store.clear()

    # ----- Startup restore -----

    async def restore_session(self) -> None:
        """
        Re-open the session cached by a previous run.

          - no snapshot                   -> LOGGED_OUT
          - backend answers with the user -> LOGGED_IN(VERIFIED), fresh data
          - backend says user is gone     -> snapshot cleared, LOGGED_OUT
          - timeout or BackendUnavailable -> LOGGED_IN(CACHED), snapshot as-is
          - any other fetch error         -> LOGGED_IN(CACHED), logged with traceback

        The subscription gate is not re-applied here: a session that was
        valid at login stays accepted across restores.

        Must be called once, at startup.
        """
        if self._restored:
            raise RuntimeError("restore_session() may only run once per process")
        self._restored = True

        cached = self.session_store.load()
        if cached is None:
            self._transition(SessionState.LOGGED_OUT)
            return

        self._transition(SessionState.RESTORING)
        generation = self._generation

        finished = await first_completed(
            self.user_store.find_user_by_username(cached.username),
            timeout=self.restore_timeout,
        )

        if generation != self._generation:
            # login/logout happened while we were waiting
            logger.warning("Session changed during restore; discarding restore result")
            if finished is not None:
                discard_result(finished)
            return

        if finished is None:
            logger.warning(
                "Session verification timed out after %.1fs; using cached session for %r",
                self.restore_timeout,
                cached.username,
            )
            self._transition(SessionState.LOGGED_IN, cached, TrustLevel.CACHED)
            return

        try:
            user = finished.result()
        except BackendUnavailable as exc:
            logger.warning(
                "Session verification failed (%s); using cached session for %r",
                exc.detail,
                cached.username,
            )
            self._transition(SessionState.LOGGED_IN, cached, TrustLevel.CACHED)
            return
        except Exception:
            logger.exception(
                "Unexpected error verifying session; using cached session for %r",
                cached.username,
            )
            self._transition(SessionState.LOGGED_IN, cached, TrustLevel.CACHED)
            return

        if user is None:
            logger.info("User %r no longer exists; clearing session", cached.username)
            self.session_store.clear()
            self._transition(SessionState.LOGGED_OUT)
            return

        self._transition(
            SessionState.LOGGED_IN,
            SessionSnapshot.from_user(user),
            TrustLevel.VERIFIED,
        )
        logger.info("Session restored for %r", user.username)

    # ----- Subscription -----

    def subscription_status(self, now: datetime | None = None) -> SubscriptionStatus | None:
        """Status of the logged-in user's subscription; None when logged out."""
        if self.current_session is None:
            return None
        return get_subscription_status(
            self.current_session.subscription_end_date,
            now or self.clock(),
        )

    # ----- User management -----

    async def list_users(self) -> list[User]:
        return await self.user_store.list_users()

    async def create_user(self, payload: UserCreate) -> User:
        """
        Create a user.

        Rules:
          - username must not exist yet
          - subscription starts now unless a start date is given
          - end date = start + duration months
        """
        existing = await self.user_store.find_user_by_username(payload.username)
        if existing is not None:
            raise DuplicateUsername(payload.username)

        start = payload.subscription_start_date or self.clock()
        user = User(
            username=payload.username,
            full_name=payload.full_name,
            role=payload.role,
            currency=payload.currency or self.default_currency,
            password_hash=hash_password(payload.password),
            subscription_start_date=start,
            subscription_duration_months=payload.subscription_duration_months,
            subscription_end_date=calculate_end_date(
                start, payload.subscription_duration_months
            ),
        )
        saved = await self.user_store.save_user(user)
        logger.info("Created user %r (role=%s)", saved.username, saved.role)
        return saved

    async def update_user(self, user_id: uuid.UUID, payload: UserUpdate) -> User:
        """
        Partially update a user.

        Rules:
          - a new username must not belong to another user
          - password is rehashed only when a new one is given
          - end date is recomputed when start or duration change
          - editing yourself refreshes the session (memory + disk)
        """
        users = await self.user_store.list_users()
        user = next((u for u in users if u.id == user_id), None)
        if user is None:
            raise UserNotFound()

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        new_username = changes.get("username")
        if new_username is not None and new_username != user.username:
            other = await self.user_store.find_user_by_username(new_username)
            if other is not None and other.id != user_id:
                raise DuplicateUsername(new_username)

        password = changes.pop("password", None)
        updated = user.model_copy(update=changes)
        if password:
            updated.password_hash = hash_password(password)

        if (
            "subscription_start_date" in changes
            or "subscription_duration_months" in changes
        ):
            start = updated.subscription_start_date or self.clock()
            updated.subscription_start_date = start
            updated.subscription_end_date = calculate_end_date(
                start, updated.subscription_duration_months
            )

        saved = await self.user_store.save_user(updated)
        logger.info("Updated user %r", saved.username)

        if self.current_session is not None and self.current_session.user_id == user_id:
            snapshot = SessionSnapshot.from_user(saved)
            self.current_session = snapshot
            self.session_store.save(snapshot)

        return saved

    async def remove_user(self, user_id: uuid.UUID) -> None:
        """
        Delete a user.

        Rules:
          - you cannot delete yourself
          - the last remaining admin cannot be deleted
        """
        if self.current_session is not None and self.current_session.user_id == user_id:
            raise SelfDeletionForbidden()

        users = await self.user_store.list_users()
        target = next((u for u in users if u.id == user_id), None)
        if target is None:
            raise UserNotFound()

        admin_count = sum(1 for u in users if u.is_admin)
        if target.is_admin and admin_count <= 1:
            raise LastAdminProtected()

        if not await self.user_store.delete_user(user_id):
            raise UserNotFound()
        logger.info("Deleted user %r", target.username)
