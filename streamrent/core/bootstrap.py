# streamrent/core/bootstrap.py
import logging

from streamrent.core.config import Settings
from streamrent.schemas.user import UserCreate
from streamrent.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


async def ensure_default_admin(manager: SessionManager, settings: Settings) -> bool:
    """
    Create the default admin account if it does not exist yet.

    Idempotent: safe to call on every start. Called explicitly by the entry
    point, never at import time.

    Returns:
        True if the admin was created by this call.

    Raises:
        RuntimeError: if the admin is missing and DEFAULT_ADMIN_PASSWORD
        is not configured.
    """
    username = settings.DEFAULT_ADMIN_USERNAME
    existing = await manager.user_store.find_user_by_username(username)
    if existing is not None:
        return False

    if not settings.DEFAULT_ADMIN_PASSWORD:
        raise RuntimeError(
            f"Default admin {username!r} does not exist and "
            "DEFAULT_ADMIN_PASSWORD is not set in .env"
        )

    await manager.create_user(
        UserCreate(
            username=username,
            password=settings.DEFAULT_ADMIN_PASSWORD,
            full_name=settings.DEFAULT_ADMIN_FULL_NAME,
            role="admin",
            currency=settings.DEFAULT_CURRENCY,
        )
    )
    logger.info("✅ Default admin user created: %s", username)
    return True
