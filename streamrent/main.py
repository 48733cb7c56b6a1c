# streamrent/main.py
import asyncio
import logging
from dataclasses import dataclass

from supabase import AsyncClient

from streamrent.core.bootstrap import ensure_default_admin
from streamrent.core.config import Settings, get_settings
from streamrent.core.supabase_client import supabase_client
from streamrent.repositories.rental_repo import SupabaseRentalStore
from streamrent.repositories.session_store import FileSessionStore
from streamrent.repositories.user_repo import SupabaseUserStore
from streamrent.services.platform_service import PlatformService
from streamrent.services.rental_service import RentalService
from streamrent.services.session_manager import SessionManager

logger = logging.getLogger("streamrent")


@dataclass
class Services:
    """Everything a front-end needs, built once per process."""

    sessions: SessionManager
    rentals: RentalService
    platforms: PlatformService


def build_services(client: AsyncClient, settings: Settings) -> Services:
    user_store = SupabaseUserStore(client)
    return Services(
        sessions=SessionManager(
            user_store,
            FileSessionStore(settings.SESSION_FILE),
            restore_timeout=settings.SESSION_RESTORE_TIMEOUT,
            default_currency=settings.DEFAULT_CURRENCY,
        ),
        rentals=RentalService(
            SupabaseRentalStore(client),
            expiring_soon_days=settings.RENTAL_EXPIRING_SOON_DAYS,
        ),
        platforms=PlatformService(user_store),
    )


async def startup(settings: Settings | None = None) -> Services:
    """
    Process startup.

      - Connect to Supabase.
      - Make sure the default admin exists.
      - Restore the session cached by the previous run.
    """
    settings = settings or get_settings()

    logger.info("🔄 Startup: Connecting to Supabase...")
    client = await supabase_client(settings)
    services = build_services(client, settings)

    try:
        await ensure_default_admin(services.sessions, settings)
    except Exception as e:
        logger.error(f"❌ Startup: default admin check FAILED: {e}")
        raise

    await services.sessions.restore_session()

    session = services.sessions.current_session
    if session is None:
        logger.info("✅ Startup: no active session")
    else:
        status = services.sessions.subscription_status()
        logger.info(
            "✅ Startup: session for %s (%s), subscription %s",
            session.username,
            services.sessions.trust.value,
            status.message,
        )
    return services


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(startup(settings))


if __name__ == "__main__":
    main()
