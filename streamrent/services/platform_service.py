# streamrent/services/platform_service.py
from streamrent.repositories.user_repo import UserStore

# Built-in platforms, always offered
DEFAULT_PLATFORMS: tuple[str, ...] = (
    "Netflix",
    "Spotify",
    "Prime Video",
    "HBO Max",
    "Disney+",
    "Apple TV+",
    "Paramount+",
    "Crunchyroll",
    "YouTube Premium",
    "Star+",
    "Max",
    "Peacock",
    "Deezer",
    "Tidal",
)


class PlatformService:
    """
    Platform catalogue: built-in names plus custom ones stored in the backend.
    """

    def __init__(self, store: UserStore):
        self.store = store

    async def list_platforms(self) -> list[str]:
        """Built-in and custom names, de-duplicated and sorted."""
        custom = await self.store.list_custom_platform_names()
        return sorted(set(DEFAULT_PLATFORMS) | set(custom))

    async def add_platform(self, name: str) -> bool:
        """
        Register a custom platform.

        Returns:
            False if the (trimmed) name already exists as a custom platform.

        Raises:
            ValueError: if the name is blank.
        """
        name = name.strip()
        if not name:
            raise ValueError("platform name cannot be empty")
        return await self.store.add_custom_platform(name)
