# tests/test_platform_service.py
import pytest

from streamrent.services.platform_service import DEFAULT_PLATFORMS, PlatformService


@pytest.fixture
def service(user_store) -> PlatformService:
    return PlatformService(user_store)


async def test_defaults_only(service):
    assert await service.list_platforms() == sorted(DEFAULT_PLATFORMS)


async def test_custom_platforms_are_merged_and_sorted(service, user_store):
    user_store.platforms = ["Vix", "Netflix"]

    platforms = await service.list_platforms()

    assert platforms.count("Netflix") == 1
    assert "Vix" in platforms
    assert platforms == sorted(platforms)


async def test_add_trims_and_rejects_duplicates(service, user_store):
    assert await service.add_platform("  Vix ") is True
    assert user_store.platforms == ["Vix"]
    assert await service.add_platform("Vix") is False
    # exact, case-sensitive match
    assert await service.add_platform("vix") is True


async def test_blank_name_rejected(service):
    with pytest.raises(ValueError):
        await service.add_platform("   ")
