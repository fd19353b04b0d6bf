"""Tests for FavoriteRepository."""

import pytest

from adwarn.favorites.repository import FavoriteRepository, validate_icao


class TestValidateIcao:
    @pytest.mark.parametrize("value,expected", [("SBMQ", "SBMQ"), (" sbgr ", "SBGR")])
    def test_valid(self, value, expected):
        assert validate_icao(value) == expected

    @pytest.mark.parametrize("value", ["", "SBM", "SBMQX", "SB1Q", None])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            validate_icao(value)


class TestFavoriteRepository:
    @pytest.mark.asyncio
    async def test_add_and_list(self, db_session):
        repo = FavoriteRepository(db_session)

        favorite = await repo.add("sbmq", "Macapa")
        await repo.add("SBBE", "Belem")

        assert favorite.icao == "SBMQ"
        assert [f.icao for f in await repo.list_all()] == ["SBMQ", "SBBE"]

    @pytest.mark.asyncio
    async def test_blank_name_defaults_to_icao(self, db_session):
        favorite = await FavoriteRepository(db_session).add("SBMQ", "  ")
        assert favorite.name == "SBMQ"

    @pytest.mark.asyncio
    async def test_add_rejects_malformed_icao(self, db_session):
        with pytest.raises(ValueError):
            await FavoriteRepository(db_session).add("XX", "bad")

    @pytest.mark.asyncio
    async def test_enabled_icaos(self, db_session):
        repo = FavoriteRepository(db_session)
        await repo.add("SBMQ", "Macapa")
        await repo.add("SBBE", "Belem")
        await repo.add("SBGR", "Guarulhos")

        assert await repo.set_enabled("sbbe", False) == 1

        assert await repo.list_enabled_icaos() == ["SBMQ", "SBGR"]

    @pytest.mark.asyncio
    async def test_duplicate_icaos_listed_once(self, db_session):
        repo = FavoriteRepository(db_session)
        await repo.add("SBMQ", "Macapa")
        await repo.add("SBMQ", "Macapa again")

        assert await repo.list_enabled_icaos() == ["SBMQ"]

    @pytest.mark.asyncio
    async def test_remove(self, db_session):
        repo = FavoriteRepository(db_session)
        await repo.add("SBMQ", "Macapa")

        assert await repo.remove("sbmq") == 1
        assert await repo.list_all() == []
