"""Favorite aerodromes repository.

Favorites decide which ICAO codes the poll cycle visits. Unlike the alerting
core, adding a favorite validates the ICAO format.
"""

import re

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adwarn.alerts.errors import StoreError
from adwarn.models.favorite import Favorite

ICAO_PATTERN = re.compile(r"^[A-Z]{4}$")


def validate_icao(icao: str) -> str:
    """Return icao uppercased, or raise ValueError if it is not 4 letters."""
    code = (icao or "").strip().upper()
    if not ICAO_PATTERN.match(code):
        raise ValueError(f"Invalid ICAO code {icao!r}. Must be 4 letters.")
    return code


class FavoriteRepository:
    """Repository for favorite aerodromes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> list[Favorite]:
        stmt = select(Favorite).order_by(Favorite.sort_order, Favorite.icao)
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def list_enabled_icaos(self) -> list[str]:
        """Enabled ICAO codes in display order, without duplicates."""
        stmt = (
            select(Favorite.icao)
            .where(Favorite.enabled.is_(True))
            .order_by(Favorite.sort_order, Favorite.icao)
        )
        result = await self._execute(stmt)
        return list(dict.fromkeys(result.scalars().all()))

    async def add(self, icao: str, name: str, sort_order: int | None = None) -> Favorite:
        """Add a favorite.

        Args:
            icao: ICAO code (case-insensitive)
            name: Display name
            sort_order: Position in lists; appended at the end when None

        Raises:
            ValueError: If icao is not 4 letters
            StoreError: On database failure
        """
        code = validate_icao(icao)
        if sort_order is None:
            sort_order = len(await self.list_all())

        favorite = Favorite(icao=code, name=name.strip() or code, sort_order=sort_order)
        self.session.add(favorite)
        try:
            await self.session.commit()
            await self.session.refresh(favorite)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"add favorite failed: {e}") from e
        return favorite

    async def remove(self, icao: str) -> int:
        """Delete every favorite for icao. Returns the number removed."""
        stmt = delete(Favorite).where(Favorite.icao == icao.upper())
        result = await self._execute(stmt, commit=True)
        return result.rowcount or 0

    async def set_enabled(self, icao: str, enabled: bool) -> int:
        stmt = (
            update(Favorite)
            .where(Favorite.icao == icao.upper())
            .values(enabled=enabled)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, commit=True)
        return result.rowcount or 0

    async def _execute(self, stmt, commit: bool = False):
        try:
            result = await self.session.execute(stmt)
            if commit:
                await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"favorites query failed: {e}") from e
        return result
