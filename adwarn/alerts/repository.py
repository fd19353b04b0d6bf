"""Alert history repository.

This module provides the AlertRepository class, the Persistent Alert Store
used by the reconciler and the validity sweep. Key features:

- Existence check for an ACTIVE (icao, alert_type, content) triple
- Insert guarded by the partial unique index on ACTIVE triples
- Bulk expiry of ACTIVE rows whose validity window excludes "now"
- Read paths for recent history and in-force counts

Every SQLAlchemy failure is rolled back and re-raised as StoreError.

Usage:
    from adwarn.alerts.repository import AlertRepository

    repo = AlertRepository(session)
    if await repo.find_active(icao, alert_type, content) is None:
        is_new = await repo.insert_active(alert)
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adwarn.alerts.errors import StoreError
from adwarn.alerts.models import NewAlert
from adwarn.alerts.validity import is_in_force
from adwarn.models.alert_history import AlertHistory, AlertStatus

logger = logging.getLogger(__name__)


class AlertRepository:
    """Repository for alert history database operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self.session = session

    async def find_active(self, icao: str, alert_type: str, content: str) -> UUID | None:
        """Return the id of the ACTIVE record for this triple, or None."""
        stmt = (
            select(AlertHistory.id)
            .where(
                AlertHistory.icao == icao.upper(),
                AlertHistory.status == AlertStatus.ACTIVE,
                AlertHistory.alert_type == alert_type,
                AlertHistory.content == content,
            )
            .limit(1)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise await self._store_error("find_active", e) from e
        return result.scalar_one_or_none()

    async def insert_active(self, alert: NewAlert) -> bool:
        """Insert a new ACTIVE record.

        Returns:
            True if inserted, False if the partial unique index reports an
            ACTIVE record with the same triple (a concurrent insert won).

        Raises:
            StoreError: On any other database failure, including integrity
                violations that leave no ACTIVE record with the same triple
        """
        record = AlertHistory(
            icao=alert.icao,
            alert_type=alert.alert_type,
            content=alert.content,
            status=AlertStatus.ACTIVE,
            severity=alert.severity,
            valid_from=alert.valid_from,
            valid_until=alert.valid_until,
            raw_data=alert.raw_data,
        )
        self.session.add(record)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            # Only the active-triple index means "duplicate"; NOT NULL and
            # check constraint violations are write failures.
            if await self.find_active(alert.icao, alert.alert_type, alert.content) is None:
                raise await self._store_error("insert_active", e) from e
            logger.debug(
                "Insert lost to an existing active alert (icao=%s, type=%s)",
                alert.icao,
                alert.alert_type,
            )
            return False
        except SQLAlchemyError as e:
            raise await self._store_error("insert_active", e) from e
        return True

    async def bulk_set_expired(self, now: datetime, icaos: list[str] | None = None) -> int:
        """Move ACTIVE records outside their validity window to EXPIRED.

        Two statements: valid_until strictly before now, then valid_from
        strictly after now. EXPIRED rows are never touched.

        Args:
            now: Reference instant (aware, UTC)
            icaos: Restrict to these ICAO codes; all records when None or empty

        Returns:
            Number of records expired
        """
        conditions = [
            AlertHistory.valid_until.is_not(None) & (AlertHistory.valid_until < now),
            AlertHistory.valid_from.is_not(None) & (AlertHistory.valid_from > now),
        ]
        expired = 0
        try:
            for condition in conditions:
                stmt = (
                    update(AlertHistory)
                    .where(AlertHistory.status == AlertStatus.ACTIVE, condition)
                    .values(status=AlertStatus.EXPIRED)
                    .execution_options(synchronize_session=False)
                )
                if icaos:
                    stmt = stmt.where(AlertHistory.icao.in_([i.upper() for i in icaos]))
                result = await self.session.execute(stmt)
                await self.session.commit()
                expired += result.rowcount or 0
        except SQLAlchemyError as e:
            raise await self._store_error("bulk_set_expired", e) from e
        return expired

    async def query_recent(self, limit: int = 200) -> list[AlertHistory]:
        """Most recent records first, any status."""
        stmt = select(AlertHistory).order_by(AlertHistory.created_at.desc()).limit(limit)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise await self._store_error("query_recent", e) from e
        return list(result.scalars().all())

    async def list_active(self, icaos: list[str] | None = None) -> list[AlertHistory]:
        """ACTIVE records, optionally restricted to some ICAO codes."""
        stmt = select(AlertHistory).where(AlertHistory.status == AlertStatus.ACTIVE)
        if icaos:
            stmt = stmt.where(AlertHistory.icao.in_([i.upper() for i in icaos]))
        stmt = stmt.order_by(AlertHistory.created_at.desc())
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise await self._store_error("list_active", e) from e
        return list(result.scalars().all())

    async def count_in_force(self, now: datetime, icaos: list[str] | None = None) -> int:
        """Count ACTIVE records whose validity window contains now.

        Status alone is not trusted: a record may still be ACTIVE between
        sweeps while already out of its window.
        """
        records = await self.list_active(icaos)
        return sum(1 for record in records if is_in_force(record, now))

    async def count_by_status(self) -> dict[str, int]:
        """Number of records per status."""
        stmt = select(AlertHistory.status, func.count()).group_by(AlertHistory.status)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise await self._store_error("count_by_status", e) from e
        return {str(AlertStatus(status).value): count for status, count in result.all()}

    async def delete_all(self) -> int:
        """Clear the whole history. Returns the number of rows deleted."""
        try:
            result = await self.session.execute(delete(AlertHistory))
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._store_error("delete_all", e) from e
        return result.rowcount or 0

    async def _store_error(self, operation: str, error: SQLAlchemyError) -> StoreError:
        logger.error("Alert store %s failed: %s", operation, error)
        await self.session.rollback()
        return StoreError(f"{operation} failed: {error}")
