"""Validity window handling for stored warnings.

is_in_force is the read-time predicate consumers apply on top of the ACTIVE
status. ValiditySweeper brings the stored status in line with the clock so
warnings expire even when nobody polls their aerodrome again.

Expiry is one-way: nothing here sets a record back to ACTIVE. A warning that
lapses and reappears later is inserted as a new record by the reconciler.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol

from adwarn.alerts.errors import StoreError
from adwarn.alerts.models import SweepResult

if TYPE_CHECKING:
    from adwarn.alerts.repository import AlertRepository

logger = logging.getLogger(__name__)


class HasValidityWindow(Protocol):
    valid_from: datetime | None
    valid_until: datetime | None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_in_force(record: HasValidityWindow, now: datetime | None = None) -> bool:
    """True iff now lies within [valid_from, valid_until], bounds inclusive.

    A None bound is unbounded on that side.
    """
    now = _as_utc(now) if now is not None else datetime.now(tz=timezone.utc)

    if record.valid_from is not None and now < _as_utc(record.valid_from):
        return False
    if record.valid_until is not None and now > _as_utc(record.valid_until):
        return False
    return True


class ValiditySweeper:
    """Expires ACTIVE warnings whose validity window no longer contains now."""

    def __init__(self, repository: "AlertRepository"):
        self._repo = repository

    async def expire_out_of_window_active_alerts(
        self,
        icaos: list[str] | None = None,
        now: datetime | None = None,
    ) -> SweepResult:
        """Run one sweep.

        Args:
            icaos: Only sweep these ICAO codes (all when None or empty)
            now: Reference instant, defaults to the current UTC time

        Returns:
            SweepResult with the number of expired records, or ok=False with
            the store error message. Never raises StoreError.
        """
        now = _as_utc(now).astimezone(timezone.utc) if now else datetime.now(tz=timezone.utc)

        try:
            expired = await self._repo.bulk_set_expired(now, icaos)
        except StoreError as e:
            logger.error("Validity sweep failed (icaos=%s): %s", icaos, e)
            return SweepResult(ok=False, error=str(e))

        if expired:
            logger.info("Expired %d alert(s) out of their validity window", expired)
        return SweepResult(ok=True, expired=expired)
