"""AlertReconciler: turn repeatedly fetched warnings into discrete records.

Each poll of an aerodrome returns the warnings currently posted. The
reconciler inserts only the ones without an ACTIVE record for the same
(icao, alert_type, content), so a warning alarms once while it stays posted.

Usage:
    from adwarn.alerts.reconciler import AlertReconciler

    reconciler = AlertReconciler(source=redemet_client, repository=alert_repo)
    result = await reconciler.register_warnings("SBMQ")
    if result.ok and result.inserted:
        ...  # alarm
"""

import logging
from typing import TYPE_CHECKING, Protocol

from adwarn.alerts.classifier import is_aerodrome_warning
from adwarn.alerts.errors import SourceFetchError, StoreError
from adwarn.alerts.factory import build_new_alert
from adwarn.alerts.models import RegisterFailure, RegisterResult, RegisterSuccess
from adwarn.redemet.models import RawWarning

if TYPE_CHECKING:
    from adwarn.alerts.repository import AlertRepository

logger = logging.getLogger(__name__)


class WarningSource(Protocol):
    """Anything that returns the warnings currently posted for an ICAO.

    Implementations raise SourceFetchError on failure.
    """

    async def fetch_warnings(self, icao: str) -> list[RawWarning]:
        ...


class AlertReconciler:
    """Fetch, classify and persist new aerodrome warnings for one ICAO.

    Features:
    - Quiet aerodromes never touch the store
    - Dedup against ACTIVE records only; an EXPIRED duplicate does not block
      a new occurrence
    - Never raises SourceFetchError/StoreError - returns RegisterFailure

    The check-then-insert is not transactional across warnings: inserts done
    before a store failure in the same call stay in place.
    """

    def __init__(self, source: WarningSource, repository: "AlertRepository"):
        """Initialize AlertReconciler.

        Args:
            source: Aerodrome status source (e.g. RedemetClient)
            repository: AlertRepository for the alert history
        """
        self._source = source
        self._repo = repository

    async def register_warnings(self, icao: str) -> RegisterResult:
        """Register the aerodrome warnings currently posted for an ICAO.

        Args:
            icao: 4-letter ICAO code, validated by the caller

        Returns:
            RegisterSuccess with inserted/already-active counts, or
            RegisterFailure carrying the source or store error message
        """
        icao = icao.upper()

        try:
            raw_warnings = await self._source.fetch_warnings(icao)
        except SourceFetchError as e:
            logger.error("Fetching warnings failed (icao=%s): %s", icao, e)
            return RegisterFailure(error=str(e))

        warnings = [w for w in raw_warnings if is_aerodrome_warning(w)]
        if not warnings:
            return RegisterSuccess()

        result = RegisterSuccess(sample_message=warnings[0].message or None)

        for warning in warnings:
            alert = build_new_alert(icao, warning)
            try:
                existing_id = await self._repo.find_active(
                    alert.icao, alert.alert_type, alert.content
                )
                if existing_id is not None:
                    result.already_active += 1
                    logger.debug(
                        "Warning already active (icao=%s, id=%s)", alert.icao, existing_id
                    )
                    continue

                if await self._repo.insert_active(alert):
                    result.inserted += 1
                    logger.info(
                        "New aerodrome warning (icao=%s, type=%s, severity=%s)",
                        alert.icao,
                        alert.alert_type,
                        alert.severity.value,
                    )
                else:
                    result.already_active += 1
            except StoreError as e:
                logger.error(
                    "Registering warnings aborted (icao=%s, inserted=%d): %s",
                    icao,
                    result.inserted,
                    e,
                )
                return RegisterFailure(error=str(e))

        return result
