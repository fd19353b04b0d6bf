"""Alerting value objects and result types."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from adwarn.models.alert_history import AlertSeverity


@dataclass(frozen=True)
class NewAlert:
    """A classified warning ready to be inserted as an ACTIVE record.

    Attributes:
        icao: Uppercase ICAO code
        alert_type: Classification label ("AVISO" when the source omits it)
        content: Message body, the dedup key together with icao and alert_type
        severity: Computed once at creation, never recomputed
        valid_from: Start of validity (UTC), None if unbounded
        valid_until: End of validity (UTC), None if unbounded
        raw_data: Snapshot of the originating source record
    """

    icao: str
    alert_type: str
    content: str
    severity: AlertSeverity
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def dedupe_key(self) -> tuple[str, str, str]:
        return (self.icao, self.alert_type, self.content)


@dataclass
class RegisterSuccess:
    """Outcome of a successful reconciliation for one ICAO.

    Attributes:
        inserted: Warnings stored as new ACTIVE records (these should alarm)
        already_active: Warnings that matched an existing ACTIVE record
        sample_message: Content of the first warning in source order, if any
    """

    inserted: int = 0
    already_active: int = 0
    sample_message: str | None = None
    ok: bool = field(default=True, init=False)

    @property
    def should_alarm(self) -> bool:
        return self.inserted > 0


@dataclass
class RegisterFailure:
    """Reconciliation aborted by a source or store error.

    Inserts performed before the failure are not rolled back.
    """

    error: str
    ok: bool = field(default=False, init=False)

    @property
    def should_alarm(self) -> bool:
        return False


RegisterResult = RegisterSuccess | RegisterFailure


@dataclass
class SweepResult:
    """Outcome of one validity sweep.

    Attributes:
        ok: False if the store rejected an update
        expired: Number of ACTIVE records moved to EXPIRED
        error: Error message when ok is False
    """

    ok: bool
    expired: int = 0
    error: str | None = None
