"""One poll cycle over the monitored aerodromes: sweep, then reconcile."""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from adwarn.alerts.models import RegisterResult, SweepResult
from adwarn.alerts.reconciler import AlertReconciler
from adwarn.alerts.validity import ValiditySweeper

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """Result of one poll cycle.

    Attributes:
        sweep: Outcome of the validity sweep run before reconciling
        results: RegisterResult per ICAO, in polling order
    """

    sweep: SweepResult
    results: dict[str, RegisterResult] = field(default_factory=dict)

    @property
    def alarm_icaos(self) -> list[str]:
        """ICAO codes with at least one newly inserted warning."""
        return [icao for icao, result in self.results.items() if result.should_alarm]

    @property
    def failed_icaos(self) -> list[str]:
        return [icao for icao, result in self.results.items() if not result.ok]

    def to_dict(self) -> dict:
        return {
            "sweep": {
                "ok": self.sweep.ok,
                "expired": self.sweep.expired,
                "error": self.sweep.error,
            },
            "results": {
                icao: (
                    {
                        "ok": True,
                        "inserted": r.inserted,
                        "already_active": r.already_active,
                        "sample_message": r.sample_message,
                    }
                    if r.ok
                    else {"ok": False, "error": r.error}
                )
                for icao, r in self.results.items()
            },
            "alarm_icaos": self.alarm_icaos,
        }


async def run_poll_cycle(
    icaos: list[str],
    reconciler: AlertReconciler,
    sweeper: ValiditySweeper,
    now: datetime | None = None,
) -> CycleReport:
    """Sweep expired warnings for icaos, then register fresh ones per ICAO.

    A failed sweep aborts the cycle before any reconciliation. ICAO codes are
    processed one after the other; a failure for one does not stop the rest.
    """
    icaos = list(dict.fromkeys(i.upper() for i in icaos))

    sweep = await sweeper.expire_out_of_window_active_alerts(icaos=icaos, now=now)
    report = CycleReport(sweep=sweep)
    if not sweep.ok:
        logger.error("Poll cycle aborted: validity sweep failed: %s", sweep.error)
        return report

    for icao in icaos:
        report.results[icao] = await reconciler.register_warnings(icao)

    if report.alarm_icaos:
        logger.warning("New aerodrome warnings for: %s", ", ".join(report.alarm_icaos))
    if report.failed_icaos:
        logger.error("Poll failed for: %s", ", ".join(report.failed_icaos))
    return report
