"""Periodic poll scheduler.

Runs a poll cycle every check_interval_seconds on an APScheduler
AsyncIOScheduler, starting immediately. Each run opens its own session.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from adwarn.alerts.reconciler import WarningSource
from adwarn.alerts.setup import build_alerting
from adwarn.favorites.repository import FavoriteRepository
from adwarn.monitor.cycle import CycleReport, run_poll_cycle

logger = logging.getLogger(__name__)

AlarmCallback = Callable[[CycleReport], Awaitable[None]]


class PollScheduler:
    """Poll the monitored aerodromes on a fixed interval.

    The monitored set is the enabled favorites; fallback_icaos is used when
    there are none.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        source: WarningSource,
        interval_seconds: int,
        fallback_icaos: list[str] | None = None,
        on_alarm: AlarmCallback | None = None,
    ):
        """Initialize scheduler.

        Args:
            session_factory: Returns a new AsyncSession context manager
            source: Aerodrome status source shared by all runs
            interval_seconds: Seconds between cycles
            fallback_icaos: ICAO codes polled when no favorite is enabled
            on_alarm: Awaited with the report when a cycle inserts new warnings
        """
        self.session_factory = session_factory
        self.source = source
        self.interval_seconds = interval_seconds
        self.fallback_icaos = fallback_icaos or []
        self.on_alarm = on_alarm
        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)

    async def run_once(self) -> CycleReport | None:
        """Run one cycle. Returns None when there is nothing to poll."""
        async with self.session_factory() as session:
            icaos = await FavoriteRepository(session).list_enabled_icaos()
            if not icaos:
                icaos = self.fallback_icaos
            if not icaos:
                logger.info("No aerodromes to poll")
                return None

            alerting = build_alerting(session, self.source)
            report = await run_poll_cycle(icaos, alerting.reconciler, alerting.sweeper)

        if report.alarm_icaos and self.on_alarm is not None:
            await self.on_alarm(report)
        return report

    def start(self) -> None:
        """Schedule the interval job, first run immediately."""
        self.scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            next_run_time=datetime.now(timezone.utc),
            id="poll_cycle",
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info("PollScheduler started (interval=%ss)", self.interval_seconds)

    def shutdown(self) -> None:
        """Shutdown the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("PollScheduler shut down")
