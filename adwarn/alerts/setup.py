"""Alerting wiring.

Builds the REDEMET client, repository, reconciler and sweeper from settings.
The rate limiter is created once by the caller (per process) and passed in.

Usage:
    from adwarn.alerts.setup import build_alerting, build_redemet_client

    client = build_redemet_client(limiter)
    async with async_session() as session:
        alerting = build_alerting(session, client)
        result = await alerting.reconciler.register_warnings("SBMQ")
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from adwarn.alerts.reconciler import AlertReconciler, WarningSource
from adwarn.alerts.repository import AlertRepository
from adwarn.alerts.validity import ValiditySweeper
from adwarn.config import Settings, settings
from adwarn.redemet.client import RedemetClient
from adwarn.redemet.rate_limit import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


@dataclass
class Alerting:
    repository: AlertRepository
    reconciler: AlertReconciler
    sweeper: ValiditySweeper


def build_rate_limiter(config: Settings = settings) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        max_requests=config.redemet_rate_limit,
        window_seconds=config.redemet_rate_window_seconds,
    )


def build_redemet_client(
    rate_limiter: FixedWindowRateLimiter | None = None,
    config: Settings = settings,
) -> RedemetClient:
    if not config.redemet_api_key:
        logger.warning("REDEMET_API_KEY is not set; every fetch will fail")
    return RedemetClient(
        api_key=config.redemet_api_key,
        base_url=config.redemet_base_url,
        timeout_seconds=config.redemet_timeout_seconds,
        rate_limiter=rate_limiter,
    )


def build_alerting(session: AsyncSession, source: WarningSource) -> Alerting:
    """Create repository, reconciler and sweeper sharing one session."""
    repo = AlertRepository(session)
    return Alerting(
        repository=repo,
        reconciler=AlertReconciler(source=source, repository=repo),
        sweeper=ValiditySweeper(repo),
    )
