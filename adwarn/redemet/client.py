"""REDEMET API client (the aerodrome status source).

Endpoints used:
- /mensagens/aviso/{ICAO}: warnings currently posted for an aerodrome
- /aerodromos/status/localidades/{ICAO}: colour flag and METAR/TAF text

All failures surface as SourceFetchError; callers never see httpx errors.
"""

import logging
from typing import Any

import httpx

from adwarn.alerts.errors import SourceFetchError
from adwarn.redemet.models import AerodromeStatus, RawWarning
from adwarn.redemet.rate_limit import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api-redemet.decea.mil.br"


def extract_alert_list(payload: Any) -> list[dict[str, Any]]:
    """Find the warning list in a REDEMET payload.

    The list usually sits at payload["data"]["data"], but other nestings
    have been observed; the first list found wins.
    """
    node = payload
    for _ in range(3):
        if not isinstance(node, dict):
            break
        node = node.get("data")
        if isinstance(node, list):
            return [item for item in node if isinstance(item, dict)]
    return []


class RedemetClient:
    """Async client for the REDEMET API.

    Example:
        client = RedemetClient(api_key=settings.redemet_api_key)
        warnings = await client.fetch_warnings("SBMQ")
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        rate_limiter: FixedWindowRateLimiter | None = None,
        client_key: str = "redemet",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: REDEMET API key; empty makes every fetch fail
            base_url: API root
            timeout_seconds: HTTP request timeout
            rate_limiter: Optional limiter checked before every request
            client_key: Identity this client is rate limited under
            transport: httpx transport override (tests)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = rate_limiter
        self.client_key = client_key
        self._transport = transport

    async def fetch_warnings(self, icao: str) -> list[RawWarning]:
        """Warnings currently posted for icao, in the order REDEMET returns them."""
        icao = icao.upper()
        payload = await self._get_json(f"/mensagens/aviso/{icao}", icao)
        return [RawWarning.from_payload(item) for item in extract_alert_list(payload)]

    async def fetch_aerodrome_status(self, icao: str) -> AerodromeStatus:
        """Colour flag and report text for icao.

        Expected payload: {"data": [["SBVT", "Name", lat, lon, "g", "METAR ..."]]}
        """
        icao = icao.upper()
        payload = await self._get_json(f"/aerodromos/status/localidades/{icao}", icao)

        rows = payload.get("data") if isinstance(payload, dict) else None
        row = rows[0] if isinstance(rows, list) and rows else None
        if not isinstance(row, list):
            return AerodromeStatus(icao=icao, flag=None)

        flag = row[4] if len(row) > 4 and row[4] else None
        report = row[5] if len(row) > 5 and row[5] else None
        return AerodromeStatus(
            icao=icao,
            flag=str(flag) if flag is not None else None,
            report_text=str(report) if report is not None else None,
        )

    async def _get_json(self, path: str, icao: str) -> Any:
        if not self.api_key:
            raise SourceFetchError("REDEMET_API_KEY not configured", icao=icao)

        if self.rate_limiter is not None and not self.rate_limiter.allow(self.client_key):
            raise SourceFetchError("Rate limit exceeded. Please try again later.", icao=icao)

        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(
                    url,
                    params={"api_key": self.api_key},
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            raise SourceFetchError("REDEMET request timed out", icao=icao) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("REDEMET API error: %s (icao=%s)", status, icao)
            raise SourceFetchError(
                f"REDEMET returned {status}", icao=icao, status_code=status
            ) from e
        except httpx.RequestError as e:
            raise SourceFetchError(f"REDEMET connection failed: {e}", icao=icao) from e
        except ValueError as e:
            raise SourceFetchError(f"REDEMET returned invalid JSON: {e}", icao=icao) from e
