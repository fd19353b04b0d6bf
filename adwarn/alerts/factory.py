"""Build NewAlert instances from raw REDEMET warnings.

Usage:
    from adwarn.alerts.factory import build_new_alert

    alert = build_new_alert("SBMQ", warning)
"""

import logging
import re
from datetime import datetime, timezone

from adwarn.alerts.classifier import determine_alert_severity
from adwarn.alerts.models import NewAlert
from adwarn.redemet.models import RawWarning

logger = logging.getLogger(__name__)

DEFAULT_ALERT_TYPE = "AVISO"
EMPTY_CONTENT = "(sem mensagem)"

# REDEMET validity timestamps carry no offset, e.g. "2024-01-01 06:00:00"
_NAIVE_REDEMET_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def build_new_alert(icao: str, warning: RawWarning) -> NewAlert:
    """Normalize a raw warning into a NewAlert.

    Applies the type/content fallbacks, converts the validity window to UTC
    and computes severity from the normalized type and content.
    """
    alert_type = warning.type or DEFAULT_ALERT_TYPE
    content = warning.message or EMPTY_CONTENT

    severity = determine_alert_severity(RawWarning(message=content, type=alert_type))

    return NewAlert(
        icao=icao.upper(),
        alert_type=alert_type,
        content=content,
        severity=severity,
        valid_from=to_utc_instant(warning.valid_from_raw),
        valid_until=to_utc_instant(warning.valid_until_raw),
        raw_data=warning.raw or warning.model_dump(),
    )


def to_utc_instant(value: str | datetime | None) -> datetime | None:
    """Convert a source timestamp to an aware UTC datetime.

    - None/empty: None (unbounded)
    - "YYYY-MM-DD HH:mm:ss" or any naive value: assumed UTC
    - Values with an offset: same instant, expressed in UTC
    - Unparseable text: None, logged as a warning
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if _NAIVE_REDEMET_TIMESTAMP.match(text):
            text = text.replace(" ", "T")
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning("Ignoring unparseable validity timestamp: %r", value)
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)

    if parsed.tzinfo == timezone.utc:
        return parsed

    return parsed.astimezone(timezone.utc)
