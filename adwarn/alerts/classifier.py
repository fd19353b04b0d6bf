"""Aerodrome warning classification.

Pure keyword heuristics over the free text REDEMET returns:

- is_aerodrome_warning: does a record describe an aerodrome warning (AD WRNG)?
- determine_alert_severity: keyword tiers, first match wins
- extract_icaos_from_warning_text: aerodromes listed before the AD WRNG marker

The keyword lists and tier order are part of the alerting contract and are
covered by tests; change them only together.
"""

import re
import unicodedata

from adwarn.models.alert_history import AlertSeverity
from adwarn.redemet.models import RawWarning

AD_WRNG_MARKER = "AD WRNG"

CRITICAL_MESSAGE_KEYWORDS = ("closed", "fechado", "danger")
CRITICAL_TYPE_KEYWORDS = ("sigmet",)
HIGH_MESSAGE_KEYWORDS = ("thunderstorm", "tempestade", "severe", "turbulence")
MEDIUM_MESSAGE_KEYWORDS = ("caution", "warning", "aviso")

_ICAO_TOKEN = re.compile(r"\b[A-Z]{4}\b")
_MARKER = re.compile(re.escape(AD_WRNG_MARKER), re.IGNORECASE)


def normalize_text(value: str | None) -> str:
    """Lowercase and strip diacritics ("Aeródromo" -> "aerodromo")."""
    decomposed = unicodedata.normalize("NFD", (value or "").lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_aerodrome_warning(warning: RawWarning) -> bool:
    """Return True if the record textually represents an aerodrome warning."""
    msg = normalize_text(warning.message)
    tipo = normalize_text(warning.type)

    if "ad wrng" in msg or "aerodrome warning" in msg:
        return True

    if "aerodromo" in tipo or "aerodromo" in msg:
        return True

    if "aviso" in tipo and ("ad" in msg or "aerodromo" in msg):
        return True

    return False


def determine_alert_severity(warning: RawWarning) -> AlertSeverity:
    """Scan message and type for severity keywords.

    Tiers are checked critical, high, medium; LOW when nothing matches.
    """
    message = (warning.message or "").lower()
    tipo = (warning.type or "").lower()

    if any(k in message for k in CRITICAL_MESSAGE_KEYWORDS) or any(
        k in tipo for k in CRITICAL_TYPE_KEYWORDS
    ):
        return AlertSeverity.CRITICAL

    if any(k in message for k in HIGH_MESSAGE_KEYWORDS):
        return AlertSeverity.HIGH

    if any(k in message for k in MEDIUM_MESSAGE_KEYWORDS):
        return AlertSeverity.MEDIUM

    return AlertSeverity.LOW


def extract_icaos_from_warning_text(text: str | None) -> list[str]:
    """Return the unique 4-letter ICAO codes preceding the AD WRNG marker.

    The whole text is scanned when the marker is absent. Codes keep their
    first-seen order.
    """
    if not text:
        return []

    match = _MARKER.search(text)
    head = text[: match.start()] if match else text
    return list(dict.fromkeys(_ICAO_TOKEN.findall(head)))
