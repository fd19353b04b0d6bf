"""REDEMET payload models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


# Upstream keys per field, in precedence order; a null value falls through
_FALLBACK_KEYS = {
    "message": ("message", "mensagem", "mens"),
    "type": ("type", "tipo"),
    "valid_from_raw": ("valid_from_raw", "data_validade_ini", "validade_inicial"),
    "valid_until_raw": ("valid_until_raw", "data_validade_fim", "validade_final"),
}


class RawWarning(BaseModel):
    """One message record returned by the REDEMET warnings endpoint.

    Field names follow the upstream payload (``mensagem``/``mens``, ``tipo``,
    ``data_validade_ini``/``data_validade_fim``). Unknown fields are kept and
    the original dict is available as ``raw`` for auditing.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    message: str = Field(default="", validation_alias=AliasChoices("message", "mensagem", "mens"))
    type: str = Field(default="", validation_alias=AliasChoices("type", "tipo"))
    valid_from_raw: str | None = Field(
        default=None,
        validation_alias=AliasChoices("valid_from_raw", "data_validade_ini", "validade_inicial"),
    )
    valid_until_raw: str | None = Field(
        default=None,
        validation_alias=AliasChoices("valid_until_raw", "data_validade_fim", "validade_final"),
    )
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _first_non_null(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field, keys in _FALLBACK_KEYS.items():
            value = next((data[k] for k in keys if data.get(k) is not None), None)
            if value is not None:
                data[field] = value
        return data

    @field_validator("message", "type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("valid_from_raw", "valid_until_raw", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RawWarning":
        """Build a RawWarning from one upstream record, keeping a snapshot of it."""
        warning = cls.model_validate(payload)
        warning.raw = dict(payload)
        return warning


class FlightRule(str, Enum):
    VFR = "VFR"
    IFR = "IFR"
    LIFR = "LIFR"


_FLAG_TO_RULE = {
    "g": FlightRule.VFR,
    "y": FlightRule.IFR,
    "r": FlightRule.LIFR,
}


def map_flight_rule_from_flag(flag: Any) -> FlightRule | None:
    """Map the REDEMET status colour flag (g/y/r) to a flight rule."""
    return _FLAG_TO_RULE.get(str(flag if flag is not None else "").strip().lower())


@dataclass
class AerodromeStatus:
    """Current status of one aerodrome.

    Attributes:
        icao: Aerodrome ICAO code
        flag: Raw colour flag from REDEMET (g/y/r), None if absent
        report_text: METAR/SPECI/TAF text following the flag, if any
    """

    icao: str
    flag: str | None
    report_text: str | None = None

    @property
    def flight_rule(self) -> FlightRule | None:
        return map_flight_rule_from_flag(self.flag)
