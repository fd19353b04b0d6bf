"""Aerodrome warning alerting package.

This package turns repeatedly fetched REDEMET warnings into a stable alert
history:
- Warning classification (aerodrome warning detection, severity)
- NewAlert factory and timestamp normalization
- AlertRepository over the alerts_history table
- AlertReconciler (dedup against ACTIVE records)
- Validity window predicate and ValiditySweeper
"""

from adwarn.alerts.classifier import (
    AD_WRNG_MARKER,
    determine_alert_severity,
    extract_icaos_from_warning_text,
    is_aerodrome_warning,
    normalize_text,
)
from adwarn.alerts.errors import AlertingError, SourceFetchError, StoreError
from adwarn.alerts.factory import (
    DEFAULT_ALERT_TYPE,
    EMPTY_CONTENT,
    build_new_alert,
    to_utc_instant,
)
from adwarn.alerts.models import (
    NewAlert,
    RegisterFailure,
    RegisterResult,
    RegisterSuccess,
    SweepResult,
)
from adwarn.alerts.reconciler import AlertReconciler, WarningSource
from adwarn.alerts.repository import AlertRepository
from adwarn.alerts.validity import ValiditySweeper, is_in_force

__all__ = [
    # Constants
    "AD_WRNG_MARKER",
    "DEFAULT_ALERT_TYPE",
    "EMPTY_CONTENT",
    # Classifier
    "determine_alert_severity",
    "extract_icaos_from_warning_text",
    "is_aerodrome_warning",
    "normalize_text",
    # Errors
    "AlertingError",
    "SourceFetchError",
    "StoreError",
    # Factory
    "build_new_alert",
    "to_utc_instant",
    # Models
    "NewAlert",
    "RegisterFailure",
    "RegisterResult",
    "RegisterSuccess",
    "SweepResult",
    # Reconciler
    "AlertReconciler",
    "WarningSource",
    # Repository
    "AlertRepository",
    # Validity
    "ValiditySweeper",
    "is_in_force",
]
