from adwarn.models.alert_history import AlertHistory, AlertSeverity, AlertStatus
from adwarn.models.favorite import Favorite

__all__ = [
    "AlertHistory",
    "AlertSeverity",
    "AlertStatus",
    "Favorite",
]
