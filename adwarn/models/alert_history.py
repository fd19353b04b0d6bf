"""SQLAlchemy model for the aerodrome warning history."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from adwarn.db.database import Base


class AlertStatus(str, Enum):
    """Lifecycle status of a stored warning.

    ACTIVE -> EXPIRED happens only through the validity sweep and never
    reverts. ARCHIVED is set by manual housekeeping only.
    """

    ACTIVE = "active"
    EXPIRED = "expired"
    ARCHIVED = "archived"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertHistory(Base):
    """One discrete aerodrome warning occurrence.

    At most one row per (icao, alert_type, content) may be ACTIVE; the
    partial unique index below enforces it at the store level.
    """

    __tablename__ = "alerts_history"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    icao: Mapped[str] = mapped_column(String(4), index=True)
    alert_type: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text)
    status: Mapped[AlertStatus] = mapped_column(
        String(10), default=AlertStatus.ACTIVE, index=True
    )
    severity: Mapped[AlertSeverity] = mapped_column(
        String(10), default=AlertSeverity.MEDIUM, index=True
    )

    # Validity window (UTC), None means unbounded on that side
    valid_from: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    valid_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    raw_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index(
            "uq_alerts_history_active_triple",
            "icao",
            "alert_type",
            "content",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )
