"""Key-value record holding one piece of widget state as JSON text."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from luckydraw.models.base import Base


class StateRecord(Base):
    """One persisted state entry (e.g. the winner list)."""

    __tablename__ = "lottery_state"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )
