from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from diet_tracker.core.db import Base, utcnow


class DietLog(Base):
    __tablename__ = "diet_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, comment="Free-form, not a foreign key")
    food_name: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Naive UTC, matching TIMESTAMP WITHOUT TIME ZONE.
    logged_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=utcnow(), comment="When the food was eaten"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=utcnow())

    __table_args__ = (
        Index("ix_diet_logs_user_id_logged_at", "user_id", "logged_at"),
    )
