import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class SerialCounter(Base):
    """One row per (format, context key) ever allocated. Never deleted."""

    __tablename__ = "customer_serial_counters"
    __table_args__ = (
        UniqueConstraint("format_setting_id", "context_key", name="uq_csc_format_context"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    format_setting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customer_number_format_settings.id", ondelete="CASCADE"),
        nullable=False,
    )
    context_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    current_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
