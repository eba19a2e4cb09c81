import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import ScopedSettingBase


class NumberFormatSetting(ScopedSettingBase):
    __tablename__ = "customer_number_format_settings"
    __table_args__ = (
        UniqueConstraint("scope", "org_id", "target", name="uq_cnf_scope_org_target"),
        # org_id is NULL for GLOBAL rows, which the constraint above never treats as equal
        Index(
            "uq_cnf_global_target",
            "target",
            unique=True,
            postgresql_where=text("org_id IS NULL"),
            sqlite_where=text("org_id IS NULL"),
        ),
        CheckConstraint("scope IN ('GLOBAL', 'ORG')", name="ck_cnf_scope"),
        CheckConstraint("target IN ('CUSTOMER_NO', 'MANAGEMENT_NO')", name="ck_cnf_target"),
        CheckConstraint(
            "fiscal_year_start_month BETWEEN 1 AND 12", name="ck_cnf_fiscal_year_start_month"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    # scope / org_id inherited from ScopedSettingBase
    target: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    parts: Mapped[list] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    joiner: Mapped[str | None] = mapped_column(String(64), nullable=True)
    fiscal_year_start_month: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
