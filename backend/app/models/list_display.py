import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, UniqueConstraint, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import ScopedSettingBase


class ListDisplaySetting(ScopedSettingBase):
    __tablename__ = "customer_list_display_settings"
    __table_args__ = (
        UniqueConstraint("scope", "org_id", name="uq_clds_scope_org"),
        Index(
            "uq_clds_global",
            "scope",
            unique=True,
            postgresql_where=text("org_id IS NULL"),
            sqlite_where=text("org_id IS NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    # scope / org_id inherited from ScopedSettingBase
    show_customer_no: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_management_no: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
