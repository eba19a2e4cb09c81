import uuid

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ScopedSettingBase(Base):
    """Abstract base for GLOBAL/ORG scoped settings. Adds scope + nullable org_id FK.

    org_id is set iff scope == 'ORG'.
    """

    __abstract__ = True

    scope: Mapped[str] = mapped_column(String(16), nullable=False)
    org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("orgs.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
