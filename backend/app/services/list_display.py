"""Customer list display settings (which number columns the UI shows).

Same resolution rule as number formats: an org row overrides the global row.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import VersionConflictError
from app.models.list_display import ListDisplaySetting
from app.schemas.list_display import ListDisplayUpsert
from app.services.orgs import get_org

logger = logging.getLogger(__name__)


async def _find(
    db: AsyncSession,
    scope: str,
    org_id: uuid.UUID | None,
) -> ListDisplaySetting | None:
    org_clause = (
        ListDisplaySetting.org_id == org_id
        if org_id is not None
        else ListDisplaySetting.org_id.is_(None)
    )
    result = await db.execute(
        select(ListDisplaySetting).where(ListDisplaySetting.scope == scope, org_clause)
    )
    return result.scalar_one_or_none()


async def get_list_display(
    db: AsyncSession,
    org_id: uuid.UUID | None = None,
) -> ListDisplaySetting:
    """Org override, else global, else an unsaved default (customer no. shown only)."""
    if org_id is not None:
        setting = await _find(db, "ORG", org_id)
        if setting is not None:
            return setting

    setting = await _find(db, "GLOBAL", None)
    if setting is not None:
        return setting

    return ListDisplaySetting(
        scope="GLOBAL",
        org_id=None,
        show_customer_no=True,
        show_management_no=False,
    )


async def upsert_list_display(db: AsyncSession, body: ListDisplayUpsert) -> ListDisplaySetting:
    if body.org_id is not None:
        await get_org(db, body.org_id)

    setting = await _find(db, body.scope, body.org_id)
    if setting is None:
        setting = ListDisplaySetting(
            scope=body.scope,
            org_id=body.org_id,
            show_customer_no=body.show_customer_no,
            show_management_no=body.show_management_no,
        )
        db.add(setting)
    else:
        if body.if_match_version is not None and body.if_match_version != setting.version:
            raise VersionConflictError(
                f"Version mismatch: expected {setting.version}, got {body.if_match_version}"
            )
        setting.show_customer_no = body.show_customer_no
        setting.show_management_no = body.show_management_no

    try:
        await db.flush()
    except (IntegrityError, StaleDataError) as exc:
        await db.rollback()
        raise VersionConflictError("List display setting was changed concurrently") from exc

    await db.refresh(setting)
    logger.info(
        "Saved list display setting %s (scope=%s org=%s)", setting.id, setting.scope, setting.org_id
    )
    return setting
