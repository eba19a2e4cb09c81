"""Number format settings: resolution, create/update, preview and generate.

Formats are edited under optimistic concurrency (the ``version`` column);
serial counters are advanced under pessimistic row locks in
``serial_allocator``.
"""

import logging
import uuid
from datetime import UTC, date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import (
    FormatConflictError,
    FormatDisabledError,
    FormatNotFoundError,
    OrgRequiredError,
    SerialAllocationError,
    VersionConflictError,
)
from app.models.number_format import NumberFormatSetting
from app.schemas.number_format import (
    FormatPart,
    FormatSettingCreate,
    FormatSettingUpdate,
    OrgCodePart,
    PreviewRequest,
    PreviewResponse,
    RenderedPart,
    dump_parts,
    parse_parts,
)
from app.services.format_parts import (
    RenderContext,
    join_fragments,
    render_parts,
    serial_contexts,
)
from app.services.orgs import get_org
from app.services.serial_allocator import allocate_serials

logger = logging.getLogger(__name__)


def _today() -> date:
    return datetime.now(UTC).date()


async def _resolve_org_code(
    db: AsyncSession,
    parts: list[FormatPart],
    org_id: uuid.UUID | None,
) -> str | None:
    """Look up the org code only when the format actually renders one."""
    if not any(isinstance(p, OrgCodePart) for p in parts):
        return None
    if org_id is None:
        raise OrgRequiredError()
    org = await get_org(db, org_id)
    return org.org_code.strip()


async def _render(
    db: AsyncSession,
    parts: list[FormatPart],
    ctx: RenderContext,
    joiner: str | None,
) -> tuple[str, list[tuple[str, str]]]:
    """Preview rendering: never allocates, serials show their would-be-first value."""
    ctx = ctx.with_org_code(await _resolve_org_code(db, parts, ctx.org_id))
    fragments = render_parts(parts, ctx)
    return join_fragments(fragments, joiner), fragments


# ---------------------------------------------------------------------------
# Resolution / CRUD
# ---------------------------------------------------------------------------


async def get_format(db: AsyncSession, setting_id: uuid.UUID) -> NumberFormatSetting:
    result = await db.execute(
        select(NumberFormatSetting).where(NumberFormatSetting.id == setting_id)
    )
    setting = result.scalar_one_or_none()
    if setting is None:
        raise FormatNotFoundError(f"Number format {setting_id} not found")
    return setting


async def get_effective_format(
    db: AsyncSession,
    target: str,
    org_id: uuid.UUID | None = None,
) -> NumberFormatSetting:
    """Return the enabled org override for ``target`` if any, else the global setting."""
    if org_id is not None:
        result = await db.execute(
            select(NumberFormatSetting).where(
                NumberFormatSetting.target == target,
                NumberFormatSetting.scope == "ORG",
                NumberFormatSetting.org_id == org_id,
                NumberFormatSetting.enabled.is_(True),
            )
        )
        setting = result.scalar_one_or_none()
        if setting is not None:
            return setting

    result = await db.execute(
        select(NumberFormatSetting).where(
            NumberFormatSetting.target == target,
            NumberFormatSetting.scope == "GLOBAL",
        )
    )
    setting = result.scalar_one_or_none()
    if setting is None:
        raise FormatNotFoundError(f"No number format configured for {target}")
    return setting


async def create_format(db: AsyncSession, body: FormatSettingCreate) -> NumberFormatSetting:
    """Create a setting; one row per (scope, org, target), never a version chain."""
    if body.org_id is not None:
        await get_org(db, body.org_id)

    org_clause = (
        NumberFormatSetting.org_id == body.org_id
        if body.org_id is not None
        else NumberFormatSetting.org_id.is_(None)
    )
    result = await db.execute(
        select(NumberFormatSetting.id).where(
            NumberFormatSetting.scope == body.scope,
            NumberFormatSetting.target == body.target,
            org_clause,
        )
    )
    if result.scalar_one_or_none() is not None:
        raise FormatConflictError()

    setting = NumberFormatSetting(
        target=body.target,
        scope=body.scope,
        org_id=body.org_id,
        enabled=body.enabled,
        parts=dump_parts(body.parts),
        joiner=body.joiner,
        fiscal_year_start_month=body.fiscal_year_start_month,
        description=body.description,
    )
    db.add(setting)

    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        raise FormatConflictError() from exc

    await db.refresh(setting)
    logger.info(
        "Created number format %s (target=%s scope=%s org=%s)",
        setting.id,
        setting.target,
        setting.scope,
        setting.org_id,
    )
    return setting


async def update_format(
    db: AsyncSession,
    setting_id: uuid.UUID,
    body: FormatSettingUpdate,
) -> NumberFormatSetting:
    """Apply a patch if ``body.version`` still matches the stored version."""
    setting = await get_format(db, setting_id)
    if body.version != setting.version:
        raise VersionConflictError(
            f"Version mismatch: expected {setting.version}, got {body.version}"
        )

    updates = body.model_dump(exclude_unset=True, exclude={"version", "parts"})
    for key, value in updates.items():
        if value is None and key in ("enabled", "fiscal_year_start_month"):
            continue
        setattr(setting, key, value)
    if body.parts is not None:
        setting.parts = dump_parts(body.parts)

    try:
        await db.flush()
    except StaleDataError as exc:
        # Someone else committed between our read and our UPDATE.
        await db.rollback()
        raise VersionConflictError() from exc

    await db.refresh(setting)
    logger.info("Updated number format %s to version %d", setting.id, setting.version)
    return setting


# ---------------------------------------------------------------------------
# Preview / generate
# ---------------------------------------------------------------------------


async def preview(db: AsyncSession, body: PreviewRequest) -> PreviewResponse:
    """Render a stored or draft format without touching any serial counter."""
    on_date = body.sample.date or _today()
    if body.id is not None:
        setting = await get_format(db, body.id)
        parts = parse_parts(setting.parts)
        target = setting.target
        joiner = setting.joiner
        fy_start = setting.fiscal_year_start_month
    else:
        parts = body.config.parts
        target = body.config.target
        joiner = body.config.joiner
        fy_start = body.config.fiscal_year_start_month

    ctx = RenderContext(
        target=target,
        on_date=on_date,
        fiscal_year_start_month=fy_start,
        org_id=body.sample.org_id,
    )
    sample, fragments = await _render(db, parts, ctx, joiner)
    return PreviewResponse(
        sample=sample,
        parts=[RenderedPart(type=t, value=v) for t, v in fragments],
    )


async def generate(
    db: AsyncSession,
    target: str,
    org_id: uuid.UUID | None = None,
    on_date: date | None = None,
) -> str:
    """Allocate serials and render the next code for ``target``.

    Entry point for customer creation and new-customer reservations. The
    allocation runs in a SAVEPOINT on ``db``: if anything fails, no counter
    advances, even when the caller goes on using the session.
    """
    setting = await get_effective_format(db, target, org_id)
    if not setting.enabled:
        raise FormatDisabledError(f"Number format for {target} is disabled")

    parts = parse_parts(setting.parts)
    ctx = RenderContext(
        target=setting.target,
        on_date=on_date or _today(),
        fiscal_year_start_month=setting.fiscal_year_start_month,
        org_id=org_id,
    )
    ctx = ctx.with_org_code(await _resolve_org_code(db, parts, org_id))
    contexts = serial_contexts(parts, ctx)

    try:
        async with db.begin_nested():
            serial_values = await allocate_serials(db, setting.id, contexts)
            value = join_fragments(render_parts(parts, ctx, serial_values), setting.joiner)
    except SQLAlchemyError as exc:
        logger.warning("Serial allocation aborted for format %s: %s", setting.id, exc)
        raise SerialAllocationError() from exc

    return value
