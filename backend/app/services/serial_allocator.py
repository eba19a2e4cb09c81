"""Per-context serial counters for number formats.

Uses ``SELECT ... FOR UPDATE`` row locks on ``customer_serial_counters`` to
guarantee that no two callers ever receive the same value for the same
(format, context key). Locks are per row, so different contexts (another
org, another day) never wait on each other.
"""

import logging
import uuid

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.serial_counter import SerialCounter
from app.services.format_parts import SerialContext

logger = logging.getLogger(__name__)


async def _set_lock_timeout(db: AsyncSession) -> None:
    """Bound the wait on a contended counter row (PostgreSQL only).

    ``is_local=true`` scopes the setting to the surrounding transaction.
    """
    if settings.SERIAL_LOCK_TIMEOUT_MS <= 0 or db.get_bind().dialect.name != "postgresql":
        return
    await db.execute(
        text("SELECT set_config('lock_timeout', :timeout, true)"),
        {"timeout": f"{settings.SERIAL_LOCK_TIMEOUT_MS}ms"},
    )


async def _lock_counter(
    db: AsyncSession,
    format_setting_id: uuid.UUID,
    context_key: str,
) -> SerialCounter | None:
    """Select the counter row with an exclusive lock, bypassing the identity map."""
    result = await db.execute(
        select(SerialCounter)
        .where(
            SerialCounter.format_setting_id == format_setting_id,
            SerialCounter.context_key == context_key,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _create_counter(
    db: AsyncSession,
    format_setting_id: uuid.UUID,
    ctx: SerialContext,
) -> SerialCounter:
    """Insert a counter seeded at start_from, or lock the one a concurrent caller created.

    The insert runs in its own SAVEPOINT so a unique violation leaves the
    outer transaction usable for the re-select.
    """
    counter = SerialCounter(
        format_setting_id=format_setting_id,
        context_key=ctx.key,
        current_value=ctx.start_from,
    )
    try:
        async with db.begin_nested():
            db.add(counter)
            await db.flush()
    except IntegrityError:
        logger.warning(
            "Serial counter insert raced for format=%s context=%s; re-selecting",
            format_setting_id,
            ctx.key,
        )
        existing = await _lock_counter(db, format_setting_id, ctx.key)
        if existing is None:
            raise
        return existing

    logger.info("Created serial counter for format=%s context=%s", format_setting_id, ctx.key)
    return counter


async def allocate_serials(
    db: AsyncSession,
    format_setting_id: uuid.UUID,
    contexts: list[SerialContext],
) -> dict[str, int]:
    """Advance each context's counter by its step and return ``{context_key: value}``.

    Must run inside the caller's transaction. Row locks are held until that
    transaction commits or rolls back, so either every context in this call
    advances or none does.
    """
    if not contexts:
        return {}

    await _set_lock_timeout(db)

    values: dict[str, int] = {}
    for ctx in contexts:
        counter = await _lock_counter(db, format_setting_id, ctx.key)
        if counter is None:
            counter = await _create_counter(db, format_setting_id, ctx)

        counter.current_value = counter.current_value + ctx.step
        await db.flush()
        values[ctx.key] = counter.current_value
        logger.debug(
            "Allocated serial %d for format=%s context=%s",
            counter.current_value,
            format_setting_id,
            ctx.key,
        )
    return values
