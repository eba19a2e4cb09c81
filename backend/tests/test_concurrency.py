"""Concurrent generate calls on one context never share a value."""

import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.serial_counter import SerialCounter
from app.services.number_format import generate
from tests.numbering_helpers import literal, seed_format, serial

pytestmark = [pytest.mark.db, pytest.mark.concurrency]

CALLERS = 10


async def _generate_in_own_transaction(factory: async_sessionmaker[AsyncSession]) -> str:
    async with factory() as session:
        async with session.begin():
            return await generate(session, "CUSTOMER_NO")


@pytest.mark.asyncio
async def test_concurrent_generates_are_distinct_and_gapless(
    session_factory: async_sessionmaker[AsyncSession],
):
    async with session_factory() as session:
        async with session.begin():
            setting = await seed_format(session, [literal("C"), serial(digits=4, step=2)])
            setting_id = setting.id

    values = await asyncio.gather(
        *(_generate_in_own_transaction(session_factory) for _ in range(CALLERS))
    )

    numbers = sorted(int(v[1:]) for v in values)
    assert numbers == list(range(2, 2 * CALLERS + 1, 2))

    async with session_factory() as session:
        result = await session.execute(
            select(SerialCounter).where(SerialCounter.format_setting_id == setting_id)
        )
        counters = result.scalars().all()
    assert len(counters) == 1
    assert counters[0].current_value == 2 * CALLERS


@pytest.mark.asyncio
async def test_concurrent_first_allocation_creates_single_row(
    session_factory: async_sessionmaker[AsyncSession],
):
    """Racing first callers on a fresh context end up sharing one counter row."""
    async with session_factory() as session:
        async with session.begin():
            await seed_format(session, [serial(digits=3, reset_policy="DAILY")])

    values = await asyncio.gather(
        *(_generate_in_own_transaction(session_factory) for _ in range(4))
    )

    assert sorted(values) == ["001", "002", "003", "004"]
    async with session_factory() as session:
        result = await session.execute(select(SerialCounter))
        assert len(result.scalars().all()) == 1
