from __future__ import annotations

import asyncio

import pytest

from clinic_booking.application.use_cases.slot_refresh import SlotRefreshSession


@pytest.mark.asyncio
async def test_refresh_runs_periodically_until_stopped():
    calls = []

    async def refresh():
        calls.append(1)

    session = SlotRefreshSession(refresh, interval_seconds=0.01)
    session.start()
    session.start()  # second start is a no-op
    await asyncio.sleep(0.1)
    await session.stop()

    assert not session.running
    count = len(calls)
    assert count >= 2

    await asyncio.sleep(0.05)
    assert len(calls) == count


@pytest.mark.asyncio
async def test_failing_refresh_keeps_loop_alive():
    calls = []

    async def refresh():
        calls.append(1)
        raise RuntimeError("network down")

    async with SlotRefreshSession(refresh, interval_seconds=0.01) as session:
        await asyncio.sleep(0.1)
        assert session.running

    assert len(calls) >= 2
    assert not session.running


@pytest.mark.asyncio
async def test_stop_without_start_is_harmless():
    async def refresh():
        pass

    session = SlotRefreshSession(refresh)
    await session.stop()
    assert not session.running
    assert session.interval_seconds == 30.0


def test_interval_must_be_positive():
    async def refresh():
        pass

    with pytest.raises(ValueError):
        SlotRefreshSession(refresh, interval_seconds=0)
