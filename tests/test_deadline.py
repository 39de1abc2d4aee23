import asyncio

import pytest

from utils import deadline
from utils.deadline import DeadlineExceeded, race_deadline


def test_returns_result_when_call_settles_first():
    async def quick():
        return "done"

    assert asyncio.run(race_deadline(quick(), 1.0)) == "done"


def test_propagates_error_raised_before_deadline():
    async def broken():
        raise LookupError("boom")

    with pytest.raises(LookupError):
        asyncio.run(race_deadline(broken(), 1.0))


def test_deadline_wins_and_slow_call_is_left_running():
    async def scenario():
        finished = asyncio.Event()

        async def slow():
            await asyncio.sleep(0.05)
            finished.set()
            return "late"

        with pytest.raises(DeadlineExceeded) as excinfo:
            await race_deadline(slow(), 0.01)
        assert excinfo.value.seconds == 0.01

        # The abandoned call is not cancelled; it completes on its own.
        await asyncio.wait_for(finished.wait(), timeout=1.0)

    asyncio.run(scenario())


def test_cancelled_caller_still_retrieves_late_failure():
    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()

        async def failing():
            started.set()
            await release.wait()
            raise LookupError("late")

        inner = asyncio.ensure_future(failing())
        outer = asyncio.ensure_future(race_deadline(inner, 5.0))
        await started.wait()
        outer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await outer

        assert not inner.cancelled()
        assert inner in deadline._ABANDONED
        release.set()
        await asyncio.wait({inner})
        await asyncio.sleep(0)
        assert inner not in deadline._ABANDONED

    asyncio.run(scenario())
