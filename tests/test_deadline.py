import asyncio

import pytest

from app.core.exceptions import (
    AuthenticationRequiredError,
    AutomationTimeoutError,
    MeetingStartError,
    is_retryable_timeout,
)
from app.meeting_handler.deadline import Deadline


@pytest.mark.asyncio
async def test_child_never_outlives_parent():
    parent = Deadline(0.1)
    child = parent.child(10)

    assert child.remaining() <= 0.1


@pytest.mark.asyncio
async def test_child_can_be_shorter_than_parent():
    parent = Deadline(10)
    child = parent.child(0.5)

    assert child.remaining() <= 0.5
    assert parent.remaining() > 9


@pytest.mark.asyncio
async def test_unbounded_deadline():
    deadline = Deadline.unbounded()

    assert deadline.remaining() is None
    assert deadline.expired is False
    assert deadline.child(None).remaining() is None
    assert await deadline.run(asyncio.sleep(0, result="done"), "never") == "done"


@pytest.mark.asyncio
async def test_run_raises_timeout_error_with_message():
    deadline = Deadline(0.05)

    with pytest.raises(AutomationTimeoutError, match="Timed out waiting for meeting-start checks"):
        await deadline.run(asyncio.sleep(5), "Timed out waiting for meeting-start checks")


@pytest.mark.asyncio
async def test_expired_deadline_does_not_start_work():
    started = []

    async def step():
        started.append(True)

    deadline = Deadline(0)
    await asyncio.sleep(0.01)

    assert deadline.expired
    with pytest.raises(AutomationTimeoutError):
        await deadline.child(5).run(step(), "Timed out starting new meeting")
    assert started == []


@pytest.mark.parametrize(
    "error,retryable",
    [
        (AutomationTimeoutError("Timed out starting new meeting"), True),
        (RuntimeError("page.goto: Timeout 20000ms exceeded."), True),
        (RuntimeError("goto: Timeout navigating to Zoom home"), True),
        (MeetingStartError("Unable to find a New Meeting button in Zoom web app"), False),
        (AuthenticationRequiredError("Timed out: Zoom login required"), False),
        (RuntimeError("boom"), False),
    ],
)
def test_is_retryable_timeout(error, retryable):
    assert is_retryable_timeout(error) is retryable
