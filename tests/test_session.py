import asyncio
from pathlib import Path

import pytest

from app.core.exceptions import SessionError
from app.domain.models import AutomatorState
from app.meeting_handler.session import BrowserSessionManager
from app.meeting_handler.state import AutomatorStateMachine


@pytest.fixture
def state():
    return AutomatorStateMachine()


@pytest.fixture
def session(automator_config, fake_playwright, state):
    return BrowserSessionManager(
        automator_config,
        on_session_lost=state.session_lost,
        playwright_factory=fake_playwright,
    )


def test_profile_directory_created(session, automator_config):
    assert Path(automator_config.data_dir).is_dir()
    assert session.has_session is False


@pytest.mark.asyncio
async def test_ensure_session_is_idempotent(session, fake_playwright, automator_config):
    await session.ensure_session(headless=True)
    await session.ensure_session(headless=True)

    assert len(fake_playwright.launch_calls) == 1
    launch = fake_playwright.launch_calls[0]
    assert launch["headless"] is True
    assert launch["user_data_dir"] == automator_config.data_dir
    assert launch["viewport"] == {"width": 1440, "height": 900}


@pytest.mark.asyncio
async def test_get_page_reuses_first_tab(session, fake_playwright):
    await session.ensure_session(headless=True)

    page = await session.get_page()

    assert page is fake_playwright.latest.pages[0]
    assert await session.get_page() is page
    assert len(fake_playwright.latest.pages) == 1


@pytest.mark.asyncio
async def test_get_page_without_session_raises(session):
    with pytest.raises(SessionError):
        await session.get_page()


@pytest.mark.asyncio
async def test_launch_failure_raises_session_error(session, fake_playwright):
    fake_playwright.launch_error = RuntimeError("Executable doesn't exist")

    with pytest.raises(SessionError, match="Executable doesn't exist"):
        await session.ensure_session(headless=True)
    assert session.has_session is False


@pytest.mark.asyncio
async def test_browser_crash_resets_meeting_state(session, fake_playwright, state):
    await session.ensure_session(headless=True)
    state.transition(state=AutomatorState.IN_MEETING, in_meeting=True, authenticated=True)

    fake_playwright.latest.simulate_crash()

    assert session.has_session is False
    assert state.state is AutomatorState.AVAILABLE
    assert state.in_meeting is False


@pytest.mark.asyncio
async def test_close_session_is_idempotent(session, fake_playwright):
    await session.ensure_session(headless=True)
    context = fake_playwright.latest

    await session.close_session()
    await session.close_session()

    assert context.close_calls == 1
    assert context.closed is True
    assert session.has_session is False


@pytest.mark.asyncio
async def test_hanging_close_is_bounded(session, fake_playwright, automator_config):
    await session.ensure_session(headless=True)
    fake_playwright.latest.hang_on_close = True

    loop = asyncio.get_running_loop()
    started = loop.time()
    await session.close_session()
    elapsed = loop.time() - started

    budget = automator_config.close_timeout_seconds + automator_config.browser_close_timeout_seconds
    assert elapsed < budget + 0.5
    assert session.has_session is False
    # Persistent contexts have no Browser object; the driver is stopped instead
    assert fake_playwright.stop_calls == 1


@pytest.mark.asyncio
async def test_reopen_after_forced_close(session, fake_playwright):
    await session.ensure_session(headless=True)
    fake_playwright.latest.hang_on_close = True
    await session.close_session()

    await session.ensure_session(headless=True)

    assert session.has_session is True
    assert len(fake_playwright.contexts) == 2


@pytest.mark.asyncio
async def test_stale_context_close_is_ignored(session, fake_playwright, state):
    await session.ensure_session(headless=True)
    stale = fake_playwright.latest
    await session.close_session()
    await session.ensure_session(headless=True)
    state.transition(state=AutomatorState.IN_MEETING, in_meeting=True)

    stale.emit("close", stale)

    assert session.has_session is True
    assert state.in_meeting is True


@pytest.mark.asyncio
async def test_wait_for_new_page(session, fake_playwright):
    await session.ensure_session(headless=True)
    context = fake_playwright.latest

    waiter = asyncio.ensure_future(session.wait_for_new_page(1))
    await asyncio.sleep(0)
    opened = context.open_page("https://app.zoom.us/wc/81234567890/start")

    assert await waiter is opened
    assert await session.wait_for_new_page(0.01) is None


@pytest.mark.asyncio
async def test_stop_shuts_down_playwright(session, fake_playwright):
    await session.ensure_session(headless=True)

    await session.stop()

    assert session.has_session is False
    assert fake_playwright.stop_calls == 1
