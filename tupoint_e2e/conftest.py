import logging
import re
import shutil
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from playwright.async_api import expect

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tupoint_e2e.browser import take_screenshot
from tupoint_e2e.config import settings
from tupoint_e2e.playwright_client import BrowserNotInstalled, PlaywrightClient

logger = logging.getLogger(__name__)

expect.set_options(timeout=settings.expect_timeout)


def pytest_configure(config):
    """Apply the configured retry count unless --reruns was given explicitly."""
    if not config.pluginmanager.hasplugin("rerunfailures"):
        return
    if any(arg == "--reruns" or str(arg).startswith("--reruns=") for arg in config.invocation_params.args):
        return
    config.option.reruns = settings.retries


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report as ``item.rep_setup`` / ``rep_call`` / ``rep_teardown``."""
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def _failed(node) -> bool:
    rep = getattr(node, "rep_call", None)
    return rep is not None and rep.failed


def _slug(nodeid: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "-", nodeid).strip("-")[:120]


# ============================================================================
# Application under test
# ============================================================================

@pytest.fixture(scope="session")
def mock_app_server():
    """In-process mock tuPoint app on a free loopback port."""
    from tupoint_e2e.mock_tupoint_app import MockServer, reset_mock_state

    reset_mock_state()
    server = MockServer()
    server.start()

    yield server

    server.stop()
    reset_mock_state()


@pytest.fixture(scope="session")
def target_url(request):
    """Base URL the scenarios run against.

    With TUPOINT_E2E_MOCK=1 this is the in-process mock app. Otherwise the
    configured TUPOINT_URL is probed once and every browser scenario is
    skipped when nothing answers there.
    """
    if settings.use_mock:
        return request.getfixturevalue("mock_app_server").url

    try:
        httpx.get(settings.base_url, timeout=5.0, follow_redirects=True)
    except httpx.HTTPError as exc:
        pytest.skip(
            f"tuPoint app not reachable at {settings.base_url} ({exc}) - "
            "start the web build or set TUPOINT_E2E_MOCK=1"
        )
    return settings.base_url


# ============================================================================
# Browser fixtures
# ============================================================================

@pytest_asyncio.fixture()
async def playwright_client():
    """Create a Playwright client instance; skipped when the browser is not installed."""
    client = PlaywrightClient()
    try:
        await client.connect()
    except BrowserNotInstalled as exc:
        pytest.skip(str(exc))

    yield client

    await client.close()


@pytest_asyncio.fixture()
async def context(request, playwright_client, target_url):
    """Fresh browser context per scenario; trace and video are kept only on failure."""
    artifact_dir = settings.artifacts_dir / _slug(request.node.nodeid)
    options = {}
    if settings.artifacts.video:
        options["record_video_dir"] = str(artifact_dir)
        options["record_video_size"] = settings.viewport.as_dict()

    context = await playwright_client.new_context(target_url, **options)
    if settings.artifacts.trace:
        await context.tracing.start(screenshots=True, snapshots=True)

    yield context

    failed = _failed(request.node)
    if settings.artifacts.trace:
        if failed:
            await context.tracing.stop(path=str(artifact_dir / "trace.zip"))
        else:
            await context.tracing.stop()
    await context.close()

    if failed:
        logger.info("Failure artifacts kept in %s", artifact_dir)
    else:
        shutil.rmtree(artifact_dir, ignore_errors=True)


@pytest_asyncio.fixture()
async def page(request, context):
    """Page in the scenario's context; a failed scenario leaves a full-page screenshot."""
    page = await context.new_page()

    yield page

    if settings.artifacts.screenshot and _failed(request.node) and not page.is_closed():
        await take_screenshot(page, _slug(request.node.name), "failures")
