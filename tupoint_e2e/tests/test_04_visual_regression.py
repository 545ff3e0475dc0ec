"""
Suite 04: Visual Regression

Full-page screenshots of the login, profile creation and feed screens in
light and dark colour schemes, compared against baselines in
``tupoint_e2e/baselines``.

The first run (or UPDATE_BASELINES=1) records the baselines; later runs fail
when more pixels differ than the screen's tolerance. Diff and current
images of failed comparisons are written to <SCREENSHOT_DIR>/diffs/.
"""
import pytest

from tupoint_e2e.browser import (
    clear_browser_storage,
    navigate_to_app,
    set_color_scheme,
    wait_for_loading_to_complete,
)
from tupoint_e2e.visual import capture_and_compare
from tupoint_e2e.workflows import complete_sign_up_flow, sign_up_with_email

SCREEN_TOLERANCE = 100  # minor font rendering differences
FEED_TOLERANCE = 150    # feed may carry dynamic content

SCHEMES = ["light", "dark"]


async def _prepare(page, scheme: str) -> None:
    await clear_browser_storage(page)
    await set_color_scheme(page, scheme)
    await navigate_to_app(page)


class TestVisualRegression:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scheme", SCHEMES)
    async def test_01_login_screen_matches_baseline(self, page, scheme):
        """4.1 / 4.2 Login screen."""
        await _prepare(page, scheme)

        result = await capture_and_compare(page, f"login-{scheme}.png", SCREEN_TOLERANCE)
        assert result.passed, result.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scheme", SCHEMES)
    async def test_02_profile_creation_matches_baseline(self, page, scheme):
        """4.3 / 4.4 Profile creation screen right after sign-up."""
        await _prepare(page, scheme)
        await sign_up_with_email(page)

        result = await capture_and_compare(page, f"profile-creation-{scheme}.png", SCREEN_TOLERANCE)
        assert result.passed, result.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scheme", SCHEMES)
    async def test_03_main_feed_matches_baseline(self, page, scheme):
        """4.5 / 4.6 Main feed after the full onboarding."""
        await _prepare(page, scheme)
        await complete_sign_up_flow(page)
        await wait_for_loading_to_complete(page)
        await page.wait_for_timeout(1_000)

        result = await capture_and_compare(page, f"main-feed-{scheme}.png", FEED_TOLERANCE)
        assert result.passed, result.message
