"""
Suite 02: Sign-In Flow

Returning user journey. One user is registered per module before the first
scenario and shared read-only by all of them:

1. **Sign-in** - correct credentials reach the feed
2. **Rejection** - wrong password and unknown account
3. **Loading state** - spinner while the request is in flight
4. **Routing** - no profile creation screen for existing users
"""
import pytest
import pytest_asyncio
from playwright.async_api import expect

from tupoint_e2e.browser import (
    clear_browser_storage,
    generate_unique_email,
    navigate_to_app,
    wait_for_loading_to_complete,
)
from tupoint_e2e.fixtures import EXPECTED_ERRORS, UserCredentials
from tupoint_e2e.locators import AUTH, PROFILE
from tupoint_e2e.outcomes import Outcome, assert_one_of, observe
from tupoint_e2e.playwright_client import BrowserNotInstalled, playwright_session
from tupoint_e2e.workflows import (
    complete_sign_up_flow,
    ensure_sign_in_mode,
    is_authenticated,
    sign_in_expecting_error,
    sign_in_with_email,
    spinner_appeared,
    submit_credentials,
)


@pytest_asyncio.fixture(scope="module", loop_scope="module")
async def existing_user(target_url) -> UserCredentials:
    """Registered user with a completed profile, created once for this module."""
    try:
        async with playwright_session(target_url) as page:
            await navigate_to_app(page)
            created = await complete_sign_up_flow(page)
    except BrowserNotInstalled as exc:
        pytest.skip(str(exc))

    return UserCredentials(
        email=created["email"],
        password=created["password"],
        username=created["username"],
    )


@pytest_asyncio.fixture(autouse=True)
async def fresh_app(page):
    await clear_browser_storage(page)
    await navigate_to_app(page)


class TestSignInFlow:
    """Sign-in for a user who already has a profile."""

    @pytest.mark.asyncio
    async def test_01_existing_user_can_sign_in(self, page, existing_user):
        """2.1 Correct credentials reach the feed."""
        await expect(page.get_by_text(AUTH["app_title"])).to_be_visible()

        await sign_in_with_email(page, existing_user.email, existing_user.password)
        await wait_for_loading_to_complete(page)

        assert await is_authenticated(page), "Sign-in did not reach the feed"
        await expect(page.get_by_text(AUTH["app_title"])).to_be_visible()

    @pytest.mark.asyncio
    async def test_02_wrong_password_shows_error(self, page, existing_user):
        """2.2 Wrong password is refused and the login screen stays."""
        await sign_in_expecting_error(
            page,
            existing_user.email,
            "WrongPassword123",
            EXPECTED_ERRORS["invalid_credentials"],
        )
        await expect(page.get_by_text(AUTH["tagline"])).to_be_visible()

    @pytest.mark.asyncio
    async def test_03_unknown_account_shows_error(self, page):
        """2.3 An address nobody registered is refused the same way."""
        await sign_in_expecting_error(
            page,
            generate_unique_email("nonexistent"),
            "SomePassword123",
            EXPECTED_ERRORS["invalid_credentials"],
        )
        await expect(page.get_by_text(AUTH["tagline"])).to_be_visible()

    @pytest.mark.asyncio
    async def test_04_sign_in_shows_loading_spinner(self, page, existing_user):
        """2.4 The spinner shows while sign-in is in flight (a fast backend may skip it)."""
        await ensure_sign_in_mode(page)
        await submit_credentials(page, existing_user.email, existing_user.password, "sign_in")

        observed = await observe(page, {
            Outcome.SPINNER_SHOWN: spinner_appeared,
            Outcome.AUTHENTICATED: is_authenticated,
        })
        assert_one_of(observed, {Outcome.SPINNER_SHOWN, Outcome.AUTHENTICATED}, "sign-in loading")

    @pytest.mark.asyncio
    async def test_05_sign_in_skips_profile_creation(self, page, existing_user):
        """2.5 Existing users go straight to the feed."""
        await sign_in_with_email(page, existing_user.email, existing_user.password)
        await wait_for_loading_to_complete(page)

        assert await is_authenticated(page), "Sign-in did not reach the feed"
        assert not await page.get_by_text(PROFILE["welcome_message"]).is_visible(), \
            "Existing user was sent to profile creation"
        await expect(page.get_by_text(AUTH["app_title"])).to_be_visible()
