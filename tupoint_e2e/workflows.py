"""Reusable authentication workflows for the tuPoint suites.

Journey: logged out -> signing up / signing in -> profile creation (sign-up
only) -> authenticated feed. The helpers never track that state themselves;
they read it off the page. The form's mode is inferred from which toggle link
is showing, so every helper works whatever mode the form starts in.
"""
from __future__ import annotations

import logging
from typing import Dict, Literal, Optional

from playwright.async_api import Error as PlaywrightError, Locator, Page, expect

from tupoint_e2e.browser import (
    generate_unique_email,
    generate_unique_username,
    is_on_screen,
    wait_for_loading_to_complete,
)
from tupoint_e2e.fixtures import VALID_PASSWORDS
from tupoint_e2e.locators import AUTH, FEED, PROFILE, Timeouts

logger = logging.getLogger(__name__)

AuthMode = Literal["sign_up", "sign_in"]

DEFAULT_PASSWORD = VALID_PASSWORDS["standard"]


async def _visible_now(locator: Locator) -> bool:
    """Non-waiting visibility check for optional UI; lookup failures count as not visible."""
    try:
        return await locator.is_visible()
    except PlaywrightError:
        return False


# ---- form mode ---------------------------------------------------------------

async def ensure_sign_up_mode(page: Page) -> bool:
    """Switch the auth form to sign-up if needed. Returns True if a toggle click happened."""
    toggle = page.get_by_text(AUTH["toggle_sign_up_link"])
    if await _visible_now(toggle):
        await toggle.click()
        logger.debug("Toggled auth form to sign-up mode")
        return True
    return False


async def ensure_sign_in_mode(page: Page) -> bool:
    """Switch the auth form to sign-in if needed. Returns True if a toggle click happened."""
    if await _visible_now(page.get_by_text(AUTH["toggle_sign_up_link"])):
        # the "need an account" link only shows in sign-in mode
        return False
    toggle = page.get_by_text(AUTH["toggle_sign_in_link"])
    if await _visible_now(toggle):
        await toggle.click()
        logger.debug("Toggled auth form to sign-in mode")
        return True
    return False


async def submit_credentials(page: Page, email: str, password: str, mode: AuthMode) -> None:
    """Fill both fields and press the mode's submit button (mode must already be set)."""
    await page.get_by_label(AUTH["email_input"]).fill(email)
    await page.get_by_label(AUTH["password_input"]).fill(password)
    button = AUTH["sign_up_button"] if mode == "sign_up" else AUTH["sign_in_button"]
    await page.get_by_role("button", name=button).click()


async def spinner_appeared(page: Page, timeout: int = 3_000) -> bool:
    """Whether the loading indicator showed up; fast responses can skip it entirely."""
    try:
        await page.get_by_role("progressbar").wait_for(state="visible", timeout=timeout)
    except PlaywrightError:
        return False
    return True


# ---- success paths -----------------------------------------------------------

async def sign_up_with_email(
    page: Page,
    email: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
) -> Dict[str, str]:
    """Create an account. Does not assert where the app routes afterwards."""
    test_email = email or generate_unique_email()

    await expect(page.get_by_text(AUTH["app_title"])).to_be_visible()
    await ensure_sign_up_mode(page)
    await submit_credentials(page, test_email, password, "sign_up")
    await wait_for_loading_to_complete(page)

    logger.debug("Signed up %s", test_email)
    return {"email": test_email, "password": password}


async def sign_in_with_email(page: Page, email: str, password: str) -> None:
    await expect(page.get_by_text(AUTH["app_title"])).to_be_visible()
    await ensure_sign_in_mode(page)
    await submit_credentials(page, email, password, "sign_in")
    await wait_for_loading_to_complete(page)
    logger.debug("Signed in %s", email)


async def complete_profile(
    page: Page,
    username: Optional[str] = None,
    bio: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    test_username = username or generate_unique_username()

    await expect(page.get_by_text(PROFILE["page_title"])).to_be_visible()
    await page.get_by_label(PROFILE["username_input"]).fill(test_username)
    if bio:
        await page.get_by_label(PROFILE["bio_input"]).fill(bio)
    await page.get_by_role("button", name=PROFILE["done_button"]).click()
    await wait_for_loading_to_complete(page)

    logger.debug("Completed profile for %s", test_username)
    return {"username": test_username, "bio": bio}


async def complete_sign_up_flow(
    page: Page,
    email: Optional[str] = None,
    password: Optional[str] = None,
    username: Optional[str] = None,
    bio: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    """Sign up, then create the profile. Returns credentials and profile merged."""
    credentials = await sign_up_with_email(page, email, password or DEFAULT_PASSWORD)
    profile = await complete_profile(page, username, bio)
    return {**credentials, **profile}


# ---- screen probes -----------------------------------------------------------

async def is_authenticated(page: Page, timeout: int = Timeouts.SHORT) -> bool:
    """On the main feed (the "Create Point" button only exists there)."""
    return await is_on_screen(page, FEED["create_point_fab"], timeout)


async def is_on_login_screen(page: Page, timeout: int = Timeouts.SHORT) -> bool:
    return await is_on_screen(page, AUTH["tagline"], timeout)


async def is_on_profile_creation_screen(page: Page, timeout: int = Timeouts.SHORT) -> bool:
    return await is_on_screen(page, PROFILE["welcome_message"], timeout)


# ---- expected-failure paths --------------------------------------------------

async def sign_up_expecting_error(page: Page, email: str, password: str, expected_error: str) -> None:
    """Submit sign-up and fail the scenario unless ``expected_error`` shows up."""
    await ensure_sign_up_mode(page)
    await submit_credentials(page, email, password, "sign_up")
    await page.wait_for_timeout(Timeouts.SHORT)
    await expect(page.get_by_text(expected_error, exact=False)).to_be_visible()


async def sign_in_expecting_error(page: Page, email: str, password: str, expected_error: str) -> None:
    """Submit sign-in and fail the scenario unless ``expected_error`` shows up."""
    await ensure_sign_in_mode(page)
    await submit_credentials(page, email, password, "sign_in")
    await page.wait_for_timeout(Timeouts.SHORT)
    await expect(page.get_by_text(expected_error, exact=False)).to_be_visible()


async def expect_password_helper_text(page: Page) -> None:
    """Sign-up mode shows the password rules under the field."""
    await expect(page.get_by_text(AUTH["password_helper"])).to_be_visible()


async def validate_username(page: Page, username: str, expected_error: str) -> None:
    """Submit ``username`` on the profile screen and expect the inline validation message."""
    await expect(page.get_by_text(PROFILE["page_title"])).to_be_visible()
    await page.get_by_label(PROFILE["username_input"]).fill(username)
    await page.get_by_role("button", name=PROFILE["done_button"]).click()
    await expect(page.get_by_text(expected_error)).to_be_visible()
