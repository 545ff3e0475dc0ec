"""Closed sets of acceptable UI outcomes.

Some behaviours legitimately show up in more than one way: the spinner may be
too quick to catch, an error may be a snackbar or inline text. Scenarios
observe which states are present and assert membership in an explicit set
rather than hand-writing ``a or b`` per test.
"""
from __future__ import annotations

import enum
from typing import Awaitable, Callable, Iterable, Mapping

from playwright.async_api import Error as PlaywrightError, Page

from tupoint_e2e.browser import TextMatcher, is_on_screen
from tupoint_e2e.locators import Timeouts


class Outcome(enum.Enum):
    ALERT_SHOWN = "alert shown"
    TEXT_SHOWN = "text shown"
    SPINNER_SHOWN = "spinner shown"
    PROFILE_SCREEN = "profile creation screen"
    AUTHENTICATED = "authenticated feed"
    LOGIN_SCREEN = "login screen"


Probe = Callable[[Page], Awaitable[bool]]


async def alert_visible(page: Page) -> bool:
    """Snackbar showing right now (no waiting)."""
    try:
        return await page.get_by_role("alert").is_visible()
    except PlaywrightError:
        return False


def text_visible(text: TextMatcher, timeout: int = Timeouts.SHORT) -> Probe:
    """Probe for ``text`` (substring or pattern) becoming visible within ``timeout``."""

    async def probe(page: Page) -> bool:
        return await is_on_screen(page, text, timeout)

    return probe


async def observe(page: Page, probes: Mapping[Outcome, Probe]) -> frozenset:
    """Run each probe in order and return the outcomes that were observed."""
    observed = set()
    for outcome, probe in probes.items():
        if await probe(page):
            observed.add(outcome)
    return frozenset(observed)


def _names(outcomes: Iterable[Outcome]) -> str:
    return ", ".join(sorted(o.value for o in outcomes)) or "nothing"


def assert_one_of(observed: frozenset, acceptable: Iterable[Outcome], scenario: str) -> None:
    acceptable = frozenset(acceptable)
    if not observed & acceptable:
        raise AssertionError(
            f"{scenario}: expected one of [{_names(acceptable)}], observed [{_names(observed)}]"
        )


def assert_none_of(observed: frozenset, forbidden: Iterable[Outcome], scenario: str) -> None:
    hit = observed & frozenset(forbidden)
    if hit:
        raise AssertionError(f"{scenario}: must not reach [{_names(hit)}]")
