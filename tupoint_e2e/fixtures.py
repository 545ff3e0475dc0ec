"""Test data shared by the tuPoint suites.

Tables are read-only mappings from a label to a literal value so scenarios can
drive negative paths from them (``INVALID_USERNAMES["too_short"]``). Generated
users embed a process-unique stamp so repeated runs against the same backend
never collide on email or username.
"""
from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import List, Mapping, Optional, Pattern


@dataclass(frozen=True)
class UserCredentials:
    email: str
    password: str
    username: str
    bio: Optional[str] = None


@dataclass(frozen=True)
class ThemePalette:
    """Colour constants of one theme variant (hex, as the design tokens list them)."""

    name: str
    location_blue: str
    background_start: str
    background_end: str
    card_background: str
    accent: str


VALID_CREDENTIALS = UserCredentials(
    email="testuser@example.com",
    password="ValidPass123",
    username="test_user_valid",
    bio="I am a test user for automated testing",
)

INVALID_EMAILS: Mapping[str, str] = MappingProxyType({
    "missing_at": "invalid.email.com",
    "missing_domain": "invalid@",
    "missing_username": "@example.com",
    "spaces": "test user@example.com",
    "special_chars": "test!user@example.com",
})

INVALID_PASSWORDS: Mapping[str, str] = MappingProxyType({
    "too_short": "12345",          # below the 6 character minimum
    "no_uppercase": "testpass123",
    "no_lowercase": "TESTPASS123",
    "no_number": "TestPassword",
    "only_letters": "TestPass",
    "empty": "",
})

VALID_PASSWORDS: Mapping[str, str] = MappingProxyType({
    "standard": "TestPass123",
    "with_special": "Test@Pass123",
    "long": "VeryLongTestPassword123",
    "minimum": "Aa1bcd",
})

INVALID_USERNAMES: Mapping[str, str] = MappingProxyType({
    "too_short": "ab",
    "too_long": "a" * 21,
    "with_spaces": "test user",
    "with_special": "test@user",
    "with_hyphen": "test-user",
    "empty": "",
})

VALID_USERNAMES: Mapping[str, str] = MappingProxyType({
    "short": "abc",
    "long": "a" * 20,
    "with_underscore": "test_user_99",
    "with_numbers": "user123",
    "mixed": "Test_User_2024",
})

VALID_BIOS: Mapping[str, str] = MappingProxyType({
    "short": "Hello!",
    "medium": "I love dropping points on the map and exploring my neighborhood.",
    "long": "A" * 280,
    "with_emoji": "Map enthusiast \U0001F5FA️ | Explorer \U0001F9ED | Point dropper \U0001F4CD",
    "multiline": "Line 1\nLine 2\nLine 3",
})

TEST_POINTS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "nearby": MappingProxyType({"content": "Test point nearby", "distance": "50m"}),
    "far": MappingProxyType({"content": "Test point far away", "distance": "4.5km"}),
    "recent": MappingProxyType({"content": "Just dropped!", "timestamp": "Just now"}),
    "old": MappingProxyType({"content": "Posted a while ago", "timestamp": "2 hours ago"}),
})

EXPECTED_ERRORS: Mapping[str, str] = MappingProxyType({
    # auth
    "invalid_credentials": "Invalid login credentials",
    "user_already_exists": "User already registered",
    "weak_password": "Password should be at least 6 characters",
    "invalid_email": "Invalid email",
    "empty_fields": "Please enter email and password",
    # profile
    "username_required": "Username is required",
    "username_too_short": "Username must be at least 3 characters",
    "username_too_long": "Username must be 20 characters or less",
    "username_invalid_chars": "Username can only contain letters, numbers, and underscores",
    "username_taken": "Username already taken",
    # network
    "network_error": "Network request failed",
    "timeout": "Request timed out",
})

# Wording varies between backend and inline validators; a bare field label
# ("Password", "Email") never matches.
ERROR_PATTERNS: Mapping[str, Pattern[str]] = MappingProxyType({
    "weak_password": re.compile(r"password.*(at least|must|should|weak)", re.I),
    "invalid_email": re.compile(r"(invalid|valid).*email|email.*(invalid|format)", re.I),
})

THEME_COLORS: Mapping[str, ThemePalette] = MappingProxyType({
    "light": ThemePalette(
        name="light",
        location_blue="#3A9BFC",
        background_start="#B3DCFF",
        background_end="#D6EEFF",
        card_background="#F0F7FF",
        accent="#99CCFF",
    ),
    "dark": ThemePalette(
        name="dark",
        location_blue="#66B8FF",
        background_start="#0F1A26",
        background_end="#1A2836",
        card_background="#1A2836",
        accent="#66B8FF",
    ),
})


# ---- unique identifiers ------------------------------------------------------

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
MAX_USERNAME_LENGTH = 20
_stamp_lock = threading.Lock()
_last_stamp = 0


def unique_stamp() -> int:
    """Millisecond timestamp, strictly increasing within this process."""
    global _last_stamp
    with _stamp_lock:
        stamp = max(int(time.time() * 1000), _last_stamp + 1)
        _last_stamp = stamp
        return stamp


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    digits = []
    while True:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
        if value == 0:
            break
    return "".join(reversed(digits))


def unique_suffix() -> str:
    """Short process-unique token; 8 characters for current timestamps."""
    return to_base36(unique_stamp())


def fit_username(prefix: str, suffix: str) -> str:
    """Join ``prefix`` and ``suffix``, shortening the prefix so the result fits the app's limit."""
    room = MAX_USERNAME_LENGTH - len(suffix) - 1
    return f"{prefix[:max(room, 1)]}_{suffix}"


def generate_test_user(index: int = 0) -> UserCredentials:
    suffix = unique_suffix()
    return UserCredentials(
        email=f"testuser{index}_{suffix}@test.tupoint.local",
        password=VALID_PASSWORDS["standard"],
        username=fit_username(f"testuser{index}", suffix),
        bio=f"Test user #{index} created at {datetime.now(timezone.utc).isoformat()}",
    )


def generate_test_users(count: int) -> List[UserCredentials]:
    return [generate_test_user(i) for i in range(count)]
