"""Centralized locators for the tuPoint screens.

Flutter web exposes no stable HTML ids, so the suites locate elements by
visible text, ARIA role and accessible label. When UI copy changes, update the
value here and nowhere else.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping


AUTH: Mapping[str, str] = MappingProxyType({
    # branding
    "app_title": "tuPoint",
    "tagline": "what's your point?",
    # email/password form
    "email_input": "Email",
    "password_input": "Password",
    "sign_up_button": "Sign Up",
    "sign_in_button": "Sign In",
    "toggle_sign_up_link": "Need an account? Sign Up",
    "toggle_sign_in_link": "Already have an account? Sign In",
    # OAuth buttons (not configured in the current build)
    "google_sign_in_button": "Sign In with Google (Not Configured)",
    "apple_sign_in_button": "Sign In with Apple (Not Configured)",
    # transient states
    "loading_spinner": "role=progressbar",
    "snackbar": "role=alert",
    "empty_fields_error": "Please enter email and password",
    # form sections
    "create_account_header": "Create Account",
    "sign_in_header": "Sign In",
    "info_text": "After signing up, you'll choose your username",
    "password_helper": "Min 6 chars with uppercase, lowercase, and digit",
})

PROFILE: Mapping[str, str] = MappingProxyType({
    "page_title": "Create Profile",
    "welcome_message": "Welcome to tuPoint!",
    "subtitle": "Pick a username to get started",
    "username_input": "Username",
    "username_placeholder": "@CoolMapMaker_99",
    "bio_input": "Bio (Optional)",
    "bio_placeholder": "Tell others about yourself...",
    "done_button": "Done",
    "loading_spinner": "role=progressbar",
    "username_required": "Username is required",
    "username_too_short": "Username must be at least 3 characters",
    "username_too_long": "Username must be 20 characters or less",
    "username_invalid_chars": "Username can only contain letters, numbers, and underscores",
    "username_helper": "3-20 characters, letters, numbers, underscores only",
    "bio_helper": "Max 280 characters",
})

FEED: Mapping[str, str] = MappingProxyType({
    "app_bar_title": "tuPoint",
    "create_point_fab": "Create Point",
    "point_card": "role=article",
    "point_content": ".point-content",
    "point_username": ".point-username",
    "point_distance": ".point-distance",
    "point_time": ".point-timestamp",
    "like_button": 'role=button[name*="like"]',
    "empty_message": "No points nearby",
    "empty_subtext": "Be the first to drop a point!",
    "loading_indicator": "role=progressbar",
})

THEME: Mapping[str, str] = MappingProxyType({
    "gradient_container": "flt-semantics",
    "point_card": 'flt-semantics[role="article"]',
    "fab": 'role=button[name="Create Point"]',
    "snackbar": "role=alert",
    "alert_css": '[role="alert"]',
})

# Root element Flutter attaches once its engine has booted.
APP_READY_SELECTOR = "flt-glass-pane"


class Timeouts:
    """Wait budgets in milliseconds."""

    SHORT = 2_000       # button clicks, screen probes
    MEDIUM = 5_000      # API round trips
    LONG = 10_000       # page loads
    APP_READY = 15_000  # Flutter engine start-up


def input_by_label(label: str) -> str:
    """Case-insensitive textbox locator for an accessible label."""
    return f'role=textbox[name="{label}"i]'


def button_by_text(text: str) -> str:
    return f'role=button[name="{text}"]'
