"""Shared configuration for the tuPoint browser suites.

Each value resolves as: environment variable, then ``.env.defaults`` at the
repository root, then the built-in default below.

Set TUPOINT_URL (or the older FLUTTER_URL) to point the suites at a running
Flutter web build. Set TUPOINT_E2E_MOCK=1 to run them against the in-process
mock application instead.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urljoin


PACKAGE_DIR = Path(__file__).resolve().parent
ENV_DEFAULTS_FILE = PACKAGE_DIR.parent / ".env.defaults"
DEFAULT_BASE_URL = "http://localhost:53241"

_TRUTHY = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def env_file_defaults() -> Dict[str, str]:
    """KEY=VALUE pairs from ``ENV_DEFAULTS_FILE``; empty when there is no file.

    Cached for the process. Call ``env_file_defaults.cache_clear()`` after
    pointing ``ENV_DEFAULTS_FILE`` elsewhere.
    """
    try:
        lines = ENV_DEFAULTS_FILE.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return {}

    pairs = (line.strip().partition("=") for line in lines)
    return {
        key.strip(): value.strip().strip("\"'")
        for key, sep, value in pairs
        if sep and key.strip() and not key.startswith("#")
    }


def _setting(key: str, default: str, *aliases: str) -> str:
    for name in (key, *aliases):
        value = os.getenv(name)
        if value:
            return value
    for name in (key, *aliases):
        value = env_file_defaults().get(name)
        if value:
            return value
    return default


def _flag(key: str, default: bool) -> bool:
    return _setting(key, "1" if default else "0").strip().lower() in _TRUTHY


@dataclass
class Viewport:
    width: int = 1280
    height: int = 720

    def as_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


@dataclass
class ArtifactPolicy:
    """Which failure artifacts to keep. Artifacts of passing tests are discarded."""

    trace: bool = True
    video: bool = True
    screenshot: bool = True


@dataclass
class UiTestConfig:
    """Resolved settings for one test process."""

    base_url: str = DEFAULT_BASE_URL
    use_mock: bool = False
    browser_type: str = "chromium"
    playwright_headless: bool = True
    launch_args: List[str] = field(default_factory=list)
    viewport: Viewport = field(default_factory=Viewport)
    action_timeout: int = 10_000
    navigation_timeout: int = 20_000
    expect_timeout: int = 5_000
    settle_delay_ms: int = 1_000
    ci: bool = False
    retries: int = 1
    screenshot_dir: Path = Path("screenshots")
    report_dir: Path = Path("reports")
    artifacts_dir: Path = Path("test-results")
    baseline_dir: Path = PACKAGE_DIR / "baselines"
    update_baselines: bool = False
    artifacts: ArtifactPolicy = field(default_factory=ArtifactPolicy)

    @classmethod
    def from_env(cls) -> "UiTestConfig":
        browser_type = _setting("PLAYWRIGHT_BROWSER", "chromium").lower()
        ci = bool(os.getenv("CI"))
        use_mock = _flag("TUPOINT_E2E_MOCK", False)
        # mock screenshots never match the Flutter build
        baseline_default = PACKAGE_DIR / "baselines" / "mock" if use_mock else PACKAGE_DIR / "baselines"
        launch_args: List[str] = []
        if browser_type == "chromium":
            launch_args = [
                "--disable-web-security",
                "--disable-features=IsolateOrigins,site-per-process",
            ]

        config = cls(
            base_url=_setting("TUPOINT_URL", DEFAULT_BASE_URL, "FLUTTER_URL"),
            use_mock=use_mock,
            browser_type=browser_type,
            playwright_headless=_flag("PLAYWRIGHT_HEADLESS", True),
            launch_args=launch_args,
            viewport=Viewport(
                width=int(_setting("VIEWPORT_WIDTH", "1280")),
                height=int(_setting("VIEWPORT_HEIGHT", "720")),
            ),
            action_timeout=int(_setting("ACTION_TIMEOUT_MS", "10000")),
            navigation_timeout=int(_setting("NAVIGATION_TIMEOUT_MS", "20000")),
            expect_timeout=int(_setting("EXPECT_TIMEOUT_MS", "5000")),
            settle_delay_ms=int(_setting("SETTLE_DELAY_MS", "1000")),
            ci=ci,
            retries=int(_setting("E2E_RETRIES", "2" if ci else "1")),
            screenshot_dir=Path(_setting("SCREENSHOT_DIR", "screenshots")),
            report_dir=Path(_setting("REPORT_DIR", "reports")),
            artifacts_dir=Path(_setting("ARTIFACTS_DIR", "test-results")),
            baseline_dir=Path(_setting("BASELINE_DIR", str(baseline_default))),
            update_baselines=_flag("UPDATE_BASELINES", False),
            artifacts=ArtifactPolicy(
                trace=_flag("CAPTURE_TRACE", True),
                video=_flag("CAPTURE_VIDEO", True),
                screenshot=_flag("CAPTURE_SCREENSHOT", True),
            ),
        )
        print(
            f"[CONFIG] base_url={config.base_url} mock={config.use_mock} "
            f"browser={config.browser_type} headless={config.playwright_headless} "
            f"retries={config.retries}"
        )
        return config

    # ---- utility helpers --------------------------------------------------------
    def url(self, path: str = "/", base_url: Optional[str] = None) -> str:
        """Return an absolute URL for the provided path."""
        base = base_url or self.base_url
        return urljoin(base.rstrip("/") + "/", path.lstrip("/"))

    def context_options(self, base_url: Optional[str] = None) -> dict:
        """Keyword arguments for ``Browser.new_context``."""
        return {
            "base_url": base_url or self.base_url,
            "viewport": self.viewport.as_dict(),
        }


# Singleton instance - initialized on first import
settings = UiTestConfig.from_env()
