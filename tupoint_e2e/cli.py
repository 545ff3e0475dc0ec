"""
Command line runner for the tuPoint browser suites.

Wraps ``pytest.main`` with the suite's execution policy: one worker, list
style output, whole-scenario retries, an HTML report folder and a JSON
results file. Settings are handed to the test process through environment
variables, so anything not given on the command line keeps its
environment/.env.defaults value.

Usage:
    tupoint-e2e                          # live app at $TUPOINT_URL
    tupoint-e2e --mock --headed          # in-process mock app, visible browser
    tupoint-e2e -k sign_in --retries 0   # extra args go straight to pytest
"""
import argparse
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import pytest

if TYPE_CHECKING:
    from tupoint_e2e.config import UiTestConfig

TESTS_DIR = Path(__file__).resolve().parent / "tests"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tupoint-e2e",
        description="Run the tuPoint end-to-end suites (unknown arguments are passed to pytest)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="URL of the tuPoint web build (default: $TUPOINT_URL or http://localhost:53241)",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Run against the in-process mock app instead of a live build",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--browser",
        choices=["chromium", "firefox", "webkit"],
        default=None,
        help="Browser engine (default: $PLAYWRIGHT_BROWSER or chromium)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Re-run a failed scenario up to N times (default: 2 on CI, 1 locally)",
    )
    parser.add_argument(
        "--update-baselines",
        action="store_true",
        help="Overwrite visual baselines instead of comparing",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Folder for the HTML report and JSON results (default: $REPORT_DIR or reports)",
    )
    parser.add_argument(
        "-k",
        dest="keyword",
        default=None,
        help="Only run scenarios matching the pytest keyword expression",
    )
    return parser


def build_environment(args: argparse.Namespace) -> Dict[str, str]:
    """Environment overrides for the test process."""
    env: Dict[str, str] = {}
    if args.base_url:
        env["TUPOINT_URL"] = args.base_url
    if args.mock:
        env["TUPOINT_E2E_MOCK"] = "1"
    if args.headed:
        env["PLAYWRIGHT_HEADLESS"] = "0"
    if args.browser:
        env["PLAYWRIGHT_BROWSER"] = args.browser
    if args.update_baselines:
        env["UPDATE_BASELINES"] = "1"
    if args.retries is not None:
        env["E2E_RETRIES"] = str(args.retries)
    if args.report_dir:
        env["REPORT_DIR"] = args.report_dir
    return env


def build_pytest_args(
    args: argparse.Namespace,
    config: "UiTestConfig",
    passthrough: Sequence[str] = (),
) -> List[str]:
    """pytest arguments for ``config``, the settings resolved after the overrides."""
    report_dir = config.report_dir

    pytest_args = [
        str(TESTS_DIR),
        "-v",
        "-p", "no:xdist",
        f"--reruns={config.retries}",
        f"--html={report_dir / 'index.html'}",
        "--self-contained-html",
        "--json-report",
        f"--json-report-file={report_dir / 'test-results.json'}",
    ]
    if args.keyword:
        pytest_args += ["-k", args.keyword]
    pytest_args += list(passthrough)
    return pytest_args


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args, passthrough = parser.parse_known_args(argv)

    env = build_environment(args)
    os.environ.update(env)
    # settings resolve on first import; the overrides must already be set
    from tupoint_e2e.config import settings

    pytest_args = build_pytest_args(args, settings, passthrough)

    print(f"[RUN] pytest {' '.join(pytest_args)}")
    for key, value in sorted(env.items()):
        print(f"[RUN] {key}={value}")

    return int(pytest.main(pytest_args))


if __name__ == "__main__":
    sys.exit(main())
