"""
Screenshot baselines for visual regression.

Baseline management:
- First run creates baselines in ``settings.baseline_dir`` (login-light.png, ...)
- Subsequent runs compare against them with pixelmatch
- Set UPDATE_BASELINES=1 to overwrite baselines instead of comparing
- Diff and current images of failed comparisons go to <SCREENSHOT_DIR>/diffs/
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image
from pixelmatch.contrib.PIL import pixelmatch
from playwright.async_api import Page

from tupoint_e2e.config import settings

logger = logging.getLogger(__name__)

# Per-pixel colour distance below which two pixels count as equal (0..1).
PIXEL_THRESHOLD = 0.1


@dataclass
class ComparisonResult:
    passed: bool
    diff_pixels: int
    message: str


def compare_images(
    current_bytes: bytes,
    baseline_path: Path,
    diff_path: Path,
    max_diff_pixels: int,
) -> ComparisonResult:
    """Compare a PNG against its baseline; write a diff image if any pixel differs."""
    if not baseline_path.exists():
        return ComparisonResult(False, -1, f"Baseline not found: {baseline_path}")

    current_img = Image.open(io.BytesIO(current_bytes)).convert("RGBA")
    baseline_img = Image.open(baseline_path).convert("RGBA")

    if current_img.size != baseline_img.size:
        return ComparisonResult(
            False,
            -1,
            f"Size mismatch: current={current_img.size}, baseline={baseline_img.size}",
        )

    diff_img = Image.new("RGBA", current_img.size)
    diff_pixels = pixelmatch(
        baseline_img,
        current_img,
        diff_img,
        threshold=PIXEL_THRESHOLD,
        includeAA=True,
    )

    if diff_pixels > 0:
        diff_path.parent.mkdir(parents=True, exist_ok=True)
        diff_img.save(diff_path)

    passed = diff_pixels <= max_diff_pixels
    message = f"{diff_pixels} pixels differ (allowed {max_diff_pixels})"
    return ComparisonResult(passed, diff_pixels, message)


def save_baseline(image_bytes: bytes, baseline_path: Path) -> None:
    baseline_path.parent.mkdir(parents=True, exist_ok=True)
    baseline_path.write_bytes(image_bytes)


async def capture_and_compare(
    page: Page,
    name: str,
    max_diff_pixels: int,
    full_page: bool = True,
    baseline_dir: Optional[Path] = None,
) -> ComparisonResult:
    """
    Capture the page and compare it with ``<baseline_dir>/<name>``.

    ``name`` includes the extension (``login-light.png``). With no baseline yet
    (or UPDATE_BASELINES set) the capture becomes the baseline and passes.
    """
    baseline_path = (baseline_dir or settings.baseline_dir) / name
    diff_dir = settings.screenshot_dir / "diffs"
    stem = Path(name).stem

    screenshot_bytes = await page.screenshot(
        full_page=full_page,
        animations="disabled",
        caret="hide",
    )

    if settings.update_baselines or not baseline_path.exists():
        action = "updated" if baseline_path.exists() else "created"
        save_baseline(screenshot_bytes, baseline_path)
        logger.info("Baseline %s: %s", action, baseline_path)
        return ComparisonResult(True, 0, f"Baseline {action}: {baseline_path}")

    diff_path = diff_dir / f"{stem}_diff.png"
    result = compare_images(screenshot_bytes, baseline_path, diff_path, max_diff_pixels)

    if not result.passed:
        current_path = diff_dir / f"{stem}_current.png"
        current_path.parent.mkdir(parents=True, exist_ok=True)
        current_path.write_bytes(screenshot_bytes)
        result.message = f"{result.message}. Diff saved to {diff_path}"
        logger.warning("Visual mismatch for %s: %s", name, result.message)

    return result
