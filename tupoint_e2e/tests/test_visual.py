"""Tests for screenshot baseline comparison (Pillow images, no browser)."""
import io

import pytest
from PIL import Image, ImageDraw

from tupoint_e2e import visual
from tupoint_e2e.config import settings
from tupoint_e2e.visual import capture_and_compare, compare_images


def png_bytes(size=(100, 60), color=(179, 220, 255), block=None) -> bytes:
    """Solid PNG, optionally with a black rectangle ``block=(x0, y0, x1, y1)`` (inclusive)."""
    image = Image.new("RGB", size, color)
    if block:
        ImageDraw.Draw(image).rectangle(block, fill=(0, 0, 0))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class FakePage:
    """Stands in for a Playwright page; returns a fixed screenshot."""

    def __init__(self, image: bytes):
        self.image = image
        self.screenshot_calls = []

    async def screenshot(self, **kwargs):
        self.screenshot_calls.append(kwargs)
        return self.image


@pytest.fixture
def dirs(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "screenshot_dir", tmp_path / "screenshots")
    monkeypatch.setattr(settings, "update_baselines", False)
    baseline_dir = tmp_path / "baselines"
    return baseline_dir, tmp_path / "screenshots" / "diffs"


class TestCompareImages:

    def test_identical_images_pass_with_zero_diff(self, tmp_path):
        baseline = tmp_path / "login-light.png"
        baseline.write_bytes(png_bytes())
        diff_path = tmp_path / "diff.png"

        result = compare_images(png_bytes(), baseline, diff_path, max_diff_pixels=0)

        assert result.passed
        assert result.diff_pixels == 0
        assert not diff_path.exists()

    def test_counts_exact_differing_pixels(self, tmp_path):
        baseline = tmp_path / "login-light.png"
        baseline.write_bytes(png_bytes())
        diff_path = tmp_path / "diff.png"

        # 20 x 10 block
        result = compare_images(png_bytes(block=(10, 10, 29, 19)), baseline, diff_path, max_diff_pixels=100)

        assert result.diff_pixels == 200
        assert not result.passed
        assert diff_path.exists()
        assert "200 pixels differ (allowed 100)" in result.message

    def test_within_tolerance_passes(self, tmp_path):
        baseline = tmp_path / "main-feed-dark.png"
        baseline.write_bytes(png_bytes())

        result = compare_images(png_bytes(block=(0, 0, 9, 9)), baseline, tmp_path / "diff.png", max_diff_pixels=150)

        assert result.passed
        assert result.diff_pixels == 100

    def test_size_mismatch_fails_without_comparison(self, tmp_path):
        baseline = tmp_path / "login-dark.png"
        baseline.write_bytes(png_bytes(size=(100, 60)))
        diff_path = tmp_path / "diff.png"

        result = compare_images(png_bytes(size=(100, 80)), baseline, diff_path, max_diff_pixels=10_000)

        assert not result.passed
        assert result.diff_pixels == -1
        assert "Size mismatch" in result.message
        assert not diff_path.exists()

    def test_missing_baseline_fails(self, tmp_path):
        result = compare_images(png_bytes(), tmp_path / "missing.png", tmp_path / "diff.png", 100)

        assert not result.passed
        assert "Baseline not found" in result.message


class TestCaptureAndCompare:

    @pytest.mark.asyncio
    async def test_first_run_creates_baseline(self, dirs):
        baseline_dir, _ = dirs
        page = FakePage(png_bytes())

        result = await capture_and_compare(page, "login-light.png", 100, baseline_dir=baseline_dir)

        assert result.passed
        assert (baseline_dir / "login-light.png").read_bytes() == page.image
        assert page.screenshot_calls == [{"full_page": True, "animations": "disabled", "caret": "hide"}]

    @pytest.mark.asyncio
    async def test_mismatch_writes_diff_and_current(self, dirs):
        baseline_dir, diff_dir = dirs
        baseline_dir.mkdir(parents=True)
        (baseline_dir / "profile-creation-dark.png").write_bytes(png_bytes())

        result = await capture_and_compare(
            FakePage(png_bytes(block=(0, 0, 49, 29))),
            "profile-creation-dark.png",
            100,
            baseline_dir=baseline_dir,
        )

        assert not result.passed
        assert result.diff_pixels == 1_500
        assert (diff_dir / "profile-creation-dark_diff.png").exists()
        assert (diff_dir / "profile-creation-dark_current.png").exists()

    @pytest.mark.asyncio
    async def test_update_baselines_overwrites(self, dirs, monkeypatch):
        baseline_dir, _ = dirs
        baseline_dir.mkdir(parents=True)
        (baseline_dir / "main-feed-light.png").write_bytes(png_bytes())
        monkeypatch.setattr(settings, "update_baselines", True)
        changed = png_bytes(block=(0, 0, 49, 29))

        result = await capture_and_compare(FakePage(changed), "main-feed-light.png", 150, baseline_dir=baseline_dir)

        assert result.passed
        assert "updated" in result.message
        assert (baseline_dir / "main-feed-light.png").read_bytes() == changed

    def test_threshold_matches_pixelmatch_default(self):
        assert visual.PIXEL_THRESHOLD == 0.1
