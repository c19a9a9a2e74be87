"""Tests for the backend-neutral scene description."""

from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from imagebench.scene import (
    OVERLAY_STOPS,
    Circle,
    GradientLayer,
    ImageLayer,
    RoundedRect,
    TextRun,
    cover_rect,
    font_path_for,
    gradient_rgba,
    kitchen_sink_scene,
    rgba_to_bytes,
    rgba_to_float,
    rgba_to_hex,
    text_layout_runs,
)

sizes = st.integers(min_value=1, max_value=4000)


class TestCoverRect:
    def test_wide_image(self):
        assert cover_rect(200, 100, 100, 100) == (-50.0, 0.0, 200.0, 100.0)

    def test_tall_image(self):
        assert cover_rect(100, 200, 100, 100) == (0.0, -50.0, 100.0, 200.0)

    def test_same_ratio_fills_exactly(self):
        assert cover_rect(1600, 900, 1280, 720) == pytest.approx((0.0, 0.0, 1280.0, 720.0))

    @given(sizes, sizes, sizes, sizes)
    def test_always_covers_and_is_centered(self, iw, ih, cw, ch):
        x, y, w, h = cover_rect(iw, ih, cw, ch)
        assert w >= cw * (1 - 1e-9)
        assert h >= ch * (1 - 1e-9)
        assert x == pytest.approx((cw - w) / 2, abs=1e-6)
        assert y == pytest.approx((ch - h) / 2, abs=1e-6)
        assert w / h == pytest.approx(iw / ih, rel=1e-9)


class TestGradient:
    def test_shape_and_dtype(self):
        pixels = gradient_rgba(30, 20, OVERLAY_STOPS)
        assert pixels.shape == (20, 30, 4)
        assert pixels.dtype == np.uint8

    def test_corners_match_end_stops(self):
        pixels = gradient_rgba(50, 50, OVERLAY_STOPS)
        assert tuple(pixels[0, 0]) == rgba_to_bytes(OVERLAY_STOPS[0][1])
        # Bottom-right pixel center is just short of t = 1
        np.testing.assert_allclose(
            pixels[-1, -1], rgba_to_bytes(OVERLAY_STOPS[-1][1]), atol=8
        )

    def test_two_stop_midpoint(self):
        stops = ((0.0, (0, 0, 0, 1.0)), (1.0, (200, 100, 50, 1.0)))
        pixels = gradient_rgba(101, 1, stops)
        np.testing.assert_allclose(pixels[0, 50, :3], (99, 50, 25), atol=2)


class TestColors:
    def test_float(self):
        assert rgba_to_float((255, 0, 51, 0.5)) == (1.0, 0.0, 0.2, 0.5)

    def test_bytes(self):
        assert rgba_to_bytes((1, 2, 3, 0.5)) == (1, 2, 3, 128)

    def test_hex(self):
        assert rgba_to_hex((79, 145, 223, 1.0)) == "#4f91df"


class TestKitchenSinkScene:
    def test_primitive_mix(self, small_context):
        scene = kitchen_sink_scene(small_context)
        kinds = [type(p) for p in scene]
        assert kinds.count(ImageLayer) == 3
        assert kinds.count(GradientLayer) == 1
        assert kinds.count(RoundedRect) == 2
        assert kinds.count(Circle) == 2
        assert kinds.count(TextRun) == 5

    def test_background_first_and_covers_canvas(self, small_context):
        background = kitchen_sink_scene(small_context)[0]
        assert background == ImageLayer(
            "background", 0, 0, small_context.width, small_context.height, fit="cover"
        )

    def test_progress_is_fraction_of_track(self, small_context):
        track, progress = [
            p for p in kitchen_sink_scene(small_context) if isinstance(p, RoundedRect)
        ]
        assert progress.width == round(track.width * 0.67)
        assert track.width == small_context.width - 84

    def test_sample_count_in_text(self, small_context):
        texts = [p.text for p in kitchen_sink_scene(small_context) if isinstance(p, TextRun)]
        assert f"samples: {len(small_context.text_samples)}" in texts


class TestTextLayoutRuns:
    def test_two_passes_over_samples(self, small_context):
        runs = text_layout_runs(small_context)
        samples = small_context.text_samples
        assert len(runs) == 2 * len(samples)
        assert [r.text for r in runs[: len(samples)]] == list(samples)
        assert runs[len(samples)].text == f"{samples[0]} :: {len(samples[0])}"

    def test_sizes_and_weights(self, small_context):
        runs = text_layout_runs(small_context)
        half = len(runs) // 2
        assert {(r.size, r.weight) for r in runs[:half]} == {(40, "semibold")}
        assert {(r.size, r.weight) for r in runs[half:]} == {(26, "regular")}

    def test_lines_stack_downward(self, small_context):
        ys = [r.y for r in text_layout_runs(small_context)]
        assert ys == sorted(ys)
        assert len(set(ys)) == len(ys)


def test_font_path_for(small_context):
    assert font_path_for(small_context, "semibold") == small_context.font_paths.semibold
    assert font_path_for(small_context, "regular") == small_context.font_paths.regular
