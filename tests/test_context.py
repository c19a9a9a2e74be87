"""Tests for the shared benchmark context and fixture loading."""

from __future__ import annotations

import base64
import dataclasses
import io
from pathlib import Path

import pytest
from PIL import Image

from imagebench.context import (
    DEFAULT_TEXT_SAMPLES,
    FIXTURE_FILES,
    create_bench_context,
    stream_to_bytes,
    synthesize_fixture_png,
    to_data_uri,
)
from imagebench.errors import BenchmarkConfigError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestSynthesizedFixtures:
    def test_png_of_requested_size(self):
        data = synthesize_fixture_png(40, 30, seed=1)
        assert data.startswith(PNG_SIGNATURE)
        with Image.open(io.BytesIO(data)) as image:
            assert image.size == (40, 30)
            assert image.mode == "RGB"

    def test_deterministic(self):
        assert synthesize_fixture_png(16, 16, seed=3) == synthesize_fixture_png(
            16, 16, seed=3
        )

    def test_seed_changes_output(self):
        assert synthesize_fixture_png(16, 16, seed=3) != synthesize_fixture_png(
            16, 16, seed=4
        )


class TestCreateBenchContext:
    def test_defaults(self, small_context):
        assert small_context.width == 640
        assert small_context.height == 480
        assert small_context.text_samples == DEFAULT_TEXT_SAMPLES
        assert small_context.buffers.background.startswith(PNG_SIGNATURE)
        assert small_context.data_uris.avatar.startswith("data:image/png;base64,")

    def test_data_uris_match_buffers(self, small_context):
        encoded = small_context.data_uris.badge.split(",", 1)[1]
        assert base64.b64decode(encoded) == small_context.buffers.badge

    def test_font_paths_exist(self, small_context):
        assert Path(small_context.font_paths.regular).is_file()
        assert Path(small_context.font_paths.semibold).is_file()

    def test_frozen(self, small_context):
        with pytest.raises(dataclasses.FrozenInstanceError):
            small_context.width = 10

    def test_streams_are_fresh(self, small_context):
        first = small_context.create_background_stream()
        first.read()
        second = small_context.create_background_stream()
        assert second.read() == small_context.buffers.background
        assert small_context.create_avatar_stream().read() == small_context.buffers.avatar

    @pytest.mark.parametrize("size", [(0, 10), (10, -1)])
    def test_rejects_non_positive_size(self, size):
        with pytest.raises(ValueError, match="must be positive"):
            create_bench_context(width=size[0], height=size[1])

    def test_loads_fixture_directory(self, tmp_path):
        for role, name in FIXTURE_FILES.items():
            (tmp_path / name).write_bytes(synthesize_fixture_png(8, 8, seed=len(role)))
        context = create_bench_context(tmp_path, width=32, height=32)
        assert context.buffers.background == (tmp_path / "background.png").read_bytes()
        assert context.buffers.badge == (tmp_path / "guild.png").read_bytes()

    def test_missing_fixture_is_e2005(self, tmp_path):
        (tmp_path / "background.png").write_bytes(synthesize_fixture_png(8, 8, seed=1))
        with pytest.raises(BenchmarkConfigError, match=r"\[E2005\].*avatar"):
            create_bench_context(tmp_path)

    def test_empty_fixture_is_e2005(self, tmp_path):
        for name in FIXTURE_FILES.values():
            (tmp_path / name).write_bytes(synthesize_fixture_png(8, 8, seed=1))
        (tmp_path / "guild.png").write_bytes(b"")
        with pytest.raises(BenchmarkConfigError, match=r"\[E2005\].*empty"):
            create_bench_context(tmp_path)


class TestHelpers:
    def test_to_data_uri(self):
        assert to_data_uri(b"abc", "image/webp") == "data:image/webp;base64,YWJj"

    def test_stream_to_bytes_chunks(self):
        payload = bytes(range(256)) * 10
        assert stream_to_bytes(io.BytesIO(payload), chunk_size=7) == payload

    def test_stream_to_bytes_empty(self):
        assert stream_to_bytes(io.BytesIO(b"")) == b""
