"""Shared test fixtures for the imagebench test suite.

Fixture Naming Convention
=========================

**Contexts** are built once per session from synthesized fixtures:
    - small_context: 640x480 canvas, the default text samples
    - tiny_context: 64x48 canvas with two text samples, for fast backend loops

**Fake backends** implement the backend protocol without drawing anything, so
runner and suite tests control exactly what each invocation returns:
    - MetricBackend: always returns a metric of 100
    - ImageBackend: returns a small PNG-like payload
    - UnsupportedBackend: rejects configured workloads
    - CrashingBackend: raises a non-recoverable error
    - PrepareCountingBackend: records ``prepare`` calls

**FakeProbe** replaces psutil/tracemalloc sampling with scripted values.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

import pytest
from hypothesis import Phase, Verbosity, settings

from imagebench.context import BenchContext, create_bench_context
from imagebench.errors import UnsupportedWorkloadError
from imagebench.memory import MemorySample
from imagebench.results import ImageResult, MetricResult

# =============================================================================
# Hypothesis Configuration
# =============================================================================
# - "ci": Fast profile for CI pipelines (fewer examples, no deadline)
# - "dev": Standard development profile (moderate examples)
# - "thorough": Full property testing (many examples, for pre-release)

settings.register_profile(
    "ci",
    max_examples=10,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
    verbosity=Verbosity.quiet,
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=5000,
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "thorough",
    max_examples=100,
    deadline=None,
    verbosity=Verbosity.verbose,
)

_profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_profile)


# =============================================================================
# Contexts
# =============================================================================


@pytest.fixture(scope="session")
def small_context() -> BenchContext:
    """640x480 context; large enough that every scene primitive is on canvas."""
    return create_bench_context(width=640, height=480)


@pytest.fixture(scope="session")
def tiny_context() -> BenchContext:
    """Very small canvas for tests that loop real backends many times."""
    return create_bench_context(
        width=64, height=48, text_samples=("Short", "0123456789")
    )


# =============================================================================
# Fake backends
# =============================================================================


class MetricBackend:
    """Returns ``MetricResult(100)`` for every workload."""

    def __init__(self, name: str = "fake-metric", value: float = 100.0) -> None:
        self.name = name
        self.value = value
        self.calls: list[str] = []

    def run(self, context, workload):
        self.calls.append(str(workload))
        return MetricResult(value=self.value)


class ImageBackend:
    """Returns a fixed-size image payload for every workload."""

    def __init__(
        self, name: str = "fake-image", size: int = 2048, image_format: str = "png"
    ) -> None:
        self.name = name
        self.payload = b"\x89PNG" + b"\x00" * (size - 4)
        self.image_format = image_format
        self.calls = 0

    def run(self, context, workload):
        self.calls += 1
        return ImageResult(payload=self.payload, format=self.image_format)


class UnsupportedBackend:
    """Raises ``UnsupportedWorkloadError`` for the configured workloads."""

    def __init__(
        self,
        name: str = "fake-unsupported",
        unsupported: Iterable[str] | None = None,
        fail_on_call: int = 1,
    ) -> None:
        self.name = name
        self.unsupported = None if unsupported is None else set(unsupported)
        self.fail_on_call = fail_on_call
        self.calls = 0

    def run(self, context, workload):
        self.calls += 1
        rejected = self.unsupported is None or str(workload) in self.unsupported
        if rejected and self.calls >= self.fail_on_call:
            raise UnsupportedWorkloadError(str(workload), "not available here")
        return MetricResult(value=1.0)


class CrashingBackend:
    """Raises ``RuntimeError`` on the first invocation."""

    def __init__(self, name: str = "fake-crash") -> None:
        self.name = name

    def run(self, context, workload):
        raise RuntimeError("renderer exploded")


class PrepareCountingBackend(MetricBackend):
    """Metric backend that counts ``prepare`` calls and when they happen."""

    def __init__(self, name: str = "fake-prepare", events: list[str] | None = None) -> None:
        super().__init__(name=name)
        self.prepare_calls = 0
        self.events = events if events is not None else []

    def prepare(self, context):
        self.prepare_calls += 1
        self.events.append(f"prepare {self.name}")

    def run(self, context, workload):
        self.events.append(f"run {self.name} {workload}")
        return super().run(context, workload)


class FakeProbe:
    """Memory probe returning scripted samples.

    ``samples`` are consumed in order; the last one repeats once exhausted.
    """

    def __init__(self, samples: Iterable[tuple[int, int]] = ((0, 0),)) -> None:
        self._samples = [MemorySample(rss=rss, heap=heap) for rss, heap in samples]
        self._index = 0
        self.collections = 0

    def sample(self) -> MemorySample:
        sample = self._samples[min(self._index, len(self._samples) - 1)]
        self._index += 1
        return sample

    def collect(self) -> None:
        self.collections += 1


@pytest.fixture
def fake_probe() -> FakeProbe:
    return FakeProbe()
