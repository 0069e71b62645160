"""
The fixed test plan.

The catalog is plain data: an ordered tuple of ``TestSpec`` values.  The
orchestrator runs specs in the order it is given, so tests can swap in a
smaller synthetic plan without touching the prober or the aggregator.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple


class TestCategory(Enum):
    __test__ = False

    LATENCY = "Latency"
    SPEED = "Speed"


class TestDirection(Enum):
    __test__ = False

    DOWNLOAD = "Download"
    UPLOAD = "Upload"


@dataclass(frozen=True)
class TestSpec:
    """One entry of the test plan."""

    __test__ = False

    name: str
    category: TestCategory
    direction: TestDirection
    payload_bytes: int
    iterations: int

    def __post_init__(self) -> None:
        if self.iterations < 1:
            raise ValueError(f"{self.name}: iterations must be >= 1")
        if self.payload_bytes < 0:
            raise ValueError(f"{self.name}: payload_bytes must be >= 0")
        if self.category is TestCategory.LATENCY and self.payload_bytes != 0:
            raise ValueError(f"{self.name}: latency specs carry no payload")
        if self.category is TestCategory.SPEED and self.payload_bytes == 0:
            raise ValueError(f"{self.name}: speed specs need a payload")

    @property
    def bits(self) -> int:
        return self.payload_bytes * 8

    @property
    def description(self) -> str:
        """Label used for progress bars and listings."""
        if self.category is TestCategory.LATENCY:
            return TestCategory.LATENCY.value
        return f"{self.direction.value} {self.name}"


# ---------------------------------------------------------------------------
# Default plan
# ---------------------------------------------------------------------------

_LATENCY = TestCategory.LATENCY
_SPEED = TestCategory.SPEED
_DOWN = TestDirection.DOWNLOAD
_UP = TestDirection.UPLOAD

DEFAULT_CATALOG: Tuple[TestSpec, ...] = (
    TestSpec("latency", _LATENCY, _DOWN, 0, 20),
    TestSpec("100 kB", _SPEED, _DOWN, 100_000, 10),
    TestSpec("1 MB", _SPEED, _DOWN, 1_000_000, 8),
    TestSpec("10 MB", _SPEED, _DOWN, 10_000_000, 6),
    TestSpec("25 MB", _SPEED, _DOWN, 25_000_000, 4),
    TestSpec("100 kB", _SPEED, _UP, 100_000, 8),
    TestSpec("1 MB", _SPEED, _UP, 1_000_000, 6),
    TestSpec("10 MB", _SPEED, _UP, 10_000_000, 4),
)

_CATEGORY_ORDER = {category: i for i, category in enumerate(TestCategory)}
_DIRECTION_ORDER = {direction: i for i, direction in enumerate(TestDirection)}


def catalog() -> List[TestSpec]:
    """Return the default test plan in execution order."""
    return list(DEFAULT_CATALOG)


def display_order(specs: Iterable[TestSpec]) -> List[TestSpec]:
    """Sort by category, then payload size, then direction (display only)."""
    return sorted(
        specs,
        key=lambda s: (
            _CATEGORY_ORDER[s.category],
            s.payload_bytes,
            _DIRECTION_ORDER[s.direction],
        ),
    )


def total_iterations(specs: Iterable[TestSpec]) -> int:
    return sum(s.iterations for s in specs)
