"""
Run orchestration.

Probes run strictly one after another, in the order of the plan.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence, Tuple

from .api import SpeedTestClient
from .catalog import DEFAULT_CATALOG, TestSpec
from .constants import BASE_URL, DEFAULT_TIMEOUT
from .probe import Sample
from .results import RunResult, aggregate

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Progress side channel
# ---------------------------------------------------------------------------

class ProgressSink(Protocol):
    """Receives progress notifications, keyed by spec."""

    def start_task(self, spec: TestSpec) -> None: ...

    def increment(self, spec: TestSpec) -> None: ...


class NullProgress:
    """Sink that ignores every notification."""

    def start_task(self, spec: TestSpec) -> None:
        pass

    def increment(self, spec: TestSpec) -> None:
        pass


def _notify(progress: ProgressSink, event: str, spec: TestSpec) -> None:
    try:
        getattr(progress, event)(spec)
    except Exception:  # noqa: BLE001
        LOGGER.warning("Progress sink failed on %s(%s)", event, spec.description, exc_info=True)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RunConfig:
    """Options recognised by ``run_speed_test``."""

    timeout_seconds: float = DEFAULT_TIMEOUT
    base_url: str = BASE_URL
    specs: Tuple[TestSpec, ...] = DEFAULT_CATALOG


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

async def run(
    specs: Sequence[TestSpec],
    client: SpeedTestClient,
    started_at: datetime,
    progress: Optional[ProgressSink] = None,
) -> RunResult:
    """Execute every spec in order and aggregate the samples.

    Any ``TransportError`` propagates and aborts the remaining probes.
    """
    progress = progress or NullProgress()

    meta = await client.fetch_metadata()

    samples: List[Sample] = []
    for spec in specs:
        LOGGER.info("Running %s (%d iterations)", spec.description, spec.iterations)
        _notify(progress, "start_task", spec)
        for _ in range(spec.iterations):
            samples.append(await client.probe(spec))
            _notify(progress, "increment", spec)

    summary = aggregate(samples, started_at)
    LOGGER.info("Collected %d samples", len(samples))
    return RunResult.build(meta, summary)


async def run_speed_test(
    config: Optional[RunConfig] = None,
    progress: Optional[ProgressSink] = None,
    started_at: Optional[datetime] = None,
) -> RunResult:
    """Run a full speed test against the configured endpoint."""
    config = config or RunConfig()
    started_at = started_at or datetime.now(timezone.utc)

    async with SpeedTestClient(
        base_url=config.base_url,
        timeout=config.timeout_seconds,
    ) as client:
        return await run(config.specs, client, started_at, progress)
