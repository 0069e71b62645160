"""
Aggregation of raw samples into the run summary.

``aggregate`` partitions the samples by category and direction and reduces
each partition to a single figure.  Download and upload speed use the 90th
percentile; every latency and jitter figure uses the median and the mean
successive difference.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .api import NetworkMetadata
from .catalog import TestCategory, TestDirection
from .constants import SPEED_PERCENTILE
from .probe import Sample
from .stats import (
    calculate_jitter,
    calculate_median,
    calculate_percentile,
    format_bps,
    format_ms,
)


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SummaryResult:
    """Run statistics.  ``None`` means no samples backed the figure."""

    started_at: datetime
    downloaded_speed: Optional[float] = None     # bits per second
    uploaded_speed: Optional[float] = None
    latency: Optional[float] = None              # milliseconds
    jitter: Optional[float] = None
    downloaded_latency: Optional[float] = None
    downloaded_jitter: Optional[float] = None
    uploaded_latency: Optional[float] = None
    uploaded_jitter: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startedAt": self.started_at.isoformat(),
            "download": self.downloaded_speed,
            "upload": self.uploaded_speed,
            "latency": self.latency,
            "jitter": self.jitter,
            "downLoadedLatency": self.downloaded_latency,
            "downLoadedJitter": self.downloaded_jitter,
            "upLoadedLatency": self.uploaded_latency,
            "upLoadedJitter": self.uploaded_jitter,
        }


@dataclass(frozen=True)
class PrettyResult:
    """String projection of a SummaryResult, fixed at construction."""

    downloaded_speed: str
    uploaded_speed: str
    latency: str
    jitter: str
    downloaded_latency: str
    downloaded_jitter: str
    uploaded_latency: str
    uploaded_jitter: str

    @classmethod
    def from_summary(cls, summary: SummaryResult) -> PrettyResult:
        return cls(
            downloaded_speed=format_bps(summary.downloaded_speed),
            uploaded_speed=format_bps(summary.uploaded_speed),
            latency=format_ms(summary.latency),
            jitter=format_ms(summary.jitter),
            downloaded_latency=format_ms(summary.downloaded_latency),
            downloaded_jitter=format_ms(summary.downloaded_jitter),
            uploaded_latency=format_ms(summary.uploaded_latency),
            uploaded_jitter=format_ms(summary.uploaded_jitter),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "download": self.downloaded_speed,
            "upload": self.uploaded_speed,
            "latency": self.latency,
            "jitter": self.jitter,
            "downLoadedLatency": self.downloaded_latency,
            "downLoadedJitter": self.downloaded_jitter,
            "upLoadedLatency": self.uploaded_latency,
            "upLoadedJitter": self.uploaded_jitter,
        }


@dataclass(frozen=True)
class RunResult:
    """Everything one run produces."""

    meta: NetworkMetadata
    result: SummaryResult
    pretty: PrettyResult

    @classmethod
    def build(cls, meta: NetworkMetadata, summary: SummaryResult) -> RunResult:
        return cls(meta=meta, result=summary, pretty=PrettyResult.from_summary(summary))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meta": self.meta.to_dict(),
            "result": self.result.to_dict(),
            "pretty": self.pretty.to_dict(),
        }


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _select(
    samples: Sequence[Sample],
    category: TestCategory,
    direction: Optional[TestDirection] = None,
) -> List[Sample]:
    """Samples of *category* (and *direction*, if given), in execution order."""
    return [
        s for s in samples
        if s.spec.category is category
        and (direction is None or s.spec.direction is direction)
    ]


def _select_latencies(
    samples: Sequence[Sample],
    category: TestCategory,
    direction: Optional[TestDirection] = None,
) -> List[float]:
    return [s.latency_ms for s in _select(samples, category, direction)]


def _speed(samples: Sequence[Sample], direction: TestDirection) -> Optional[float]:
    speeds = [s.bits_per_second for s in _select(samples, TestCategory.SPEED, direction)]
    if not speeds:
        return None
    return calculate_percentile(speeds, SPEED_PERCENTILE)


def aggregate(samples: Sequence[Sample], started_at: datetime) -> SummaryResult:
    """Reduce the samples of one run to its SummaryResult."""
    latencies = _select_latencies(samples, TestCategory.LATENCY)
    dl_latencies = _select_latencies(samples, TestCategory.SPEED, TestDirection.DOWNLOAD)
    ul_latencies = _select_latencies(samples, TestCategory.SPEED, TestDirection.UPLOAD)

    return SummaryResult(
        started_at=started_at,
        downloaded_speed=_speed(samples, TestDirection.DOWNLOAD),
        uploaded_speed=_speed(samples, TestDirection.UPLOAD),
        latency=calculate_median(latencies),
        jitter=calculate_jitter(latencies),
        downloaded_latency=calculate_median(dl_latencies),
        downloaded_jitter=calculate_jitter(dl_latencies),
        uploaded_latency=calculate_median(ul_latencies),
        uploaded_jitter=calculate_jitter(ul_latencies),
    )
