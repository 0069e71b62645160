"""Cloudflare speed test engine -- probing, aggregation, and formatting."""

from .api import NetworkMetadata, SpeedTestClient
from .catalog import (
    DEFAULT_CATALOG,
    TestCategory,
    TestDirection,
    TestSpec,
    catalog,
    display_order,
)
from .constants import APP_VERSION as __version__
from .errors import (
    EmptyInputError,
    PercentileRangeError,
    SpeedTestError,
    StatisticsError,
    TransportError,
)
from .probe import Sample, measure, parse_server_timing, probe
from .results import PrettyResult, RunResult, SummaryResult, aggregate
from .runner import NullProgress, ProgressSink, RunConfig, run, run_speed_test
from .stats import (
    calculate_jitter,
    calculate_median,
    calculate_percentile,
    format_bps,
    format_ms,
)

__all__ = [
    "DEFAULT_CATALOG",
    "EmptyInputError",
    "NetworkMetadata",
    "NullProgress",
    "PercentileRangeError",
    "PrettyResult",
    "ProgressSink",
    "RunConfig",
    "RunResult",
    "Sample",
    "SpeedTestClient",
    "SpeedTestError",
    "StatisticsError",
    "SummaryResult",
    "TestCategory",
    "TestDirection",
    "TestSpec",
    "TransportError",
    "__version__",
    "aggregate",
    "calculate_jitter",
    "calculate_median",
    "calculate_percentile",
    "catalog",
    "display_order",
    "format_bps",
    "format_ms",
    "measure",
    "parse_server_timing",
    "probe",
    "run",
    "run_speed_test",
]
