"""Exception hierarchy for the measurement engine."""


class SpeedTestError(Exception):
    """Base class for every error raised by cfspeed."""


class TransportError(SpeedTestError):
    """An HTTP exchange failed: connection error, timeout or non-2xx status.

    Fatal for a run.  The orchestrator lets it propagate and no result is
    produced.
    """


class StatisticsError(SpeedTestError, ValueError):
    """A statistic was requested for input it is not defined on."""


class EmptyInputError(StatisticsError):
    pass


class PercentileRangeError(StatisticsError):
    pass
