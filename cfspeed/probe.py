"""
Single-transfer prober.

One probe is one HTTP exchange against the speed test endpoint:

    download:  GET  {base}/__down?bytes=N
    upload:    POST {base}/__up           (N zero bytes)

The wall-clock time of the whole exchange includes server processing.  The
server reports that processing time in ``Server-Timing`` as
``cfRequestDuration;dur=<ms>``; subtracting it leaves the network latency.
"""
from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import aiohttp
from multidict import CIMultiDictProxy

from .catalog import TestDirection, TestSpec
from .constants import BASE_URL, DOWNLOAD_PATH, SERVER_TIMING_HEADER, UPLOAD_PATH
from .errors import TransportError

LOGGER = logging.getLogger(__name__)

_SERVER_TIMING_RE = re.compile(r"cfRequestDuration;dur=([\d.]+)")


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Sample:
    """Outcome of one probe."""

    spec: TestSpec
    duration: float          # seconds
    latency_ms: float
    bits_per_second: float

    def to_dict(self) -> dict:
        return {
            "name": self.spec.name,
            "category": self.spec.category.value,
            "direction": self.spec.direction.value,
            "duration_ms": round(self.duration * 1000, 3),
            "latency_ms": round(self.latency_ms, 3),
            "bits_per_second": round(self.bits_per_second, 2),
        }


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def parse_server_timing(header: Optional[str]) -> float:
    """Server processing time in ms, or ``0.0`` if absent or malformed."""
    if not header:
        return 0.0
    match = _SERVER_TIMING_RE.search(header)
    if match is None:
        LOGGER.debug("No cfRequestDuration in Server-Timing %r", header)
        return 0.0
    try:
        return float(match.group(1))
    except ValueError:
        LOGGER.debug("Unparsable cfRequestDuration in Server-Timing %r", header)
        return 0.0


def measure(spec: TestSpec, elapsed: float, server_timing: Optional[str]) -> Sample:
    """Turn an elapsed time and the ``Server-Timing`` header into a Sample."""
    server_ms = parse_server_timing(server_timing)
    latency_ms = max(0.0, elapsed * 1000 - server_ms)
    bps = spec.bits / elapsed if spec.bits and elapsed > 0 else 0.0
    return Sample(
        spec=spec,
        duration=elapsed,
        latency_ms=latency_ms,
        bits_per_second=bps,
    )


def download_url(base_url: str, payload_bytes: int) -> str:
    return f"{base_url.rstrip('/')}{DOWNLOAD_PATH}?bytes={payload_bytes}"


def upload_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}{UPLOAD_PATH}"


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------

async def exchange(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    data: Optional[bytes] = None,
) -> Tuple[float, CIMultiDictProxy]:
    """Perform one request, reading the full body.

    Returns ``(elapsed_seconds, response_headers)``.  The clock runs from
    dispatch until the last body byte has been read.
    """
    try:
        start = time.perf_counter()
        async with session.request(method, url, data=data) as resp:
            resp.raise_for_status()
            await resp.read()
            elapsed = time.perf_counter() - start
            return elapsed, resp.headers
    except asyncio.TimeoutError as exc:
        raise TransportError(f"{method} {url} timed out") from exc
    except aiohttp.ClientResponseError as exc:
        raise TransportError(f"{method} {url} returned HTTP {exc.status}") from exc
    except aiohttp.ClientError as exc:
        raise TransportError(f"{method} {url} failed: {exc}") from exc


async def probe(
    session: aiohttp.ClientSession,
    spec: TestSpec,
    base_url: str = BASE_URL,
) -> Sample:
    """Run one transfer for *spec* and return its Sample.

    Raises ``TransportError`` on any network failure; nothing is retried.
    """
    if spec.direction is TestDirection.UPLOAD:
        elapsed, headers = await exchange(
            session, "POST", upload_url(base_url), data=bytes(spec.payload_bytes)
        )
    else:
        elapsed, headers = await exchange(
            session, "GET", download_url(base_url, spec.payload_bytes)
        )

    server_timing = ", ".join(headers.getall(SERVER_TIMING_HEADER, [])) or None
    sample = measure(spec, elapsed, server_timing)
    LOGGER.debug("%s: %s", spec.description, sample.to_dict())
    return sample
