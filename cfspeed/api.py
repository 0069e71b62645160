"""
Cloudflare speed test API client.

Owns the shared HTTP transport.  All HTTP work goes through a single
``aiohttp.ClientSession`` managed via async-context-manager protocol
(``async with SpeedTestClient() as client: ...``), so the connection pool is
released on every exit path, including a failed probe.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import aiohttp

from .catalog import TestSpec
from .constants import (
    BASE_URL,
    COMMON_HEADERS,
    DEFAULT_TIMEOUT,
    META_HEADERS,
    NOT_AVAILABLE,
)
from .probe import Sample, download_url, exchange, probe

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NetworkMetadata:
    """Where the edge thinks the client is, from ``cf-meta-*`` headers."""

    asn: str = NOT_AVAILABLE
    city: str = NOT_AVAILABLE
    colo: str = NOT_AVAILABLE
    country: str = NOT_AVAILABLE
    ip: str = NOT_AVAILABLE

    # -- Constructors -------------------------------------------------------

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> NetworkMetadata:
        values = {
            field: headers.get(header) or NOT_AVAILABLE
            for field, header in META_HEADERS.items()
        }
        return cls(**values)

    # -- Serialisation ------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asn": self.asn,
            "city": self.city,
            "colo": self.colo,
            "country": self.country,
            "ip": self.ip,
        }

    def __str__(self) -> str:
        return (
            f"City: {self.city} Country: {self.country} IP: {self.ip} "
            f"ASN: {self.asn} Colo: {self.colo}"
        )


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

class SpeedTestClient:
    """Async context-manager wrapping the speed test endpoint."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = dict(headers if headers is not None else COMMON_HEADERS)
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> SpeedTestClient:
        self._session = aiohttp.ClientSession(
            headers=self.headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    @property
    def closed(self) -> bool:
        return self._session is None

    # -- Internal helpers ---------------------------------------------------

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "SpeedTestClient must be used as an async context manager "
                "(async with SpeedTestClient() as client: ...)"
            )
        return self._session

    # -- Public methods -----------------------------------------------------

    async def fetch_metadata(self) -> NetworkMetadata:
        """Issue a zero-byte download and read the ``cf-meta-*`` headers."""
        session = self._ensure_session()
        _, headers = await exchange(session, "GET", download_url(self.base_url, 0))
        meta = NetworkMetadata.from_headers(headers)
        LOGGER.debug("Network metadata: %s", meta)
        return meta

    async def probe(self, spec: TestSpec) -> Sample:
        return await probe(self._ensure_session(), spec, self.base_url)
