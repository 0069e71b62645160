"""
Shared constants used across all cfspeed modules.

Centralises endpoint paths, header names, and tunables so they live in
exactly one place.
"""

APP_NAME = "cfspeedtest"
APP_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = f"{APP_NAME}/{APP_VERSION}"

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
}

SERVER_TIMING_HEADER = "Server-Timing"

META_HEADERS = {
    "asn": "cf-meta-asn",
    "city": "cf-meta-city",
    "colo": "cf-meta-colo",
    "country": "cf-meta-country",
    "ip": "cf-meta-ip",
}

NOT_AVAILABLE = "N/A"

# ---------------------------------------------------------------------------
# Cloudflare speed test endpoints
# ---------------------------------------------------------------------------

BASE_URL = "https://speed.cloudflare.com"
DOWNLOAD_PATH = "/__down"
UPLOAD_PATH = "/__up"

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

DEFAULT_TIMEOUT = 10.0           # seconds, per request
MIN_TIMEOUT = 1.0
MAX_TIMEOUT = 300.0

# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

SPEED_PERCENTILE = 0.9
PRETTY_DIGITS = 2
