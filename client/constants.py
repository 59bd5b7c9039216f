"""
Shared constants used by the client runners and the server.

Centralises wire literals, transfer sizes, and tunables so both sides of
the measurement agree on them from exactly one place.
"""

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = "speedtesting/1.0 (+https://speedtesting.deno.dev)"

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
}

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

DEFAULT_SERVER = "https://speedtesting.deno.dev"

WS_PATH = "/ws"
DOWNLOAD_PATH = "/download"
UPLOAD_PATH = "/upload"
STATUS_PATH = "/status"

# ---------------------------------------------------------------------------
# Echo protocol
# ---------------------------------------------------------------------------

PING_MESSAGE = "ping"
PONG_MESSAGE = "pong"

# ---------------------------------------------------------------------------
# Test parameters
# ---------------------------------------------------------------------------

DEFAULT_PING_COUNT = 100
DEFAULT_DOWNLOAD_MEGABYTES = 50
DEFAULT_UPLOAD_MEGABYTES = 50
DEFAULT_DEADLINE_SECONDS = 30

CONNECT_TIMEOUT = 5.0            # seconds to open a socket / websocket
CLOSE_TIMEOUT = 2.0              # seconds to wait for a websocket close

# ---------------------------------------------------------------------------
# Data transfer
# ---------------------------------------------------------------------------

CHUNK_SIZE = 64 * 1024           # 64 KiB streamed per download pull
UNIT_SIZE = 1024 * 1024          # 1 MiB transferred per request
CHUNKS_PER_UNIT = UNIT_SIZE // CHUNK_SIZE

MAX_UPLOAD_BYTES = 1024 * 1024   # per-request upload cap on the server
HIGH_WATER_MARK = 4 * CHUNK_SIZE # transport buffer before the writer drains

DEFAULT_PORT = 8000
DEFAULT_HOST = "0.0.0.0"
