"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8080"
USER_AGENT = "pyloctrack/1"

#: Seconds between remote location polls.
DEFAULT_POLL_INTERVAL: float = 3.0

#: aiohttp total timeout for a single HTTP request.
DEFAULT_HTTP_TIMEOUT: float = 30.0

USER_NOT_FOUND_CODES: frozenset[str] = frozenset({"404", "USER_NOT_FOUND"})

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
