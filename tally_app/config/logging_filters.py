import logging
from collections.abc import Iterable

# Probes plus the endpoints the public dashboard re-polls every few seconds.
DEFAULT_QUIET_PATHS: tuple[str, ...] = (
    "/healthz",
    "/readyz",
    "/api/public/results",
    "/api/public/chart-data",
    "/api/public/audit-feed",
)


class QuietPollingFilter(logging.Filter):
    """Drop successful GET access-log lines for frequently polled endpoints."""

    def __init__(self, paths: Iterable[str] | None = None) -> None:
        super().__init__()
        self.paths = tuple(paths) if paths is not None else DEFAULT_QUIET_PATHS

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if " 200 " not in message:
            return True
        for path in self.paths:
            if f"GET {path} " in message or f"GET {path}?" in message:
                return False
        return True
