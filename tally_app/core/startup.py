import logging
import time

from django.db import OperationalError, connection

from core.models import SystemConfig
from core.system_config import ensure_system_config

logger = logging.getLogger(__name__)

_startup_state_ready: bool = False

_STARTUP_MAX_ATTEMPTS: int = 3
_STARTUP_RETRY_BASE_DELAY_SECONDS: float = 2.0


def ensure_startup_state() -> bool:
    """Seed the singleton system configuration once per process.

    Retries up to _STARTUP_MAX_ATTEMPTS times with exponential backoff while
    the database is unreachable. If all attempts fail, logs at ERROR level
    and returns False; the public view stays disabled until the row exists.
    """

    global _startup_state_ready
    if _startup_state_ready:
        return True

    last_exc: Exception | None = None
    for attempt in range(1, _STARTUP_MAX_ATTEMPTS + 1):
        try:
            if SystemConfig._meta.db_table not in connection.introspection.table_names():
                # `migrate` seeds the row through post_migrate instead.
                logger.warning("Startup: schema not migrated; skipping system configuration seed")
                return False
            ensure_system_config()
            _startup_state_ready = True
            return True
        except OperationalError as exc:
            last_exc = exc
            if attempt < _STARTUP_MAX_ATTEMPTS:
                delay = _STARTUP_RETRY_BASE_DELAY_SECONDS * (2 ** (attempt - 1))
                logger.warning(
                    "Startup: database unavailable (attempt %d/%d); retrying in %.0fs",
                    attempt,
                    _STARTUP_MAX_ATTEMPTS,
                    delay,
                    exc_info=True,
                )
                time.sleep(delay)

    logger.error(
        "Startup: database unavailable after %d attempts; system configuration not seeded.",
        _STARTUP_MAX_ATTEMPTS,
        exc_info=last_exc,
    )
    return False


def seed_after_migrate(sender, **kwargs) -> None:
    ensure_system_config()
