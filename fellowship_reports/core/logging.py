"""Process-wide logging setup."""

import logging
import threading

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the root logger; later calls only adjust the level."""

    global _handler
    root = logging.getLogger()
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    with _lock:
        if _handler is None or _handler not in root.handlers:
            _handler = logging.StreamHandler()
            _handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(_handler)

    root.setLevel(resolved)
