"""Root logger configuration for the CLI process."""

from __future__ import annotations

import logging
import logging.handlers

from ims.infrastructure.config import Settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(settings: Settings) -> None:
    """Log to stderr, and to a rotating file when ``LOG_FILE`` is set.

    Safe to call more than once: handlers are only added on the first call.
    """
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())
    fmt = logging.Formatter(_FORMAT)

    if not any(getattr(h, "_ims_handler", False) for h in root.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(fmt)
        stream._ims_handler = True  # type: ignore[attr-defined]
        root.addHandler(stream)

        if settings.LOG_FILE is not None:
            log_path = settings.LOG_FILE.expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(
                log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
            )
            handler.setFormatter(fmt)
            handler._ims_handler = True  # type: ignore[attr-defined]
            root.addHandler(handler)
