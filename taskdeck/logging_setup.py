from __future__ import annotations

import logging
import sys

_QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3", "httpx", "multipart")

def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure process-wide logging:
    - one stderr handler with a timestamped format
    - taskdeck loggers at the configured level
    - chatty third-party loggers held at WARNING

    Safe to call more than once (create_app runs per test).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        if getattr(h, "_taskdeck", False):
            root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch._taskdeck = True  # type: ignore[attr-defined]
    root.addHandler(ch)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
