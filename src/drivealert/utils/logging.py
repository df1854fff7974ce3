from __future__ import annotations

import logging
from typing import Mapping, Optional


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    levels: Optional[Mapping[str, str]] = None,
) -> None:
    """Configures the root handlers once; ``levels`` tunes single areas such
    as ``drivealert.motion`` without raising the global level."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=_level(level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
    )
    for name, lvl in (levels or {}).items():
        logging.getLogger(str(name)).setLevel(_level(lvl))


def _level(name: str) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)
