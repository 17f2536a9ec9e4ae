from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

# Driver libraries log every statement at INFO.
_NOISY_LOGGERS = ("databricks.sql", "urllib3", "psycopg")


def configure_logging(level: str, stream: TextIO | None = None) -> None:
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=stream or sys.stderr,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))


def log_extra(**kwargs: Any) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}
