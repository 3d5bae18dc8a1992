from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, IO, Mapping, Optional

from .config import structured_logging_enabled

DEFAULT_LOGGER_NAME = "metascan"


def configure_logging(verbose: bool = False, logger_name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Configure and return the package logger.

    Makes sure the tool has a configured logger even in script usage where
    ``logging.basicConfig`` was not called. ``verbose`` raises the level to
    INFO.
    """

    logger = logging.getLogger(logger_name)
    level = logging.INFO if verbose else logging.WARNING
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
        )
        logger.addHandler(handler)

    return logger


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class StructuredLogSink:
    """Writes one JSON object per line to a stream (stderr by default).

    Writes are best effort: ``emit`` reports failures to the diagnostic
    logger and returns False instead of raising.
    """

    def __init__(
        self,
        stream: Optional[IO[str]] = None,
        *,
        enabled: Optional[bool] = None,
        environ: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._stream = stream
        self.enabled = structured_logging_enabled(environ) if enabled is None else enabled
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild("structured")

    @property
    def stream(self) -> IO[str]:
        # resolved lazily so pytest's capsys and redirected stderr are honoured
        return self._stream if self._stream is not None else sys.stderr

    def emit(self, record: Dict[str, Any]) -> bool:
        if not self.enabled:
            return False
        try:
            line = json.dumps(record, default=str, sort_keys=False)
            self.stream.write(line + "\n")
            self.stream.flush()
        except Exception as exc:
            self.logger.warning("Structured logging failed: %s", exc)
            return False
        return True
