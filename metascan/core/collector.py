from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

from .logs import DEFAULT_LOGGER_NAME, StructuredLogSink, utc_timestamp
from .models import CorrelationContext, Finding, Severity


class ErrorCollector:
    """Ordered, append-only store of validation findings.

    Errors and warnings share one shape and live in separate buckets. The
    collector does not know whether the caller validates one file or many;
    stopping early is the caller's decision.
    """

    def __init__(
        self,
        *,
        tool_name: str = "metascan",
        correlation: Optional[CorrelationContext] = None,
        sink: Optional[StructuredLogSink] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.tool_name = tool_name
        self.correlation = correlation or CorrelationContext.new()
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.sink = sink or StructuredLogSink(logger=base_logger)
        self._errors: List[Finding] = []
        self._warnings: List[Finding] = []

    def add_error(
        self,
        file: str,
        *,
        type: str,
        message: str,
        line: Optional[int] = None,
        field: Optional[str] = None,
        suggestion: Optional[str] = None,
        secret: Optional[str] = None,
    ) -> Finding:
        finding = Finding(
            file=str(file),
            type=type,
            message=message,
            line=line,
            field=field,
            suggestion=suggestion,
            severity=Severity.ERROR,
            secret=secret,
        )
        self._errors.append(finding)
        return finding

    def add_warning(
        self,
        file: str,
        *,
        type: str,
        message: str,
        line: Optional[int] = None,
        field: Optional[str] = None,
        suggestion: Optional[str] = None,
        secret: Optional[str] = None,
    ) -> Finding:
        finding = Finding(
            file=str(file),
            type=type,
            message=message,
            line=line,
            field=field,
            suggestion=suggestion,
            severity=Severity.WARNING,
            secret=secret,
        )
        self._warnings.append(finding)
        return finding

    @property
    def errors(self) -> Tuple[Finding, ...]:
        return tuple(self._errors)

    @property
    def warnings(self) -> Tuple[Finding, ...]:
        return tuple(self._warnings)

    @property
    def findings(self) -> Tuple[Finding, ...]:
        return tuple(self._errors) + tuple(self._warnings)

    def any(self) -> bool:
        return bool(self._errors)

    def count(self) -> int:
        return len(self._errors)

    def files_with_errors(self) -> List[str]:
        seen: Dict[str, None] = {}
        for finding in self._errors:
            seen.setdefault(finding.file, None)
        return list(seen)

    def clear(self) -> None:
        self._errors.clear()
        self._warnings.clear()

    def summary(self) -> Dict[str, Any]:
        by_type: Counter = Counter()
        by_file: Dict[str, Dict[str, int]] = {}
        for finding in self.findings:
            by_type[finding.type] += 1
            bucket = by_file.setdefault(finding.file, {"errors": 0, "warnings": 0})
            bucket["errors" if finding.is_error else "warnings"] += 1
        return {
            "counts": {"errors": len(self._errors), "warnings": len(self._warnings)},
            "by_type": dict(sorted(by_type.items())),
            "by_file": dict(sorted(by_file.items())),
        }

    def log_validation_summary(self) -> Optional[Dict[str, Any]]:
        """Emit one ``validation_summary`` record to the structured sink.

        Advisory only. Nothing raised while building or writing the record
        escapes this call, and the collected findings are left untouched.
        """
        if not self.sink.enabled:
            return None
        try:
            record: Dict[str, Any] = {
                "event": "validation_summary",
                "correlation_id": self.correlation.correlation_id,
                "timestamp": utc_timestamp(),
                "tool": self.tool_name,
                "duration_seconds": round(self.correlation.elapsed_seconds(), 3),
            }
            record.update(self.summary())
        except Exception as exc:
            self.logger.warning("Unable to build validation summary: %s", exc)
            return None
        if not self.sink.emit(record):
            return None
        return record
