\
from __future__ import annotations
import uuid
from dataclasses import dataclass, field as dc_field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Finding:
    file: str
    type: str  # taxonomy tag; validators may introduce new ones
    message: str
    line: Optional[int] = None  # None means document-level
    field: Optional[str] = None
    suggestion: Optional[str] = None
    severity: Severity = Severity.ERROR
    # raw value of a flagged secret; only ever used to redact output
    secret: Optional[str] = dc_field(default=None, repr=False, compare=False)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "field": self.field,
            "type": self.type,
            "message": self.message,
            "suggestion": self.suggestion,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class ParseError:
    type: str
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    suggestion: Optional[str] = None


@dataclass
class ParseResult:
    data: Optional[Dict[str, Any]]
    line_map: Dict[str, int] = dc_field(default_factory=dict)
    errors: List[ParseError] = dc_field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.data is not None and not self.errors


@dataclass(frozen=True)
class CorrelationContext:
    """Per-invocation id used to tag structured log records."""

    correlation_id: str
    started_at: datetime

    @classmethod
    def new(cls) -> "CorrelationContext":
        return cls(correlation_id=uuid.uuid4().hex, started_at=datetime.now(timezone.utc))

    def elapsed_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self.started_at).total_seconds()


# Detected front-matter forms. Callers match on the concrete class.

@dataclass(frozen=True)
class YamlFrontMatter:
    block: str
    start_line: int  # 1-based line of the block's first line in the document


@dataclass(frozen=True)
class LegacyFrontMatter:
    block: str
    start_line: int


@dataclass(frozen=True)
class NoFrontMatter:
    pass


FrontMatterForm = Union[YamlFrontMatter, LegacyFrontMatter, NoFrontMatter]


@dataclass
class Document:
    """A file whose front matter parsed into a mapping, ready for checks."""

    path: str
    kind: str  # "tenets" or "bindings"
    data: Dict[str, Any]
    line_map: Dict[str, int]
    content: str = ""
