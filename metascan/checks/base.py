\
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..core.collector import ErrorCollector
from ..core.config import REQUIRED_KEYS
from ..core.models import Document


@dataclass
class ValidationContext:
    """State shared by every check over one run."""

    expected_version: str
    required_keys: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in REQUIRED_KEYS.items()})
    tenet_ids: Optional[Set[str]] = None  # None when the tenets directory is unknown
    seen_ids: Dict[str, str] = field(default_factory=dict)  # id -> first file using it


class CheckPlugin:
    """
    Base class for front-matter checks. Subclasses set NAME, ORDER and KINDS
    at the top and implement ``check``. Findings go straight into the
    collector; a check never raises for bad metadata.
    """
    NAME: str = "base"
    ORDER: int = 100  # checks run in ascending ORDER, then NAME
    KINDS: List[str] = ["tenets", "bindings"]

    def __init__(self) -> None:
        self.context: Optional[ValidationContext] = None

    # Lifecycle hooks
    def begin(self, context: ValidationContext) -> None:
        self.context = context

    def end(self) -> None:
        pass

    def applies_to(self, document: Document) -> bool:
        return document.kind in self.KINDS

    def check(self, document: Document, collector: ErrorCollector) -> None:
        raise NotImplementedError("check must be implemented in subclasses")
