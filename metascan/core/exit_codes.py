from __future__ import annotations

from enum import Enum
from typing import Iterable

from .models import Finding
from .taxonomy import is_syntax

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_SYNTAX_ERRORS = 2
EXIT_FIELD_ERRORS = 3


class ExitCodeMode(str, Enum):
    SIMPLE = "simple"
    GRANULAR = "granular"


class ExitCodePolicy:
    """Turns the findings of a run into a process exit code.

    ``simple``: 0 without errors, 1 otherwise.
    ``granular``: 2 when any error is a syntax-class problem, 3 when errors
    are all field-class, 0 without errors.

    Warnings never change the result, and neither does finding order.
    """

    def __init__(self, mode: ExitCodeMode = ExitCodeMode.SIMPLE) -> None:
        self.mode = ExitCodeMode(mode)

    def exit_code(self, findings: Iterable[Finding]) -> int:
        errors = [f for f in findings if f.is_error]
        if not errors:
            return EXIT_OK
        if self.mode is ExitCodeMode.SIMPLE:
            return EXIT_FAILURE
        if any(is_syntax(f.type) for f in errors):
            return EXIT_SYNTAX_ERRORS
        return EXIT_FIELD_ERRORS
