from __future__ import annotations
import re
from typing import Any, Callable, Dict

from ..core import taxonomy
from ..core.collector import ErrorCollector
from ..core.models import Document
from .base import CheckPlugin

SLUG_RE = re.compile(r"^[a-z0-9-]+$")


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(v, str) and v.strip() for v in value)


# Optional keys with a value rule when present, per document kind
OPTIONAL_KEYS: Dict[str, Dict[str, Callable[[Any], bool]]] = {
    "tenets": {},
    "bindings": {
        "applies_to": _is_string_list,
    },
}


class DerivedFromCheck(CheckPlugin):
    NAME = "derived_from"
    ORDER = 50
    KINDS = ["bindings"]

    def check(self, document: Document, collector: ErrorCollector) -> None:
        derived_from = document.data.get("derived_from")
        line = document.line_map.get("derived_from")
        if not (isinstance(derived_from, str) and SLUG_RE.match(derived_from)):
            collector.add_error(
                document.path,
                line=line,
                field="derived_from",
                type=taxonomy.INVALID_DERIVED_FROM_FORMAT,
                message="Invalid format for 'derived_from' in YAML front-matter",
                suggestion="The 'derived_from' field must be a string containing only lowercase letters, numbers, and hyphens.",
            )

        tenet_ids = self.context.tenet_ids if self.context else None
        if tenet_ids is not None and isinstance(derived_from, str) and derived_from not in tenet_ids:
            collector.add_error(
                document.path,
                line=line,
                field="derived_from",
                type=taxonomy.NONEXISTENT_TENET_REFERENCE,
                message=f"References non-existent tenet '{derived_from}'",
                suggestion="The 'derived_from' field must reference an existing tenet ID. Check docs/tenets/ for available tenets.",
            )


class EnforcedByCheck(CheckPlugin):
    NAME = "enforced_by"
    ORDER = 60
    KINDS = ["bindings"]

    def check(self, document: Document, collector: ErrorCollector) -> None:
        enforced_by = document.data.get("enforced_by")
        if isinstance(enforced_by, str) and enforced_by.strip():
            return
        collector.add_error(
            document.path,
            line=document.line_map.get("enforced_by"),
            field="enforced_by",
            type=taxonomy.INVALID_ENFORCED_BY_FORMAT,
            message="Invalid format for 'enforced_by' in YAML front-matter",
            suggestion="The 'enforced_by' field must be a non-empty string.",
        )


class OptionalFieldsCheck(CheckPlugin):
    NAME = "optional_fields"
    ORDER = 70

    def check(self, document: Document, collector: ErrorCollector) -> None:
        for key, validator in OPTIONAL_KEYS.get(document.kind, {}).items():
            if key not in document.data or validator(document.data[key]):
                continue
            collector.add_error(
                document.path,
                line=document.line_map.get(key),
                field=key,
                type=taxonomy.INVALID_OPTIONAL_FIELD_FORMAT,
                message=f"Invalid format for '{key}' in YAML front-matter",
                suggestion=f"'{key}' must be a non-empty list of strings.",
            )
