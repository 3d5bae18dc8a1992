from __future__ import annotations

from typing import Any, List

from ..core import taxonomy
from ..core.collector import ErrorCollector
from ..core.models import Document
from ..core.redaction import is_secret_field
from .base import CheckPlugin


def _flatten_values(obj: Any, out: List[str]) -> None:
    if isinstance(obj, dict):
        for v in obj.values():
            _flatten_values(v, out)
    elif isinstance(obj, list):
        for v in obj:
            _flatten_values(v, out)
    elif obj is not None and str(obj).strip():
        out.append(str(obj))


class PotentialSecretCheck(CheckPlugin):
    # Settings up top
    NAME = "secrets"
    ORDER = 90
    SUGGESTION = (
        "Documentation metadata must not carry credentials.\n"
        "Remove the value and rotate it if it was ever committed."
    )

    def check(self, document: Document, collector: ErrorCollector) -> None:
        for key, value in document.data.items():
            key = str(key)
            if not is_secret_field(key):
                continue
            values: List[str] = []
            _flatten_values(value, values)
            if not values:
                continue
            collector.add_error(
                document.path,
                line=document.line_map.get(key),
                field=key,
                type=taxonomy.POTENTIAL_SECRET,
                message=f"Potential secret field '{key}' found in YAML front-matter",
                suggestion=self.SUGGESTION,
                secret="\n".join(values),
            )
