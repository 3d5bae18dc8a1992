from __future__ import annotations
import re
from datetime import date
from typing import Any

from ..core import taxonomy
from ..core.collector import ErrorCollector
from ..core.models import Document
from .base import CheckPlugin
from .bindings import OPTIONAL_KEYS, SLUG_RE

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+$")


def is_valid_date(value: Any) -> bool:
    # unquoted dates arrive from YAML as date objects already
    if isinstance(value, date):
        return True
    if not (isinstance(value, str) and ISO_DATE_RE.match(value)):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


class RequiredFieldsCheck(CheckPlugin):
    NAME = "required"
    ORDER = 10

    def check(self, document: Document, collector: ErrorCollector) -> None:
        required = self.context.required_keys.get(document.kind, [])
        missing = [key for key in required if key not in document.data]
        if not missing:
            return
        collector.add_error(
            document.path,
            type=taxonomy.MISSING_REQUIRED_FIELDS,
            message=f"Missing required keys in YAML front-matter: {', '.join(missing)}",
            suggestion=f"{document.kind.capitalize()} must include: {', '.join(required)}.",
        )


class IdCheck(CheckPlugin):
    NAME = "id"
    ORDER = 20

    def check(self, document: Document, collector: ErrorCollector) -> None:
        doc_id = document.data.get("id")
        line = document.line_map.get("id")

        if isinstance(doc_id, str) and doc_id in self.context.seen_ids:
            collector.add_error(
                document.path,
                line=line,
                field="id",
                type=taxonomy.DUPLICATE_ID,
                message=f"Duplicate ID '{doc_id}' in YAML front-matter (already used in {self.context.seen_ids[doc_id]})",
                suggestion="Each document must have a unique ID. Choose a different ID value.",
            )

        if not (isinstance(doc_id, str) and SLUG_RE.match(doc_id)):
            collector.add_error(
                document.path,
                line=line,
                field="id",
                type=taxonomy.INVALID_ID_FORMAT,
                message=f"Invalid ID format '{doc_id}' in YAML front-matter",
                suggestion="ID must contain only lowercase letters, numbers, and hyphens (e.g., 'example-id').",
            )

        if isinstance(doc_id, str):
            self.context.seen_ids.setdefault(doc_id, document.path)


class LastModifiedCheck(CheckPlugin):
    NAME = "last_modified"
    ORDER = 30

    def check(self, document: Document, collector: ErrorCollector) -> None:
        value = document.data.get("last_modified")
        if is_valid_date(value):
            return
        collector.add_error(
            document.path,
            line=document.line_map.get("last_modified"),
            field="last_modified",
            type=taxonomy.INVALID_DATE_FORMAT,
            message="Invalid date format in 'last_modified' field",
            suggestion="Date must be in ISO format (YYYY-MM-DD) and enclosed in quotes. Example: last_modified: '2025-05-09'",
        )


class VersionCheck(CheckPlugin):
    NAME = "version"
    ORDER = 40

    def check(self, document: Document, collector: ErrorCollector) -> None:
        version = document.data.get("version")
        expected = self.context.expected_version
        line = document.line_map.get("version")

        if version is None or version == "":
            collector.add_error(
                document.path,
                line=line,
                field="version",
                type=taxonomy.MISSING_VERSION,
                message="Missing 'version' field in YAML front-matter",
                suggestion=f"The 'version' field is required and must match the VERSION file. Expected: version: '{expected}'",
            )
        elif not (isinstance(version, str) and SEMVER_RE.match(version)):
            collector.add_error(
                document.path,
                line=line,
                field="version",
                type=taxonomy.INVALID_VERSION_FORMAT,
                message="Invalid version format in YAML front-matter",
                suggestion=f"Version must be a quoted semantic version (e.g., '{expected}').",
            )
        elif version != expected:
            collector.add_error(
                document.path,
                line=line,
                field="version",
                type=taxonomy.VERSION_MISMATCH,
                message="Version mismatch in YAML front-matter",
                suggestion=f"Document version '{version}' does not match VERSION file '{expected}'. Expected: version: '{expected}'",
            )


class UnknownFieldsCheck(CheckPlugin):
    NAME = "unknown_fields"
    ORDER = 80

    def check(self, document: Document, collector: ErrorCollector) -> None:
        allowed = list(self.context.required_keys.get(document.kind, []))
        allowed.extend(OPTIONAL_KEYS.get(document.kind, {}))
        unknown = [str(key) for key in document.data if str(key) not in allowed]
        if not unknown:
            return
        collector.add_error(
            document.path,
            line=document.line_map.get(unknown[0]),
            type=taxonomy.UNKNOWN_FIELDS,
            message=f"Unknown key(s) in YAML front-matter: {', '.join(unknown)}",
            suggestion=f"Only these keys are allowed: {', '.join(allowed)}. Remove unknown keys.",
        )
