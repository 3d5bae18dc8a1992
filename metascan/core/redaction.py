from __future__ import annotations

import re
from typing import Iterable, List, Optional, Pattern

REDACTION_MARKER = "[REDACTED]"

SECRET_FIELD_KEYWORDS = [
    r"password",
    r"passphrase",
    r"passwd",
    r"secret",
    r"credential(?:s)?",
    r"connection[_\- ]?string",
    r"api[_\- ]?key",
    r"access[_\- ]?key",
    r"auth[_\- ]?key",
    r"private[_\- ]?key",
    r"ssh[_\- ]?key",
    r"encryption[_\- ]?key",
    r"token",
    r"bearer",
    r"oauth",
    r"jwt",
]

SECRET_FIELD_RE: Pattern[str] = re.compile(
    "|".join(f"(?:{kw})" for kw in SECRET_FIELD_KEYWORDS), re.IGNORECASE
)

_BLOCK_SCALAR_INDICATORS = ("|", ">", "|-", ">-", "|+", ">+")


def is_secret_field(name: Optional[str]) -> bool:
    """True when a field name looks like it holds a credential.

    Only the name is inspected, so any validator can compose with
    redaction without knowing how the value is typed.
    """
    if not isinstance(name, str) or not name:
        return False
    return SECRET_FIELD_RE.search(name) is not None


def secret_variants(value: Optional[str]) -> List[str]:
    """The value itself plus every non-empty line of a multi-line value."""
    if value is None:
        return []
    value = str(value)
    if not value.strip():
        return []
    variants = [value]
    if "\n" in value:
        for line in value.splitlines():
            line = line.strip()
            if line and line not in variants:
                variants.append(line)
    return variants


def _strip_quotes(raw: str) -> str:
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
        return raw[1:-1]
    return raw


def extract_field_value(lines: List[str], line: int, field: str) -> Optional[str]:
    """Best-effort read of ``field``'s raw value declared at 1-based ``line``.

    Handles inline scalars and ``|``/``>`` block scalars. Returns None when the
    line does not declare the field.
    """
    if not 1 <= line <= len(lines):
        return None
    match = re.match(rf"^(\s*){re.escape(field)}\s*:\s*(.*?)\s*$", lines[line - 1])
    if match is None:
        return None
    indent, raw = len(match.group(1)), match.group(2)
    if raw.split("#", 1)[0].strip() in _BLOCK_SCALAR_INDICATORS:
        body = []
        for follow in lines[line:]:
            if follow.strip() and len(follow) - len(follow.lstrip()) <= indent:
                break
            body.append(follow.strip())
        while body and not body[-1]:
            body.pop()
        return "\n".join(body) or None
    value = _strip_quotes(raw)
    return value or None


class Redactor:
    """Replaces every known secret value with ``REDACTION_MARKER``."""

    def __init__(self, values: Iterable[Optional[str]] = (), marker: str = REDACTION_MARKER) -> None:
        self.marker = marker
        self._values: List[str] = []
        for value in values:
            self.add(value)

    def add(self, value: Optional[str]) -> None:
        for variant in secret_variants(value):
            if variant not in self._values and variant != self.marker:
                self._values.append(variant)
        # longest first so a value is never half-replaced by one of its lines
        self._values.sort(key=len, reverse=True)

    @property
    def values(self) -> List[str]:
        return list(self._values)

    def __bool__(self) -> bool:
        return bool(self._values)

    def redact(self, text: Optional[str]) -> Optional[str]:
        if not text or not self._values:
            return text
        for value in self._values:
            if value in text:
                text = text.replace(value, self.marker)
        return text


SECRET_DECLARATION_RE: Pattern[str] = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_-]*)\s*:")


def declared_secret_values(lines: List[str], first_line: int = 1, last_line: Optional[int] = None) -> List[str]:
    """Values of every secret-named key declared between two 1-based lines.

    Works on raw text, so it still finds values in blocks that fail to parse.
    """
    last_line = len(lines) if last_line is None else min(last_line, len(lines))
    values: List[str] = []
    for number in range(max(first_line, 1), last_line + 1):
        match = SECRET_DECLARATION_RE.match(lines[number - 1])
        if match is None or not is_secret_field(match.group(1)):
            continue
        value = extract_field_value(lines, number, match.group(1))
        if value is not None:
            values.append(value)
    return values
