from __future__ import annotations

import sys
from typing import Dict, IO, Iterable, List, Mapping, Optional, Sequence

from rich.color import ColorSystem
from rich.style import Style

from .config import color_disabled_by_env
from ..parsers.frontmatter import detect_front_matter
from .models import Finding, LegacyFrontMatter, YamlFrontMatter
from .redaction import Redactor, declared_secret_values, extract_field_value, is_secret_field

CONTEXT_BEFORE = 2
CONTEXT_AFTER = 2
MAX_LINE_WIDTH = 80
ELLIPSIS = "..."

STYLES = {
    "error": Style(color="red", bold=True),
    "warning": Style(color="yellow", bold=True),
    "marker": Style(color="red", bold=True),
}

PLAIN_INDICATORS = {True: "[ERROR]", False: "[WARNING]"}
COLOR_INDICATORS = {True: "✗", False: "⚠"}
PLAIN_MARKER = ">"
COLOR_MARKER = "→"
NEIGHBOR_MARKER = "│"


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def should_use_colors(stream: Optional[IO[str]] = None, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Color only for interactive destinations, and never when NO_COLOR is non-empty."""
    if color_disabled_by_env(environ):
        return False
    stream = stream if stream is not None else sys.stderr
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError):
        return False


def truncate(line: str, width: int = MAX_LINE_WIDTH) -> str:
    if len(line) <= width:
        return line
    return line[: width - len(ELLIPSIS)] + ELLIPSIS


def group_by_file(findings: Iterable[Finding]) -> Dict[str, List[Finding]]:
    """Group findings per file, files in sorted order, findings in insertion order."""
    grouped: Dict[str, List[Finding]] = {}
    for finding in findings:
        grouped.setdefault(finding.file, []).append(finding)
    return {path: grouped[path] for path in sorted(grouped)}


class ErrorFormatter:
    """Renders findings as one deterministic, human-readable report.

    Whether to emit color is decided once, when the formatter is built, from
    the destination stream and the ``NO_COLOR`` environment variable. Pass
    ``use_colors`` to force the decision either way.
    """

    def __init__(
        self,
        stream: Optional[IO[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        use_colors: Optional[bool] = None,
    ) -> None:
        if use_colors is None:
            use_colors = should_use_colors(stream, environ)
        self.use_colors = use_colors

    def colorize(self, text: str, style: str) -> str:
        if not self.use_colors:
            return text
        return STYLES[style].render(text, color_system=ColorSystem.STANDARD)

    def render(
        self,
        findings: Iterable[Finding],
        file_contents: Optional[Mapping[str, str]] = None,
    ) -> str:
        findings = list(findings)
        if not findings:
            return ""

        contents = self._normalize_contents(file_contents)
        redactor = self.redactor_for(findings, contents)
        grouped = group_by_file(findings)

        output: List[str] = [self.format_header(findings, len(grouped)), ""]
        for path, file_findings in grouped.items():
            lines = self._split_lines(contents.get(path))
            output.append(f"{path}:")
            for finding in file_findings:
                output.extend(self.format_finding(finding, lines, redactor))
            output.append("")

        if output[-1] == "":
            output.pop()
        return "\n".join(output)

    def redactor_for(
        self,
        findings: Iterable[Finding],
        file_contents: Optional[Mapping[str, str]] = None,
    ) -> Redactor:
        """Collect every secret value the report must not reveal.

        Values come from a finding's ``secret``, from the declaration of a
        secret-named finding field, and from every secret-named key declared
        in the front matter of a reported file, whichever check fired. A value
        that cannot be located is simply skipped; its finding is still
        reported.
        """
        findings = list(findings)
        contents = self._normalize_contents(file_contents)
        redactor = Redactor()
        for path in sorted({f.file for f in findings}):
            for value in self._front_matter_secrets(contents.get(path)):
                redactor.add(value)
        for finding in findings:
            if finding.secret is not None:
                redactor.add(finding.secret)
            if finding.line is None or not is_secret_field(finding.field):
                continue
            lines = self._split_lines(contents.get(finding.file))
            if lines:
                redactor.add(extract_field_value(lines, finding.line, finding.field))
        return redactor

    def format_header(self, findings: Sequence[Finding], file_count: int) -> str:
        errors = sum(1 for f in findings if f.is_error)
        warnings = len(findings) - errors
        files = pluralize(file_count, "file")
        if errors:
            header = f"Validation failed with {pluralize(errors, 'error')} in {files}"
            if warnings:
                header += f" and {pluralize(warnings, 'warning')}"
            return self.colorize(header + ":", "error")
        return self.colorize(f"Validation passed with {pluralize(warnings, 'warning')} in {files}:", "warning")

    def format_finding(
        self,
        finding: Finding,
        lines: Optional[List[str]] = None,
        redactor: Optional[Redactor] = None,
    ) -> List[str]:
        redactor = redactor or Redactor()
        message = redactor.redact(finding.message) or ""
        suggestion = redactor.redact(finding.suggestion)

        indicator_map = COLOR_INDICATORS if self.use_colors else PLAIN_INDICATORS
        indicator = self.colorize(indicator_map[finding.is_error], "error" if finding.is_error else "warning")

        location = []
        if finding.line is not None:
            location.append(f"line {finding.line}")
        if finding.field:
            location.append(f"field '{finding.field}'")
        head = f"  {indicator} "
        if location:
            head += ", ".join(location) + ": "
        output = [head + message]
        output.append(f"    type: {finding.type}")

        snippet = self.format_context(finding.line, lines, redactor)
        if snippet:
            output.extend(snippet)

        if suggestion is not None and suggestion.strip():
            output.append("    suggestion:")
            for line in suggestion.strip("\n").split("\n"):
                output.append(f"      {line}".rstrip())
        return output

    def format_context(
        self,
        error_line: Optional[int],
        lines: Optional[List[str]],
        redactor: Optional[Redactor] = None,
    ) -> List[str]:
        """Lines around ``error_line``, or an empty list when they cannot be shown."""
        if error_line is None or not lines:
            return []
        if not 1 <= error_line <= len(lines):
            return []
        redactor = redactor or Redactor()

        error_index = error_line - 1
        start = max(0, error_index - CONTEXT_BEFORE)
        end = min(len(lines) - 1, error_index + CONTEXT_AFTER)

        output = ["    context:"]
        for index in range(start, end + 1):
            text = truncate(redactor.redact(lines[index]) or "")
            number = f"{index + 1:3d}"
            if index == error_index:
                marker = self.colorize(COLOR_MARKER, "marker") if self.use_colors else PLAIN_MARKER
            else:
                marker = NEIGHBOR_MARKER
            output.append(f"      {number} {marker} {text}" if text else f"      {number} {marker}")
        return output

    @classmethod
    def _front_matter_secrets(cls, content: Optional[str]) -> List[str]:
        lines = cls._split_lines(content)
        if not lines:
            return []
        form = detect_front_matter(content)
        if not isinstance(form, (YamlFrontMatter, LegacyFrontMatter)):
            return []
        last_line = form.start_line + len(form.block.splitlines()) - 1
        return declared_secret_values(lines, form.start_line, last_line)

    @staticmethod
    def _normalize_contents(file_contents: Optional[Mapping[str, str]]) -> Dict[str, str]:
        if not file_contents:
            return {}
        return {str(path): text for path, text in file_contents.items() if isinstance(text, str)}

    @staticmethod
    def _split_lines(content: Optional[str]) -> Optional[List[str]]:
        if content is None:
            return None
        return content.splitlines()
