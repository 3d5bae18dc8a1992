from __future__ import annotations

import re
from typing import Any, Dict, Optional

import yaml

from ..core.models import ParseError, ParseResult
from ..core import taxonomy

TOP_LEVEL_KEY_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_-]*)\s*:")

SYNTAX_SUGGESTION = (
    "Check YAML syntax around line {line}. Common issues: unquoted colons, "
    "incorrect indentation, missing quotes around strings with special characters."
)


class LineTrackingParser:
    """YAML front-matter parser that remembers where each top-level key lives.

    ``parse`` never raises. A failed parse comes back as ``data=None`` plus a
    list of ``ParseError`` records, and the line map is filled in either way.
    """

    def parse(self, block: Optional[str], start_line: int = 1) -> ParseResult:
        block = block or ""
        line_map = self.build_line_map(block, start_line)
        last_line = start_line + max(len(block.splitlines()), 1) - 1

        if not block.strip():
            return ParseResult(
                data=None,
                line_map=line_map,
                errors=[
                    ParseError(
                        type=taxonomy.EMPTY_FRONTMATTER,
                        message="Empty YAML in front-matter",
                        line=start_line,
                        suggestion="Front-matter must include the required fields.",
                    )
                ],
            )

        try:
            data = yaml.safe_load(block)
        except yaml.YAMLError as exc:
            line, column = self._error_position(exc, start_line, last_line)
            return ParseResult(
                data=None,
                line_map=line_map,
                errors=[
                    ParseError(
                        type=taxonomy.YAML_SYNTAX,
                        message=f"YAML syntax error: {self._describe(exc)}",
                        line=line,
                        column=column,
                        suggestion=SYNTAX_SUGGESTION.format(line=line),
                    )
                ],
            )
        except RecursionError:
            return ParseResult(
                data=None,
                line_map=line_map,
                errors=[
                    ParseError(
                        type=taxonomy.YAML_SYNTAX,
                        message="YAML syntax error: nesting is too deep to load",
                        line=start_line,
                        suggestion=SYNTAX_SUGGESTION.format(line=start_line),
                    )
                ],
            )
        except (ValueError, TypeError) as exc:
            # value construction, e.g. an impossible date such as 2025-13-45
            return ParseResult(
                data=None,
                line_map=line_map,
                errors=[
                    ParseError(
                        type=taxonomy.YAML_SYNTAX,
                        message=f"YAML value could not be loaded: {exc}",
                        line=start_line,
                        suggestion=SYNTAX_SUGGESTION.format(line=start_line),
                    )
                ],
            )

        if data is None:
            return ParseResult(
                data=None,
                line_map=line_map,
                errors=[
                    ParseError(
                        type=taxonomy.EMPTY_FRONTMATTER,
                        message="Empty YAML in front-matter",
                        line=start_line,
                        suggestion="Front-matter must include the required fields.",
                    )
                ],
            )

        if not isinstance(data, dict):
            return ParseResult(
                data=None,
                line_map=line_map,
                errors=[
                    ParseError(
                        type=taxonomy.YAML_SYNTAX,
                        message=f"YAML front-matter must be a mapping of keys to values, got {type(data).__name__}",
                        line=start_line,
                        suggestion="Write front-matter as 'key: value' pairs, one per line.",
                    )
                ],
            )

        return ParseResult(data=data, line_map=self._restrict_to_keys(line_map, data), errors=[])

    @staticmethod
    def build_line_map(block: str, start_line: int = 1) -> Dict[str, int]:
        """Map top-level keys to document line numbers; a repeated key keeps its last line."""
        line_map: Dict[str, int] = {}
        for offset, line in enumerate(block.splitlines()):
            match = TOP_LEVEL_KEY_RE.match(line)
            if match:
                line_map[match.group(1)] = start_line + offset
        return line_map

    @staticmethod
    def _loaded_key(raw: str) -> str:
        """The key as checks see it, e.g. ``yes`` loads as ``True``."""
        try:
            loaded = yaml.safe_load(f"{raw}: 0")
        except yaml.YAMLError:
            return raw
        if isinstance(loaded, dict) and len(loaded) == 1:
            return str(next(iter(loaded)))
        return raw

    @classmethod
    def _restrict_to_keys(cls, line_map: Dict[str, int], data: Dict[Any, Any]) -> Dict[str, int]:
        # entries are kept under the source name and under the loaded name
        keys = {str(k) for k in data}
        restricted: Dict[str, int] = {}
        for raw, line in line_map.items():
            loaded = cls._loaded_key(raw)
            if loaded not in keys:
                continue
            restricted[raw] = line
            restricted[loaded] = max(line, restricted.get(loaded, 0))
        return restricted

    @staticmethod
    def _error_position(exc: yaml.YAMLError, start_line: int, last_line: int):
        mark: Any = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
        if mark is None:
            return start_line, None
        line = start_line + mark.line
        return max(start_line, min(line, last_line)), mark.column + 1

    @staticmethod
    def _describe(exc: yaml.YAMLError) -> str:
        problem = getattr(exc, "problem", None)
        context = getattr(exc, "context", None)
        if problem and context:
            return f"{context}, {problem}"
        return problem or context or (str(exc).splitlines() or [exc.__class__.__name__])[0]
