from __future__ import annotations
import re
from typing import List, Optional

from ..core.models import FrontMatterForm, LegacyFrontMatter, NoFrontMatter, YamlFrontMatter

YAML_DELIMITER = "---"
LEGACY_RULE_RE = re.compile(r"^_{3,}$")


def _closing_index(lines: List[str], start: int, is_delimiter) -> Optional[int]:
    for i in range(start, len(lines)):
        if is_delimiter(lines[i]):
            return i
    return None


def detect_front_matter(content: str) -> FrontMatterForm:
    """Classify the metadata block at the top of a Markdown document.

    YAML front matter must open on the very first line with ``---`` and close
    with another ``---`` line. The legacy form is a block between two
    horizontal rules made of underscores.
    """
    if not content or not content.strip():
        return NoFrontMatter()

    lines = content.splitlines()

    if lines[0].rstrip() == YAML_DELIMITER:
        end = _closing_index(lines, 1, lambda l: l.rstrip() == YAML_DELIMITER)
        if end is not None:
            return YamlFrontMatter(block="\n".join(lines[1:end]), start_line=2)

    start = _closing_index(lines, 0, lambda l: LEGACY_RULE_RE.match(l.strip()) is not None)
    if start is not None:
        end = _closing_index(lines, start + 1, lambda l: LEGACY_RULE_RE.match(l.strip()) is not None)
        if end is not None:
            return LegacyFrontMatter(block="\n".join(lines[start + 1:end]), start_line=start + 2)

    return NoFrontMatter()
