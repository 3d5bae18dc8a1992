from __future__ import annotations
from typing import FrozenSet

# Syntax class: the front matter could not be read at all.
YAML_SYNTAX = "yaml_syntax"
EMPTY_FRONTMATTER = "empty_frontmatter"
NO_FRONTMATTER = "no_frontmatter"

# Field class: the front matter parsed but a field is wrong.
MISSING_REQUIRED_FIELDS = "missing_required_fields"
INVALID_ID_FORMAT = "invalid_id_format"
INVALID_DATE_FORMAT = "invalid_date_format"
DUPLICATE_ID = "duplicate_id"
INVALID_DERIVED_FROM_FORMAT = "invalid_derived_from_format"
NONEXISTENT_TENET_REFERENCE = "nonexistent_tenet_reference"
INVALID_ENFORCED_BY_FORMAT = "invalid_enforced_by_format"
MISSING_VERSION = "missing_version"
VERSION_MISMATCH = "version_mismatch"
INVALID_VERSION_FORMAT = "invalid_version_format"
UNKNOWN_FIELDS = "unknown_fields"
POTENTIAL_SECRET = "potential_secret"
INVALID_OPTIONAL_FIELD_FORMAT = "invalid_optional_field_format"

# Environment class: the file itself is in the wrong place.
INVALID_FILE_PATH = "invalid_file_path"

SYNTAX_CLASS = "syntax"
FIELD_CLASS = "field"
ENVIRONMENT_CLASS = "environment"

SYNTAX_TYPES: FrozenSet[str] = frozenset({YAML_SYNTAX, EMPTY_FRONTMATTER, NO_FRONTMATTER})
FIELD_TYPES: FrozenSet[str] = frozenset(
    {
        MISSING_REQUIRED_FIELDS,
        INVALID_ID_FORMAT,
        INVALID_DATE_FORMAT,
        DUPLICATE_ID,
        INVALID_DERIVED_FROM_FORMAT,
        NONEXISTENT_TENET_REFERENCE,
        INVALID_ENFORCED_BY_FORMAT,
        MISSING_VERSION,
        VERSION_MISMATCH,
        INVALID_VERSION_FORMAT,
        UNKNOWN_FIELDS,
        POTENTIAL_SECRET,
        INVALID_OPTIONAL_FIELD_FORMAT,
    }
)
ENVIRONMENT_TYPES: FrozenSet[str] = frozenset({INVALID_FILE_PATH})


def classify(tag: str) -> str:
    """Return the taxonomy class of ``tag``.

    Tags are open-ended: anything that is not a known syntax or environment
    tag is treated as a field problem.
    """
    if tag in SYNTAX_TYPES:
        return SYNTAX_CLASS
    if tag in ENVIRONMENT_TYPES:
        return ENVIRONMENT_CLASS
    return FIELD_CLASS


def is_syntax(tag: str) -> bool:
    return classify(tag) == SYNTAX_CLASS
