\
from __future__ import annotations
from pathlib import Path
from typing import Optional

import chardet  # type: ignore

BINARY_BYTES = bytes(range(0, 32)) + b"\x7f"


def is_likely_binary(
    data: bytes, control_threshold: float = 0.30, high_bit_threshold: float = 0.60
) -> bool:
    if not data:
        return False
    total = len(data)
    if 0 in data:
        return True
    control = sum(1 for b in data if b in BINARY_BYTES and b not in (9, 10, 13))
    if (control / total) > control_threshold:
        return True
    high = sum(1 for b in data if b >= 0x80)
    if (high / total) > high_bit_threshold:
        # lots of high bytes is fine as long as it is valid UTF-8
        try:
            data.decode("utf-8", errors="strict")
        except UnicodeDecodeError:
            return True
    return False


def decode_text(data: bytes) -> Optional[str]:
    """Decode bytes, trying UTF-8 (with BOM) first, then chardet's guess."""
    candidates = ["utf-8-sig"]
    enc = chardet.detect(data).get("encoding")
    if enc and enc.lower() not in ("utf-8", "ascii"):
        candidates.append(enc)
    for candidate in candidates:
        try:
            return data.decode(candidate, errors="strict")
        except (LookupError, UnicodeDecodeError):
            continue
    return None


def read_text_safely(path: Path, max_bytes: int = 20_000_000) -> Optional[str]:
    """Read a text file, returning None for binary or undecodable content.

    I/O errors propagate; callers decide how to report them.
    """
    with path.open("rb") as f:
        data = f.read(max_bytes)
    if is_likely_binary(data[:4096]) or is_likely_binary(data):
        return None
    text = decode_text(data)
    if text is None:
        return None
    # normalise line endings so line numbers match what editors show
    return text.replace("\r\n", "\n").replace("\r", "\n")
