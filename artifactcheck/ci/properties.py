from __future__ import annotations

import re
from pathlib import Path
from typing import Dict

__all__ = ["parse_properties", "read_properties", "unescape"]

_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)
_SIMPLE = {"n": "\n", "r": "\r", "t": "\t", "f": "\f"}


def _sub(m: re.Match) -> str:
    tok = m.group(1)
    if len(tok) == 5 and tok[0] == "u":
        return chr(int(tok[1:], 16))
    return _SIMPLE.get(tok, tok)


def unescape(value: str) -> str:
    """Undo backslash escapes: \\n \\r \\t \\f \\uXXXX, and \\c -> c for anything else."""
    return _ESCAPE.sub(_sub, value)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse `key=value` lines. Split at the first '='; later duplicates win.

    Lines without '=' and comment lines ('#' or '!') are ignored.
    """
    out: Dict[str, str] = {}
    for row in text.splitlines():
        if row.lstrip().startswith(("#", "!")):
            continue
        index = row.find("=")
        if index == -1:
            continue
        out[row[:index]] = unescape(row[index + 1:])
    return out


def read_properties(path: str | Path) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_properties(f.read())
