from __future__ import annotations

import json
import sys
from typing import Any, Iterable, Mapping, Sequence, TextIO, cast

from ..engine.types import ComparisonResult


def print_json(obj: Any, *, stream: TextIO | None = None) -> None:
    """Compact, stable JSON on one line (no color)."""
    out = stream or sys.stdout
    out.write(json.dumps(obj, separators=(",", ":"), sort_keys=True) + "\n")


def _stringify(x: Any) -> str:
    return "" if x is None else str(x)


def print_table(
    rows: Iterable[Sequence[Any]] | Iterable[Mapping[str, Any]],
    headers: Sequence[str] | None = None,
    *,
    stream: TextIO | None = None,
) -> None:
    """
    Plain ASCII table (no color). Accepts list-of-dicts or list-of-sequences.
    """
    out = stream or sys.stdout
    it = list(rows)
    if not it:
        return
    if isinstance(it[0], Mapping):
        rows_m = [cast(Mapping[str, Any], r) for r in it]
        if headers is None:
            headers = list(rows_m[0].keys())
        matrix = [[_stringify(r.get(h, "")) for h in headers] for r in rows_m]
    else:
        rows_s = [cast(Sequence[Any], r) for r in it]
        matrix = [[_stringify(c) for c in r] for r in rows_s]
        if headers is None:
            headers = [f"col{i+1}" for i in range(len(rows_s[0]))]

    widths = [max(len(h), *(len(r[i]) for r in matrix)) for i, h in enumerate(headers)]

    def fmt(row):
        return "  ".join(s.ljust(w) for s, w in zip(row, widths)).rstrip()

    print(fmt(list(map(str, headers))), file=out)
    print("  ".join("-" * w for w in widths), file=out)
    for r in matrix:
        print(fmt(r), file=out)


_TABLE_HEADERS = ("kind", "previous", "current", "detail")


def emit_result(result: ComparisonResult, *, wants_json: bool, wants_table: bool) -> None:
    """Structured result output on stdout; plain mode relies on the log lines alone."""
    if wants_json:
        print_json(result.to_dict())
        return
    if wants_table:
        rows = []
        for d in result.diagnostics:
            if d.previous_count is not None:
                prev, curr, detail = d.previous_count, d.current_count, "count"
            else:
                prev, curr = d.previous_rel, d.current_rel
                detail = f"{d.previous_digest} {d.current_digest}" if d.previous_digest else ""
            rows.append((d.kind.value, prev, curr, detail))
        if rows:
            print_table(rows, headers=_TABLE_HEADERS)
        else:
            print_table([("-", "-", "-", "identical")], headers=_TABLE_HEADERS)
