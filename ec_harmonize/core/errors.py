"""Error kinds raised while harmonizing, and the run-level report that collects them.

Nothing here aborts a run on its own: adapters, the enricher and the aggregator
catch these, record them on an ``ErrorReport`` and carry on with what is left.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence


class HarmonizeError(Exception):
    """Base error for anything that excludes data from the canonical table."""

    kind = "HarmonizeError"
    path: Optional[Path] = None
    row: Optional[int] = None

    def detail(self) -> str:
        return str(self)


class ParseError(HarmonizeError):
    """A file (or a row in it) cannot be read under its era's declared variant."""

    kind = "ParseError"

    def __init__(self, path, variant: str, reason: str, row: Optional[int] = None) -> None:
        self.path = Path(path) if path is not None else None
        self.variant = variant
        self.reason = reason
        self.row = row
        where = f"{self.path}" if row is None else f"{self.path} row {row}"
        super().__init__(f"{where}: cannot parse as {variant}: {reason}")

    def detail(self) -> str:
        return f"{self.variant}: {self.reason}"


class EncodingError(HarmonizeError):
    """A file does not decode under the encoding its era declares."""

    kind = "EncodingError"

    def __init__(self, path, encoding: str, position: Optional[int] = None) -> None:
        self.path = Path(path)
        self.encoding = encoding
        self.position = position
        at = "" if position is None else f" at byte {position}"
        super().__init__(f"{self.path}: not valid {encoding}{at}")

    def detail(self) -> str:
        at = "" if self.position is None else f" at byte {self.position}"
        return f"not valid {self.encoding}{at}"


class JoinMiscount(HarmonizeError):
    """A lookup key matched no row, or more than one row, of an auxiliary table."""

    kind = "JoinMiscount"

    def __init__(self, key: str, matches: int, table: str) -> None:
        self.key = key
        self.matches = matches
        self.table = table
        outcome = "no row" if matches == 0 else f"{matches} rows; first match kept"
        super().__init__(f"{table}: key {key!r} matched {outcome}")

    def detail(self) -> str:
        return str(self)


class SchemaMismatch(HarmonizeError):
    """An era's table does not carry the canonical column set."""

    kind = "SchemaMismatch"

    def __init__(self, parliament: int, missing: Sequence[str] = (), unexpected: Sequence[str] = ()) -> None:
        self.parliament = parliament
        self.missing = list(missing)
        self.unexpected = list(unexpected)
        parts = []
        if self.missing:
            parts.append("missing " + ", ".join(self.missing))
        if self.unexpected:
            parts.append("unexpected " + ", ".join(self.unexpected))
        super().__init__(f"Parliament {parliament}: " + "; ".join(parts or ["column order differs"]))

    def detail(self) -> str:
        return str(self)


@dataclass
class ErrorReport:
    """Structured list of everything dropped or degraded during a run."""

    parliament: Optional[int] = None
    entries: List[Dict[str, Any]] = field(default_factory=list)
    gaps: Counter = field(default_factory=Counter)
    notes: List[str] = field(default_factory=list)

    def add(
        self,
        kind: str,
        detail: str,
        file: Optional[Path] = None,
        row: Optional[int] = None,
        parliament: Optional[int] = None,
    ) -> None:
        self.entries.append(
            {
                "kind": kind,
                "parliament": parliament if parliament is not None else self.parliament,
                "file": str(file) if file is not None else None,
                "row": row,
                "detail": detail,
            }
        )

    def record(self, exc: HarmonizeError, parliament: Optional[int] = None) -> None:
        if parliament is None and isinstance(exc, SchemaMismatch):
            parliament = exc.parliament
        self.add(exc.kind, exc.detail(), file=exc.path, row=exc.row, parliament=parliament)

    def gap(self, raw: str) -> None:
        self.gaps[raw] += 1

    def note(self, text: str) -> None:
        self.notes.append(text)

    def extend(self, other: "ErrorReport") -> None:
        self.entries.extend(other.entries)
        self.gaps.update(other.gaps)
        self.notes.extend(other.notes)

    def count(self, kind: Optional[str] = None) -> int:
        if kind is None:
            return len(self.entries)
        return sum(1 for e in self.entries if e["kind"] == kind)

    def to_dict(self) -> Dict[str, Any]:
        by_kind = Counter(e["kind"] for e in self.entries)
        return {
            "counts": dict(sorted(by_kind.items())),
            "entries": list(self.entries),
            "normalization_gaps": dict(self.gaps.most_common()),
            "notes": list(self.notes),
        }
