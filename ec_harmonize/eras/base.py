"""Shared adapter plumbing: reading an era's files, per-file failure isolation,
candidate-name columns, vote-cell validation and era metadata.

Concrete adapters only implement ``parse_frame`` for one raw file.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd
from loguru import logger

from ec_harmonize.core.era_registry import Era
from ec_harmonize.core.errors import EncodingError, ErrorReport, ParseError
from ec_harmonize.libs import names
from ec_harmonize.libs.formatting import clean_text, is_missing, to_num
from ec_harmonize.readers import read_text_table

NAME_COLUMNS = ["Candidate", "Last_Name", "First_Name", "Middle_Names"]
ROW = "_row"


class EraAdapter(ABC):
    variant: str = ""

    def __init__(self, era: Era) -> None:
        if era.variant != self.variant:
            raise ValueError(f"{type(self).__name__} cannot parse {era.label} ({era.variant})")
        self.era = era

    # ---------------- reading ----------------

    def required_columns(self) -> List[str]:
        return list(self.era.sourced().values()) + list(self.era.name_columns)

    def read(self, path: Path) -> pd.DataFrame:
        df = read_text_table(
            path,
            self.era.encoding,
            self.variant,
            delimiter=self.era.delimiter,
            required=self.required_columns(),
        )
        # File line number of each data row (header is line 1).
        df[ROW] = range(2, len(df) + 2)
        return df

    # ---------------- parsing ----------------

    @abstractmethod
    def parse_frame(self, raw: pd.DataFrame, path: Path, report: ErrorReport) -> pd.DataFrame:
        """Turn one raw file into intermediate rows (one per station x candidate)."""

    def parse(self, files: Iterable[Path], report: Optional[ErrorReport] = None) -> pd.DataFrame:
        """Parse every file of the era; unreadable files are recorded and skipped."""
        report = report if report is not None else ErrorReport(parliament=self.era.parliament)
        frames: List[pd.DataFrame] = []
        for path in files:
            path = Path(path)
            try:
                raw = self.read(path)
                df = self.parse_frame(raw, path, report)
            except (ParseError, EncodingError) as e:
                logger.warning("Parliament {}: skipping {}", self.era.parliament, e)
                report.record(e, parliament=self.era.parliament)
                continue
            frames.append(self.drop_invalid_votes(df, path, report))
            logger.debug("Parliament {}: {} -> {} rows", self.era.parliament, path.name, len(df))

        if frames:
            out = pd.concat(frames, ignore_index=True)
        else:
            out = pd.DataFrame(columns=[c for c, src in self.era.column_map.items() if src is not None])
        return self.attach_metadata(out.drop(columns=[ROW], errors="ignore"))

    def attach_metadata(self, df: pd.DataFrame) -> pd.DataFrame:
        out = df.copy()
        out["Election_Date"] = self.era.election_date
        out["Election_Type"] = self.era.election_type
        out["Parliament"] = self.era.parliament
        return out

    # ---------------- helpers for subclasses ----------------

    def drop_invalid_votes(self, df: pd.DataFrame, path: Path, report: ErrorReport) -> pd.DataFrame:
        """Drop rows whose vote cell is present but not a non-negative number."""
        if "Votes" not in df.columns or df.empty:
            return df
        num = to_num(df["Votes"])
        present = ~df["Votes"].map(is_missing)
        bad = present & (num.isna() | (num < 0))
        if not bad.any():
            return df
        for idx in df.index[bad]:
            row = int(df.at[idx, ROW]) if ROW in df.columns else None
            err = ParseError(path, self.variant, f"invalid vote count {df.at[idx, 'Votes']!r}", row=row)
            report.record(err, parliament=self.era.parliament)
        logger.warning("Parliament {}: dropped {} row(s) with invalid votes in {}", self.era.parliament, int(bad.sum()), path.name)
        return df[~bad]

    @staticmethod
    def name_frame(values: Sequence, order: str = names.AUTO, index=None) -> pd.DataFrame:
        """Candidate / Last / First / Middle columns, parsing each distinct raw name once."""
        cache: Dict[object, tuple] = {}
        rows = []
        for v in values:
            if isinstance(v, tuple):
                key = tuple(clean_text(x) for x in v)
            else:
                key = clean_text(v)
            hit = cache.get(key)
            if hit is None:
                c = names.parse(key, order)
                if c.low_confidence and isinstance(key, tuple):
                    # Keep the published parts; only the combined key is left as-is.
                    last, first, middle = (list(key) + [None, None, None])[:3]
                else:
                    last, first, middle = c.last or None, c.first or None, c.middle
                hit = cache[key] = (names.reassemble(c) or None, last, first, middle)
            rows.append(hit)
        return pd.DataFrame(rows, columns=NAME_COLUMNS, index=index)
