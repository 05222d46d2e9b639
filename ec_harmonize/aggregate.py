"""Concatenate unified era tables into the canonical dataset and export it."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Protocol

import pandas as pd
from loguru import logger

from ec_harmonize.core.errors import ErrorReport, SchemaMismatch
from ec_harmonize.core.schema import (
    BOOL_COLUMNS,
    CANONICAL_COLUMNS,
    INT_COLUMNS,
    PROVINCE_ALIASES,
    PROVINCE_ORDER,
    RECORD_KEY,
    RESULT_VALUES,
)
from ec_harmonize.libs.formatting import clean_text, to_int, yes_no_to_bool
from ec_harmonize.libs.fs import safe_mkdir
from ec_harmonize.unify import validate_columns

COMBINED_FILENAME = "EC_1997_present.csv"


def _province(v):
    s = clean_text(v)
    return PROVINCE_ALIASES.get(s, s) if s is not None else None


def coerce_types(df: pd.DataFrame) -> pd.DataFrame:
    """Final dtypes of the canonical table."""
    out = df.copy()
    out["Election_Date"] = pd.to_datetime(out["Election_Date"], errors="coerce")
    for c in INT_COLUMNS:
        out[c] = to_int(out[c])
    for c in BOOL_COLUMNS:
        out[c] = yes_no_to_bool(out[c])

    provinces = out["Province"].map(_province)
    unknown = sorted(set(provinces.dropna()) - set(PROVINCE_ORDER))
    if unknown:
        logger.warning("Province value(s) outside the fixed order: {}", unknown)
    out["Province"] = pd.Categorical(provinces, categories=PROVINCE_ORDER + unknown)
    out["Result"] = pd.Categorical(out["Result"].map(clean_text), categories=RESULT_VALUES)
    return out


def record_keys(df: pd.DataFrame) -> pd.DataFrame:
    """The RECORD_KEY columns; the constituency name stands in for a missing district number."""
    keys = df[RECORD_KEY].astype(object)
    keys["Electoral_District_No"] = keys["Electoral_District_No"].where(
        df["Electoral_District_No"].notna(), df["Constituency"]
    )
    return keys


def deduplicate(df: pd.DataFrame, report: ErrorReport) -> pd.DataFrame:
    keys = record_keys(df)
    dup = keys.duplicated(keep="first")
    if not dup.any():
        return df
    for idx in df.index[dup]:
        k = keys.loc[idx]
        parliament = None if pd.isna(k["Parliament"]) else int(k["Parliament"])
        report.add(
            "Duplicate",
            f"district {k['Electoral_District_No']} station {k['Polling_Station_No']} candidate {k['Candidate']}",
            parliament=parliament,
        )
    logger.warning("Dropped {} duplicate record(s)", int(dup.sum()))
    return df[~dup]


def aggregate(tables: Dict[int, pd.DataFrame], report: ErrorReport) -> pd.DataFrame:
    """Row-union of every era table that carries the canonical columns.

    An era whose columns do not line up is excluded (and recorded); the rest
    still make it into the output.
    """
    frames: List[pd.DataFrame] = []
    for parliament in sorted(tables):
        df = tables[parliament]
        try:
            validate_columns(df, parliament)
        except SchemaMismatch as e:
            logger.error("Excluding Parliament {}: {}", parliament, e)
            report.record(e, parliament=parliament)
            continue
        if not df.empty:
            frames.append(df)

    if frames:
        out = pd.concat(frames, ignore_index=True)
    else:
        out = pd.DataFrame(columns=CANONICAL_COLUMNS)
    out = coerce_types(out)
    out = deduplicate(out, report)
    # Parliament first; within an era, file order (files are read sorted by name).
    out = out.sort_values("Parliament", kind="stable").reset_index(drop=True)
    logger.info("Aggregated {} record(s) from {} era(s)", len(out), len(frames))
    return out


class Exporter(Protocol):
    def export(self, df: pd.DataFrame) -> List[Path]:
        ...


class CsvExporter:
    """Combined CSV plus, optionally, one ``<parliament>_Parliament.csv`` per election."""

    def __init__(self, out_root: Path, split_by_parliament: bool = True, combined_name: str = COMBINED_FILENAME) -> None:
        self.out_root = Path(out_root)
        self.split_by_parliament = split_by_parliament
        self.combined_name = combined_name

    def _write(self, df: pd.DataFrame, path: Path) -> Path:
        safe_mkdir(path.parent)
        df.to_csv(path, index=False, encoding="utf-8", date_format="%Y-%m-%d")
        return path

    def export(self, df: pd.DataFrame) -> List[Path]:
        written = [self._write(df, self.out_root / "master" / self.combined_name)]
        if self.split_by_parliament:
            for parliament, part in df.groupby("Parliament", sort=True):
                written.append(self._write(part, self.out_root / "parliaments" / f"{int(parliament)}_Parliament.csv"))
        logger.info("Wrote {} file(s) under {}", len(written), self.out_root)
        return written
