from __future__ import annotations

import re
from io import StringIO
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from ec_harmonize.core.errors import EncodingError, ParseError

_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "`": "'", "´": "'"})


# ---------------- decoding ----------------

def decode_strict(path: Path, encoding: str) -> str:
    """Decode with the era's declared encoding only; no sniffing, no replacement."""
    raw = Path(path).read_bytes()
    try:
        return raw.decode(encoding, errors="strict")
    except UnicodeDecodeError as e:
        raise EncodingError(path, encoding, e.start) from e


# ---------------- headers ----------------

def normalize_header(h) -> str:
    s = str(h).replace("\ufeff", "").translate(_APOSTROPHES)
    return re.sub(r"\s+", " ", s).strip()


def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out.columns = [normalize_header(c) for c in out.columns]
    return out


def rename_to_canonical(df: pd.DataFrame, mapping: dict) -> pd.DataFrame:
    """Rename raw headers to canonical names given ``{canonical: raw}``.

    Exact header match first, then a case-insensitive one: the same release
    is not always consistent about capitalisation.
    """
    inverse = {normalize_header(raw): canon for canon, raw in mapping.items()}
    folded = {k.casefold(): v for k, v in inverse.items()}
    renames = {}
    for col in df.columns:
        if col in inverse:
            renames[col] = inverse[col]
        elif col.casefold() in folded:
            renames[col] = folded[col.casefold()]
    return df.rename(columns=renames)


def missing_columns(df: pd.DataFrame, required: Iterable[str]) -> List[str]:
    have = {c.casefold() for c in df.columns}
    return [c for c in required if normalize_header(c).casefold() not in have]


# ---------------- reading ----------------

def read_text_table(
    path: Path,
    encoding: str,
    variant: str,
    delimiter: str = ",",
    required: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Read one raw file with every column as text and headers normalized.

    Raises EncodingError when the bytes do not decode, ParseError when the
    delimited text cannot be tabulated or lacks a required column.
    """
    text = decode_strict(path, encoding)
    if not text.strip():
        raise ParseError(path, variant, "empty file")
    try:
        df = pd.read_csv(
            StringIO(text),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            na_values=[""],
            skipinitialspace=False,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise ParseError(path, variant, str(e).strip().splitlines()[0] if str(e).strip() else type(e).__name__) from e

    df = normalize_headers(df)
    # Trailing delimiters produce "Unnamed: n" columns with nothing in them.
    junk = [c for c in df.columns if c.startswith("Unnamed:") and df[c].isna().all()]
    if junk:
        df = df.drop(columns=junk)
    if required:
        missing = missing_columns(df, required)
        if missing:
            raise ParseError(path, variant, "missing column(s): " + ", ".join(missing))
    return df


def read_lookup_table(path: Path, encoding: str) -> pd.DataFrame:
    """Auxiliary lookup tables (districts, candidates, winners) are plain CSV."""
    return read_text_table(path, encoding, "lookup table")
