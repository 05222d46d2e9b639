from __future__ import annotations

import re
from typing import Optional, Tuple

import pandas as pd

# Exact tokens only: "Na" is a real surname.
_MISSING_TOKENS = {"", "NA", "N/A", "nan", "NaN", "<NA>", "None"}

_TRUE_TOKENS = {"y", "yes", "true", "o", "oui", "1", "elected", "élu"}
_FALSE_TOKENS = {"n", "no", "false", "non", "0", "defeated", "défait"}

_WS_RE = re.compile(r"\s+")


def is_missing(v) -> bool:
    if v is None:
        return True
    if isinstance(v, str):
        return v.strip() in _MISSING_TOKENS
    try:
        return bool(pd.isna(v))
    except (TypeError, ValueError):
        return False


def clean_text(v) -> Optional[str]:
    """Collapse internal whitespace and trim; missing-like values become None."""
    if is_missing(v):
        return None
    s = _WS_RE.sub(" ", str(v)).strip()
    return s or None


def to_num(s: pd.Series) -> pd.Series:
    if pd.api.types.is_string_dtype(s.dtype):
        s2 = s.map(lambda v: None if is_missing(v) else str(v).replace(",", "").strip())
    else:
        s2 = s
    return pd.to_numeric(s2, errors="coerce")


def to_int(s: pd.Series) -> pd.Series:
    """Numeric coercion into the nullable Int64 dtype."""
    return to_num(s).astype("Float64").round().astype("Int64")


def bool_token(v):
    if is_missing(v):
        return pd.NA
    t = str(v).strip().casefold()
    if t in _TRUE_TOKENS:
        return True
    if t in _FALSE_TOKENS:
        return False
    return pd.NA


def yes_no_to_bool(s: pd.Series) -> pd.Series:
    """Map Y/N style indicators (English or French) to the nullable boolean dtype."""
    return s.map(bool_token).astype("boolean")


def split_bilingual(v) -> Tuple[Optional[str], Optional[str]]:
    """Split an "English/French" cell. The French half falls back to the English one."""
    s = clean_text(v)
    if s is None:
        return None, None
    if "/" not in s:
        return s, s
    en, fr = (p.strip() for p in s.split("/", 1))
    en = en or fr
    return en or None, (fr or en) or None


def split_bilingual_series(s: pd.Series) -> Tuple[pd.Series, pd.Series]:
    pairs = s.map(split_bilingual)
    en = pairs.map(lambda p: p[0])
    fr = pairs.map(lambda p: p[1])
    return en, fr
