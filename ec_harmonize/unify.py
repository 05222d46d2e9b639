"""Align an enriched era table to the canonical column set."""

from __future__ import annotations

import pandas as pd
from loguru import logger

from ec_harmonize.core.era_registry import Era
from ec_harmonize.core.errors import SchemaMismatch
from ec_harmonize.core.schema import CANONICAL_COLUMNS


def validate_columns(df: pd.DataFrame, parliament: int) -> None:
    """Raise SchemaMismatch unless ``df`` has exactly the canonical columns, in order."""
    cols = list(df.columns)
    if cols == CANONICAL_COLUMNS:
        return
    missing = [c for c in CANONICAL_COLUMNS if c not in cols]
    unexpected = [c for c in cols if c not in CANONICAL_COLUMNS]
    raise SchemaMismatch(parliament, missing=missing, unexpected=unexpected)


def unify(df: pd.DataFrame, era: Era) -> pd.DataFrame:
    """Rename/reorder to CANONICAL_COLUMNS; fields the era lacks become null columns.

    A field the era declares (sourced or derived) but which is absent from
    ``df`` is a SchemaMismatch: something upstream dropped it.
    """
    declared = era.column_map
    undeclared = [c for c in CANONICAL_COLUMNS if c not in declared]
    missing = [c for c in CANONICAL_COLUMNS if declared.get(c) is not None and c not in df.columns]
    if undeclared or missing:
        raise SchemaMismatch(era.parliament, missing=undeclared + missing)

    out = df.copy()
    for c in CANONICAL_COLUMNS:
        if declared[c] is None:
            out[c] = None
    extra = [c for c in out.columns if c not in CANONICAL_COLUMNS]
    if extra:
        logger.debug("Parliament {}: dropping intermediate columns {}", era.parliament, extra)
    out = out[CANONICAL_COLUMNS].reset_index(drop=True)
    validate_columns(out, era.parliament)
    return out
