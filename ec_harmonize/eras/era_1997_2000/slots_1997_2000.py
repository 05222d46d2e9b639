"""1997 and 2000 tab-delimited files: one row per polling station with up to
13 fixed candidate slots (``cand_<i>_<field>``).

Each station row gets a row id; every slot is cut out into its own frame,
the frames are stacked, empty slots dropped, and the stack is joined back to
the station columns on the row id. Slot numbers are trusted positionally:
slot ``i`` on one row need not be the same candidate as slot ``i`` on another.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict

import numpy as np
import pandas as pd
from loguru import logger

from ec_harmonize.core.era_registry import LEGACY, LEGACY_ELECTED_COLUMNS, LEGACY_MAX_SLOTS, LEGACY_SLOT_FIELDS
from ec_harmonize.core.errors import ErrorReport, ParseError
from ec_harmonize.eras.base import ROW, EraAdapter
from ec_harmonize.libs import names
from ec_harmonize.readers import rename_to_canonical

SLOT_RE = re.compile(r"^cand_(\d+)_(.+)$", re.IGNORECASE)
SLOT = "_slot"


def slot_columns(columns) -> Dict[int, Dict[str, str]]:
    """``{slot: {field: raw column}}`` for every ``cand_<i>_<field>`` header."""
    slots: Dict[int, Dict[str, str]] = {}
    for c in columns:
        m = SLOT_RE.match(c)
        if m:
            slots.setdefault(int(m.group(1)), {})[m.group(2).lower()] = c
    return slots


def unpivot_slots(df: pd.DataFrame, slots: Dict[int, Dict[str, str]]) -> pd.DataFrame:
    """Stack the slot frames; a slot with every field empty is not a candidate."""
    targets = list(dict.fromkeys(LEGACY_SLOT_FIELDS.values()))
    frames = []
    for i in sorted(slots):
        part = pd.DataFrame({ROW: df[ROW]})
        for field, col in slots[i].items():
            target = LEGACY_SLOT_FIELDS.get(field)
            if target is not None:
                part[target] = df[col]
        for target in targets:
            if target not in part.columns:
                part[target] = None
        filled = part[targets].notna().any(axis=1)
        part = part[filled].copy()
        part[SLOT] = i
        frames.append(part)
    if not frames:
        return pd.DataFrame(columns=[ROW, SLOT] + targets)
    return pd.concat(frames, ignore_index=True)


class LegacySlotDelimitedAdapter(EraAdapter):
    variant = LEGACY

    def parse_frame(self, raw: pd.DataFrame, path: Path, report: ErrorReport) -> pd.DataFrame:
        slots = slot_columns(raw.columns)
        if not slots:
            raise ParseError(path, self.variant, "no cand_<i>_* columns")
        if max(slots) > LEGACY_MAX_SLOTS:
            logger.warning("{}: {} candidate slots (expected at most {})", path.name, max(slots), LEGACY_MAX_SLOTS)

        slot_cols = {c for fields in slots.values() for c in fields.values()}
        station_raw = raw[[c for c in raw.columns if c not in slot_cols]]
        station = rename_to_canonical(station_raw, self.era.sourced())
        keep = [c for c in self.era.sourced() if c in station.columns] + [ROW]
        station_out = station[keep].copy()
        station_out["_elected_key"] = self._elected_keys(station_raw)

        cands = unpivot_slots(raw, slots)
        name_cols = self.name_frame(
            list(zip(cands["_last"], cands["_first"], cands["_middle"])),
            names.LAST_FIRST,
            index=cands.index,
        )
        cands = pd.concat([cands, name_cols], axis=1)

        out = cands.merge(station_out, on=ROW, how="left", validate="many_to_one")
        out = out.sort_values([ROW, SLOT], kind="stable").reset_index(drop=True)

        # Empty elected indicator: fall back to the district's elected_*_name columns.
        fallback = out["Result"].isna() & out["_elected_key"].notna()
        is_winner = (out["Candidate"] == out["_elected_key"]).to_numpy(dtype=bool)
        out.loc[fallback, "Result"] = np.where(is_winner, "Y", "N")[fallback.to_numpy()]
        return out.drop(columns=["_last", "_first", "_middle", "_gender", SLOT, "_elected_key"])

    @staticmethod
    def _elected_keys(station_raw: pd.DataFrame) -> pd.Series:
        lookup = {c.lower(): c for c in station_raw.columns}
        cols = [lookup.get(c) for c in LEGACY_ELECTED_COLUMNS]
        if cols[0] is None:
            return pd.Series([None] * len(station_raw), index=station_raw.index, dtype=object)
        parts = zip(*(station_raw[c] if c is not None else [None] * len(station_raw) for c in cols))
        return pd.Series([names.normalize_key(p) for p in parts], index=station_raw.index, dtype=object)
