"""2004 "pollbypoll" files: one row per polling station, one column per candidate.

Candidate column headers are display-order names ("A. Smith"). A vote cell
may read "<n> Merged with No. <poll>" (or only "Merged with No. <poll>") when
the station's ballots were counted with another one.
"""

from __future__ import annotations

import re
from pathlib import Path

import pandas as pd

from ec_harmonize.core.era_registry import WIDE
from ec_harmonize.core.errors import ErrorReport, ParseError
from ec_harmonize.eras.base import ROW, EraAdapter
from ec_harmonize.libs import names
from ec_harmonize.libs.formatting import clean_text, is_missing, split_bilingual_series
from ec_harmonize.readers import normalize_header, rename_to_canonical

MERGED_CELL_RE = r"^(?P<votes>.*?)\s*Merged\s+with\s+No\.?\s*(?P<merged>.+?)\s*$"


def split_merged_cell(cells: pd.Series) -> pd.DataFrame:
    """Split vote cells into ``Votes`` and ``Merged_With`` (null when not merged)."""
    text = cells.astype(object).where(cells.notna(), "")
    m = text.astype(str).str.extract(MERGED_CELL_RE, flags=re.IGNORECASE)
    merged = m["merged"].notna()
    votes = cells.where(~merged, m["votes"])
    return pd.DataFrame(
        {
            "Votes": votes.map(clean_text).astype(object),
            "Merged_With": m["merged"].map(clean_text).astype(object),
        },
        index=cells.index,
    )


class WideCandidateColumnsAdapter(EraAdapter):
    variant = WIDE

    def candidate_columns(self, raw: pd.DataFrame):
        station = {normalize_header(v).casefold() for v in self.era.sourced().values()}
        station |= {normalize_header(v).casefold() for v in self.era.station_extras}
        return [c for c in raw.columns if c != ROW and c.casefold() not in station]

    def parse_frame(self, raw: pd.DataFrame, path: Path, report: ErrorReport) -> pd.DataFrame:
        cand_cols = self.candidate_columns(raw)
        if not cand_cols:
            raise ParseError(path, self.variant, "no candidate columns")

        station = rename_to_canonical(raw.drop(columns=cand_cols), self.era.sourced())
        station = station[[c for c in self.era.sourced() if c in station.columns] + [ROW]]

        long = raw[[ROW] + cand_cols].melt(id_vars=ROW, var_name="_candidate_raw", value_name="_cell")
        long = long[~long["_cell"].map(is_missing)]
        # melt is column-major; stable sort restores file order within each candidate.
        long = long.sort_values(ROW, kind="stable").reset_index(drop=True)

        cells = split_merged_cell(long["_cell"])
        long = pd.concat([long[[ROW, "_candidate_raw"]], cells], axis=1)

        out = long.merge(station, on=ROW, how="left", validate="many_to_one")
        en, fr = split_bilingual_series(out["Constituency"])
        out["Constituency"] = en
        out["Constituency_Fr"] = fr

        name_cols = self.name_frame(list(out["_candidate_raw"]), names.DISPLAY, index=out.index)
        return pd.concat([out.drop(columns=["_candidate_raw"]), name_cols], axis=1)
