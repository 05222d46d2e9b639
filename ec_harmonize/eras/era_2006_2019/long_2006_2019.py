"""2006-2019 "pollresults" files: one row per (polling station, candidate).

Family, first and middle names are published in separate columns, but the
first-name column usually carries the middle name too ("Alexander J."). The
first token is kept as the first name; the rest is prepended to the middle
names. A two-token given name such as "Mary Ann" is therefore split wrongly.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from ec_harmonize.core.era_registry import LONG
from ec_harmonize.core.errors import ErrorReport
from ec_harmonize.eras.base import ROW, EraAdapter
from ec_harmonize.libs import names
from ec_harmonize.readers import rename_to_canonical

_NAME_HELPERS = ("_last", "_first", "_middle")


class LongCandidateRowAdapter(EraAdapter):
    variant = LONG

    def parse_frame(self, raw: pd.DataFrame, path: Path, report: ErrorReport) -> pd.DataFrame:
        mapping = dict(self.era.sourced())
        mapping.update(zip(_NAME_HELPERS, self.era.name_columns))
        df = rename_to_canonical(raw, mapping)

        parts = list(zip(*(df[c] for c in _NAME_HELPERS)))
        name_cols = self.name_frame(parts, names.LAST_FIRST, index=df.index)

        keep = [c for c in self.era.sourced() if c in df.columns] + [ROW]
        return pd.concat([df[keep], name_cols], axis=1)
