"""Electoral district directory: district number / constituency name -> province.

Built once per run from each era's ``table_tableau11.csv``. Eras that shipped
no usable table borrow the nearest later table that loads (district numbers carry
over between consecutive representation orders).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd
from loguru import logger

from ec_harmonize.core.era_registry import Era, districts_sources, era_for_parliament
from ec_harmonize.core.errors import EncodingError, ErrorReport, JoinMiscount, ParseError
from ec_harmonize.libs.formatting import clean_text, split_bilingual, to_int
from ec_harmonize.readers import missing_columns, read_lookup_table

PROVINCE_HEADER = "Province"
DISTRICT_NO_HEADER = "Electoral District Number/Numéro de circonscription"
DISTRICT_NAME_HEADER = "Electoral District Name/Nom de circonscription"

_DASHES_RE = re.compile(r"[‐-―\-]+")
_QUOTES_RE = re.compile(r"[\"'’‘`´]")


@dataclass(frozen=True)
class ElectoralDistrictEntry:
    district_no: Optional[int]
    province_en: Optional[str]
    province_fr: Optional[str]
    constituency_en: Optional[str] = None
    constituency_fr: Optional[str] = None


UNKNOWN = ElectoralDistrictEntry(None, None, None)


def normalize_constituency(name) -> Optional[str]:
    """Matching form of a constituency name: case, dash, quote and space insensitive."""
    s = clean_text(name)
    if s is None:
        return None
    s = _DASHES_RE.sub("-", s)
    s = _QUOTES_RE.sub("", s)
    s = re.sub(r"\s*-\s*", "-", s)
    return re.sub(r"\s+", " ", s).strip().casefold() or None


def _as_int(v) -> Optional[int]:
    s = clean_text(v)
    if s is None:
        return None
    try:
        return int(float(s.replace(",", "")))
    except ValueError:
        return None


def _parliament(era: Union[Era, int]) -> int:
    return era.parliament if isinstance(era, Era) else int(era)


def entries_from_table(df: pd.DataFrame) -> List[ElectoralDistrictEntry]:
    """Rows of a district table as entries; the bilingual columns are split in two."""
    missing = missing_columns(df, [PROVINCE_HEADER, DISTRICT_NO_HEADER])
    if missing:
        raise ParseError(None, "district table", "missing column(s): " + ", ".join(missing))
    lookup = {c.casefold(): c for c in df.columns}
    prov_col = lookup[PROVINCE_HEADER.casefold()]
    no_col = lookup[DISTRICT_NO_HEADER.casefold()]
    name_col = lookup.get(DISTRICT_NAME_HEADER.casefold())

    numbers = to_int(df[no_col])
    out: List[ElectoralDistrictEntry] = []
    for i, idx in enumerate(df.index):
        prov_en, prov_fr = split_bilingual(df.at[idx, prov_col])
        name_en, name_fr = split_bilingual(df.at[idx, name_col]) if name_col else (None, None)
        no = numbers.iloc[i]
        out.append(
            ElectoralDistrictEntry(
                district_no=None if pd.isna(no) else int(no),
                province_en=prov_en,
                province_fr=prov_fr,
                constituency_en=name_en,
                constituency_fr=name_fr,
            )
        )
    return out


class DistrictDirectory:
    """Per-era lookup of district entries; unknown keys resolve to null fields."""

    def __init__(self) -> None:
        self._by_no: Dict[int, Dict[int, ElectoralDistrictEntry]] = {}
        self._by_name: Dict[int, Dict[str, List[ElectoralDistrictEntry]]] = {}
        self._source: Dict[int, int] = {}

    # ---------------- building ----------------

    def add_entries(self, era: Union[Era, int], entries: Iterable[ElectoralDistrictEntry]) -> None:
        p = _parliament(era)
        by_no: Dict[int, ElectoralDistrictEntry] = {}
        by_name: Dict[str, List[ElectoralDistrictEntry]] = {}
        for e in entries:
            if e.district_no is not None:
                by_no.setdefault(e.district_no, e)
            for name in {normalize_constituency(e.constituency_en), normalize_constituency(e.constituency_fr)}:
                if name is None:
                    continue
                bucket = by_name.setdefault(name, [])
                if e not in bucket:
                    bucket.append(e)
        self._by_no[p] = by_no
        self._by_name[p] = by_name
        self._source[p] = p

    def borrow(self, era: Union[Era, int], from_era: Union[Era, int]) -> None:
        p, src = _parliament(era), _parliament(from_era)
        self._by_no[p] = self._by_no[src]
        self._by_name[p] = self._by_name[src]
        self._source[p] = src

    @classmethod
    def build(
        cls,
        data_root: Path,
        eras: Iterable[Era],
        report: Optional[ErrorReport] = None,
    ) -> "DistrictDirectory":
        """Read every needed district table once and wire up borrowing.

        Each era takes its own table when that loads, else the nearest later
        era's table that does. Unusable tables are recorded once and skipped.
        """
        directory = cls()
        loaded: Dict[int, bool] = {}
        for era in sorted(eras, key=lambda e: e.parliament):
            src = None
            skipped: List[int] = []
            for candidate in districts_sources(era):
                if candidate.parliament not in loaded:
                    loaded[candidate.parliament] = directory._load(Path(data_root), candidate, report)
                if loaded[candidate.parliament]:
                    src = candidate
                    break
                skipped.append(candidate.parliament)
            if skipped and report is not None:
                report.note(
                    f"Parliament {era.parliament}: skipped unusable district table(s) of Parliament(s) "
                    + ", ".join(map(str, skipped))
                )
            if src is None:
                logger.warning("Parliament {}: no district table available", era.parliament)
                continue
            if src.parliament != era.parliament:
                directory.borrow(era, src)
                msg = f"Parliament {era.parliament}: district table borrowed from Parliament {src.parliament}"
                logger.info(msg)
                if report is not None:
                    report.note(msg)
        return directory

    def _load(self, data_root: Path, era: Era, report: Optional[ErrorReport]) -> bool:
        path = data_root / era.folder / era.districts_table
        if not path.exists():
            logger.warning("Parliament {}: district table not found at {}", era.parliament, path)
            if report is not None:
                report.add("ParseError", "district table not found", file=path, parliament=era.parliament)
            return False
        try:
            entries = entries_from_table(read_lookup_table(path, era.encoding))
        except (ParseError, EncodingError) as e:
            e.path = path
            logger.warning("Parliament {}: unusable district table: {}", era.parliament, e)
            if report is not None:
                report.record(e, parliament=era.parliament)
            return False
        self.add_entries(era, entries)
        logger.debug("Parliament {}: {} districts from {}", era.parliament, len(entries), path.name)
        return True

    # ---------------- lookups ----------------

    def has(self, era: Union[Era, int]) -> bool:
        return _parliament(era) in self._by_no

    def source_of(self, era: Union[Era, int]) -> Optional[int]:
        return self._source.get(_parliament(era))

    def lookup(self, district_no, era: Union[Era, int]) -> ElectoralDistrictEntry:
        no = _as_int(district_no)
        if no is None:
            return UNKNOWN
        return self._by_no.get(_parliament(era), {}).get(no, UNKNOWN)

    def lookup_constituency(
        self,
        name,
        era: Union[Era, int],
        report: Optional[ErrorReport] = None,
    ) -> ElectoralDistrictEntry:
        key = normalize_constituency(name)
        if key is None:
            return UNKNOWN
        p = _parliament(era)
        matches = self._by_name.get(p, {}).get(key, [])
        if not matches:
            return UNKNOWN
        if len(matches) > 1 and report is not None:
            report.record(JoinMiscount(key, len(matches), f"districts (Parliament {self._source.get(p, p)})"), parliament=p)
        return matches[0]


def describe_sources(directory: DistrictDirectory, parliaments: Iterable[int]) -> Dict[int, Optional[int]]:
    """Which parliament's table serves each requested parliament."""
    return {p: directory.source_of(p) for p in parliaments if era_for_parliament(p) is not None}
