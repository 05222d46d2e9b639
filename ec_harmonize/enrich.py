"""Backfill province, district number, party, result and incumbency.

Native values always win; lookups only fill what an era left empty. Party
strings in every era are passed through the normalizer so the canonical table
carries one vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd
from loguru import logger

from ec_harmonize.core.era_registry import Era
from ec_harmonize.core.errors import EncodingError, ErrorReport, JoinMiscount, ParseError
from ec_harmonize.core.schema import RESULT_DEFEATED, RESULT_ELECTED
from ec_harmonize.districts import DistrictDirectory, normalize_constituency
from ec_harmonize.libs import names
from ec_harmonize.libs.formatting import bool_token, clean_text, is_missing, split_bilingual
from ec_harmonize.libs.parties import DEFAULT_NORMALIZER, PartyNameNormalizer
from ec_harmonize.readers import read_lookup_table

Key = Tuple[Optional[str], str]


@dataclass
class AuxTables:
    """An era's auxiliary lookups, already keyed by (constituency, canonical name)."""

    candidates: Optional[pd.DataFrame] = None
    winners: Optional[pd.DataFrame] = None
    incumbents: Optional[pd.DataFrame] = None


def _find_col(df: pd.DataFrame, name: str) -> Optional[str]:
    """Column whose English half (before "/") is ``name``, ignoring case."""
    want = name.casefold()
    for c in df.columns:
        if str(c).split("/")[0].strip().casefold() == want:
            return c
    return None


def parse_candidate_table(
    df: pd.DataFrame,
    order: str,
    normalizer: PartyNameNormalizer = DEFAULT_NORMALIZER,
    report: Optional[ErrorReport] = None,
    path: Optional[Path] = None,
) -> pd.DataFrame:
    """Rows of "<name> <party variant>" as constituency / key / party / province.

    Leading asterisks (used by the authority to flag winners) are dropped
    before the party suffix is stripped. An unknown bilingual suffix is split
    off by word count and kept raw, so it surfaces as a normalization gap once
    joined. Rows with no party suffix or no name are recorded on ``report``.
    """
    cand_col = _find_col(df, "Candidate")
    if cand_col is None:
        raise ParseError(path, "candidate table", "missing column(s): Candidate")
    dist_col = _find_col(df, "District")
    prov_col = _find_col(df, "Province")

    rows = []
    for line, idx in enumerate(df.index, start=2):
        text = clean_text(df.at[idx, cand_col])
        if text is None:
            continue
        text = text.lstrip("*").strip()
        name, raw_party = normalizer.strip_suffix(text, guess=True)
        key = names.normalize_key(name, order)
        if report is not None and (key is None or raw_party is None):
            problem = "no candidate name" if key is None else "no party suffix"
            report.add("ParseError", f"candidate table: {problem} in {text!r}", file=path, row=line)
        if key is None:
            continue
        constituency = split_bilingual(df.at[idx, dist_col])[0] if dist_col else None
        prov_en, prov_fr = split_bilingual(df.at[idx, prov_col]) if prov_col else (None, None)
        rows.append(
            {
                "constituency": normalize_constituency(constituency),
                "key": key,
                "raw_party": raw_party,
                "party": normalizer.normalize(raw_party),
                "province_en": prov_en,
                "province_fr": prov_fr,
            }
        )
    cols = ["constituency", "key", "raw_party", "party", "province_en", "province_fr"]
    return pd.DataFrame(rows, columns=cols)


def load_aux_tables(
    data_root: Path,
    era: Era,
    report: ErrorReport,
    normalizer: PartyNameNormalizer = DEFAULT_NORMALIZER,
) -> AuxTables:
    aux = AuxTables()
    specs = [
        ("candidates", era.candidates_table, names.DISPLAY),
        ("winners", era.winners_table, names.LAST_FIRST),
        ("incumbents", era.incumbents_table, names.LAST_FIRST),
    ]
    for attr, rel, order in specs:
        if not rel:
            continue
        path = Path(data_root) / era.folder / rel
        if not path.exists():
            logger.warning("Parliament {}: {} table not found at {}", era.parliament, attr, path)
            report.add("ParseError", f"{attr} table not found", file=path, parliament=era.parliament)
            continue
        try:
            table = parse_candidate_table(read_lookup_table(path, era.encoding), order, normalizer, report, path)
        except (ParseError, EncodingError) as e:
            e.path = path
            logger.warning("Parliament {}: unusable {} table: {}", era.parliament, attr, e)
            report.record(e, parliament=era.parliament)
            continue
        setattr(aux, attr, table)
        logger.debug("Parliament {}: {} {} rows from {}", era.parliament, len(table), attr, path.name)
    return aux


def _index(table: pd.DataFrame) -> Tuple[Dict[Key, List[int]], Dict[str, List[int]]]:
    scoped: Dict[Key, List[int]] = {}
    by_key: Dict[str, List[int]] = {}
    for i, (c, k) in enumerate(zip(table["constituency"], table["key"])):
        if c is not None:
            scoped.setdefault((c, k), []).append(i)
        by_key.setdefault(k, []).append(i)
    return scoped, by_key


def _native_result(v) -> Optional[str]:
    b = bool_token(v)
    if b is pd.NA:
        return None
    return RESULT_ELECTED if b else RESULT_DEFEATED


class RecordEnricher:
    def __init__(
        self,
        directory: Optional[DistrictDirectory] = None,
        normalizer: PartyNameNormalizer = DEFAULT_NORMALIZER,
    ) -> None:
        self.directory = directory or DistrictDirectory()
        self.normalizer = normalizer

    def enrich(
        self,
        df: pd.DataFrame,
        era: Era,
        report: ErrorReport,
        aux: Optional[AuxTables] = None,
    ) -> pd.DataFrame:
        aux = aux or AuxTables()
        out = df.copy()
        for c in (
            "Province", "Province_Fr", "Constituency", "Constituency_Fr", "Electoral_District_No",
            "Political_Affiliation", "Political_Affiliation_Fr", "Result", "Incumbent",
        ):
            if c not in out.columns:
                out[c] = None
            out[c] = out[c].astype(object)

        out = self.fill_districts(out, era, report)
        out = self.fill_party(out, era, report, aux.candidates)
        out = self.fill_result(out, aux.winners)
        out = self.fill_incumbent(out, aux.incumbents)
        return out

    # ---------------- districts ----------------

    def fill_districts(self, df: pd.DataFrame, era: Era, report: ErrorReport) -> pd.DataFrame:
        if not self.directory.has(era):
            return df
        out = df
        has_no = ~out["Electoral_District_No"].map(is_missing)

        need = has_no & (out["Province"].map(is_missing) | out["Province_Fr"].map(is_missing))
        for no in out.loc[need, "Electoral_District_No"].unique():
            e = self.directory.lookup(no, era)
            rows = need & (out["Electoral_District_No"] == no)
            self._fill(out, rows, "Province", e.province_en)
            self._fill(out, rows, "Province_Fr", e.province_fr)

        by_name = ~has_no & ~out["Constituency"].map(is_missing)
        for name in out.loc[by_name, "Constituency"].unique():
            e = self.directory.lookup_constituency(name, era, report)
            rows = by_name & (out["Constituency"] == name)
            self._fill(out, rows, "Electoral_District_No", e.district_no)
            self._fill(out, rows, "Province", e.province_en)
            self._fill(out, rows, "Province_Fr", e.province_fr)
            self._fill(out, rows, "Constituency_Fr", e.constituency_fr)

        unresolved = out["Province"].map(is_missing)
        if unresolved.any():
            logger.warning("Parliament {}: {} row(s) without a province after district lookup", era.parliament, int(unresolved.sum()))
        return out

    @staticmethod
    def _fill(df: pd.DataFrame, rows: pd.Series, col: str, value) -> None:
        if value is None:
            return
        target = rows & df[col].map(is_missing)
        if target.any():
            df.loc[target, col] = value

    # ---------------- party ----------------

    def fill_party(
        self,
        df: pd.DataFrame,
        era: Era,
        report: ErrorReport,
        candidates: Optional[pd.DataFrame],
    ) -> pd.DataFrame:
        out = df
        if candidates is not None and not candidates.empty:
            out = self._join_candidates(out, era, report, candidates)

        values = out["Political_Affiliation"]
        mapping: Dict[str, Tuple[Optional[str], bool]] = {}
        for raw in values.dropna().unique():
            canonical, known = self.normalizer.match(raw)
            mapping[raw] = (canonical, known)
            if not known:
                report.gap(str(raw))
        if mapping:
            gaps = [r for r, (_, known) in mapping.items() if not known]
            if gaps:
                logger.info("Parliament {}: {} party string(s) outside the vocabulary", era.parliament, len(gaps))

        canon = values.map(lambda v: None if is_missing(v) else mapping[v][0])
        known = values.map(lambda v: False if is_missing(v) else mapping[v][1])
        french = canon.map(self.normalizer.french)
        out["Political_Affiliation_Fr"] = french.where(known.astype(bool), out["Political_Affiliation_Fr"].map(clean_text))
        out["Political_Affiliation"] = canon
        return out

    def _join_candidates(
        self,
        df: pd.DataFrame,
        era: Era,
        report: ErrorReport,
        candidates: pd.DataFrame,
    ) -> pd.DataFrame:
        scoped, by_key = _index(candidates)
        table = f"candidates (Parliament {era.parliament})"
        const_norm = df["Constituency"].map(normalize_constituency)
        party = df["Political_Affiliation"].copy()
        prov_en = df["Province"].copy()
        prov_fr = df["Province_Fr"].copy()

        resolved: Dict[Key, Optional[int]] = {}
        for idx, (c, k) in zip(df.index, zip(const_norm, df["Candidate"])):
            if is_missing(k):
                continue
            pair = (c, k)
            if pair not in resolved:
                hits = scoped.get(pair) if c is not None else None
                if not hits:
                    hits = by_key.get(k, [])
                if len(hits) != 1:
                    report.record(JoinMiscount(f"{c} / {k}" if c else k, len(hits), table), parliament=era.parliament)
                resolved[pair] = hits[0] if hits else None
            hit = resolved[pair]
            if hit is None:
                continue
            row = candidates.iloc[hit]
            if is_missing(party.at[idx]):
                party.at[idx] = row["party"]
            if is_missing(prov_en.at[idx]) and row["province_en"] is not None:
                prov_en.at[idx] = row["province_en"]
                prov_fr.at[idx] = row["province_fr"]

        misses = sum(1 for v in resolved.values() if v is None)
        if misses:
            logger.warning("Parliament {}: {} candidate(s) not found in the candidates table; see run report", era.parliament, misses)
        out = df
        out["Political_Affiliation"] = party
        out["Province"] = prov_en
        out["Province_Fr"] = prov_fr
        return out

    # ---------------- result / incumbency ----------------

    @staticmethod
    def _members(df: pd.DataFrame, table: pd.DataFrame) -> pd.Series:
        scoped = {(c, k) for c, k in zip(table["constituency"], table["key"]) if c is not None}
        unscoped = {k for c, k in zip(table["constituency"], table["key"]) if c is None}
        const_norm = df["Constituency"].map(normalize_constituency)
        return pd.Series(
            [(c, k) in scoped or k in unscoped for c, k in zip(const_norm, df["Candidate"])],
            index=df.index,
            dtype=bool,
        )

    def fill_result(self, df: pd.DataFrame, winners: Optional[pd.DataFrame]) -> pd.DataFrame:
        out = df
        if winners is not None:
            member = self._members(out, winners)
            out["Result"] = member.map({True: RESULT_ELECTED, False: RESULT_DEFEATED}).astype(object)
        else:
            out["Result"] = out["Result"].map(_native_result).astype(object)
        return out

    def fill_incumbent(self, df: pd.DataFrame, incumbents: Optional[pd.DataFrame]) -> pd.DataFrame:
        out = df
        if incumbents is not None:
            out["Incumbent"] = self._members(out, incumbents).astype("boolean")
        else:
            out["Incumbent"] = out["Incumbent"].map(bool_token).astype("boolean")
        return out
