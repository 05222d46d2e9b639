"""Post-aggregation checks over the canonical table, reported as pass/fail groups."""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from ec_harmonize.aggregate import record_keys
from ec_harmonize.core.schema import RESULT_VALUES

# Failures listed per check; the count is always complete.
MAX_LISTED = 50


def _group(passed: int, failed: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"passed": passed, "failed": failed[:MAX_LISTED], "failed_count": len(failed)}


def check_votes_non_negative(df: pd.DataFrame) -> Dict[str, Any]:
    votes = df["Votes"]
    bad = (votes < 0).fillna(False).astype(bool)
    failed = [
        {"row": int(i), "parliament": int(df.at[i, "Parliament"]), "votes": int(votes[i])}
        for i in df.index[bad]
    ]
    return _group(int(votes.notna().sum()) - len(failed), failed)


def check_rejected_constant_per_station(df: pd.DataFrame) -> Dict[str, Any]:
    keys = record_keys(df).drop(columns=["Candidate"]).astype(str)
    grp = df["Rejected_Ballots_PollNo"].groupby([keys[c] for c in keys.columns], dropna=False)
    distinct = grp.nunique(dropna=False)
    failed = [
        {"station": " / ".join(map(str, k)), "distinct_values": int(n)}
        for k, n in distinct[distinct > 1].items()
    ]
    return _group(int((distinct <= 1).sum()), failed)


def check_unique_record_key(df: pd.DataFrame) -> Dict[str, Any]:
    dup = record_keys(df).duplicated(keep=False)
    failed = [{"row": int(i), "candidate": df.at[i, "Candidate"]} for i in df.index[dup]]
    return _group(int((~dup).sum()), failed)


def check_result_domain(df: pd.DataFrame) -> Dict[str, Any]:
    res = df["Result"].astype(object)
    bad = res.notna() & ~res.isin(RESULT_VALUES)
    failed = [{"row": int(i), "result": res[i]} for i in df.index[bad]]
    return _group(int((~bad).sum()), failed)


def check_candidate_present(df: pd.DataFrame) -> Dict[str, Any]:
    missing = df["Candidate"].isna()
    failed = [
        {"row": int(i), "parliament": int(df.at[i, "Parliament"]), "station": df.at[i, "Polling_Station_No"]}
        for i in df.index[missing]
    ]
    return _group(int((~missing).sum()), failed)


def run_checks(df: pd.DataFrame) -> Dict[str, Any]:
    checks = {
        "votes_non_negative": check_votes_non_negative(df),
        "rejected_ballots_constant_per_station": check_rejected_constant_per_station(df),
        "unique_record_key": check_unique_record_key(df),
        "result_domain": check_result_domain(df),
        "candidate_present": check_candidate_present(df),
    }
    return {"records": int(len(df)), "checks": checks}


def has_fail(detail: Dict[str, Any]) -> bool:
    for group in detail.get("checks", {}).values():
        if isinstance(group, dict) and group.get("failed_count"):
            return True
    return False
