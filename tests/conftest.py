"""Shared fixtures: tiny raw files in each Elections Canada layout."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence

import pytest

from ec_harmonize.core.errors import ErrorReport

LONG_HEADERS: List[str] = [
    "Electoral District Number/Numéro de circonscription",
    "Electoral District Name_English/Nom de circonscription_Anglais",
    "Electoral District Name_French/Nom de circonscription_Français",
    "Polling Station Number/Numéro du bureau de scrutin",
    "Polling Station Name/Nom du bureau de scrutin",
    "Void Poll Indicator/Indicateur de bureau supprimé",
    "No Poll Held Indicator/Indicateur de bureau sans scrutin",
    "Merge With/Fusionné avec",
    "Rejected Ballots for Polling Station/Bulletins rejetés du bureau",
    "Electors for Polling Station/Électeurs du bureau",
    "Candidate’s Family Name/Nom de famille du candidat",
    "Candidate’s Middle Name/Second prénom du candidat",
    "Candidate’s First Name/Prénom du candidat",
    "Political Affiliation Name_English/Appartenance politique_Anglais",
    "Political Affiliation Name_French/Appartenance politique_Français",
    "Incumbent Indicator/Indicateur_Candidat sortant",
    "Elected Candidate Indicator/Indicateur du candidat élu",
    "Candidate Poll Votes Count/Votes du candidat pour le bureau",
]

WIDE_STATION_HEADERS = ["District", "Poll Number", "Poll Name", "Electors"]
WIDE_TRAILING_HEADERS = ["Rejected Ballots", "Total Vote"]

LEGACY_STATION_HEADERS: List[str] = [
    "event_number",
    "ed_code",
    "ed_english_name",
    "ed_french_name",
    "province_name_english",
    "province_name_french",
    "poll_rejected_ballot_count",
    "poll_electors_on_list_count",
    "polling_station_name",
    "poll_number",
    "void_indicator",
    "no_poll_indicator",
    "merged_with_poll_number",
    "elected_last_name",
    "elected_first_name",
    "elected_middle_name",
]
LEGACY_SLOT_SUFFIXES: List[str] = [
    "last_name",
    "first_name",
    "middle_name",
    "party_english_name",
    "party_french_name",
    "gender_code",
    "elected_indicator",
    "incumbent_indicator",
    "poll_vote",
]

DISTRICT_HEADERS = [
    "Province",
    "Electoral District Name/Nom de circonscription",
    "Electoral District Number/Numéro de circonscription",
]


def write_table(
    path: Path,
    header: Sequence[str],
    rows: Sequence[Sequence],
    encoding: str = "utf-8",
    sep: str = ",",
) -> Path:
    """Write a small delimited file; fields containing the separator are quoted."""

    def cell(v) -> str:
        s = "" if v is None else str(v)
        if sep in s or '"' in s:
            s = '"' + s.replace('"', '""') + '"'
        return s

    lines = [sep.join(cell(h) for h in header)]
    lines += [sep.join(cell(v) for v in r) for r in rows]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(("\n".join(lines) + "\n").encode(encoding))
    return path


def long_row(**kw) -> List:
    """One long-format row; keyword names are short aliases of LONG_HEADERS."""
    values: Dict[str, object] = {
        "no": "35001",
        "name": "Ottawa Centre",
        "name_fr": "Ottawa-Centre",
        "station": "1",
        "station_name": "Glebe",
        "void": "N",
        "no_poll": "N",
        "merge": "",
        "rejected": "2",
        "electors": "400",
        "last": "Smith",
        "middle": "",
        "first": "John A.",
        "party": "Liberal",
        "party_fr": "Libéral",
        "incumbent": "N",
        "elected": "Y",
        "votes": "150",
    }
    values.update(kw)
    order = [
        "no", "name", "name_fr", "station", "station_name", "void", "no_poll", "merge", "rejected",
        "electors", "last", "middle", "first", "party", "party_fr", "incumbent", "elected", "votes",
    ]
    return [values[k] for k in order]


def legacy_header(slots: int = 2) -> List[str]:
    header = list(LEGACY_STATION_HEADERS)
    for i in range(1, slots + 1):
        header += [f"cand_{i}_{s}" for s in LEGACY_SLOT_SUFFIXES]
    return header


def legacy_row(station: Dict[str, object], candidates: Sequence[Dict[str, object]], slots: int = 2) -> List:
    base = {
        "event_number": "36",
        "ed_code": "35001",
        "ed_english_name": "Ottawa Centre",
        "ed_french_name": "Ottawa-Centre",
        "province_name_english": "Ontario",
        "province_name_french": "Ontario",
        "poll_rejected_ballot_count": "4",
        "poll_electors_on_list_count": "350",
        "polling_station_name": "Glebe",
        "poll_number": "1",
        "void_indicator": "N",
        "no_poll_indicator": "N",
        "merged_with_poll_number": "",
        "elected_last_name": "",
        "elected_first_name": "",
        "elected_middle_name": "",
    }
    base.update(station)
    row = [base[h] for h in LEGACY_STATION_HEADERS]
    for i in range(slots):
        cand = candidates[i] if i < len(candidates) else {}
        row += [cand.get(s, "") for s in LEGACY_SLOT_SUFFIXES]
    return row


def canonical_row(**kw) -> Dict[str, object]:
    """One unified (pre-coercion) record; keyword names are canonical columns."""
    row: Dict[str, object] = {
        "Province": "Ontario",
        "Province_Fr": "Ontario",
        "Election_Date": "2008-10-14",
        "Election_Type": "General",
        "Parliament": 40,
        "Constituency": "Ottawa Centre",
        "Constituency_Fr": "Ottawa-Centre",
        "Electoral_District_No": "35001",
        "Electors": "400",
        "Polling_Station_Name": "Glebe",
        "Polling_Station_No": "1",
        "Merged_With": None,
        "Void_Poll": "N",
        "No_Poll_Held": "N",
        "Candidate": "Smith, John A.",
        "Last_Name": "Smith",
        "First_Name": "John",
        "Middle_Names": "A.",
        "Political_Affiliation": "Liberal Party of Canada",
        "Political_Affiliation_Fr": "Parti libéral du Canada",
        "Incumbent": "N",
        "Result": "Elected",
        "Votes": "150",
        "Rejected_Ballots_PollNo": "2",
    }
    row.update(kw)
    return row


@pytest.fixture
def report() -> ErrorReport:
    return ErrorReport()


@pytest.fixture
def wide_file(tmp_path: Path) -> Path:
    """The two-candidate example station from the 2004 layout."""
    header = WIDE_STATION_HEADERS + ["A. Smith", "B. Jones"] + WIDE_TRAILING_HEADERS
    rows = [["Centretown", "12", "Hall", "500", "120", "80", "3", "200"]]
    return write_table(tmp_path / "pollbypoll" / "35001.csv", header, rows, encoding="cp1252")


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """A miniature raw-data tree with one era of each layout plus lookup tables."""
    root = tmp_path / "raw"

    # Parliament 36: tab-delimited slots.
    write_table(
        root / "Parliament 36" / "35001.txt",
        legacy_header(3),
        [
            legacy_row(
                {"poll_number": "1", "elected_last_name": "Adams", "elected_first_name": "Mary"},
                [
                    {"last_name": "Adams", "first_name": "Mary", "party_english_name": "Liberal Party of Canada",
                     "party_french_name": "Parti libéral du Canada", "incumbent_indicator": "Y", "poll_vote": "90"},
                    {"last_name": "Baker", "first_name": "Tom", "middle_name": "R.",
                     "party_english_name": "Reform Party of Canada", "incumbent_indicator": "N", "poll_vote": "60"},
                ],
                slots=3,
            ),
            legacy_row(
                {"poll_number": "2", "poll_rejected_ballot_count": "1",
                 "elected_last_name": "Adams", "elected_first_name": "Mary"},
                [
                    {"last_name": "Adams", "first_name": "Mary", "party_english_name": "Liberal Party of Canada",
                     "incumbent_indicator": "Y", "poll_vote": "30"},
                    {"last_name": "Baker", "first_name": "Tom", "middle_name": "R.",
                     "party_english_name": "Reform Party of Canada", "incumbent_indicator": "N", "poll_vote": "45"},
                ],
                slots=3,
            ),
        ],
        encoding="cp1252",
        sep="\t",
    )

    # Parliament 38: wide CSV + candidates and winners tables.
    p38 = root / "Parliament 38"
    write_table(
        p38 / "pollbypoll" / "35001.csv",
        WIDE_STATION_HEADERS + ["A. Smith", "B. Jones"] + WIDE_TRAILING_HEADERS,
        [
            ["Ottawa Centre/Ottawa-Centre", "1", "Glebe", "500", "120", "80", "3", "200"],
            ["Ottawa Centre/Ottawa-Centre", "2", "Centretown", "300", "Merged with No. 1", "Merged with No. 1", "0", ""],
        ],
        encoding="cp1252",
    )
    write_table(
        p38 / "tables" / "table12.csv",
        ["Province", "District", "Candidate"],
        [
            ["Ontario", "Ottawa Centre/Ottawa-Centre", "** A. Smith Liberal/Libéral"],
            ["Ontario", "Ottawa Centre/Ottawa-Centre", "B. Jones N.D.P./N.P.D."],
        ],
        encoding="cp1252",
    )
    write_table(
        p38 / "tables" / "table11.csv",
        ["Province", "District", "Candidate"],
        [["Ontario", "Ottawa Centre/Ottawa-Centre", "Smith, A. Liberal/Libéral"]],
        encoding="cp1252",
    )

    # Parliament 40: long CSV + district table (also serves 38 and 39).
    p40 = root / "Parliament 40"
    write_table(
        p40 / "pollresults" / "pollresults_resultatsbureau35001.csv",
        LONG_HEADERS,
        [
            long_row(station="1", last="Smith", first="John A.", party="Liberal", elected="Y", votes="150"),
            long_row(station="1", last="Doe", first="Jane", party="NDP-New Democratic Party",
                     party_fr="NPD-Nouveau Parti démocratique", elected="N", votes="75"),
            long_row(station="2", rejected="0", last="Smith", first="John A.", party="Liberal", elected="Y", votes="20"),
            long_row(station="2", rejected="0", last="Doe", first="Jane", party="NDP-New Democratic Party",
                     party_fr="NPD-Nouveau Parti démocratique", elected="N", votes="25"),
        ],
        encoding="cp1252",
    )
    write_table(
        p40 / "tables" / "table_tableau11.csv",
        DISTRICT_HEADERS,
        [
            ["Ontario", "Ottawa Centre/Ottawa-Centre", "35001"],
            ["Quebec/Québec", "Hull--Aylmer", "24030"],
        ],
        encoding="cp1252",
    )
    return root
