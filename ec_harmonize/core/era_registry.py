"""Era registry and dispatch.

Each raw-format era of Elections Canada poll-by-poll results has its own
adapter. The pipeline only calls into the adapter registered for an era, and
every era declares (here, as data) how its raw columns map onto the canonical
table so the mapping can be audited without reading adapter code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# Variants of raw layout.
WIDE = "WideCandidateColumns"
LONG = "LongCandidateRow"
LEGACY = "LegacySlotDelimited"

# Marker in a column map: the field is computed (adapter or enricher), not read.
DERIVED = "<derived>"

UTF8 = "utf-8-sig"
CP1252 = "cp1252"


@dataclass(frozen=True)
class Era:
    key: str
    label: str
    parliament: int
    election_date: str
    variant: str
    encoding: str
    results_glob: str
    # canonical field -> raw header | DERIVED | None (absent in this era)
    column_map: Dict[str, Optional[str]] = field(compare=False, hash=False)
    election_type: str = "General"
    delimiter: str = ","
    # (family, first, middle) raw headers for eras that publish split names.
    name_columns: Tuple[str, ...] = ()
    # Non-candidate columns in a wide file that are not mapped anywhere.
    station_extras: Tuple[str, ...] = ()
    districts_table: Optional[str] = None
    candidates_table: Optional[str] = None
    winners_table: Optional[str] = None
    incumbents_table: Optional[str] = None

    @property
    def folder(self) -> str:
        return f"Parliament {self.parliament}"

    def sourced(self) -> Dict[str, str]:
        """Canonical fields read straight from a raw header."""
        return {k: v for k, v in self.column_map.items() if v is not None and v != DERIVED}


_LONG_MAP: Dict[str, Optional[str]] = {
    "Province": DERIVED,
    "Province_Fr": DERIVED,
    "Election_Date": DERIVED,
    "Election_Type": DERIVED,
    "Parliament": DERIVED,
    "Constituency": "Electoral District Name_English/Nom de circonscription_Anglais",
    "Constituency_Fr": "Electoral District Name_French/Nom de circonscription_Français",
    "Electoral_District_No": "Electoral District Number/Numéro de circonscription",
    "Electors": "Electors for Polling Station/Électeurs du bureau",
    "Polling_Station_Name": "Polling Station Name/Nom du bureau de scrutin",
    "Polling_Station_No": "Polling Station Number/Numéro du bureau de scrutin",
    "Merged_With": "Merge With/Fusionné avec",
    "Void_Poll": "Void Poll Indicator/Indicateur de bureau supprimé",
    "No_Poll_Held": "No Poll Held Indicator/Indicateur de bureau sans scrutin",
    "Candidate": DERIVED,
    "Last_Name": DERIVED,
    "First_Name": DERIVED,
    "Middle_Names": DERIVED,
    "Political_Affiliation": "Political Affiliation Name_English/Appartenance politique_Anglais",
    "Political_Affiliation_Fr": "Political Affiliation Name_French/Appartenance politique_Français",
    "Incumbent": "Incumbent Indicator/Indicateur_Candidat sortant",
    "Result": "Elected Candidate Indicator/Indicateur du candidat élu",
    "Votes": "Candidate Poll Votes Count/Votes du candidat pour le bureau",
    "Rejected_Ballots_PollNo": "Rejected Ballots for Polling Station/Bulletins rejetés du bureau",
}

_LONG_NAMES = (
    "Candidate's Family Name/Nom de famille du candidat",
    "Candidate's First Name/Prénom du candidat",
    "Candidate's Middle Name/Second prénom du candidat",
)

_WIDE_MAP: Dict[str, Optional[str]] = {
    "Province": DERIVED,
    "Province_Fr": DERIVED,
    "Election_Date": DERIVED,
    "Election_Type": DERIVED,
    "Parliament": DERIVED,
    "Constituency": "District",
    "Constituency_Fr": DERIVED,
    "Electoral_District_No": DERIVED,
    "Electors": "Electors",
    "Polling_Station_Name": "Poll Name",
    "Polling_Station_No": "Poll Number",
    "Merged_With": DERIVED,
    "Void_Poll": None,
    "No_Poll_Held": None,
    "Candidate": DERIVED,
    "Last_Name": DERIVED,
    "First_Name": DERIVED,
    "Middle_Names": DERIVED,
    "Political_Affiliation": DERIVED,
    "Political_Affiliation_Fr": DERIVED,
    "Incumbent": None,
    "Result": DERIVED,
    "Votes": DERIVED,
    "Rejected_Ballots_PollNo": "Rejected Ballots",
}

_LEGACY_MAP: Dict[str, Optional[str]] = {
    "Province": "province_name_english",
    "Province_Fr": "province_name_french",
    "Election_Date": DERIVED,
    "Election_Type": DERIVED,
    "Parliament": DERIVED,
    "Constituency": "ed_english_name",
    "Constituency_Fr": "ed_french_name",
    "Electoral_District_No": "ed_code",
    "Electors": "poll_electors_on_list_count",
    "Polling_Station_Name": "polling_station_name",
    "Polling_Station_No": "poll_number",
    "Merged_With": "merged_with_poll_number",
    "Void_Poll": "void_indicator",
    "No_Poll_Held": "no_poll_indicator",
    "Candidate": DERIVED,
    "Last_Name": DERIVED,
    "First_Name": DERIVED,
    "Middle_Names": DERIVED,
    "Political_Affiliation": DERIVED,
    "Political_Affiliation_Fr": DERIVED,
    "Incumbent": DERIVED,
    "Result": DERIVED,
    "Votes": DERIVED,
    "Rejected_Ballots_PollNo": "poll_rejected_ballot_count",
}

# Per-slot raw fields in the legacy layout, cand_<i>_<field>.
LEGACY_SLOT_FIELDS: Dict[str, str] = {
    "last_name": "_last",
    "first_name": "_first",
    "middle_name": "_middle",
    "party_english_name": "Political_Affiliation",
    "party_french_name": "Political_Affiliation_Fr",
    "gender_code": "_gender",
    "elected_indicator": "Result",
    "incumbent_indicator": "Incumbent",
    "poll_vote": "Votes",
}
LEGACY_ELECTED_COLUMNS = ("elected_last_name", "elected_first_name", "elected_middle_name")
LEGACY_MAX_SLOTS = 13

_TABLE11 = "tables/table_tableau11.csv"

ERA_1997 = Era("1997", "1997 (tab-delimited candidate slots)", 36, "1997-06-02", LEGACY, CP1252, "*.txt",
               _LEGACY_MAP, delimiter="\t")
ERA_2000 = Era("2000", "2000 (tab-delimited candidate slots)", 37, "2000-11-27", LEGACY, CP1252, "*.txt",
               _LEGACY_MAP, delimiter="\t")
ERA_2004 = Era("2004", "2004 (pollbypoll wide CSV)", 38, "2004-06-28", WIDE, CP1252, "pollbypoll/*.csv",
               _WIDE_MAP, station_extras=("Total Vote",),
               candidates_table="tables/table12.csv", winners_table="tables/table11.csv")
ERA_2006 = Era("2006", "2006 (pollresults long CSV)", 39, "2006-01-23", LONG, CP1252, "pollresults/*.csv",
               _LONG_MAP, name_columns=_LONG_NAMES)
ERA_2008 = Era("2008", "2008 (pollresults long CSV)", 40, "2008-10-14", LONG, CP1252, "pollresults/*.csv",
               _LONG_MAP, name_columns=_LONG_NAMES, districts_table=_TABLE11)
ERA_2011 = Era("2011", "2011 (pollresults long CSV)", 41, "2011-05-02", LONG, CP1252, "pollresults/*.csv",
               _LONG_MAP, name_columns=_LONG_NAMES, districts_table=_TABLE11)
ERA_2015 = Era("2015", "2015 (pollresults long CSV)", 42, "2015-10-19", LONG, UTF8, "pollresults/*.csv",
               _LONG_MAP, name_columns=_LONG_NAMES, districts_table=_TABLE11)
ERA_2019 = Era("2019", "2019 (pollresults long CSV)", 43, "2019-10-21", LONG, UTF8, "pollresults/*.csv",
               _LONG_MAP, name_columns=_LONG_NAMES, districts_table=_TABLE11)

ALL_ERAS: List[Era] = [ERA_1997, ERA_2000, ERA_2004, ERA_2006, ERA_2008, ERA_2011, ERA_2015, ERA_2019]

_BY_PARLIAMENT: Dict[int, Era] = {e.parliament: e for e in ALL_ERAS}


def era_for_parliament(parliament) -> Optional[Era]:
    """Map a parliament number (int or "43" / "Parliament 43") to its era.

    Anything unrecognised returns None; callers should stop rather than guess
    a parser.
    """
    if parliament is None:
        return None
    if isinstance(parliament, str):
        s = parliament.strip()
        if s.lower().startswith("parliament"):
            s = s[len("parliament"):].strip()
        if not s.isdigit():
            return None
        parliament = int(s)
    return _BY_PARLIAMENT.get(int(parliament))


def describe(era: Era) -> Dict[str, Optional[str]]:
    """The era's canonical-field mapping, for audit."""
    return dict(era.column_map)


def districts_sources(era: Era) -> List[Era]:
    """Eras whose district table may serve ``era``, in the order to try them.

    ``era`` itself first when it declares a table, then every later era that
    declares one, nearest first.
    """
    ordered = sorted(ALL_ERAS, key=lambda e: e.parliament)
    return [e for e in ordered if e.parliament >= era.parliament and e.districts_table]
