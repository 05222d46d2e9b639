from __future__ import annotations

from typing import List

# Output column order of the canonical table.
CANONICAL_COLUMNS: List[str] = [
    "Province",
    "Province_Fr",
    "Election_Date",
    "Election_Type",
    "Parliament",
    "Constituency",
    "Constituency_Fr",
    "Electoral_District_No",
    "Electors",
    "Polling_Station_Name",
    "Polling_Station_No",
    "Merged_With",
    "Void_Poll",
    "No_Poll_Held",
    "Candidate",
    "Last_Name",
    "First_Name",
    "Middle_Names",
    "Political_Affiliation",
    "Political_Affiliation_Fr",
    "Incumbent",
    "Result",
    "Votes",
    "Rejected_Ballots_PollNo",
]

INT_COLUMNS: List[str] = [
    "Parliament",
    "Electoral_District_No",
    "Electors",
    "Votes",
    "Rejected_Ballots_PollNo",
]
BOOL_COLUMNS: List[str] = ["Void_Poll", "No_Poll_Held", "Incumbent"]

RECORD_KEY: List[str] = ["Parliament", "Electoral_District_No", "Polling_Station_No", "Candidate"]

RESULT_ELECTED = "Elected"
RESULT_DEFEATED = "Defeated"
RESULT_VALUES: List[str] = [RESULT_ELECTED, RESULT_DEFEATED]

PROVINCE_ORDER: List[str] = [
    "British Columbia",
    "Alberta",
    "Saskatchewan",
    "Manitoba",
    "Ontario",
    "Quebec",
    "Newfoundland and Labrador",
    "New Brunswick",
    "Nova Scotia",
    "Prince Edward Island",
    "Yukon",
    "Northwest Territories",
    "Nunavut",
]

PROVINCE_ALIASES = {
    "Québec": "Quebec",
    "Newfoundland": "Newfoundland and Labrador",
    "Yukon Territory": "Yukon",
    "N.W.T.": "Northwest Territories",
}
