"""Unit tests for raw-file decoding and header handling."""

from pathlib import Path

import pandas as pd
import pytest

from ec_harmonize.core.errors import EncodingError, ParseError
from ec_harmonize.readers import (
    decode_strict,
    missing_columns,
    normalize_header,
    read_text_table,
    rename_to_canonical,
)


class TestDecode:
    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.csv"
        path.write_bytes(b"a,b\n1,\xff\n")
        with pytest.raises(EncodingError) as exc:
            decode_strict(path, "utf-8-sig")
        assert exc.value.position == 6

    def test_cp1252_accents(self, tmp_path: Path) -> None:
        path = tmp_path / "ok.csv"
        path.write_bytes("Province\nQuébec\n".encode("cp1252"))
        assert "Québec" in decode_strict(path, "cp1252")


class TestHeaders:
    def test_bom_and_apostrophe(self) -> None:
        assert normalize_header("\ufeffCandidate’s  Family Name") == "Candidate's Family Name"

    def test_rename_case_insensitive(self) -> None:
        df = pd.DataFrame(columns=["POLL NUMBER", "Electors", "Other"])
        out = rename_to_canonical(df, {"Polling_Station_No": "Poll Number", "Electors": "Electors"})
        assert list(out.columns) == ["Polling_Station_No", "Electors", "Other"]

    def test_missing_columns(self) -> None:
        df = pd.DataFrame(columns=["candidate's family name/nom de famille du candidat"])
        assert missing_columns(df, ["Candidate’s Family Name/Nom de famille du candidat", "Votes"]) == ["Votes"]


class TestReadTextTable:
    """Tests for read_text_table()."""

    def test_text_columns_and_blanks(self, tmp_path: Path) -> None:
        path = tmp_path / "t.csv"
        path.write_text("\ufeffPoll Number,Electors,\n001,500,\n002,,\n", encoding="utf-8")
        df = read_text_table(path, "utf-8", "WideCandidateColumns")
        assert list(df.columns) == ["Poll Number", "Electors"]
        assert df["Poll Number"].tolist() == ["001", "002"]
        assert pd.isna(df.at[1, "Electors"])

    def test_na_token_stays_text(self, tmp_path: Path) -> None:
        path = tmp_path / "t.csv"
        path.write_text("Last\nNA\n", encoding="utf-8")
        df = read_text_table(path, "utf-8", "LongCandidateRow")
        assert df.at[0, "Last"] == "NA"

    def test_missing_required_column(self, tmp_path: Path) -> None:
        path = tmp_path / "t.csv"
        path.write_text("Poll Number\n1\n", encoding="utf-8")
        with pytest.raises(ParseError, match="missing column"):
            read_text_table(path, "utf-8", "WideCandidateColumns", required=["Poll Number", "Electors"])

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "t.csv"
        path.write_text("  \n", encoding="utf-8")
        with pytest.raises(ParseError, match="empty file"):
            read_text_table(path, "utf-8", "LongCandidateRow")

    def test_tab_delimited(self, tmp_path: Path) -> None:
        path = tmp_path / "t.txt"
        path.write_text("ed_code\tpoll_number\n35001\t1\n", encoding="cp1252")
        df = read_text_table(path, "cp1252", "LegacySlotDelimited", delimiter="\t")
        assert df.to_dict("records") == [{"ed_code": "35001", "poll_number": "1"}]
