"""Unit tests for the 2006-2019 long-format adapter."""

from pathlib import Path

from conftest import LONG_HEADERS, long_row, write_table

from ec_harmonize.core.era_registry import ERA_2008, ERA_2019
from ec_harmonize.core.errors import ErrorReport
from ec_harmonize.eras.era_2006_2019.long_2006_2019 import LongCandidateRowAdapter


def _file(tmp_path: Path, rows, encoding: str = "cp1252") -> Path:
    return write_table(tmp_path / "pollresults" / "pollresults_resultatsbureau35001.csv", LONG_HEADERS, rows, encoding)


class TestLongAdapter:
    """Tests for LongCandidateRowAdapter.parse()."""

    def test_one_row_per_station_candidate(self, tmp_path: Path, report: ErrorReport) -> None:
        path = _file(tmp_path, [long_row(), long_row(last="Doe", first="Jane", elected="N", votes="75")])
        df = LongCandidateRowAdapter(ERA_2008).parse([path], report)
        assert len(df) == 2
        assert df["Candidate"].tolist() == ["Smith, John A.", "Doe, Jane"]
        assert df["First_Name"].tolist() == ["John", "Jane"]
        assert df.at[0, "Middle_Names"] == "A."
        assert df.at[0, "Constituency"] == "Ottawa Centre"
        assert df.at[0, "Votes"] == "150"
        assert report.count() == 0

    def test_metadata(self, tmp_path: Path, report: ErrorReport) -> None:
        df = LongCandidateRowAdapter(ERA_2008).parse([_file(tmp_path, [long_row()])], report)
        assert df.at[0, "Parliament"] == 40
        assert df.at[0, "Election_Date"] == "2008-10-14"
        assert df.at[0, "Election_Type"] == "General"

    def test_utf8_era(self, tmp_path: Path, report: ErrorReport) -> None:
        path = _file(tmp_path, [long_row(name_fr="Montréal")], encoding="utf-8-sig")
        df = LongCandidateRowAdapter(ERA_2019).parse([path], report)
        assert df.at[0, "Constituency_Fr"] == "Montréal"

    def test_wrong_encoding_skips_file(self, tmp_path: Path, report: ErrorReport) -> None:
        path = _file(tmp_path, [long_row(name_fr="Montréal")], encoding="cp1252")
        df = LongCandidateRowAdapter(ERA_2019).parse([path], report)
        assert df.empty
        assert report.count("EncodingError") == 1

    def test_missing_column_is_parse_error(self, tmp_path: Path, report: ErrorReport) -> None:
        path = write_table(tmp_path / "bad.csv", LONG_HEADERS[:-1], [long_row()[:-1]])
        df = LongCandidateRowAdapter(ERA_2008).parse([path], report)
        assert df.empty
        assert report.entries[0]["kind"] == "ParseError"
        assert "Candidate Poll Votes Count" in report.entries[0]["detail"]

    def test_invalid_votes_dropped_with_row(self, tmp_path: Path, report: ErrorReport) -> None:
        path = _file(tmp_path, [long_row(), long_row(last="Doe", first="Jane", votes="-3")])
        df = LongCandidateRowAdapter(ERA_2008).parse([path], report)
        assert df["Candidate"].tolist() == ["Smith, John A."]
        assert report.entries[0]["row"] == 3

    def test_one_bad_file_does_not_stop_others(self, tmp_path: Path, report: ErrorReport) -> None:
        good = _file(tmp_path, [long_row()])
        bad = tmp_path / "pollresults" / "empty.csv"
        bad.write_text("", encoding="utf-8")
        df = LongCandidateRowAdapter(ERA_2008).parse([bad, good], report)
        assert len(df) == 1
        assert report.count("ParseError") == 1
