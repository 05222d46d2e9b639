"""Unit tests for aggregation, type coercion and CSV export."""

from pathlib import Path

import pandas as pd
from conftest import canonical_row

from ec_harmonize.aggregate import COMBINED_FILENAME, CsvExporter, aggregate, coerce_types, record_keys
from ec_harmonize.core.errors import ErrorReport
from ec_harmonize.core.schema import CANONICAL_COLUMNS, PROVINCE_ORDER, RECORD_KEY


def _table(*rows) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=CANONICAL_COLUMNS)


class TestCoerceTypes:
    def test_dtypes(self) -> None:
        out = coerce_types(_table(canonical_row(Province="Québec", Votes="1,200", Incumbent=True)))
        assert str(out["Votes"].dtype) == "Int64"
        assert out.at[0, "Votes"] == 1200
        assert str(out["Void_Poll"].dtype) == "boolean"
        assert bool(out.at[0, "Incumbent"]) is True
        assert out.at[0, "Province"] == "Quebec"
        assert list(out["Province"].cat.categories) == PROVINCE_ORDER
        assert out.at[0, "Election_Date"] == pd.Timestamp("2008-10-14")

    def test_unknown_province_kept(self) -> None:
        out = coerce_types(_table(canonical_row(Province="Atlantis")))
        assert out.at[0, "Province"] == "Atlantis"

    def test_null_fields_stay_null(self) -> None:
        out = coerce_types(_table(canonical_row(Void_Poll=None, Result=None, Votes=None)))
        assert pd.isna(out.at[0, "Void_Poll"])
        assert pd.isna(out.at[0, "Result"])
        assert pd.isna(out.at[0, "Votes"])


class TestAggregate:
    """Tests for aggregate()."""

    def test_union_sorted_by_parliament(self) -> None:
        report = ErrorReport()
        tables = {
            40: _table(canonical_row(), canonical_row(Candidate="Doe, Jane", Votes="75")),
            36: _table(canonical_row(Parliament=36, Election_Date="1997-06-02")),
        }
        out = aggregate(tables, report)
        assert out["Parliament"].tolist() == [36, 40, 40]
        assert out["Candidate"].tolist()[1:] == ["Smith, John A.", "Doe, Jane"]
        assert report.count() == 0

    def test_schema_mismatch_excludes_era(self) -> None:
        report = ErrorReport()
        bad = _table(canonical_row(Parliament=41)).drop(columns=["Votes"])
        out = aggregate({40: _table(canonical_row()), 41: bad}, report)
        assert out["Parliament"].tolist() == [40]
        assert report.entries[0]["kind"] == "SchemaMismatch"
        assert report.entries[0]["parliament"] == 41

    def test_duplicates_dropped_and_reported(self) -> None:
        report = ErrorReport()
        out = aggregate({40: _table(canonical_row(), canonical_row(Votes="999"))}, report)
        assert len(out) == 1
        assert out.at[0, "Votes"] == 150
        assert report.count("Duplicate") == 1

    def test_constituency_stands_in_for_missing_district(self) -> None:
        report = ErrorReport()
        rows = [
            canonical_row(Electoral_District_No=None, Constituency="Centre A"),
            canonical_row(Electoral_District_No=None, Constituency="Centre B"),
        ]
        out = aggregate({38: _table(*rows)}, report)
        assert len(out) == 2
        keys = record_keys(out)
        assert list(keys.columns) == RECORD_KEY
        assert keys["Electoral_District_No"].tolist() == ["Centre A", "Centre B"]

    def test_empty(self) -> None:
        out = aggregate({}, ErrorReport())
        assert out.empty
        assert list(out.columns) == CANONICAL_COLUMNS


class TestCsvExporter:
    def test_writes_combined_and_split(self, tmp_path: Path) -> None:
        table = aggregate(
            {
                36: _table(canonical_row(Parliament=36, Election_Date="1997-06-02")),
                40: _table(canonical_row(Merged_With=None, Votes=None)),
            },
            ErrorReport(),
        )
        written = CsvExporter(tmp_path).export(table)
        assert written[0] == tmp_path / "master" / COMBINED_FILENAME
        assert (tmp_path / "parliaments" / "36_Parliament.csv").exists()
        assert (tmp_path / "parliaments" / "40_Parliament.csv").exists()

        text = written[0].read_text(encoding="utf-8")
        header = text.splitlines()[0].split(",")
        assert header == CANONICAL_COLUMNS
        assert "1997-06-02" in text
        assert "35001.0" not in text
        assert "400.0" not in text

    def test_no_split(self, tmp_path: Path) -> None:
        table = aggregate({40: _table(canonical_row())}, ErrorReport())
        written = CsvExporter(tmp_path, split_by_parliament=False).export(table)
        assert len(written) == 1
        assert not (tmp_path / "parliaments").exists()
