"""Unit tests for era selection and raw-file discovery."""

from pathlib import Path

import pytest

from ec_harmonize.core.era_registry import ALL_ERAS, ERA_2008
from ec_harmonize.discovery import build_jobs, select_eras


class TestSelectEras:
    def test_default_is_every_era(self) -> None:
        assert select_eras() == ALL_ERAS

    def test_deduplicated_and_sorted(self) -> None:
        eras = select_eras(["Parliament 40", 40, 36])
        assert [e.parliament for e in eras] == [36, 40]

    def test_unsupported(self) -> None:
        with pytest.raises(ValueError, match="Unsupported parliament"):
            select_eras([35])


class TestBuildJobs:
    def test_files_per_era(self, data_root: Path) -> None:
        jobs = {j.era.parliament: j for j in build_jobs(data_root, [36, 38, 40])}
        assert [p.name for p in jobs[36].files] == ["35001.txt"]
        assert [p.name for p in jobs[38].files] == ["35001.csv"]
        assert [p.name for p in jobs[40].files] == ["pollresults_resultatsbureau35001.csv"]
        assert jobs[40].era is ERA_2008

    def test_lookup_tables_not_picked_up(self, data_root: Path) -> None:
        job = build_jobs(data_root, [38])[0]
        assert all(p.parent.name == "pollbypoll" for p in job.files)

    def test_missing_folder(self, data_root: Path) -> None:
        job = build_jobs(data_root, [41])[0]
        assert job.files == []
        assert job.folder == data_root / "Parliament 41"
