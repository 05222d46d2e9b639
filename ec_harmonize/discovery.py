from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from loguru import logger

from ec_harmonize.core.era_registry import ALL_ERAS, Era, era_for_parliament


@dataclass
class EraJob:
    era: Era
    folder: Path
    files: List[Path]


def select_eras(parliaments: Optional[Iterable] = None) -> List[Era]:
    if not parliaments:
        return list(ALL_ERAS)
    eras: List[Era] = []
    for p in parliaments:
        era = era_for_parliament(p)
        if era is None:
            raise ValueError(f"Unsupported parliament: {p!r}")
        if era not in eras:
            eras.append(era)
    return sorted(eras, key=lambda e: e.parliament)


def build_jobs(data_root: Path, parliaments: Optional[Iterable] = None) -> List[EraJob]:
    """One job per era: its folder under ``data_root`` and its raw files, sorted by name."""
    jobs: List[EraJob] = []
    for era in select_eras(parliaments):
        folder = Path(data_root) / era.folder
        files = sorted(p for p in folder.glob(era.results_glob) if p.is_file()) if folder.is_dir() else []
        if not files:
            logger.warning("Parliament {}: no files matching {} under {}", era.parliament, era.results_glob, folder)
        jobs.append(EraJob(era=era, folder=folder, files=files))
    return jobs
