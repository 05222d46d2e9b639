from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd
from loguru import logger

from ec_harmonize.aggregate import CsvExporter, Exporter, aggregate
from ec_harmonize.checks import has_fail, run_checks
from ec_harmonize.core.era_registry import describe
from ec_harmonize.core.errors import ErrorReport, HarmonizeError
from ec_harmonize.discovery import EraJob, build_jobs
from ec_harmonize.districts import DistrictDirectory, describe_sources
from ec_harmonize.enrich import RecordEnricher, load_aux_tables
from ec_harmonize.eras.dispatch import adapter_for
from ec_harmonize.libs.fs import run_stamp, safe_mkdir, write_json
from ec_harmonize.libs.parties import DEFAULT_NORMALIZER, PartyNameNormalizer
from ec_harmonize.unify import unify


@dataclass
class RunResult:
    table: pd.DataFrame
    report: ErrorReport
    checks: Dict[str, Any]
    written: List[Path] = field(default_factory=list)
    report_path: Optional[Path] = None


def process_era(
    job: EraJob,
    directory: DistrictDirectory,
    data_root: Path,
    normalizer: PartyNameNormalizer = DEFAULT_NORMALIZER,
) -> Tuple[int, Optional[pd.DataFrame], ErrorReport]:
    """Adapter -> enricher -> unifier for one era, with its own report.

    Anything that goes wrong inside the era is recorded and the era yields no
    table; the other eras are unaffected.
    """
    era = job.era
    report = ErrorReport(parliament=era.parliament)
    logger.info("Parliament {}: {} file(s), {}", era.parliament, len(job.files), era.label)
    if not job.files:
        report.add("ParseError", f"no files matching {era.results_glob}", file=job.folder)

    try:
        df = adapter_for(era).parse(job.files, report)
        aux = load_aux_tables(data_root, era, report, normalizer)
        enriched = RecordEnricher(directory, normalizer).enrich(df, era, report, aux)
        unified = unify(enriched, era)
    except HarmonizeError as e:
        logger.error("Parliament {}: {}", era.parliament, e)
        report.record(e, parliament=era.parliament)
        return era.parliament, None, report
    except Exception as e:
        logger.exception("Parliament {}: unexpected failure, era excluded", era.parliament)
        report.add("Unexpected", f"{type(e).__name__}: {e}", parliament=era.parliament)
        return era.parliament, None, report
    logger.info("Parliament {}: {} record(s)", era.parliament, len(unified))
    return era.parliament, unified, report


def run_all(
    data_root: Path,
    output_root: Path,
    parliaments: Optional[Iterable] = None,
    max_workers: int = 1,
    exporter: Optional[Exporter] = None,
    split_by_parliament: bool = True,
    normalizer: PartyNameNormalizer = DEFAULT_NORMALIZER,
) -> RunResult:
    data_root = Path(data_root)
    output_root = Path(output_root)
    safe_mkdir(output_root)

    jobs = build_jobs(data_root, parliaments)
    report = ErrorReport()
    directory = DistrictDirectory.build(data_root, [j.era for j in jobs], report)

    tables: Dict[int, pd.DataFrame] = {}
    era_reports: Dict[int, ErrorReport] = {}
    if max_workers <= 1 or len(jobs) <= 1:
        for job in jobs:
            p, df, rep = process_era(job, directory, data_root, normalizer)
            era_reports[p] = rep
            if df is not None:
                tables[p] = df
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            futs = [ex.submit(process_era, job, directory, data_root, normalizer) for job in jobs]
            for f in as_completed(futs):
                p, df, rep = f.result()
                era_reports[p] = rep
                if df is not None:
                    tables[p] = df

    # Merge per-era reports in parliament order so the run report is stable.
    for p in sorted(era_reports):
        report.extend(era_reports[p])

    table = aggregate(tables, report)
    checks = run_checks(table)
    if has_fail(checks):
        logger.warning("Invariant checks reported failures; see run report")

    exporter = exporter or CsvExporter(output_root, split_by_parliament=split_by_parliament)
    written = exporter.export(table)

    stamp = run_stamp()
    report_path = output_root / f"harmonize_report_{stamp.file}.json"
    write_json(
        report_path,
        {
            "timestamps": {"utc": stamp.utc, "local": stamp.local},
            "data_root": str(data_root),
            "parliaments": [j.era.parliament for j in jobs],
            "district_tables": describe_sources(directory, [j.era.parliament for j in jobs]),
            "column_maps": {j.era.parliament: describe(j.era) for j in jobs},
            "records": int(len(table)),
            "records_by_parliament": {
                int(p): int(n) for p, n in table["Parliament"].value_counts(sort=False).sort_index().items()
            },
            "written": [str(p) for p in written],
            "errors": report.to_dict(),
            "checks": checks["checks"],
        },
    )
    logger.info("Run report: {}", report_path)
    return RunResult(table=table, report=report, checks=checks, written=written, report_path=report_path)
