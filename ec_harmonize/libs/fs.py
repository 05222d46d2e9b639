from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class RunStamp:
    """When a run happened, as recorded in its report and report filename."""

    moment: datetime

    @property
    def utc(self) -> str:
        return self.moment.isoformat(timespec="seconds")

    @property
    def local(self) -> str:
        return self.moment.astimezone().strftime("%a %d %b %Y %H:%M:%S %Z%z")

    @property
    def file(self) -> str:
        return self.moment.strftime("%Y%m%dT%H%M%SZ")


def run_stamp(moment: Optional[datetime] = None) -> RunStamp:
    """Stamp for ``moment`` (default: now), normalized to UTC."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return RunStamp(moment.astimezone(timezone.utc))


def write_json(path: Path, obj: Any) -> None:
    """UTF-8 JSON with non-ASCII kept readable; paths and dates become strings."""
    safe_mkdir(path.parent)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
