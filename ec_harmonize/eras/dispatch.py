from __future__ import annotations

from typing import Dict, Type

from ec_harmonize.core.era_registry import LEGACY, LONG, WIDE, Era
from ec_harmonize.eras.base import EraAdapter
from ec_harmonize.eras.era_1997_2000.slots_1997_2000 import LegacySlotDelimitedAdapter
from ec_harmonize.eras.era_2004.wide_2004 import WideCandidateColumnsAdapter
from ec_harmonize.eras.era_2006_2019.long_2006_2019 import LongCandidateRowAdapter

ADAPTERS: Dict[str, Type[EraAdapter]] = {
    WIDE: WideCandidateColumnsAdapter,
    LONG: LongCandidateRowAdapter,
    LEGACY: LegacySlotDelimitedAdapter,
}


def adapter_for(era: Era) -> EraAdapter:
    try:
        cls = ADAPTERS[era.variant]
    except KeyError:
        raise ValueError(f"No adapter registered for variant {era.variant!r} ({era.label})") from None
    return cls(era)
