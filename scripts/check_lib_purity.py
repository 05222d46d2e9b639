#!/usr/bin/env python3
"""Fail if ec_harmonize/libs imports anything from this repo (other than ec_harmonize.libs.*).

Run:
  python scripts/check_lib_purity.py
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import List, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
LIBS_DIR = REPO_ROOT / "ec_harmonize" / "libs"

IMPORT_RE = re.compile(r"^\s*(from\s+([\w\.]+)\s+import|import\s+([\w\.]+))")


def find_violations(libs_dir: Path) -> List[Tuple[str, int, str]]:
    bad = []
    for py in sorted(libs_dir.glob("*.py")):
        txt = py.read_text(encoding="utf-8")
        for ln, line in enumerate(txt.splitlines(), start=1):
            m = IMPORT_RE.match(line)
            if not m:
                continue
            mod = m.group(2) or m.group(3) or ""
            if mod.startswith("ec_harmonize") and not mod.startswith("ec_harmonize.libs"):
                bad.append((py.name, ln, line.strip()))
            elif mod.startswith("."):
                # Relative imports cannot be told apart; libs use absolute ec_harmonize.libs.* only.
                bad.append((py.name, ln, line.strip()))
    return bad


def main(libs_dir: Path = LIBS_DIR) -> int:
    if not libs_dir.exists():
        print(f"ERROR: libs dir not found: {libs_dir}")
        return 2

    bad = find_violations(libs_dir)
    if bad:
        print("Found disallowed imports in ec_harmonize/libs:\n")
        for name, ln, line in bad:
            print(f"  {name}:{ln}: {line}")
        print("\nFix: libs modules may only import stdlib/external packages or ec_harmonize.libs.* (absolute).")
        return 1

    print("OK: ec_harmonize/libs is repo-pure.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
