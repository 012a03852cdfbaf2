#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List

from studyplan.tools._state_cli import die
from studyplan.validate import validate_state

PROG = "studyplan-validate-state"


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog=PROG, description="Validate a studyplan state JSON file.")
    ap.add_argument("--in", dest="in_json", required=True, help="Input state JSON path")
    ns = ap.parse_args(argv)

    in_path = Path(ns.in_json)
    if not in_path.exists():
        return die(PROG, f"Missing input JSON: {in_path}")

    try:
        obj = json.loads(in_path.read_text(encoding="utf-8", errors="replace"))
    except (OSError, ValueError) as e:
        return die(PROG, f"Failed to load JSON: {in_path} ({e})")

    errs = validate_state(obj)
    if errs:
        for e in errs[:50]:
            die(PROG, e, 3)
        return 3

    print(f"[{PROG}] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
