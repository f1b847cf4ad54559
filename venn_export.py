#!/usr/bin/env python3
"""
Export Vennset search results as JSON.

Writes:
  - <output-dir>/roots.json         ranked root index
  - <output-dir>/combinations.json  every combination with per-condition detail

Usage:
  python3 venn_export.py artifacts/combinations.json [--limit 50]
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
import argparse
import json
import sys

from venn_roots import RootEntry, GREEN, RED, YELLOW, CYAN, RESET
from venn_search import (
    Combination, ConditionMatch, Placement, StageThresholds, DISPLAY_LIMIT,
)

ROOTS_FILE = "roots.json"
COMBINATIONS_FILE = "combinations.json"

POSITION_COLORS = {1: GREEN, 2: CYAN, 3: YELLOW, 4: RED}


# ============================================================================ #
#                              RECORDS                                         #
# ============================================================================ #

def index_records(index: Sequence[RootEntry], compact: bool = True) -> List[dict]:
    """Root index rows. compact drops the prefix lists."""
    records = []
    for entry in index:
        record = {
            "root": entry.root,
            "rootNumber": None,
            "prefixCount": entry.prefix_count,
        }
        if not compact:
            record["prefixes"] = list(entry.prefixes)
        records.append(record)
    return records


def match_record(match: ConditionMatch) -> dict:
    return {
        "roots": list(match.roots),
        "prefixCount": match.prefix_count,
        "prefixesInCommon": list(match.prefixes_in_common),
        "count": match.count,
        "passed": match.passed,
    }


def combination_record(combination: Combination) -> dict:
    return {
        "roots": list(combination.roots),
        "entries": [
            {
                "root": p.root,
                "rootNumber": p.position,
                "prefixCount": p.entry.prefix_count,
                "prefixes": list(p.entry.prefixes),
                "conditionMatches": [match_record(m) for m in p.condition_matches],
            }
            for p in combination.placements
        ],
    }


def combination_from_record(record: dict) -> Combination:
    placements = []
    for e in record["entries"]:
        matches = tuple(
            ConditionMatch(
                roots=tuple(m["roots"]),
                prefix_count=m["prefixCount"],
                prefixes_in_common=tuple(m["prefixesInCommon"]),
            )
            for m in e.get("conditionMatches", [])
        )
        entry = RootEntry(root=e["root"], prefixes=tuple(e["prefixes"]))
        placements.append(Placement(entry=entry, position=e["rootNumber"], condition_matches=matches))
    return Combination(tuple(placements))


# ============================================================================ #
#                              FILES                                           #
# ============================================================================ #

def save_results(
    index: Sequence[RootEntry],
    combinations: Sequence[Combination],
    output_dir: Path,
    compact_index: bool = True,
    thresholds: Optional[StageThresholds] = None,
) -> Tuple[Path, Path]:
    """Write roots.json and combinations.json into output_dir."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    roots_path = output_dir / ROOTS_FILE
    with roots_path.open("w", encoding="utf-8") as f:
        json.dump({
            "num_roots": len(index),
            "roots": index_records(index, compact=compact_index),
        }, f, indent=2)

    output: Dict[str, object] = {"num_combinations": len(combinations)}
    if thresholds is not None:
        output["thresholds"] = {
            "root2": list(thresholds.root2),
            "root3": list(thresholds.root3),
            "root4": list(thresholds.root4),
        }
    output["combinations"] = [combination_record(c) for c in combinations]

    combos_path = output_dir / COMBINATIONS_FILE
    with combos_path.open("w", encoding="utf-8") as f:
        json.dump(output, f, indent=2)

    return roots_path, combos_path


def load_combinations(path: Path) -> List[Combination]:
    """Read combinations.json back into Combination objects."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict) or "combinations" not in data:
        raise ValueError(f"{path} is not a combinations file")
    try:
        return [combination_from_record(r) for r in data["combinations"]]
    except (KeyError, TypeError) as e:
        raise ValueError(f"{path} is not a combinations file: missing or malformed {e}") from e


# ============================================================================ #
#                              DISPLAY                                         #
# ============================================================================ #

def format_roots(combination: Combination) -> str:
    return '  '.join(
        f"{POSITION_COLORS.get(p.position, '')}{p.position}:{p.root:<8}{RESET}"
        for p in combination.placements
    )


def display_combinations(combinations: Sequence[Combination], limit: int = DISPLAY_LIMIT, detail: bool = True):
    if not combinations:
        print("No valid combinations.")
        return

    shown = combinations[:limit]
    print(f"\nShowing {len(shown)} of {len(combinations)} combinations:")
    for i, combination in enumerate(shown, 1):
        print(f"  {i:4d}. {format_roots(combination)}")
        if not detail:
            continue
        for p in combination.placements:
            for m in p.condition_matches:
                group = '/'.join(m.roots)
                mark = f"{GREEN}ok{RESET}" if m.passed else f"{RED}no{RESET}"
                prefixes = ', '.join(m.prefixes_in_common)
                print(f"          {p.root:<8} vs {group:<20} {m.count}/{m.prefix_count} {mark}  [{prefixes}]")


def main(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(description="Print a saved combinations.json")
    parser.add_argument("path", type=Path, help="combinations.json written by venn_search.py")
    parser.add_argument("--limit", type=int, default=DISPLAY_LIMIT, help=f"Combinations to show (default: {DISPLAY_LIMIT})")
    parser.add_argument("--brief", action="store_true", help="Only list the roots")
    args = parser.parse_args(argv)

    try:
        combinations = load_combinations(args.path)
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Loaded {len(combinations)} combinations from {args.path}")
    display_combinations(combinations, limit=args.limit, detail=not args.brief)


if __name__ == "__main__":
    main()
