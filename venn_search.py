#!/usr/bin/env python3
"""
Vennset Combination Search - venn_search.py

Finds four roots whose prefix sets overlap like the circles of a four-way
Venn diagram, so every region of the diagram can be filled with a real word
(shared prefix + region root).

The search is a staged backtrack over the ranked root index:

  root1  any root in the index
  root2  4+ prefixes in common with root1
  root3  2+ shared with root1 & root2, then 1+ more shared with root2
  root4  1+ in each of 1/2/3, 1/2, 2/3, 1/3, 1, 3

Within one candidate's check, every condition claims the prefixes it matched,
so a later condition in the same chain can't count them again. Each matched
prefix ends up in its own region of the diagram. Condition order matters.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from multiprocessing import Pool, cpu_count
from pathlib import Path
from typing import List, Optional, Sequence, Set, Tuple
import argparse
import sys
import time

from venn_roots import (
    RootEntry, CorpusError, build_root_index, print_prefix_report,
    load_popular_words, load_word_file, progress,
    TOP_POPULAR_WORDS, LANGUAGE, MINIMUM_ROOT_LENGTH, MAX_PREFIX_LENGTH,
    MIN_PREFIX_COUNT, GREEN, RED, YELLOW, RESET,
)

# ============================================================================ #
#                              CONFIGURATION                                   #
# ============================================================================ #

# Minimum prefix overlaps, one per condition, in chain order
ROOT2_THRESHOLDS = (4,)                  # 1
ROOT3_THRESHOLDS = (2, 1)                # 1/2, 2
ROOT4_THRESHOLDS = (1, 1, 1, 1, 1, 1)    # 1/2/3, 1/2, 2/3, 1/3, 1, 3

DEFAULT_OUTPUT_DIR = Path("artifacts")
DISPLAY_LIMIT = 20


@dataclass(frozen=True)
class StageThresholds:
    root2: Tuple[int, ...] = ROOT2_THRESHOLDS
    root3: Tuple[int, ...] = ROOT3_THRESHOLDS
    root4: Tuple[int, ...] = ROOT4_THRESHOLDS

    def __post_init__(self):
        for name, expected in (('root2', 1), ('root3', 2), ('root4', 6)):
            values = tuple(getattr(self, name))
            if len(values) != expected:
                raise ValueError(f"{name} needs {expected} thresholds, got {len(values)}")
            if any(v < 0 for v in values):
                raise ValueError(f"{name} thresholds must be non-negative: {values}")
            object.__setattr__(self, name, values)


# ============================================================================ #
#                              DATA STRUCTURES                                 #
# ============================================================================ #

@dataclass(frozen=True)
class Condition:
    """Candidate must share prefix_count unclaimed prefixes with all of roots."""
    roots: Tuple[RootEntry, ...]
    prefix_count: int


@dataclass(frozen=True)
class ConditionMatch:
    """Outcome of one condition for one candidate."""
    roots: Tuple[str, ...]
    prefix_count: int
    prefixes_in_common: Tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.prefixes_in_common)

    @property
    def passed(self) -> bool:
        return self.count >= self.prefix_count


@dataclass(frozen=True)
class Placement:
    """A root entry at a position (rootNumber 1-4) of a combination."""
    entry: RootEntry
    position: int
    condition_matches: Tuple[ConditionMatch, ...] = ()

    @property
    def root(self) -> str:
        return self.entry.root


@dataclass(frozen=True)
class Combination:
    placements: Tuple[Placement, ...]

    @property
    def roots(self) -> Tuple[str, ...]:
        return tuple(p.root for p in self.placements)


@dataclass
class SearchStats:
    evaluations: int = 0
    pruned: List[int] = field(default_factory=lambda: [0, 0, 0])  # dead branches at stage 2, 3, 4
    root1_done: int = 0
    timed_out: bool = False


# ============================================================================ #
#                              OVERLAP EVALUATOR                               #
# ============================================================================ #

def match_conditions(candidate: RootEntry, conditions: Sequence[Condition]) -> Tuple[bool, Tuple[ConditionMatch, ...]]:
    """
    Run a condition chain for one candidate.

    Prefixes matched by a condition are claimed and excluded from every later
    condition. Stops at the first failure; the returned matches then end with
    the failing one.
    """
    claimed: Set[str] = set()
    matches = []
    for condition in conditions:
        groups = [set(r.prefixes) for r in condition.roots]
        in_common = []
        for prefix in candidate.prefixes:
            if prefix in claimed or prefix in in_common:
                continue
            if all(prefix in g for g in groups):
                in_common.append(prefix)
        claimed.update(in_common)

        match = ConditionMatch(
            roots=tuple(r.root for r in condition.roots),
            prefix_count=condition.prefix_count,
            prefixes_in_common=tuple(in_common),
        )
        matches.append(match)
        if not match.passed:
            return False, tuple(matches)
    return True, tuple(matches)


def evaluate(
    index: Sequence[RootEntry],
    previous_roots: Sequence[RootEntry],
    conditions: Sequence[Condition],
    position: int = 0,
) -> List[Placement]:
    """Unused roots from the index that satisfy the whole condition chain, in index order."""
    disallowed = {r.root for r in previous_roots}
    placements = []
    for entry in index:
        if entry.root in disallowed:
            continue
        ok, matches = match_conditions(entry, conditions)
        if ok:
            placements.append(Placement(entry=entry, position=position, condition_matches=matches))
    return placements


# ============================================================================ #
#                              CONDITION CHAINS                                #
# ============================================================================ #

def root2_conditions(r1: RootEntry, thresholds: StageThresholds) -> List[Condition]:
    return [Condition((r1,), thresholds.root2[0])]


def root3_conditions(r1: RootEntry, r2: RootEntry, thresholds: StageThresholds) -> List[Condition]:
    t = thresholds.root3
    return [
        Condition((r1, r2), t[0]),
        Condition((r2,), t[1]),
    ]


def root4_conditions(r1: RootEntry, r2: RootEntry, r3: RootEntry, thresholds: StageThresholds) -> List[Condition]:
    t = thresholds.root4
    return [
        Condition((r1, r2, r3), t[0]),
        Condition((r1, r2), t[1]),
        Condition((r2, r3), t[2]),
        Condition((r1, r3), t[3]),
        Condition((r1,), t[4]),
        Condition((r3,), t[5]),
    ]


# ============================================================================ #
#                              COMBINATION SEARCH                              #
# ============================================================================ #

@dataclass(frozen=True)
class IndexSettings:
    max_prefix_length: int = MAX_PREFIX_LENGTH
    minimum_root_length: int = MINIMUM_ROOT_LENGTH
    min_prefix_count: int = MIN_PREFIX_COUNT

    def build(self, corpus: Sequence[str]) -> List[RootEntry]:
        return build_root_index(
            corpus,
            max_prefix_length=self.max_prefix_length,
            minimum_root_length=self.minimum_root_length,
            min_prefix_count=self.min_prefix_count,
        )


def search_from_root(
    root1: RootEntry,
    index: Sequence[RootEntry],
    thresholds: StageThresholds,
    corpus: Optional[Sequence[str]] = None,
    settings: Optional[IndexSettings] = None,
    stats: Optional[SearchStats] = None,
) -> List[Combination]:
    """
    All combinations with root1 in position 1.

    With a corpus and settings, the candidate pool is rebuilt from the corpus
    for every stage instead of reusing index.
    """
    def candidates() -> Sequence[RootEntry]:
        if corpus is not None and settings is not None:
            return settings.build(corpus)
        return index

    def run(previous, conditions, position):
        if stats is not None:
            stats.evaluations += 1
        found = evaluate(candidates(), previous, conditions, position=position)
        if not found and stats is not None:
            stats.pruned[position - 2] += 1
        return found

    first = Placement(entry=root1, position=1)
    combinations = []

    valid2 = run([root1], root2_conditions(root1, thresholds), 2)
    for p2 in valid2:
        r2 = p2.entry
        valid3 = run([root1, r2], root3_conditions(root1, r2, thresholds), 3)
        for p3 in valid3:
            r3 = p3.entry
            valid4 = run([root1, r2, r3], root4_conditions(root1, r2, r3, thresholds), 4)
            for p4 in valid4:
                combinations.append(Combination((first, p2, p3, p4)))
    return combinations


def _search_root_worker(args: Tuple[RootEntry, List[RootEntry], StageThresholds, Optional[List[str]], Optional[IndexSettings]]) -> Tuple[List[Combination], int, List[int]]:
    """Worker function to search every branch under one root1."""
    root1, index, thresholds, corpus, settings = args
    stats = SearchStats()
    found = search_from_root(root1, index, thresholds, corpus=corpus, settings=settings, stats=stats)
    return found, stats.evaluations, stats.pruned


def search(
    corpus: Sequence[str],
    thresholds: StageThresholds = StageThresholds(),
    settings: IndexSettings = IndexSettings(),
    index: Optional[Sequence[RootEntry]] = None,
    rebuild_index: bool = False,
    processes: int = 1,
    time_limit: Optional[float] = None,
    show_progress: bool = False,
    stats: Optional[SearchStats] = None,
) -> List[Combination]:
    """
    Staged backtracking search over every root1 in the index.

    The index is built once and shared by every stage unless rebuild_index is
    set. processes > 1 spreads root1 branches over a process pool; results keep
    the sequential order. time_limit (seconds) stops starting new root1
    branches and returns what was found so far. With a pool the limit is best
    effort: branches already handed to workers still run to completion.
    """
    if stats is None:
        stats = SearchStats()
    if index is None:
        index = settings.build(corpus)
    index = list(index)
    rebuild_corpus = list(corpus) if rebuild_index else None
    rebuild_settings = settings if rebuild_index else None

    t0 = time.time()
    combinations: List[Combination] = []

    def out_of_time() -> bool:
        if time_limit is not None and time.time() - t0 > time_limit:
            stats.timed_out = True
            return True
        return False

    if processes > 1:
        if out_of_time():
            return combinations

        def jobs():
            # imap pulls lazily, so branches not yet handed out are skipped once time runs out
            for root1 in index:
                if out_of_time():
                    return
                yield root1, index, thresholds, rebuild_corpus, rebuild_settings

        with Pool(processes) as workers:
            results = workers.imap(_search_root_worker, jobs())
            for found, evaluations, pruned in progress(results, "Searching root combinations", total=len(index), disable=not show_progress):
                combinations.extend(found)
                stats.evaluations += evaluations
                stats.pruned = [a + b for a, b in zip(stats.pruned, pruned)]
                stats.root1_done += 1
                if out_of_time():
                    break
        return combinations

    for root1 in progress(index, "Searching root combinations", disable=not show_progress):
        if out_of_time():
            break
        combinations.extend(search_from_root(
            root1, index, thresholds,
            corpus=rebuild_corpus, settings=rebuild_settings, stats=stats,
        ))
        stats.root1_done += 1
    return combinations


# ============================================================================ #
#                              MAIN                                            #
# ============================================================================ #

def _thresholds_arg(expected: int):
    def parse(value: str) -> Tuple[int, ...]:
        try:
            parts = tuple(int(v) for v in value.split(','))
        except ValueError:
            raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {value!r}")
        if len(parts) != expected:
            raise argparse.ArgumentTypeError(f"expected {expected} values, got {len(parts)}")
        return parts
    return parse


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find four-root combinations for a four-way Venn word puzzle")
    parser.add_argument('--top-words', type=int, default=TOP_POPULAR_WORDS,
                        help=f'Number of most popular words to use (default: {TOP_POPULAR_WORDS})')
    parser.add_argument('--lang', default=LANGUAGE, help=f'wordfreq language code (default: {LANGUAGE})')
    parser.add_argument('--dictionary', type=Path, default=None,
                        help='Ranked word list file (one word per line) instead of wordfreq')
    parser.add_argument('--min-root-length', type=int, default=MINIMUM_ROOT_LENGTH,
                        help=f'Shortest root kept (default: {MINIMUM_ROOT_LENGTH})')
    parser.add_argument('--max-prefix-length', type=int, default=MAX_PREFIX_LENGTH,
                        help=f'Longest prefix split off (default: {MAX_PREFIX_LENGTH})')
    parser.add_argument('--min-prefixes', type=int, default=MIN_PREFIX_COUNT,
                        help=f'Prefixes a root needs to be kept (default: {MIN_PREFIX_COUNT})')
    parser.add_argument('--root2', type=_thresholds_arg(1), default=ROOT2_THRESHOLDS,
                        help='Overlap with root1 (default: 4)')
    parser.add_argument('--root3', type=_thresholds_arg(2), default=ROOT3_THRESHOLDS,
                        help='Overlaps 1/2, 2 (default: 2,1)')
    parser.add_argument('--root4', type=_thresholds_arg(6), default=ROOT4_THRESHOLDS,
                        help='Overlaps 1/2/3, 1/2, 2/3, 1/3, 1, 3 (default: 1,1,1,1,1,1)')
    parser.add_argument('--rebuild-index', action='store_true',
                        help='Rebuild the root index from the corpus at every search stage')
    parser.add_argument('--processes', type=int, default=1,
                        help=f'Worker processes for the root1 loop (default: 1, machine has {cpu_count()})')
    parser.add_argument('--time-limit', type=float, default=None,
                        help='Stop starting new root1 branches after this many seconds')
    parser.add_argument('--output-dir', type=Path, default=DEFAULT_OUTPUT_DIR,
                        help=f'Where to write roots.json and combinations.json (default: {DEFAULT_OUTPUT_DIR})')
    parser.add_argument('--full-index', action='store_true',
                        help='Include prefix lists in roots.json')
    parser.add_argument('--skip-save', action='store_true', help='Do not write result files')
    parser.add_argument('--display-limit', type=int, default=DISPLAY_LIMIT,
                        help=f'Combinations to print (default: {DISPLAY_LIMIT})')
    parser.add_argument('--prefix-report', action='store_true',
                        help='Print the prefix -> roots report before searching')
    parser.add_argument('--no-progress', action='store_true', help='Hide the progress bar')
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None):
    from venn_export import save_results, display_combinations

    args = parse_args(argv)
    try:
        thresholds = StageThresholds(root2=args.root2, root3=args.root3, root4=args.root4)
    except ValueError as e:
        print(f"{RED}ERROR: {e}{RESET}")
        sys.exit(1)
    settings = IndexSettings(
        max_prefix_length=args.max_prefix_length,
        minimum_root_length=args.min_root_length,
        min_prefix_count=args.min_prefixes,
    )

    print("Loading corpus...")
    try:
        if args.dictionary is not None:
            corpus = load_word_file(args.dictionary, top_n=args.top_words)
            source = str(args.dictionary)
        else:
            corpus = load_popular_words(top_n=args.top_words, lang=args.lang)
            source = f"wordfreq top {args.top_words} ({args.lang})"
    except CorpusError as e:
        print(f"{RED}ERROR: {e}{RESET}")
        sys.exit(1)
    print(f"Loaded {len(corpus):,} words from {source}")

    if args.prefix_report:
        print(f"\n{'='*60}")
        print("PREFIX REPORT")
        print(f"{'='*60}")
        print_prefix_report(corpus, max_prefix_length=settings.max_prefix_length)

    index = settings.build(corpus)
    print(f"Built root index: {len(index)} roots with {settings.min_prefix_count}+ prefixes")
    if index:
        top = ', '.join(f"{e.root}({e.prefix_count})" for e in index[:10])
        print(f"  Top roots: {top}")

    print(f"\n{'='*60}")
    print("SEARCHING")
    print(f"{'='*60}")
    print(f"Thresholds: root2={thresholds.root2} root3={thresholds.root3} root4={thresholds.root4}")

    stats = SearchStats()
    t0 = time.time()
    combinations = search(
        corpus,
        thresholds=thresholds,
        settings=settings,
        index=index,
        rebuild_index=args.rebuild_index,
        processes=args.processes,
        time_limit=args.time_limit,
        show_progress=not args.no_progress,
        stats=stats,
    )
    elapsed = time.time() - t0

    if stats.timed_out:
        print(f"{YELLOW}Time limit reached after {stats.root1_done}/{len(index)} root1 branches, results are partial{RESET}")
    print(f"Evaluations: {stats.evaluations}, dead branches at stage 2/3/4: {'/'.join(map(str, stats.pruned))}")
    print(f"{GREEN}Found {len(combinations)} total valid combinations{RESET} in {elapsed:.1f}s")

    display_combinations(combinations, limit=args.display_limit)

    if not args.skip_save:
        roots_path, combos_path = save_results(
            index, combinations, args.output_dir,
            compact_index=not args.full_index,
            thresholds=thresholds,
        )
        print(f"\nSaved root index to {roots_path}")
        print(f"Saved combinations to {combos_path}")


if __name__ == "__main__":
    main()
