#!/usr/bin/env python3
"""
Vennset Root Index - venn_roots.py

Builds the root -> prefix index that the combination search runs on.

Every corpus word is split at prefix lengths 1..MAX_PREFIX_LENGTH into
(prefix, root) pairs. Pairs are grouped by root, so each root ends up with
the list of prefixes that turn it back into a corpus word:

  "bat", "cat", "hat"  ->  at: [b, c, h]
  "bring", "string"    ->  ing: [br, str]

Roots with too few prefixes (or that are too short) are dropped and the rest
are ranked by prefix count, most productive first.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple
from wordfreq import top_n_list
from tqdm import tqdm

# ============================================================================ #
#                              CONFIGURATION                                   #
# ============================================================================ #

TOP_POPULAR_WORDS = 3000
LANGUAGE = 'en'

MINIMUM_ROOT_LENGTH = 2
MAX_PREFIX_LENGTH = 3

# Roots need at least this many prefixes to be worth building a puzzle around
MIN_PREFIX_COUNT = 6

# Prefix report only: prefixes attached to a single root are not interesting
MIN_ROOTS_PER_PREFIX = 2


# ============================================================================ #
#                              HELPERS                                         #
# ============================================================================ #

GREEN = '\033[92m'
RED = '\033[91m'
YELLOW = '\033[93m'
CYAN = '\033[96m'
RESET = '\033[0m'


def progress(iterable, desc="", total=None, disable=False):
    return tqdm(iterable, desc=desc, total=total, disable=disable,
                ascii=" ▖▘▝▗▚▞█", bar_format='{desc}: |{bar:20}| {n_fmt}/{total_fmt}')


class CorpusError(Exception):
    """The word corpus could not be loaded."""


# ============================================================================ #
#                              CORPUS                                          #
# ============================================================================ #

def _clean_words(words: Iterable[str]) -> List[str]:
    """Lowercase, keep alphabetic tokens, drop repeats. Rank order is kept."""
    seen = set()
    output = []
    for raw in words:
        word = raw.strip().lower()
        if not word or not word.isalpha() or word in seen:
            continue
        seen.add(word)
        output.append(word)
    return output


def load_popular_words(top_n: int = TOP_POPULAR_WORDS, lang: str = LANGUAGE) -> List[str]:
    """Most popular words first, from wordfreq's 'best' list."""
    try:
        raw = top_n_list(lang, top_n, wordlist='best')
    except LookupError as e:
        raise CorpusError(f"wordfreq has no word list for {lang!r}: {e}") from e
    words = _clean_words(raw)
    if not words:
        raise CorpusError(f"wordfreq returned no usable words for {lang!r}")
    return words


def load_word_file(path: Path, top_n: int = TOP_POPULAR_WORDS) -> List[str]:
    """One word per line, most popular first. Truncated to top_n usable words."""
    path = Path(path)
    if not path.exists():
        raise CorpusError(f"Dictionary file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            words = _clean_words(handle)
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusError(f"Could not read dictionary file {path}: {e}") from e
    if not words:
        raise CorpusError(f"Dictionary file {path} contains no usable words")
    return words[:top_n]


# ============================================================================ #
#                              DATA STRUCTURES                                 #
# ============================================================================ #

@dataclass(frozen=True)
class SplitWord:
    prefix: str
    root: str


@dataclass(frozen=True)
class RootEntry:
    """A root and every prefix that completes it into a corpus word."""
    root: str
    prefixes: Tuple[str, ...]   # sorted, repeats kept

    @property
    def prefix_count(self) -> int:
        return len(self.prefixes)


@dataclass(frozen=True)
class PrefixEntry:
    """Reverse view: a prefix and the roots it attaches to."""
    prefix: str
    roots: Tuple[str, ...]

    @property
    def root_count(self) -> int:
        return len(self.roots)


# ============================================================================ #
#                              SPLITTING                                       #
# ============================================================================ #

def split_words(words: Sequence[str], prefix_length: int) -> List[SplitWord]:
    # the word has to be longer than the prefix or the root would be empty
    return [
        SplitWord(prefix=word[:prefix_length], root=word[prefix_length:])
        for word in words
        if len(word) > prefix_length
    ]


def _rank_by_count(items: List, count) -> List:
    # ascending stable sort then reverse: ties come out in reverse build order
    return list(reversed(sorted(items, key=count)))


# ============================================================================ #
#                              ROOT INDEX                                      #
# ============================================================================ #

def build_root_index(
    words: Sequence[str],
    max_prefix_length: int = MAX_PREFIX_LENGTH,
    minimum_root_length: int = MINIMUM_ROOT_LENGTH,
    min_prefix_count: int = MIN_PREFIX_COUNT,
) -> List[RootEntry]:
    """Group split words by root, filter weak roots, rank by prefix count."""
    split: List[SplitWord] = []
    for length in range(1, max_prefix_length + 1):
        split.extend(split_words(words, length))

    # dicts keep insertion order, so roots stay in first-seen order
    prefixes_by_root: Dict[str, List[str]] = {}
    for pair in split:
        prefixes_by_root.setdefault(pair.root, []).append(pair.prefix)

    entries = [
        RootEntry(root=root, prefixes=tuple(sorted(prefixes)))
        for root, prefixes in prefixes_by_root.items()
    ]
    entries = [
        e for e in entries
        if e.prefix_count >= min_prefix_count and len(e.root) >= minimum_root_length
    ]
    return _rank_by_count(entries, lambda e: e.prefix_count)


def build_prefix_index(
    words: Sequence[str],
    prefix_length: int,
    min_root_count: int = MIN_ROOTS_PER_PREFIX,
) -> List[PrefixEntry]:
    """For one prefix length, list the roots each prefix attaches to."""
    roots_by_prefix: Dict[str, List[str]] = {}
    for pair in split_words(words, prefix_length):
        roots_by_prefix.setdefault(pair.prefix, []).append(pair.root)

    entries = [
        PrefixEntry(prefix=prefix, roots=tuple(roots))
        for prefix, roots in roots_by_prefix.items()
        if len(roots) >= min_root_count
    ]
    return _rank_by_count(entries, lambda e: e.root_count)


def print_prefix_report(words: Sequence[str], max_prefix_length: int = MAX_PREFIX_LENGTH, top: int = 10):
    total = 0
    for length in range(max_prefix_length, 0, -1):
        entries = build_prefix_index(words, length)
        total += len(entries)
        print(f"Prefix length {length}: {len(entries)} total prefixes")
        for entry in entries[:top]:
            sample = ', '.join(entry.roots[:8])
            more = f" (+{entry.root_count - 8})" if entry.root_count > 8 else ""
            print(f"  {CYAN}{entry.prefix:<4}{RESET} {entry.root_count:4d} roots: {sample}{more}")
    print(f"Total prefixes: {total}")
