import pytest

import venn_roots
from venn_roots import (
    CorpusError, RootEntry, SplitWord,
    build_prefix_index, build_root_index, load_popular_words, load_word_file,
    print_prefix_report, split_words,
)


def test_split_words_slices_at_prefix_length():
    words = ["a", "at", "bat", "bring"]
    assert split_words(words, 1) == [
        SplitWord("a", "t"),
        SplitWord("b", "at"),
        SplitWord("b", "ring"),
    ]
    assert split_words(words, 3) == [SplitWord("bri", "ng")]
    for k in (1, 2, 3):
        for pair in split_words(words, k):
            assert len(pair.prefix) == k
            assert pair.prefix + pair.root in words


def test_split_words_excludes_words_not_longer_than_prefix():
    assert split_words(["", "ab", "abc"], 3) == []
    assert split_words([], 1) == []


def test_build_root_index_groups_prefixes_across_lengths():
    words = ["bat", "cat", "hat", "mat", "pat", "rat", "brat", "that", "spat"]
    index = build_root_index(words)
    at = next(e for e in index if e.root == "at")
    # one-letter prefixes from the 3-letter words, two-letter ones from the rest
    assert at.prefixes == ("b", "br", "c", "h", "m", "p", "r", "sp", "th")
    assert at.prefix_count == 9


def test_build_root_index_keeps_repeated_prefixes():
    index = build_root_index(["bat", "bat", "cat", "hat", "mat", "pat"])
    assert index == [RootEntry("at", ("b", "b", "c", "h", "m", "p"))]


def test_build_root_index_filters_short_roots_and_low_counts(toy_corpus):
    index = build_root_index(toy_corpus)
    assert {e.root for e in index} == {"at", "ing", "ed", "er", "ng"}
    for entry in index:
        assert entry.prefix_count >= 6
        assert len(entry.root) >= 2

    loose = build_root_index(toy_corpus, minimum_root_length=1, min_prefix_count=1)
    assert {"t", "d", "r", "g"} <= {e.root for e in loose}


def test_build_root_index_is_deterministic_and_sorted(toy_corpus):
    words = toy_corpus + ["bag", "rag", "tag", "wag", "brag", "drag", "flag", "snag"]
    first = build_root_index(words)
    second = build_root_index(words)
    assert first == second
    counts = [e.prefix_count for e in first]
    assert counts == sorted(counts, reverse=True)
    assert first[0].root == "ag"


def test_build_root_index_ties_come_out_in_reverse_first_seen_order(toy_corpus):
    index = build_root_index(toy_corpus)
    assert [e.root for e in index] == ["ng", "er", "ed", "ing", "at"]


def test_build_root_index_respects_max_prefix_length():
    words = ["bring", "sting", "cling", "fling", "swing", "thing"]
    one = build_root_index(words, max_prefix_length=1, min_prefix_count=1)
    assert "ing" not in {e.root for e in one}
    short = build_root_index(words, max_prefix_length=2)
    assert [e.root for e in short] == ["ing"]
    assert short[0].prefixes == ("br", "cl", "fl", "st", "sw", "th")


def test_build_prefix_index():
    words = ["bat", "bet", "bit", "cat", "cot", "dog"]
    entries = build_prefix_index(words, 1)
    assert [(e.prefix, e.roots) for e in entries] == [
        ("b", ("at", "et", "it")),
        ("c", ("at", "ot")),
    ]
    assert entries[0].root_count == 3
    assert build_prefix_index(words, 1, min_root_count=1)[-1].prefix == "d"


def test_print_prefix_report(toy_corpus, capsys):
    print_prefix_report(toy_corpus, top=3)
    out = capsys.readouterr().out
    assert "Prefix length 1:" in out
    assert "Prefix length 3:" in out
    assert "Total prefixes:" in out


def test_load_word_file_cleans_and_truncates(tmp_path):
    path = tmp_path / "ranked.txt"
    path.write_text("The\nof\n\nit's\nof\n42\nand\nto\n", encoding="utf-8")
    assert load_word_file(path) == ["the", "of", "and", "to"]
    assert load_word_file(path, top_n=2) == ["the", "of"]


def test_load_word_file_missing(tmp_path):
    with pytest.raises(CorpusError, match="not found"):
        load_word_file(tmp_path / "nope.txt")


def test_load_word_file_empty(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("123\n\n", encoding="utf-8")
    with pytest.raises(CorpusError, match="no usable words"):
        load_word_file(path)


def test_load_popular_words_uses_wordfreq_ranking(monkeypatch):
    calls = []

    def fake_top_n_list(lang, n, wordlist='best'):
        calls.append((lang, n, wordlist))
        return ["the", "of", "don't", "And", "2020", "to"]

    monkeypatch.setattr(venn_roots, "top_n_list", fake_top_n_list)
    assert load_popular_words(top_n=6) == ["the", "of", "and", "to"]
    assert calls == [("en", 6, "best")]


def test_load_popular_words_unknown_language(monkeypatch):
    def fake_top_n_list(lang, n, wordlist='best'):
        raise LookupError(f"No wordlist 'best' available for language {lang!r}")

    monkeypatch.setattr(venn_roots, "top_n_list", fake_top_n_list)
    with pytest.raises(CorpusError):
        load_popular_words(lang="xx")
