import json

import pytest

from venn_export import (
    combination_record, display_combinations, index_records,
    load_combinations, main, save_results,
)
from venn_roots import build_root_index
from venn_search import StageThresholds, search


@pytest.fixture
def results(toy_corpus):
    return build_root_index(toy_corpus), search(toy_corpus)


def test_compact_index_records(results):
    index, _ = results
    records = index_records(index)
    assert records[0] == {"root": "ng", "rootNumber": None, "prefixCount": 6}
    assert all("prefixes" not in r for r in records)


def test_full_index_records(results):
    index, _ = results
    records = index_records(index, compact=False)
    at = next(r for r in records if r["root"] == "at")
    assert at["prefixes"] == ["b", "c", "f", "h", "m", "p"]


def test_combination_record_layout(results):
    _, combinations = results
    record = combination_record(combinations[1])
    assert record["roots"] == ["at", "ing", "ed", "er"]
    assert [e["rootNumber"] for e in record["entries"]] == [1, 2, 3, 4]
    last = record["entries"][3]["conditionMatches"]
    assert last[0] == {
        "roots": ["at", "ing", "ed"],
        "prefixCount": 1,
        "prefixesInCommon": ["b"],
        "count": 1,
        "passed": True,
    }


def test_save_and_reload_round_trip(results, tmp_path):
    index, combinations = results
    roots_path, combos_path = save_results(
        index, combinations, tmp_path / "artifacts", thresholds=StageThresholds(),
    )
    roots = json.loads(roots_path.read_text(encoding="utf-8"))
    assert roots["num_roots"] == 5

    saved = json.loads(combos_path.read_text(encoding="utf-8"))
    assert saved["num_combinations"] == 2
    assert saved["thresholds"] == {"root2": [4], "root3": [2, 1], "root4": [1, 1, 1, 1, 1, 1]}

    assert load_combinations(combos_path) == combinations


def test_load_rejects_other_json(tmp_path):
    path = tmp_path / "roots.json"
    path.write_text(json.dumps({"roots": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_combinations(path)


def test_load_rejects_malformed_combination(tmp_path):
    path = tmp_path / "combinations.json"
    path.write_text(json.dumps({"combinations": [{"roots": []}]}), encoding="utf-8")
    with pytest.raises(ValueError, match="not a combinations file"):
        load_combinations(path)


def test_display(results, capsys):
    _, combinations = results
    display_combinations(combinations, limit=1)
    out = capsys.readouterr().out
    assert "Showing 1 of 2 combinations" in out
    # first combination is (er, ed, ing, at); its root4 line lists the triple group
    assert "er/ed/ing" in out
    assert "at/ing/ed" not in out

    display_combinations([])
    assert "No valid combinations." in capsys.readouterr().out


def test_main_prints_saved_combinations(results, tmp_path, capsys):
    index, combinations = results
    _, combos_path = save_results(index, combinations, tmp_path)
    main([str(combos_path), "--limit", "1", "--brief"])
    out = capsys.readouterr().out
    assert f"Loaded 2 combinations from {combos_path}" in out
    assert "Showing 1 of 2 combinations" in out
    assert " vs " not in out


def test_main_malformed_file_exits(tmp_path, capsys):
    path = tmp_path / "combinations.json"
    path.write_text(json.dumps({"combinations": [{"roots": []}]}), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main([str(path)])
    assert exc.value.code == 1
    assert "ERROR" in capsys.readouterr().out
