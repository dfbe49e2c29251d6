"""Tests for JSON export of the index, counts and results."""

import json

import pytest

from memsearch.search.index import InvertedIndex
from memsearch.search.json_writer import dumps, results_payload, write_counts, write_index, write_results
from memsearch.search.models import SearchResult


pytestmark = pytest.mark.unit


@pytest.fixture
def index():
    idx = InvertedIndex()
    idx.add_all(["comput", "comput", "scienc"], "a.txt")
    idx.add_all(["scienc"], "b.txt")
    return idx


class TestDumps:
    def test_tab_indented(self):
        assert dumps({"a": [1, 2]}) == '{\n\t"a": [\n\t\t1,\n\t\t2\n\t]\n}'

    def test_non_ascii_is_kept(self):
        assert dumps({"where": "café.txt"}) == '{\n\t"where": "café.txt"\n}'


class TestWriters:
    def test_write_index(self, index, tmp_path):
        path = tmp_path / "out" / "index.json"

        write_index(index, path)

        text = path.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert "\t\"comput\": {" in text
        assert json.loads(text) == {"comput": {"a.txt": [1, 2]}, "scienc": {"a.txt": [3], "b.txt": [1]}}

    def test_write_counts(self, index, tmp_path):
        path = tmp_path / "counts.json"

        write_counts(index, path)

        assert json.loads(path.read_text(encoding="utf-8")) == {"a.txt": 3, "b.txt": 1}

    def test_write_results(self, index, tmp_path):
        path = tmp_path / "results.json"
        results = {"scienc": index.exact_search(["scienc"]), "comput": index.exact_search(["comput"])}

        write_results(results, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert list(data) == ["comput", "scienc"]
        assert data["comput"] == [{"where": "a.txt", "count": 2, "score": "0.666667"}]
        assert [entry["where"] for entry in data["scienc"]] == ["b.txt", "a.txt"]

    def test_scores_keep_six_digits(self, tmp_path):
        idx = InvertedIndex()
        idx.add_all(["x", "y"], "half.txt")
        path = tmp_path / "results.json"

        write_results({"x": idx.exact_search(["x"])}, path)

        assert '"score": "0.500000"' in path.read_text(encoding="utf-8")

    def test_empty_results(self):
        assert results_payload({}) == {}
        assert results_payload({"zebra": []}) == {"zebra": []}

    def test_write_into_missing_directory_is_created(self, tmp_path):
        path = tmp_path / "deep" / "er" / "results.json"

        write_results({"x": [SearchResult(location="l", words=1, matches=1)]}, path)

        assert path.exists()

    def test_unwritable_path_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")

        with pytest.raises(OSError):
            write_counts(InvertedIndex(), blocker / "counts.json")
