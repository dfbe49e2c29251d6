"""Tests for building an index from text files."""

import logging

import pytest

from memsearch.search.concurrent_index import ConcurrentInvertedIndex
from memsearch.search.file_indexer import ConcurrentFileIndexer, FileIndexer, index_file
from memsearch.search.index import InvertedIndex
from memsearch.utils.work_queue import WorkQueue


pytestmark = pytest.mark.unit


class TestIndexFile:
    def test_positions_start_at_one(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("Computer computers science", encoding="utf-8")
        index = InvertedIndex()

        added = index_file(path, index)

        assert added == 3
        assert index.get("comput") == {str(path): (1, 2)}
        assert index.get("scienc") == {str(path): (3,)}

    def test_empty_file_adds_nothing(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("", encoding="utf-8")
        index = InvertedIndex()

        assert index_file(path, index) == 0
        assert index.word_count() == 0

    def test_invalid_utf8_raises(self, tmp_path):
        path = tmp_path / "binary.txt"
        path.write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(UnicodeDecodeError):
            index_file(path, InvertedIndex())


class TestFileIndexer:
    def test_indexes_text_files_only(self, text_tree):
        index = InvertedIndex()

        result = FileIndexer(index).index_path(text_tree)

        assert result.documents_indexed == 3
        assert result.documents_skipped == 0
        assert index.locations("scienc") == [str(text_tree / "a.txt"), str(text_tree / "b.text")]
        assert index.location_word_counts() == {
            str(text_tree / "a.txt"): 3,
            str(text_tree / "b.text"): 5,
            str(text_tree / "nested" / "c.TXT"): 3,
        }

    def test_single_file_root_ignores_extension(self, text_tree):
        index = InvertedIndex()

        result = FileIndexer(index).index_path(text_tree / "notes.md")

        assert result.documents_indexed == 1
        assert index.words() == ["comput", "scienc"]

    def test_missing_root_indexes_nothing(self, tmp_path, caplog):
        index = InvertedIndex()

        with caplog.at_level(logging.WARNING, logger="memsearch.utils.files"):
            result = FileIndexer(index).index_path(tmp_path / "nope")

        assert result.documents_indexed == 0
        assert "not a file or directory" in caplog.text

    def test_unreadable_file_is_skipped(self, text_tree):
        (text_tree / "broken.txt").write_bytes(b"\xff\xfe\xfa")
        index = InvertedIndex()

        result = FileIndexer(index).index_path(text_tree)

        assert result.documents_indexed == 3
        assert result.documents_skipped == 1
        assert "broken.txt" in result.errors[0]

    def test_custom_extensions(self, text_tree):
        index = InvertedIndex()

        result = FileIndexer(index, extensions=(".md",)).index_path(text_tree)

        assert result.documents_indexed == 1


class TestConcurrentFileIndexer:
    def test_matches_serial_indexer(self, text_tree):
        serial = InvertedIndex()
        FileIndexer(serial).index_path(text_tree)

        parallel = ConcurrentInvertedIndex()
        result = ConcurrentFileIndexer(parallel, threads=4).index_path(text_tree)

        assert result.documents_indexed == 3
        assert parallel.to_dict() == serial.to_dict()

    def test_many_files(self, tmp_path):
        root = tmp_path / "many"
        root.mkdir()
        for number in range(60):
            (root / f"doc{number:03d}.txt").write_text(f"cats dogs {'fish ' * (number % 4)}", encoding="utf-8")
        parallel = ConcurrentInvertedIndex()

        result = ConcurrentFileIndexer(parallel, threads=8).index_path(root)

        assert result.documents_indexed == 60
        assert parallel.location_count("cat") == 60
        assert parallel.location_count("fish") == 45

    def test_shared_queue_stays_open(self, text_tree):
        index = ConcurrentInvertedIndex()
        with WorkQueue(threads=2) as queue:
            ConcurrentFileIndexer(index, queue=queue).index_path(text_tree)

            assert queue.pending == 0
            assert queue.is_shutdown is False

        assert index.word_count() > 0
