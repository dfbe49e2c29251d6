"""Tests for the thread-safe inverted index."""

import threading

import pytest

from memsearch.search.concurrent_index import ConcurrentInvertedIndex
from memsearch.search.index import InvertedIndex
from memsearch.utils.work_queue import WorkQueue


pytestmark = pytest.mark.unit


def _documents(count=40):
    vocabulary = ["alpha", "beta", "gamma", "delta", "epsilon", "zeta"]
    return {
        f"doc-{number:02d}.txt": [vocabulary[(number + offset) % len(vocabulary)] for offset in range(number % 7 + 3)]
        for number in range(count)
    }


class TestConcurrentInvertedIndex:
    def test_behaves_like_plain_index(self):
        idx = ConcurrentInvertedIndex()

        assert idx.add("word", "loc", 1) is True
        assert idx.add("word", "loc", 1) is False
        assert idx.location_count("missing") == 0
        assert idx.get("missing") == {}
        assert idx.words_starting_with("wo") == ["word"]
        with pytest.raises(ValueError):
            idx.add("word", "loc", 0)

    def test_parallel_build_matches_serial_build(self):
        documents = _documents()
        serial = InvertedIndex()
        for location, words in documents.items():
            serial.add_all(words, location)

        parallel = ConcurrentInvertedIndex()
        with WorkQueue(threads=8) as queue:
            for location, words in documents.items():
                queue.execute(lambda location=location, words=words: parallel.add_all(words, location))

        assert parallel.to_dict() == serial.to_dict()
        assert parallel.location_word_counts() == serial.location_word_counts()

    def test_concurrent_writers_to_same_word(self):
        idx = ConcurrentInvertedIndex()
        barrier = threading.Barrier(6)

        def writer(number):
            barrier.wait()
            for position in range(1, 201):
                idx.add("shared", f"loc-{number}", position)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert idx.location_count("shared") == 6
        assert all(idx.position_count("shared", f"loc-{n}") == 200 for n in range(6))

    def test_readers_run_alongside_writers(self):
        idx = ConcurrentInvertedIndex()
        stop = threading.Event()
        errors = []

        def reader():
            while not stop.is_set():
                try:
                    idx.partial_search(["w"])
                    idx.location_word_counts()
                    idx.to_dict()
                except Exception as e:  # noqa: BLE001
                    errors.append(e)

        readers = [threading.Thread(target=reader) for _ in range(3)]
        for thread in readers:
            thread.start()
        for number in range(300):
            idx.add(f"w{number % 17}", f"loc-{number % 5}", number + 1)
        stop.set()
        for thread in readers:
            thread.join()

        assert errors == []
        assert idx.word_count() == 17
        assert sum(idx.location_word_counts().values()) == 300

    def test_clear_resets_locks(self):
        idx = ConcurrentInvertedIndex()
        idx.add_all(["a", "b"], "loc")

        idx.clear()

        assert idx.word_count() == 0
        assert idx.contains_word("a") is False
        assert idx.add("a", "loc", 1) is True
