from distlab.mr.worker import KeyValue
from distlab.mrapps.wc import map_fn, reduce_fn


def test_map_splits_on_non_letters():
    result = map_fn("ignored.txt", "Hello, world! hello")
    assert result == [KeyValue("Hello", "1"), KeyValue("world", "1"), KeyValue("hello", "1")]


def test_map_treats_digits_as_separators():
    assert [kv.key for kv in map_fn("f", "abc123def")] == ["abc", "def"]


def test_map_empty():
    assert map_fn("f", " 42 !") == []


def test_reduce_counts():
    assert reduce_fn("word", ["1", "1", "1"]) == "3"