from distlab.mr.worker import KeyValue
from distlab.mrapps.indexer import map_fn, reduce_fn


def test_map_emits_each_word_once():
    result = map_fn("doc1", "a b a c")
    assert sorted(result, key=lambda kv: kv.key) == [
        KeyValue("a", "doc1"),
        KeyValue("b", "doc1"),
        KeyValue("c", "doc1"),
    ]


def test_map_no_words():
    assert map_fn("doc", "123 ...") == []


def test_reduce_sorts_documents():
    assert reduce_fn("word", ["d2", "d1"]) == "2 d1,d2"