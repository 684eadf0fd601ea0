import os
import time

from distlab.mrapps import mtiming


def test_reduce_sorts_and_joins():
    assert mtiming.reduce_fn("k", ["c", "a", "b"]) == "a b c"


def test_reduce_of_nothing_is_empty():
    assert mtiming.reduce_fn("k", []) == ""


def test_map_reports_time_and_parallelism(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    before = time.time()
    result = mtiming.map_fn("in.txt", "contents")
    pid = os.getpid()
    keys = [kv.key for kv in result]
    assert keys == [f"times-{pid}", f"parallel-{pid}"]
    assert before - 0.1 <= float(result[0].value) <= time.time()
    assert result[1].value == "1"
    assert os.listdir(tmp_path) == []