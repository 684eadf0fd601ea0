import pytest

from distlab.mr.rpc import ReplyTask
from distlab.mr.worker import (
    KeyValue,
    ihash,
    process_map_task,
    process_reduce_task,
)


def _mapf(filename, contents):
    return [KeyValue(w, "1") for w in contents.split()]


def _reducef(key, values):
    return str(len(values))


def test_ihash_known_values():
    assert ihash("") == 0x011C9DC5
    assert ihash("a") == 0x640C292C


def test_ihash_non_negative():
    for key in ("x", "hello", "数据"):
        assert 0 <= ihash(key) <= 0x7FFFFFFF


def test_map_then_reduce(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in.txt").write_text("a b a c b a", encoding="utf-8")
    process_map_task(ReplyTask("map", "0", "in.txt", 1, 3), _mapf)
    for i in range(3):
        assert (tmp_path / f"mr-0-{i}").exists()
    counts = {}
    for i in range(3):
        process_reduce_task(ReplyTask("reduce", str(i), "", 1, 3), _reducef)
        for line in (tmp_path / f"mr-out-{i}").read_text().splitlines():
            key, value = line.split(" ")
            assert ihash(key) % 3 == i
            counts[key] = value
    assert counts == {"a": "3", "b": "2", "c": "1"}


def test_reduce_missing_input(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        process_reduce_task(ReplyTask("reduce", "0", "", 1, 1), _reducef)