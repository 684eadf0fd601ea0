import os

from distlab.mrapps import rtiming


def test_map_emits_ten_keys():
    result = rtiming.map_fn("in.txt", "ignored")
    assert [kv.key for kv in result] == list("abcdefghij")
    assert {kv.value for kv in result} == {"1"}


def test_map_ignores_input():
    assert rtiming.map_fn("a", "x") == rtiming.map_fn("b", "y y y")


def test_reduce_alone(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert rtiming.reduce_fn("a", ["1", "1"]) == "1"
    assert os.listdir(tmp_path) == []