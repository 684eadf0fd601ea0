from distlab.models import (
    KV_MODEL,
    KvInput,
    KvOutput,
    kv_describe_operation,
    kv_init,
    kv_partition,
    kv_step,
)
from distlab.porcupine.model import Operation


def _op(key, value=""):
    return Operation(input=KvInput(1, key, value), call=0, output=KvOutput(), return_=1)


def test_partition_groups_and_sorts():
    a1, b1, a2 = _op("b"), _op("a"), _op("b", "x")
    parts = kv_partition([a1, b1, a2])
    assert parts == [[b1], [a1, a2]]


def test_step_get():
    assert kv_step("v", KvInput(0, "k"), KvOutput("v")) == (True, "v")
    assert kv_step("v", KvInput(0, "k"), KvOutput("w"))[0] is False


def test_step_put_and_append():
    assert kv_step("old", KvInput(1, "k", "new"), KvOutput()) == (True, "new")
    assert kv_step("ab", KvInput(2, "k", "c"), KvOutput()) == (True, "abc")


def test_step_append_with_return():
    assert kv_step("ab", KvInput(3, "k", "c"), KvOutput("ab")) == (True, "abc")
    assert kv_step("ab", KvInput(3, "k", "c"), KvOutput("zz"))[0] is False


def test_describe():
    assert kv_describe_operation(KvInput(0, "k"), KvOutput("v")) == "get('k') -> 'v'"
    assert kv_describe_operation(KvInput(1, "k", "v"), KvOutput()) == "put('k', 'v')"
    assert kv_describe_operation(KvInput(2, "k", "v"), KvOutput()) == "append('k', 'v')"
    assert kv_describe_operation(KvInput(3, "k", "v"), KvOutput()) == "<invalid>"


def test_model_wiring():
    assert KV_MODEL.init() == kv_init() == ""
    assert KV_MODEL.step is kv_step