"""Linearizability model of a key/value store."""

from __future__ import annotations

from dataclasses import dataclass

from distlab.porcupine.model import Model, Operation

GET, PUT, APPEND = 0, 1, 2


@dataclass(frozen=True)
class KvInput:
    """Op 0 is get, 1 put, 2 append, anything else append returning the old value."""

    op: int
    key: str
    value: str = ""


@dataclass(frozen=True)
class KvOutput:
    value: str = ""


def kv_partition(history: list[Operation]) -> list[list[Operation]]:
    """Split a history by key, ordered by key."""
    groups: dict[str, list[Operation]] = {}
    for operation in history:
        groups.setdefault(operation.input.key, []).append(operation)
    return [groups[key] for key in sorted(groups)]


def kv_init() -> str:
    return ""


def kv_step(state: str, inp: KvInput, out: KvOutput) -> tuple[bool, str]:
    if inp.op == GET:
        return out.value == state, state
    if inp.op == PUT:
        return True, inp.value
    if inp.op == APPEND:
        return True, state + inp.value
    return out.value == state, state + inp.value


def kv_describe_operation(inp: KvInput, out: KvOutput) -> str:
    if inp.op == GET:
        return f"get('{inp.key}') -> '{out.value}'"
    if inp.op == PUT:
        return f"put('{inp.key}', '{inp.value}')"
    if inp.op == APPEND:
        return f"append('{inp.key}', '{inp.value}')"
    return "<invalid>"


KV_MODEL = Model(
    init=kv_init,
    step=kv_step,
    partition=kv_partition,
    describe_operation=kv_describe_operation,
)