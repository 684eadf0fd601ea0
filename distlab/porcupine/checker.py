"""Linearizability checking of operation and event histories."""

from __future__ import annotations

import dataclasses
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from distlab.porcupine.bitset import Bitset
from distlab.porcupine.model import (
    CheckResult,
    Event,
    EventKind,
    Model,
    Operation,
)


@dataclass
class _Entry:
    is_return: bool
    value: Any
    id: int
    time: int
    client_id: int


@dataclass
class LinearizationInfo:
    """Per-partition entries and the longest partial linearizations found."""

    history: list = field(default_factory=list)
    partial_linearizations: list = field(default_factory=list)


class _Node:
    __slots__ = ("value", "match", "id", "next", "prev")

    def __init__(self, value: Any, match: Optional["_Node"], ident: int) -> None:
        self.value = value
        self.match = match  # a call if match is set, otherwise a return
        self.id = ident
        self.next: Optional[_Node] = None
        self.prev: Optional[_Node] = None


def _make_entries(history: list[Operation]) -> list[_Entry]:
    entries = []
    for ident, operation in enumerate(history):
        entries.append(
            _Entry(False, operation.input, ident, operation.call, operation.client_id)
        )
        entries.append(
            _Entry(True, operation.output, ident, operation.return_, operation.client_id)
        )
    # at equal times, calls come before returns
    entries.sort(key=lambda e: (e.time, e.is_return))
    return entries


def _renumber(events: list[Event]) -> list[Event]:
    mapping: dict[int, int] = {}
    renumbered = []
    for event in events:
        new_id = mapping.setdefault(event.id, len(mapping))
        renumbered.append(dataclasses.replace(event, id=new_id))
    return renumbered


def _convert_entries(events: list[Event]) -> list[_Entry]:
    # the position in the history stands in for time
    return [
        _Entry(event.kind is EventKind.RETURN, event.value, event.id, index, event.client_id)
        for index, event in enumerate(events)
    ]


def _insert_before(node: _Node, mark: Optional[_Node]) -> _Node:
    if mark is not None:
        before = mark.prev
        mark.prev = node
        node.next = mark
        if before is not None:
            node.prev = before
            before.next = node
    return node


def _length(node: Optional[_Node]) -> int:
    count = 0
    while node is not None:
        node = node.next
        count += 1
    return count


def _make_linked_entries(entries: list[_Entry]) -> Optional[_Node]:
    root: Optional[_Node] = None
    returns: dict[int, _Node] = {}
    for elem in reversed(entries):
        if elem.is_return:
            node = _Node(elem.value, None, elem.id)
            returns[elem.id] = node
        else:
            node = _Node(elem.value, returns.get(elem.id), elem.id)
        _insert_before(node, root)
        root = node
    return root


def _lift(entry: _Node) -> None:
    entry.prev.next = entry.next
    entry.next.prev = entry.prev
    match = entry.match
    match.prev.next = match.next
    if match.next is not None:
        match.next.prev = match.prev


def _unlift(entry: _Node) -> None:
    match = entry.match
    match.prev.next = match
    if match.next is not None:
        match.next.prev = match
    entry.prev.next = entry
    entry.next.prev = entry


def _cache_contains(model: Model, cache: dict, linearized: Bitset, state: Any) -> bool:
    return any(
        linearized == seen and model.equal(state, seen_state)
        for seen, seen_state in cache.get(linearized.hash_key(), ())
    )


def _check_single(
    model: Model, history: list[_Entry], compute_partial: bool, kill: threading.Event
) -> tuple[bool, list]:
    entry = _make_linked_entries(history)
    n = _length(entry) // 2
    linearized = Bitset(n)
    cache: dict[int, list] = {}
    calls: list[tuple[_Node, Any]] = []
    # longest linearizable prefix that includes each entry
    longest: list[Optional[list[int]]] = [None] * n

    state = model.init()
    head = _insert_before(_Node(None, None, -1), entry)
    while head.next is not None:
        if kill.is_set():
            return False, longest
        if entry.match is not None:
            ok, new_state = model.step(state, entry.value, entry.match.value)
            if ok:
                new_linearized = linearized.clone().set(entry.id)
                if not _cache_contains(model, cache, new_linearized, new_state):
                    cache.setdefault(new_linearized.hash_key(), []).append(
                        (new_linearized, new_state)
                    )
                    calls.append((entry, state))
                    state = new_state
                    linearized.set(entry.id)
                    _lift(entry)
                    entry = head.next
                else:
                    entry = entry.next
            else:
                entry = entry.next
        else:
            if not calls:
                return False, longest
            if compute_partial:
                seq: Optional[list[int]] = None
                for call_node, _ in calls:
                    current = longest[call_node.id]
                    if current is None or len(calls) > len(current):
                        if seq is None:
                            seq = [node.id for node, _ in calls]
                        longest[call_node.id] = seq
            entry, state = calls.pop()
            linearized.clear(entry.id)
            _unlift(entry)
            entry = entry.next
    full = [node.id for node, _ in calls]
    return True, [full] * n


def _check_parallel(
    model: Model, history: list[list[_Entry]], compute_info: bool, timeout: float
) -> tuple[CheckResult, LinearizationInfo]:
    results: queue.Queue = queue.Queue()
    longest: list[list] = [[] for _ in history]
    kill = threading.Event()

    def run(index: int, subhistory: list[_Entry]) -> None:
        try:
            ok, partial = _check_single(model, subhistory, compute_info, kill)
        except Exception as exc:  # surfaced in the calling thread
            results.put((False, exc))
            return
        longest[index] = partial
        results.put((ok, None))

    for index, subhistory in enumerate(history):
        threading.Thread(target=run, args=(index, subhistory), daemon=True).start()

    deadline = time.monotonic() + timeout if timeout and timeout > 0 else None
    ok = True
    timed_out = False
    count = 0
    while count < len(history):
        remaining = None if deadline is None else max(deadline - time.monotonic(), 0.0)
        try:
            result, error = results.get(timeout=remaining)
        except queue.Empty:
            # a timeout may hide an illegal history
            timed_out = True
            kill.set()
            break
        count += 1
        if error is not None:
            kill.set()
            raise error
        ok = ok and result
        if not ok and not compute_info:
            kill.set()
            break

    info = LinearizationInfo()
    if compute_info:
        while count < len(history):
            _, error = results.get()
            count += 1
            if error is not None:
                raise error
        partials = []
        for per_entry in longest:
            unique: dict[int, list[int]] = {}
            for seq in per_entry:
                if seq is not None:
                    unique.setdefault(id(seq), seq)
            partials.append([list(seq) for seq in unique.values()])
        info = LinearizationInfo(history=history, partial_linearizations=partials)

    if not ok:
        return CheckResult.ILLEGAL, info
    if timed_out:
        return CheckResult.UNKNOWN, info
    return CheckResult.OK, info


def _check_events(
    model: Model, history: list[Event], verbose: bool, timeout: float
) -> tuple[CheckResult, LinearizationInfo]:
    model = model.with_defaults()
    partitions = model.partition_event(history)
    entries = [_convert_entries(_renumber(sub)) for sub in partitions]
    return _check_parallel(model, entries, verbose, timeout)


def _check_operations(
    model: Model, history: list[Operation], verbose: bool, timeout: float
) -> tuple[CheckResult, LinearizationInfo]:
    model = model.with_defaults()
    partitions = model.partition(history)
    entries = [_make_entries(sub) for sub in partitions]
    return _check_parallel(model, entries, verbose, timeout)


def check_operations(model: Model, history: list[Operation]) -> bool:
    """True if the operation history is linearizable."""
    result, _ = _check_operations(model, history, False, 0)
    return result is CheckResult.OK


def check_operations_timeout(
    model: Model, history: list[Operation], timeout: float
) -> CheckResult:
    """Check with a timeout in seconds; 0 means none. UNKNOWN on timeout."""
    result, _ = _check_operations(model, history, False, timeout)
    return result


def check_operations_verbose(
    model: Model, history: list[Operation], timeout: float
) -> tuple[CheckResult, LinearizationInfo]:
    """Check and also return partial linearizations for visualisation."""
    return _check_operations(model, history, True, timeout)


def check_events(model: Model, history: list[Event]) -> bool:
    """True if the event history is linearizable."""
    result, _ = _check_events(model, history, False, 0)
    return result is CheckResult.OK


def check_events_timeout(model: Model, history: list[Event], timeout: float) -> CheckResult:
    """Check with a timeout in seconds; 0 means none. UNKNOWN on timeout."""
    result, _ = _check_events(model, history, False, timeout)
    return result


def check_events_verbose(
    model: Model, history: list[Event], timeout: float
) -> tuple[CheckResult, LinearizationInfo]:
    """Check and also return partial linearizations for visualisation."""
    return _check_events(model, history, True, timeout)