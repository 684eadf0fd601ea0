"""Histories and models for linearizability checking."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class Operation:
    """One completed operation: its input, output and call/return times."""

    input: Any
    call: int
    output: Any
    return_: int
    client_id: int = 0


class EventKind(enum.Enum):
    CALL = False
    RETURN = True


@dataclass(frozen=True)
class Event:
    """A call or return event in an ordered history."""

    client_id: int
    kind: EventKind
    value: Any
    id: int


class CheckResult(str, enum.Enum):
    UNKNOWN = "Unknown"
    OK = "Ok"
    ILLEGAL = "Illegal"


def no_partition(history: list) -> list:
    return [history]


def no_partition_event(history: list) -> list:
    return [history]


def shallow_equal(state1: Any, state2: Any) -> bool:
    return state1 == state2


def default_describe_operation(inp: Any, out: Any) -> str:
    return f"{inp} -> {out}"


def default_describe_state(state: Any) -> str:
    return f"{state}"


@dataclass
class Model:
    """A sequential specification.

    ``step(state, input, output)`` returns ``(ok, new_state)`` and must not
    mutate ``state``.
    """

    init: Callable[[], Any]
    step: Callable[[Any, Any, Any], tuple]
    partition: Optional[Callable[[list], list]] = None
    partition_event: Optional[Callable[[list], list]] = None
    equal: Optional[Callable[[Any, Any], bool]] = None
    describe_operation: Optional[Callable[[Any, Any], str]] = None
    describe_state: Optional[Callable[[Any], str]] = None

    def with_defaults(self) -> "Model":
        """A copy with every missing optional function filled in."""
        return dataclasses.replace(
            self,
            partition=self.partition or no_partition,
            partition_event=self.partition_event or no_partition_event,
            equal=self.equal or shallow_equal,
            describe_operation=self.describe_operation or default_describe_operation,
            describe_state=self.describe_state or default_describe_state,
        )