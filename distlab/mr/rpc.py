"""Messages exchanged between MapReduce workers and the coordinator."""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass
from typing import Any


@dataclass
class CommitAndQueryTask:
    """Reports the last finished task and asks for a new one."""

    task_type: str = ""
    task_number: str = ""


@dataclass
class ReplyTask:
    """A task assignment; ``file_name`` is meaningful for map tasks only."""

    task_type: str = ""
    task_number: str = ""
    file_name: str = ""
    n_map: int = 0
    n_reduce: int = 0


_KINDS: dict[str, type] = {
    "CommitAndQueryTask": CommitAndQueryTask,
    "ReplyTask": ReplyTask,
}


def coordinator_sock() -> str:
    """A per-user UNIX-domain socket path for the coordinator."""
    return f"/var/tmp/5840-mr-{os.getuid()}"


def _to_wire(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        name = type(obj).__name__
        if _KINDS.get(name) is not type(obj):
            raise TypeError(f"cannot encode {name}")
        fields = {f.name: _to_wire(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
        return {"__kind__": name, **fields}
    if isinstance(obj, dict):
        return {str(key): _to_wire(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_wire(item) for item in obj]
    return obj


def _from_wire(data: dict) -> Any:
    kind = data.pop("__kind__", None)
    if kind is None:
        return data
    cls = _KINDS.get(kind)
    if cls is None:
        raise ValueError(f"unknown message kind {kind!r}")
    return cls(**data)


def encode_message(obj: Any) -> bytes:
    """Encode a message as one line of JSON, without the newline."""
    return json.dumps(_to_wire(obj), separators=(",", ":")).encode("utf-8")


def decode_message(data: bytes) -> Any:
    """Inverse of :func:`encode_message`."""
    return json.loads(data.decode("utf-8"), object_hook=_from_wire)