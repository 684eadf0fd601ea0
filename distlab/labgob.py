"""Value encoding for RPC and persistence that warns about common mistakes.

Values are serialised so that no references to live program objects cross
an RPC boundary. While encoding, dataclass fields whose names start with an
underscore are reported, since such fields are treated as private and are a
frequent source of lost state. While decoding into an existing object, a
warning is printed if that object already holds non-default values.
"""

from __future__ import annotations

import dataclasses
import enum
import io
import pickle
import struct
import threading
from typing import Any, BinaryIO

_lock = threading.Lock()
_error_count = 0
_checked: set[type] = set()
_registry: dict[tuple[str, str], type] = {}
_names: dict[str, type] = {}

_SAFE_BUILTINS = {"set", "frozenset", "bytearray", "complex", "slice", "range"}
_HEADER = struct.Struct(">I")


def error_count() -> int:
    """Number of problems reported so far."""
    with _lock:
        return _error_count


def _bump() -> int:
    global _error_count
    with _lock:
        _error_count += 1
        return _error_count


def _remember(cls: type) -> None:
    with _lock:
        _registry[(cls.__module__, cls.__qualname__)] = cls


def register(value: Any) -> None:
    """Allow the type of ``value`` to appear inside decoded values."""
    _check_value(value)
    _remember(type(value))


def register_name(name: str, value: Any) -> None:
    """Register the type of ``value`` under an additional name."""
    _check_value(value)
    cls = type(value)
    _remember(cls)
    with _lock:
        _names[name] = cls


def _check_value(value: Any) -> None:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        _check_dataclass(value)
        return
    if isinstance(value, enum.Enum):
        _remember(type(value))
        return
    if isinstance(value, dict):
        for key, item in value.items():
            _check_value(key)
            _check_value(item)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            _check_value(item)


def _check_dataclass(value: Any) -> None:
    cls = type(value)
    with _lock:
        first_time = cls not in _checked
        _checked.add(cls)
    _remember(cls)
    for field in dataclasses.fields(value):
        if first_time and field.name.startswith("_"):
            print(
                f"labgob error: private field {field.name} of {cls.__name__} "
                "in RPC or persist/snapshot will break your Raft"
            )
            _bump()
        _check_value(getattr(value, field.name))


def _is_default(value: Any) -> bool:
    return value == type(value)()


def _check_default(value: Any, depth: int, name: str) -> None:
    if depth > 3 or value is None:
        return
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        for field in dataclasses.fields(value):
            inner = f"{name}.{field.name}" if name else field.name
            _check_default(getattr(value, field.name), depth + 1, inner)
        return
    if isinstance(value, (bool, int, float, str)) and not _is_default(value):
        with _lock:
            quiet = _error_count >= 1
        if not quiet:
            what = name or type(value).__name__
            print(
                f"labgob warning: Decoding into a non-default variable/field {what} "
                "may not work"
            )
        _bump()


class _Unpickler(pickle.Unpickler):
    def find_class(self, module: str, name: str) -> Any:
        if module == "builtins" and name in _SAFE_BUILTINS:
            return super().find_class(module, name)
        with _lock:
            cls = _registry.get((module, name))
        if cls is None:
            raise pickle.UnpicklingError(f"type {module}.{name} is not registered")
        return cls


class LabEncoder:
    """Writes length-prefixed encoded values to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def encode(self, value: Any) -> None:
        _check_value(value)
        payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        self._stream.write(_HEADER.pack(len(payload)))
        self._stream.write(payload)


class LabDecoder:
    """Reads values written by :class:`LabEncoder`."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def decode(self, target: Any = None) -> Any:
        """Decode the next value.

        If ``target`` is a dataclass instance, list or dict of the decoded
        type, it is updated in place and returned; otherwise the decoded
        value is returned. Raises EOFError when the stream is exhausted.
        """
        if target is not None:
            _check_value(target)
            _check_default(target, 1, "")
        header = self._stream.read(_HEADER.size)
        if len(header) < _HEADER.size:
            raise EOFError("no more values")
        (size,) = _HEADER.unpack(header)
        payload = self._stream.read(size)
        if len(payload) < size:
            raise EOFError("truncated value")
        value = _Unpickler(io.BytesIO(payload)).load()
        if target is None or type(target) is not type(value):
            return value
        if dataclasses.is_dataclass(target):
            for field in dataclasses.fields(target):
                object.__setattr__(target, field.name, getattr(value, field.name))
            return target
        if isinstance(target, list):
            target[:] = value
            return target
        if isinstance(target, dict):
            target.clear()
            target.update(value)
            return target
        return value