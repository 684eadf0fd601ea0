"""Inverted-index application for MapReduce."""

from __future__ import annotations

import itertools

from distlab.mr.worker import KeyValue


def map_fn(document: str, value: str) -> list[KeyValue]:
    """Emit (word, document) once for each distinct word in the document."""
    words = dict.fromkeys(
        "".join(chars)
        for is_letter, chars in itertools.groupby(value, str.isalpha)
        if is_letter
    )
    return [KeyValue(word, document) for word in words]


def reduce_fn(key: str, values: list[str]) -> str:
    """"<count> <sorted comma-separated documents>"."""
    documents = sorted(values)
    return f"{len(documents)} {','.join(documents)}"