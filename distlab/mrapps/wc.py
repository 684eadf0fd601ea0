"""Word-count application for MapReduce."""

from __future__ import annotations

import itertools

from distlab.mr.worker import KeyValue


def map_fn(filename: str, contents: str) -> list[KeyValue]:
    """Emit ("word", "1") for every run of letters in ``contents``."""
    return [
        KeyValue("".join(chars), "1")
        for is_letter, chars in itertools.groupby(contents, str.isalpha)
        if is_letter
    ]


def reduce_fn(key: str, values: list[str]) -> str:
    """The number of occurrences of the word."""
    return str(len(values))