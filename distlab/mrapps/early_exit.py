"""MapReduce application with slow reduces, to catch workers exiting early."""

from __future__ import annotations

import time

from distlab.mr.worker import KeyValue


def map_fn(filename: str, contents: str) -> list[KeyValue]:
    """One record per input file."""
    return [KeyValue(filename, "1")]


def reduce_fn(key: str, values: list[str]) -> str:
    """The number of occurrences; some keys take three seconds."""
    if "sherlock" in key or "tom" in key:
        time.sleep(3)
    return str(len(values))