"""MapReduce application that counts how many times map tasks ran."""

from __future__ import annotations

import itertools
import os
import random
import time
from pathlib import Path

from distlab.mr.worker import KeyValue

_PREFIX = "mr-worker-jobcount"
_invocations = itertools.count()


def map_fn(filename: str, contents: str) -> list[KeyValue]:
    """Leave a marker file for this invocation, then take 2-5 seconds."""
    marker = Path(f"{_PREFIX}-{os.getpid()}-{next(_invocations)}")
    marker.write_text("x")
    time.sleep((2000 + random.randrange(3000)) / 1000)
    return [KeyValue("a", "x")]


def reduce_fn(key: str, values: list[str]) -> str:
    """The number of marker files in the current directory."""
    return str(sum(1 for name in os.listdir(".") if name.startswith(_PREFIX)))