"""MapReduce application that checks map tasks run in parallel."""

from __future__ import annotations

import os
import re
import time
from pathlib import Path

from distlab.mr.worker import KeyValue


def _alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def nparallel(phase: str) -> int:
    """Count the workers, this one included, now running ``phase``.

    Each worker leaves a marker file named after its pid in the current
    directory for a second; markers of live processes are counted.
    """
    marker = Path(f"mr-worker-{phase}-{os.getpid()}")
    marker.write_text("x")

    pattern = re.compile(rf"mr-worker-{re.escape(phase)}-([+-]?\d+)")
    running = 0
    for name in os.listdir("."):
        found = pattern.match(name)
        if found and _alive(int(found.group(1))):
            running += 1

    time.sleep(1)
    marker.unlink()
    return running


def map_fn(filename: str, contents: str) -> list[KeyValue]:
    """Report when this map started and how many maps ran alongside it."""
    started = time.time()
    pid = os.getpid()
    count = nparallel("map")
    return [
        KeyValue(f"times-{pid}", f"{started:.1f}"),
        KeyValue(f"parallel-{pid}", str(count)),
    ]


def reduce_fn(key: str, values: list[str]) -> str:
    # sorted so the output is deterministic
    return " ".join(sorted(values))