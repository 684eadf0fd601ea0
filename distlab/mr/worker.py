"""MapReduce worker: asks the coordinator for tasks and runs them."""

from __future__ import annotations

import json
import socket
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from distlab.mr import rpc
from distlab.mr.rpc import CommitAndQueryTask, ReplyTask


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: str


MapFn = Callable[[str, str], list]
ReduceFn = Callable[[str, list], str]


def ihash(key: str) -> int:
    """32-bit FNV-1a of ``key``, masked to a non-negative int."""
    h = 0x811C9DC5
    for byte in key.encode("utf-8"):
        h ^= byte
        h = (h * 0x01000193) & 0xFFFFFFFF
    return h & 0x7FFFFFFF


def process_map_task(reply: ReplyTask, mapf: MapFn) -> None:
    """Run map over one input file and write one file per reduce bucket."""
    with open(reply.file_name, encoding="utf-8") as f:
        content = f.read()
    partitions: list[list[KeyValue]] = [[] for _ in range(reply.n_reduce)]
    for kv in mapf(reply.file_name, content):
        partitions[ihash(kv.key) % reply.n_reduce].append(kv)
    for index, bucket in enumerate(partitions):
        with open(f"mr-{reply.task_number}-{index}", "w", encoding="utf-8") as out:
            for kv in bucket:
                record = {"Key": kv.key, "Value": kv.value}
                out.write(json.dumps(record, ensure_ascii=False) + "\n")


def _read_intermediate(filename: str):
    with open(filename, encoding="utf-8") as f:
        for line in f:
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                return
            yield KeyValue(record["Key"], record["Value"])


def process_reduce_task(reply: ReplyTask, reducef: ReduceFn) -> None:
    """Gather this bucket from every map output and write mr-out-N."""
    grouped: dict[str, list[str]] = {}
    for map_index in range(reply.n_map):
        for kv in _read_intermediate(f"mr-{map_index}-{reply.task_number}"):
            grouped.setdefault(kv.key, []).append(kv.value)
    with open(f"mr-out-{reply.task_number}", "w", encoding="utf-8") as out:
        for key, values in grouped.items():
            out.write(f"{key} {reducef(key, values)}\n")


def call(rpcname: str, args: Any) -> Optional[Any]:
    """Send one request to the coordinator and return its reply.

    Returns None if the coordinator reported an error; raises OSError if
    it cannot be reached.
    """
    request = rpc.encode_message({"method": rpcname, "args": args}) + b"\n"
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
        sock.connect(rpc.coordinator_sock())
        sock.sendall(request)
        with sock.makefile("rb") as stream:
            line = stream.readline()
    if not line:
        print("connection closed by coordinator")
        return None
    response = rpc.decode_message(line)
    if "error" in response:
        print(response["error"])
        return None
    return response.get("reply")


def worker(mapf: MapFn, reducef: ReduceFn) -> None:
    """Request and run tasks until the coordinator says to exit."""
    last_task = CommitAndQueryTask()
    while True:
        reply = call("Coordinator.AssignTask", last_task)
        if reply is None:
            time.sleep(1)
            continue
        if reply.task_type == "map":
            process_map_task(reply, mapf)
        elif reply.task_type == "reduce":
            process_reduce_task(reply, reducef)
        elif reply.task_type == "wait":
            continue
        elif reply.task_type == "exit":
            return
        last_task = CommitAndQueryTask(reply.task_type, reply.task_number)