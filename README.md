# distlab

A small toolkit for building and testing distributed systems in Python.

It contains:

- `distlab.labgob` – `LabEncoder` and `LabDecoder`, which write and read
  length-prefixed encoded values on a binary stream. While encoding they
  report dataclass fields whose names start with an underscore; while
  decoding into an existing object they warn if that object already holds
  non-default values. `register` and `register_name` allow a type to appear
  in decoded values, and `error_count()` tells how many problems were
  reported.
- `distlab.porcupine` – a linearizability checker:
  - `porcupine.model` holds `Operation`, `Event`, `EventKind`, `Model` and
    `CheckResult`;
  - `porcupine.checker` holds `check_operations`, `check_events`, their
    `_timeout` and `_verbose` variants, and `LinearizationInfo`;
  - `porcupine.bitset` holds the `Bitset` the checker uses.
- `distlab.models` – a key/value model for the checker (`KvInput`,
  `KvOutput`, `kv_partition`, `kv_init`, `kv_step`,
  `kv_describe_operation`, and the ready-made `KV_MODEL`).
- `distlab.mr` – a MapReduce `Coordinator` and `worker` that talk over a
  UNIX-domain socket, with their messages in `distlab.mr.rpc`.
- `distlab.mrapps` – MapReduce applications, each with `map_fn` and
  `reduce_fn`: `wc`, `indexer`, `early_exit`, `jobcount`, `mtiming`,
  `rtiming`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Checking linearizability

```python
from distlab.porcupine.model import Operation
from distlab.porcupine.checker import check_operations
from distlab.models import KV_MODEL, KvInput, KvOutput

history = [
    Operation(client_id=0, input=KvInput(op=1, key="x", value="1"),
              call=0, output=KvOutput(value=""), return_=10),
    Operation(client_id=1, input=KvInput(op=0, key="x"),
              call=20, output=KvOutput(value="1"), return_=30),
]
print(check_operations(KV_MODEL, history))  # True
```

`check_operations_timeout` and `check_operations_verbose` take a timeout
in seconds (0 means none) and return a `CheckResult`; `UNKNOWN` means the
check timed out. The verbose form also returns a `LinearizationInfo` with
the longest partial linearizations found in each partition.

## Running MapReduce

A coordinator hands out map tasks, one per input file, then `n_reduce`
reduce tasks. A task that is not reported finished within ten seconds is
handed out again.

In one process:

```python
import time
from distlab.mr.coordinator import make_coordinator

coordinator = make_coordinator(["pg-a.txt", "pg-b.txt"], 10)
while not coordinator.done():
    time.sleep(1)
coordinator.close()
```

In one or more other processes, in the same directory:

```python
from distlab.mr.worker import worker
from distlab.mrapps import wc

worker(wc.map_fn, wc.reduce_fn)
```

Map tasks write intermediate files `mr-M-R` as JSON lines; reduce task
`R` writes `mr-out-R`, one `key value` line per key. The socket is
`/var/tmp/5840-mr-<uid>`, so this works on POSIX systems only.

## What the package does not do

- It has no command-line programs; coordinators and workers are started
  from Python as shown above, and there is no sequential single-process
  MapReduce runner.
- It has no simulated RPC network and no key/value server or client; the
  `distlab.kvsrv` package is empty.