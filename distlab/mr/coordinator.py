"""MapReduce coordinator: hands out map and reduce tasks to workers."""

from __future__ import annotations

import contextlib
import enum
import os
import socketserver
import threading
from dataclasses import dataclass
from typing import Any, Optional

from distlab.mr import rpc
from distlab.mr.rpc import CommitAndQueryTask, ReplyTask

TASK_TIMEOUT = 10.0


class TaskStatus(enum.IntEnum):
    PENDING = 0
    IN_PROGRESS = 1
    COMPLETED = 2


@dataclass
class Task:
    task_type: str  # "map" or "reduce"
    file_name: str
    task_number: int
    status: TaskStatus = TaskStatus.PENDING


def _parse_index(number: str) -> int:
    try:
        return int(number)
    except ValueError:
        return 0


class _Handler(socketserver.StreamRequestHandler):
    def handle(self) -> None:
        line = self.rfile.readline()
        if not line:
            return
        try:
            request = rpc.decode_message(line)
            reply = self.server.coordinator._dispatch(request["method"], request["args"])
            response = {"reply": reply}
        except Exception as exc:
            response = {"error": str(exc)}
        self.wfile.write(rpc.encode_message(response) + b"\n")


class _RpcServer(socketserver.ThreadingMixIn, socketserver.UnixStreamServer):
    daemon_threads = True

    def __init__(self, path: str, coordinator: "Coordinator") -> None:
        self.coordinator = coordinator
        super().__init__(path, _Handler)


class Coordinator:
    """Tracks task progress; tasks not finished in time are handed out again."""

    def __init__(
        self,
        files: list[str],
        n_reduce: int,
        *,
        task_timeout: float = TASK_TIMEOUT,
        sockname: Optional[str] = None,
    ) -> None:
        self._lock = threading.Lock()
        self.n_map = len(files)
        self.n_reduce = n_reduce
        self.map_tasks = [Task("map", name, i) for i, name in enumerate(files)]
        self.reduce_tasks = [Task("reduce", "", i) for i in range(n_reduce)]
        self.completed_map = 0
        self.completed_reduce = 0
        self.task_timeout = task_timeout
        self.sockname = sockname or rpc.coordinator_sock()
        self._timers: list[threading.Timer] = []
        self._server: Optional[_RpcServer] = None
        self._thread: Optional[threading.Thread] = None

    def __enter__(self) -> "Coordinator":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _expire(self, task: Task) -> None:
        with self._lock:
            if task.status is TaskStatus.IN_PROGRESS:
                task.status = TaskStatus.PENDING

    def _claim(self, tasks: list[Task]) -> Optional[Task]:
        for task in tasks:
            if task.status is TaskStatus.PENDING:
                task.status = TaskStatus.IN_PROGRESS
                timer = threading.Timer(self.task_timeout, self._expire, args=(task,))
                timer.daemon = True
                self._timers = [t for t in self._timers if t.is_alive()]
                self._timers.append(timer)
                timer.start()
                return task
        return None

    @staticmethod
    def _finish(tasks: list[Task], number: str) -> bool:
        task = tasks[_parse_index(number)]
        if task.status is TaskStatus.COMPLETED:
            return False
        task.status = TaskStatus.COMPLETED
        return True

    def assign_task(self, args: CommitAndQueryTask) -> ReplyTask:
        """Record the worker's finished task and hand out the next one."""
        with self._lock:
            if args.task_type == "map" and self._finish(self.map_tasks, args.task_number):
                self.completed_map += 1

            if self.completed_map < self.n_map:
                task = self._claim(self.map_tasks)
                if task is None:
                    return ReplyTask(task_type="wait")
                return ReplyTask(
                    task_type="map",
                    task_number=str(task.task_number),
                    file_name=task.file_name,
                    n_map=self.n_map,
                    n_reduce=self.n_reduce,
                )

            if args.task_type == "reduce" and self._finish(
                self.reduce_tasks, args.task_number
            ):
                self.completed_reduce += 1

            if self.completed_reduce < self.n_reduce:
                task = self._claim(self.reduce_tasks)
                if task is None:
                    return ReplyTask(task_type="wait")
                return ReplyTask(
                    task_type="reduce",
                    task_number=str(task.task_number),
                    n_map=self.n_map,
                    n_reduce=self.n_reduce,
                )

            return ReplyTask(task_type="exit")

    def _dispatch(self, method: str, args: Any) -> Any:
        if method == "Coordinator.AssignTask" and isinstance(args, CommitAndQueryTask):
            return self.assign_task(args)
        raise ValueError(f"rpc: can't find method {method}")

    def serve(self) -> None:
        """Start answering worker requests on the UNIX-domain socket."""
        with contextlib.suppress(FileNotFoundError):
            os.remove(self.sockname)
        self._server = _RpcServer(self.sockname, self)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def done(self) -> bool:
        """True once every map and reduce task has completed."""
        with self._lock:
            return self.completed_map == self.n_map and self.completed_reduce == self.n_reduce

    def close(self) -> None:
        """Stop serving and cancel pending task timers."""
        with self._lock:
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
            with contextlib.suppress(FileNotFoundError):
                os.remove(self.sockname)
        if self._thread is not None:
            self._thread.join()
            self._thread = None


def make_coordinator(files: list[str], n_reduce: int) -> Coordinator:
    """Create a coordinator for ``files`` and start serving workers."""
    coordinator = Coordinator(files, n_reduce)
    coordinator.serve()
    return coordinator