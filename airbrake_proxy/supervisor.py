# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Worker pool supervision.

The supervisor owns no request traffic. Workers share one listening socket
and accept connections from it directly; the supervisor only keeps the pool
at its configured size, replacing any worker that exits.
"""

import signal
from dataclasses import dataclass
from enum import Enum
from multiprocessing.connection import wait
from multiprocessing.process import BaseProcess
from typing import Callable, List, Optional

from proxy_logging import Logger


class WorkerState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    EXITED = "exited"


@dataclass
class WorkerSlot:
    """One position in the pool; its process changes on every restart."""

    index: int
    state: WorkerState = WorkerState.EXITED
    process: Optional[BaseProcess] = None
    restarts: int = 0


class WorkerSupervisor:
    """Keeps ``worker_count`` worker processes alive until stopped."""

    def __init__(
        self,
        worker_count: int,
        spawn: Callable[[int], BaseProcess],
        logger: Logger,
        poll_interval: float = 1.0,
        shutdown_timeout: float = 10.0,
    ):
        """Initialize supervisor.

        Args:
            worker_count: Number of workers to keep alive
            spawn: Starts a worker for the given slot index and returns its process
            logger: Logger
            poll_interval: Seconds between liveness checks while waiting
            shutdown_timeout: Seconds to wait for a worker to exit on stop
        """
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")

        self.worker_count = worker_count
        self.logger = logger
        self.poll_interval = poll_interval
        self.shutdown_timeout = shutdown_timeout
        self.slots = [WorkerSlot(index=i) for i in range(worker_count)]
        self._spawn_worker = spawn
        self._started = False
        self._stopping = False

    @property
    def stopping(self) -> bool:
        return self._stopping

    def start(self) -> None:
        """Start one worker per slot."""
        self._started = True
        for slot in self.slots:
            self._spawn(slot)

    def _spawn(self, slot: WorkerSlot) -> None:
        slot.state = WorkerState.STARTING
        slot.process = self._spawn_worker(slot.index)
        slot.state = WorkerState.RUNNING
        self.logger.info(
            f"Worker {slot.index} started",
            worker=slot.index,
            pid=slot.process.pid,
            restarts=slot.restarts,
        )

    def reap(self) -> int:
        """Replace every worker that has exited.

        Returns:
            Number of workers restarted
        """
        restarted = 0
        for slot in self.slots:
            if slot.state is not WorkerState.RUNNING or slot.process.is_alive():
                continue

            slot.state = WorkerState.EXITED
            self.logger.warning(
                f"Worker {slot.index} (pid {slot.process.pid}) exited with code {slot.process.exitcode}",
                worker=slot.index,
                pid=slot.process.pid,
                exitcode=slot.process.exitcode,
            )
            if self._stopping:
                continue

            slot.restarts += 1
            self._spawn(slot)
            restarted += 1
        return restarted

    def live_processes(self) -> List[BaseProcess]:
        return [
            slot.process for slot in self.slots
            if slot.state is WorkerState.RUNNING and slot.process is not None
        ]

    def run(self) -> None:
        """Supervise the pool until stop is requested, then shut it down."""
        if not self._started:
            self.start()

        while not self._stopping:
            sentinels = [process.sentinel for process in self.live_processes()]
            wait(sentinels, timeout=self.poll_interval)
            self.reap()

        self.stop()

    def request_stop(self) -> None:
        """Ask ``run`` to leave its loop; safe to call from a signal handler."""
        self._stopping = True

    def install_signal_handlers(self) -> None:
        def handle_signal(signum, frame):
            self.logger.info(
                f"Received {signal.Signals(signum).name}, stopping workers",
                signal=signum,
            )
            self.request_stop()

        signal.signal(signal.SIGINT, handle_signal)
        signal.signal(signal.SIGTERM, handle_signal)

    def stop(self) -> None:
        """Terminate and join every worker. No worker is restarted afterwards."""
        self._stopping = True

        for process in self.live_processes():
            if process.is_alive():
                process.terminate()

        for slot in self.slots:
            if slot.process is None or slot.state is WorkerState.EXITED:
                continue
            slot.process.join(self.shutdown_timeout)
            if slot.process.is_alive():
                self.logger.warning(
                    f"Worker {slot.index} did not exit within {self.shutdown_timeout}s, killing it",
                    worker=slot.index,
                    pid=slot.process.pid,
                )
                slot.process.kill()
                slot.process.join()
            slot.state = WorkerState.EXITED

        self.logger.info("All workers stopped")
