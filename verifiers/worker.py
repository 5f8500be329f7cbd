"""
Worker unit: drains the task queue through a probe client.
"""

from typing import Protocol
import logging

from .reporting import Reporter
from .task_queue import TaskQueue
from .verdict import Outcome, Verdict

logger = logging.getLogger(__name__)


class ProbeClient(Protocol):
    def verify(self, address: str) -> Verdict: ...


class VerificationWorker:
    """
    Pulls addresses from a shared TaskQueue until it is closed and drained.
    Each worker owns its probe client; the queue and reporter are shared.
    """

    def __init__(self, worker_id: int, task_queue: TaskQueue, client: ProbeClient, reporter: Reporter):
        self.worker_id = worker_id
        self.task_queue = task_queue
        self.client = client
        self.reporter = reporter
        self.processed = 0

    def run(self) -> int:
        """
        Process addresses until the queue is exhausted.

        Returns:
            Number of addresses processed by this worker
        """
        logger.debug(f"Worker {self.worker_id} started")
        try:
            for address in self.task_queue:
                self.reporter.report(self._verify(address))
                self.processed += 1
        finally:
            close_client(self.client)

        logger.debug(f"Worker {self.worker_id} finished after {self.processed} addresses")
        return self.processed

    def _verify(self, address: str) -> Verdict:
        try:
            return self.client.verify(address)
        except Exception as e:
            # Contain the failure to this address; the loop keeps draining the queue
            logger.exception(f"Unexpected error verifying {address}")
            return Verdict(address, Outcome.ERROR, f"Unexpected error: {e}")


def close_client(client: ProbeClient) -> None:
    """Release a probe client's resources if it has any."""
    close = getattr(client, 'close', None)
    if close is not None:
        close()
