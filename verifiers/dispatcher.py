"""
Dispatcher / pool supervisor for concurrent address verification.
"""

from concurrent.futures import ThreadPoolExecutor, wait, Future
from queue import Full
from typing import Callable, Iterable, List, Optional
import logging

from .exceptions import ConfigurationError
from .probe_client import GmailProbeClient
from .reporting import ConsoleReporter, Reporter
from .task_queue import DEFAULT_CAPACITY, TaskQueue
from .worker import ProbeClient, VerificationWorker, close_client

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 2


class Dispatcher:
    """
    Runs a fixed pool of verification workers over a bounded task queue.

    Flow:
    Validate pool size → start N workers → enqueue addresses in input order
    (blocking on a full queue) → close queue → wait for every worker to exit
    """

    # How often a blocked producer checks that workers are still alive
    PUT_POLL_INTERVAL = 0.5

    def __init__(
        self,
        client_factory: Callable[[], ProbeClient],
        reporter: Reporter,
        pool_size: int = DEFAULT_POOL_SIZE,
        queue_capacity: int = DEFAULT_CAPACITY
    ):
        """
        Initialize dispatcher.

        Args:
            client_factory: Callable returning a new probe client (one per worker)
            reporter: Thread-safe sink receiving every verdict
            pool_size: Number of workers (must be >= 1)
            queue_capacity: Task queue capacity (must be >= 1)

        Raises:
            ConfigurationError: If pool_size or queue_capacity is invalid
        """
        if not isinstance(pool_size, int) or isinstance(pool_size, bool) or pool_size < 1:
            raise ConfigurationError(f"Pool size must be a positive integer, got {pool_size!r}")
        if not isinstance(queue_capacity, int) or isinstance(queue_capacity, bool) or queue_capacity < 1:
            raise ConfigurationError(f"Queue capacity must be a positive integer, got {queue_capacity!r}")

        self.client_factory = client_factory
        self.reporter = reporter
        self.pool_size = pool_size
        self.queue_capacity = queue_capacity

    def run(self, addresses: Iterable[str]) -> int:
        """
        Verify every address and block until all workers have exited.

        Args:
            addresses: Addresses to verify, enqueued in input order

        Returns:
            Number of addresses processed
        """
        task_queue = TaskQueue(self.queue_capacity)
        workers = [
            VerificationWorker(worker_id, task_queue, client, self.reporter)
            for worker_id, client in enumerate(self._create_clients(), 1)
        ]

        logger.debug(f"Starting {self.pool_size} workers (queue capacity {self.queue_capacity})")

        with ThreadPoolExecutor(max_workers=self.pool_size, thread_name_prefix="verifier") as executor:
            futures = [executor.submit(worker.run) for worker in workers]

            try:
                for address in addresses:
                    if not self._enqueue(task_queue, address, futures):
                        break
                    logger.debug(f"Added {address} to job queue")
            finally:
                task_queue.close()

            wait(futures)

        # Re-raises anything that killed a worker
        processed = sum(future.result() for future in futures)
        logger.debug(f"All workers finished, {processed} addresses processed")
        return processed

    def _create_clients(self) -> List[ProbeClient]:
        """Create one probe client per worker, releasing the built ones if any creation fails."""
        clients: List[ProbeClient] = []
        try:
            for _ in range(self.pool_size):
                clients.append(self.client_factory())
        except Exception:
            for client in clients:
                close_client(client)
            raise
        return clients

    def _enqueue(self, task_queue: TaskQueue, address: str, futures: List[Future]) -> bool:
        """
        Put one address on the queue, waiting while it is full.

        Returns:
            False if every worker has already exited and nothing will drain the queue
        """
        while True:
            try:
                task_queue.put(address, timeout=self.PUT_POLL_INTERVAL)
                return True
            except Full:
                if all(future.done() for future in futures):
                    logger.error("All workers exited before the task queue was drained")
                    return False


def verify_addresses(
    addresses: Iterable[str],
    pool_size: int = DEFAULT_POOL_SIZE,
    reporter: Optional[Reporter] = None,
    client_factory: Optional[Callable[[], ProbeClient]] = None,
    queue_capacity: int = DEFAULT_CAPACITY
) -> int:
    """
    Verify addresses with a pool of workers, reporting each verdict as it completes.

    Args:
        addresses: Addresses to verify
        pool_size: Number of concurrent workers (must be >= 1)
        reporter: Verdict sink (default: ConsoleReporter on stdout)
        client_factory: Probe client factory (default: GmailProbeClient)
        queue_capacity: Task queue capacity

    Returns:
        Number of addresses processed
    """
    dispatcher = Dispatcher(
        client_factory=client_factory or GmailProbeClient,
        reporter=reporter or ConsoleReporter(),
        pool_size=pool_size,
        queue_capacity=queue_capacity
    )
    return dispatcher.run(addresses)
