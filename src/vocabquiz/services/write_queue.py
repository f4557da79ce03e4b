"""Write-behind queue from the in-memory repositories to the durable store."""
import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from vocabquiz import monitoring
from vocabquiz.config import settings
from vocabquiz.services.store import SQLStore

logger = logging.getLogger(__name__)


@dataclass
class WriteOperation:
    """A pending durable write."""
    kind: str  # upsert_word, delete_word, upsert_history, delete_history, clear_history
    payload: Any = None


class WriteBehindQueue:
    """Queues writes and applies them to the store in committed batches.

    Each batch is one transaction of at most ``batch_size`` operations.
    A failing batch is rolled back, logged and dropped; it is not retried
    and does not stop the batches after it.
    """

    def __init__(
        self,
        store: SQLStore,
        batch_size: int = settings.storage.import_batch_size,
        flush_interval: float = settings.storage.flush_interval,
    ):
        """Initialize the queue for a store."""
        self.store = store
        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self.pending: Deque[WriteOperation] = deque()
        self.running = False
        self._task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self.pending)

    def enqueue(self, kind: str, payload: Any = None) -> None:
        """Queue a write operation."""
        self.pending.append(WriteOperation(kind, payload))
        monitoring.pending_writes.set(len(self.pending))

    def _next_batch(self) -> List[WriteOperation]:
        size = min(self.batch_size, len(self.pending))
        return [self.pending.popleft() for _ in range(size)]

    def flush(self) -> int:
        """Apply every pending operation. Returns the number committed."""
        committed = 0
        with monitoring.flush_duration.time():
            while self.pending:
                batch = self._next_batch()
                try:
                    for operation in batch:
                        self.store.apply(operation)
                    self.store.commit()
                    committed += len(batch)
                except SQLAlchemyError as e:
                    self.store.rollback()
                    monitoring.store_write_errors.inc()
                    logger.error(f"Failed to write batch of {len(batch)} operations: {e}")
                finally:
                    monitoring.pending_writes.set(len(self.pending))

        if committed:
            logger.debug(f"Committed {committed} write operations")
        return committed

    async def start(self) -> None:
        """Start flushing periodically in the background."""
        if self.running:
            return

        self.running = True
        logger.info("Starting write-behind queue...")
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background task and flush what is left."""
        if not self.running:
            return

        self.running = False
        logger.info("Stopping write-behind queue...")
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

        self.flush()

    async def _run(self) -> None:
        """Flush pending writes every ``flush_interval`` seconds."""
        while self.running:
            try:
                await asyncio.sleep(self.flush_interval)
                self.flush()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in write-behind queue: {e}")
