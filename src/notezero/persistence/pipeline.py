"""Ordered persistence queue behind the optimistic local tree.

Every local mutation has already been applied when its op is submitted here.
Ops run strictly in submission order, one at a time, each under a per-attempt
timeout and a bounded tenacity retry for transient errors. An op that still
fails becomes a PersistenceFailure: it is kept in ``failures`` (for a status
indicator) and raised once from the next ``flush()``. Nothing is rolled back
locally; ``Workspace.reload()`` is the reconciliation path.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from notezero.errors import PersistenceFailure
from notezero.persistence.gateway import GatewayError

logger = logging.getLogger(__name__)


def is_transient(error: BaseException) -> bool:
    """Determine if a persistence error is transient and worth retrying.

    Returns True for timeouts, connection problems, server errors (5xx) and
    rate limits (429). Returns False for permanent client errors (4xx).
    """
    if isinstance(error, (TimeoutError, ConnectionError, httpx.TransportError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status >= 500 or status == 429
    if isinstance(error, GatewayError):
        return error.transient
    return False


@dataclass
class PendingOp:
    """One queued persistence call. ``run`` may be awaited more than once."""

    name: str
    entity_id: str | None
    run: Callable[[], Awaitable[None]]


class PersistencePipeline:
    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        max_attempts: int = 4,
        wait_initial: float = 0.5,
        wait_max: float = 10.0,
        auto_flush: bool = True,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self.wait_initial = wait_initial
        self.wait_max = wait_max
        self.auto_flush = auto_flush
        self.failures: list[PersistenceFailure] = []
        self._unreported: list[PersistenceFailure] = []
        self._queue: deque[PendingOp] = deque()
        self._lock = asyncio.Lock()
        self._drain_task: asyncio.Task | None = None
        self._remote_ids: dict[str, str] = {}

    @property
    def pending(self) -> int:
        return len(self._queue)

    # --- id mapping ----------------------------------------------------------

    def remote_id(self, local_id: str | None) -> str | None:
        """Backend id for a locally generated id (identity unless the backend renamed it)."""
        if local_id is None:
            return None
        return self._remote_ids.get(local_id, local_id)

    def remember_id(self, local_id: str, remote_id: str) -> None:
        if remote_id != local_id:
            logger.info("Backend assigned id %s to local %s", remote_id, local_id)
            self._remote_ids[local_id] = remote_id

    # --- queue ---------------------------------------------------------------

    def submit(self, name: str, entity_id: str | None, run: Callable[[], Awaitable[None]]) -> None:
        """Queue an op; schedule a background drain when inside a running loop."""
        self._queue.append(PendingOp(name, entity_id, run))
        if not self.auto_flush:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = loop.create_task(self._drain())

    async def flush(self) -> None:
        """Drain the queue; raise the first failure not yet reported to a caller."""
        await self._drain()
        if self._unreported:
            first = self._unreported[0]
            self._unreported.clear()
            raise first

    async def _drain(self) -> None:
        async with self._lock:
            while self._queue:
                op = self._queue.popleft()
                try:
                    await self._run(op)
                except PersistenceFailure as failure:
                    self.failures.append(failure)
                    self._unreported.append(failure)

    async def _run(self, op: PendingOp) -> None:
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient),
            wait=wait_exponential_jitter(initial=self.wait_initial, max=self.wait_max, jitter=self.wait_initial),
            stop=stop_after_attempt(self.max_attempts),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    async with asyncio.timeout(self.timeout_seconds):
                        await op.run()
        except Exception as exc:
            logger.error("Persistence op %s failed for %s", op.name, op.entity_id, exc_info=True)
            raise PersistenceFailure(op.name, op.entity_id, exc) from exc

    def clear(self) -> None:
        """Drop queued ops, failures and id mappings (after a reload)."""
        self._queue.clear()
        self.failures.clear()
        self._unreported.clear()
        self._remote_ids.clear()
