"""
Concurrent, deduplicating domain processor.

The processor owns a registry of tasks keyed by lowercase domain name and
runs at most `concurrency` availability checks at a time on the current
asyncio event loop. All bookkeeping happens on that loop, so counters and
the registry are only ever mutated from one thread.

Lifecycle:
    OPEN -> CLOSING (end() called, work still draining)
         -> DRAINED (nothing queued or running)
         -> ENDED (END emitted, exactly once)
"""

import asyncio
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Optional

from .audit_logger import AuditLogger
from .availability import AvailabilityChecker
from .config import CheckerConfig
from .enums import LogLevel, ProcessorEvent, ProcessorState, TaskState
from .exceptions import AlreadyEndedError


Listener = Callable[..., None]


@dataclass
class TaskEntry:
    """One domain submitted to the processor."""

    domain: str
    state: TaskState = TaskState.QUEUED
    available: Optional[bool] = None
    error: Optional[Exception] = None


class DomainProcessor:
    """
    Drives availability checks over many domains with bounded concurrency.

    Events and listener arguments:
    - ADD(domain): a new domain was accepted
    - NEXT(domain, available): a check finished
    - AVAILABLE(domain) / TAKEN(domain): follow NEXT, by verdict
    - FAILED(domain, error): a check raised
    - IDLE(): nothing is queued or running
    - END(): terminal, after end() once the processor is idle

    Must be used from within a running event loop.
    """

    def __init__(
        self,
        config: Optional[CheckerConfig] = None,
        checker: Optional[AvailabilityChecker] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the processor.

        Args:
            config: Shared checker configuration (defaults if omitted)
            checker: Optional availability checker, built from config if omitted
            logger: Optional audit logger
        """
        self._config = config or CheckerConfig()
        self._logger = logger
        self._checker = checker or AvailabilityChecker(self._config, logger)
        self._concurrency = max(1, self._config.concurrency)

        self._tasks: dict[str, TaskEntry] = {}
        self._queue: deque[str] = deque()
        self._running: set[asyncio.Task] = set()
        self._listeners: dict[ProcessorEvent, list[Listener]] = defaultdict(list)

        self._duplicated = 0
        self._finished = 0
        self._succeeded = 0
        self._failed = 0

        self._ending = False
        self._end_emitted = False
        self._ended_event: Optional[asyncio.Event] = None

    async def __aenter__(self) -> "DomainProcessor":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.end()
        if exc_type is None:
            await self.wait_ended()

    # ------------------------------------------------------------------
    # Counters and state
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of distinct domains accepted."""
        return len(self._tasks)

    @property
    def duplicated(self) -> int:
        return self._duplicated

    @property
    def finished(self) -> int:
        return self._finished

    @property
    def succeeded(self) -> int:
        return self._succeeded

    @property
    def failed(self) -> int:
        return self._failed

    @property
    def pending(self) -> int:
        """Number of queued, not yet started tasks."""
        return len(self._queue)

    @property
    def running(self) -> int:
        return len(self._running)

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def idle(self) -> bool:
        return not self._queue and not self._running

    @property
    def ended(self) -> bool:
        return self._ending and self.idle

    @property
    def state(self) -> ProcessorState:
        if self._end_emitted:
            return ProcessorState.ENDED
        if self._ending:
            return ProcessorState.DRAINED if self.idle else ProcessorState.CLOSING
        return ProcessorState.OPEN

    def get_task(self, domain: str) -> Optional[TaskEntry]:
        return self._tasks.get(domain.lower())

    def task_state(self, domain: str) -> Optional[TaskState]:
        task = self.get_task(domain)
        return task.state if task else None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def on(self, event: ProcessorEvent, listener: Listener) -> "DomainProcessor":
        """Register a listener for an event."""
        self._listeners[event].append(listener)
        return self

    def off(self, event: ProcessorEvent, listener: Listener) -> "DomainProcessor":
        """Remove a previously registered listener."""
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)
        return self

    def _emit(self, event: ProcessorEvent, *args) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(*args)
            except Exception as e:
                self._report_listener_error(event, e)

    def _report_listener_error(self, event: ProcessorEvent, error: Exception) -> None:
        if self._logger:
            self._logger.log_error(
                "DomainProcessor",
                f"Listener for '{event.value}' raised",
                error=error,
            )
            return
        asyncio.get_running_loop().call_exception_handler({
            "message": f"DomainProcessor listener for '{event.value}' raised",
            "exception": error,
        })

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def add(self, name: str) -> None:
        """
        Submit a domain for checking.

        Names are compared case-insensitively; a name seen before only
        increments the duplicate counter.

        Raises:
            AlreadyEndedError: If the processor has already ended
            RuntimeError: If called outside a running event loop
        """
        if self.ended:
            raise AlreadyEndedError()
        # Fails before any bookkeeping so a rejected name leaves no trace
        asyncio.get_running_loop()

        domain = name.lower()
        if domain in self._tasks:
            self._duplicated += 1
            return

        self._tasks[domain] = TaskEntry(domain=domain)
        self._queue.append(domain)
        self._emit(ProcessorEvent.ADD, domain)
        self._schedule()

    def end(self) -> None:
        """
        Declare that no further domains will be added.

        END is emitted once all accepted work has finished, and never
        synchronously from within this call. Repeated calls are no-ops.
        """
        if self._ending:
            return
        self._ending = True
        self._log(LogLevel.DEBUG, "End requested", {"size": self.size, "finished": self._finished})

        if self.idle:
            asyncio.get_running_loop().call_soon(self._emit_end_if_idle)

    async def wait_ended(self) -> None:
        """Wait until END has been emitted."""
        if self._end_emitted:
            return
        if self._ended_event is None:
            self._ended_event = asyncio.Event()
        await self._ended_event.wait()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _schedule(self) -> None:
        """Start queued tasks while slots are free."""
        loop = asyncio.get_running_loop()
        while self._queue and len(self._running) < self._concurrency:
            domain = self._queue.popleft()
            self._tasks[domain].state = TaskState.RUNNING
            task = loop.create_task(self._process(domain))
            self._running.add(task)
            task.add_done_callback(self._on_task_done)

    async def _process(self, domain: str) -> None:
        entry = self._tasks[domain]
        try:
            available = await self._checker.is_available(domain)
        except Exception as e:
            entry.state = TaskState.FAILED
            entry.error = e
            self._finished += 1
            self._failed += 1
            self._log(
                LogLevel.INFO,
                f"{domain} failed: {e}",
                {"domain": domain, "error_type": type(e).__name__},
            )
            self._emit(ProcessorEvent.FAILED, domain, e)
            return

        entry.state = TaskState.SUCCEEDED
        entry.available = available
        self._finished += 1
        self._succeeded += 1
        self._log(
            LogLevel.DEBUG,
            f"{domain}: {'available' if available else 'taken'}",
            {"domain": domain, "available": available},
        )
        self._emit(ProcessorEvent.NEXT, domain, available)
        self._emit(ProcessorEvent.AVAILABLE if available else ProcessorEvent.TAKEN, domain)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        self._schedule()

        if self.idle:
            self._emit(ProcessorEvent.IDLE)
            if self._ending:
                self._emit_end_if_idle()

    def _emit_end_if_idle(self) -> None:
        if self._end_emitted or not self.idle:
            return
        self._end_emitted = True
        self._log(
            LogLevel.INFO,
            "Processing finished",
            {
                "size": self.size,
                "duplicated": self._duplicated,
                "succeeded": self._succeeded,
                "failed": self._failed,
            },
        )
        self._emit(ProcessorEvent.END)
        if self._ended_event is not None:
            self._ended_event.set()

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "DomainProcessor", message, data)
