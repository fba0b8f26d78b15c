"""
Batch façade over DomainProcessor.

Feeds a fixed list of domains through one processor and resolves once the
whole batch is done. Per-domain failures are reported through a callback and
never fail the batch.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .audit_logger import AuditLogger
from .availability import AvailabilityChecker
from .config import CheckerConfig
from .enums import ProcessorEvent
from .processor import DomainProcessor


StatusCallback = Callable[[str, bool, int], None]
ErrorCallback = Callable[[str, Exception, int], None]


@dataclass
class BatchResult:
    """Outcome of a completed batch."""

    available: set[str] = field(default_factory=set)
    taken: set[str] = field(default_factory=set)
    failed: dict[str, Exception] = field(default_factory=dict)
    duplicated: int = 0

    @property
    def total(self) -> int:
        return len(self.available) + len(self.taken) + len(self.failed)


async def check_availability(
    domains: Iterable[str],
    config: Optional[CheckerConfig] = None,
    on_status: Optional[StatusCallback] = None,
    on_error: Optional[ErrorCallback] = None,
    checker: Optional[AvailabilityChecker] = None,
    logger: Optional[AuditLogger] = None,
) -> BatchResult:
    """
    Check a batch of domains and wait for all of them.

    Args:
        domains: Domains to check; duplicates (case-insensitive) are checked once
        config: Shared checker configuration (defaults if omitted)
        on_status: Called with (domain, available, finished_count) per success
        on_error: Called with (domain, error, finished_count) per failure
        checker: Optional availability checker, built from config if omitted
        logger: Optional audit logger

    Returns:
        BatchResult; `available` holds every domain whose verdict was True
    """
    result = BatchResult()
    processor = DomainProcessor(config=config, checker=checker, logger=logger)

    def handle_next(domain: str, available: bool) -> None:
        (result.available if available else result.taken).add(domain)
        if on_status:
            on_status(domain, available, processor.finished)

    def handle_failed(domain: str, error: Exception) -> None:
        result.failed[domain] = error
        if on_error:
            on_error(domain, error, processor.finished)

    processor.on(ProcessorEvent.NEXT, handle_next)
    processor.on(ProcessorEvent.FAILED, handle_failed)

    for domain in domains:
        processor.add(domain)
    processor.end()

    await processor.wait_ended()

    result.duplicated = processor.duplicated
    return result
