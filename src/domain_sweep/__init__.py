"""
Domain Sweep - bulk domain availability checker.

This package decides, for batches of candidate domain names, whether each is
registered or available. A fast DNS probe settles the obvious cases and a
rate-limit-aware WHOIS client handles the rest, driven by a bounded,
deduplicating processor.
"""

__version__ = "0.1.0"
__author__ = "Domain Sweep Team"

from domain_sweep.exceptions import (
    DomainSweepError,
    ValidationError,
    NetworkError,
    RateLimitExceededError,
    DnsProbeError,
    AlreadyEndedError,
)
from domain_sweep.enums import (
    LogLevel,
    DomainValidationErrorCode,
    WHOISErrorCode,
    WHOISStatus,
    TaskState,
    ProcessorState,
    ProcessorEvent,
)
from domain_sweep.config import (
    LoggingConfig,
    CheckerConfig,
    config_from_dict,
    config_to_dict,
    load_config_from_file,
    load_config_from_env,
    save_config_to_file,
)
from domain_sweep.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_sweep.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
    is_valid_domain,
)
from domain_sweep.dns_probe import (
    DnsProbe,
)
from domain_sweep.retry_manager import (
    RetryManager,
    RetryResult,
)
from domain_sweep.whois_client import (
    WHOISClient,
    WHOISResponse,
)
from domain_sweep.availability import (
    AvailabilityChecker,
    is_domain_available,
)
from domain_sweep.processor import (
    DomainProcessor,
    TaskEntry,
)
from domain_sweep.aggregator import (
    BatchResult,
    check_availability,
)
from domain_sweep.word_extractor import (
    extract_words,
    normalize_candidate,
)
from domain_sweep.cli import (
    main as cli_main,
    create_parser,
)

__all__ = [
    # Exceptions
    "DomainSweepError",
    "ValidationError",
    "NetworkError",
    "RateLimitExceededError",
    "DnsProbeError",
    "AlreadyEndedError",
    # Enums
    "LogLevel",
    "DomainValidationErrorCode",
    "WHOISErrorCode",
    "WHOISStatus",
    "TaskState",
    "ProcessorState",
    "ProcessorEvent",
    # Configuration
    "LoggingConfig",
    "CheckerConfig",
    "config_from_dict",
    "config_to_dict",
    "load_config_from_file",
    "load_config_from_env",
    "save_config_to_file",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    "is_valid_domain",
    # DNS Probe
    "DnsProbe",
    # Retry Manager
    "RetryManager",
    "RetryResult",
    # WHOIS Client
    "WHOISClient",
    "WHOISResponse",
    # Availability
    "AvailabilityChecker",
    "is_domain_available",
    # Processor
    "DomainProcessor",
    "TaskEntry",
    # Aggregator
    "BatchResult",
    "check_availability",
    # Input extraction
    "extract_words",
    "normalize_candidate",
    # CLI
    "cli_main",
    "create_parser",
]
