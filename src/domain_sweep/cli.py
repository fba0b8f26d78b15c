"""
Command-line interface for the domain sweep system.

Domains come from positional arguments and, when stdin is not a terminal,
from free text piped on stdin. Available domains are printed to stdout as
soon as they are known; errors and the final summary go to stderr.

Configuration precedence (lowest to highest): defaults, DOMAIN_SWEEP_*
environment variables (optionally from --env-file), --config JSON file,
explicit command line flags.
"""

import argparse
import asyncio
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Optional, TextIO

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    CheckerConfig,
    LoggingConfig,
    load_config_from_env,
    load_config_from_file,
)
from .enums import ProcessorEvent
from .processor import DomainProcessor
from .word_extractor import extract_words, normalize_candidate


EXIT_AVAILABLE = 0
EXIT_NONE_AVAILABLE = 1
EXIT_USAGE = 2


def build_config(args: argparse.Namespace) -> Optional[CheckerConfig]:
    """
    Resolve the effective configuration for a CLI run.

    Returns:
        CheckerConfig, or None if the --config file could not be loaded
    """
    env_file = Path(args.env_file) if args.env_file else None
    config = load_config_from_env(env_file)

    if args.config:
        config = load_config_from_file(Path(args.config), base=config)
        if config is None:
            return None

    overrides = {}
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    if args.trust_dns:
        overrides["trust_dns"] = True
    if args.proxy is not None:
        overrides["proxy"] = args.proxy
    if args.timeout is not None:
        overrides["timeout_ms"] = args.timeout
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if args.retry_time is not None:
        overrides["retry_time_ms"] = args.retry_time
    if args.dry_run:
        overrides["simulation_mode"] = True

    logging_config = config.logging
    if args.log_format is not None or args.verbose:
        logging_config = LoggingConfig(
            level="debug" if args.verbose else logging_config.level,
            output_format=args.log_format or logging_config.output_format,
        )
    overrides["logging"] = logging_config

    return replace(config, **overrides)


async def _feed_stdin(processor: DomainProcessor, stdin: TextIO) -> None:
    """Add every candidate found on stdin, reading lines off the event loop."""
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, stdin.readline)
        if not line:
            return
        for word in extract_words(line):
            name = normalize_candidate(word)
            if name:
                processor.add(name)


async def run_sweep(
    domains: list[str],
    config: CheckerConfig,
    print_taken: bool = False,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    logger: Optional[AuditLogger] = None,
) -> int:
    """
    Check domains and report results as they arrive.

    Args:
        domains: Domains given on the command line
        config: Effective configuration
        print_taken: Also print taken domains, prefixed with "[T] "
        stdin: Optional stream to read further candidates from
        stdout: Stream for results (defaults to sys.stdout)
        stderr: Stream for errors and the summary (defaults to sys.stderr)
        logger: Optional audit logger

    Returns:
        Exit code (0 if any available, 1 otherwise, 2 if there was nothing to check)
    """
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    start_time = time.monotonic()
    available_count = 0

    processor = DomainProcessor(config=config, logger=logger)

    def handle_next(domain: str, available: bool) -> None:
        nonlocal available_count
        if available:
            available_count += 1
            stdout.write(f"{domain}\n")
        elif print_taken:
            stdout.write(f"[T] {domain}\n")
        stdout.flush()

    def handle_failed(domain: str, error: Exception) -> None:
        message = str(error).replace("\n", " ")
        stderr.write(f"{domain} - error: {message}\n")
        stderr.flush()

    processor.on(ProcessorEvent.NEXT, handle_next)
    processor.on(ProcessorEvent.FAILED, handle_failed)

    for word in domains:
        name = normalize_candidate(word)
        if name:
            processor.add(name)

    if stdin is not None:
        await _feed_stdin(processor, stdin)

    processor.end()
    await processor.wait_ended()

    if processor.size == 0:
        return EXIT_USAGE

    took = time.monotonic() - start_time
    summary = f"{available_count}/{processor.size} unique domains available."
    if processor.duplicated:
        summary += f" Detected {processor.duplicated} duplicates."
    summary += f" Took {took:.3f} seconds."
    stderr.write(summary + "\n")
    stderr.flush()

    return EXIT_AVAILABLE if available_count > 0 else EXIT_NONE_AVAILABLE


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-sweep",
        description="Find available domain names using DNS and WHOIS",
        epilog="Further names are read from stdin when it is not a terminal.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "domains",
        nargs="*",
        help="Domains to check (e.g., example.com)",
    )
    parser.add_argument(
        "--concurrency", "-c",
        type=int,
        help="How many concurrent checks may be performed (default: 30)",
    )
    parser.add_argument(
        "--trust-dns",
        action="store_true",
        help="Treat a missing DNS entry as proof of availability",
    )
    parser.add_argument(
        "--print-taken", "-pt",
        action="store_true",
        help='Print taken domains too (with "[T]" prefix)',
    )
    parser.add_argument(
        "--timeout", "-t",
        type=int,
        help="Timeout for a WHOIS connection in ms (default: 3000)",
    )
    parser.add_argument(
        "--max-retries", "-r",
        type=int,
        help="How many times a WHOIS query may be retried (default: 2)",
    )
    parser.add_argument(
        "--retry-time", "-rt",
        type=int,
        help="Delay before retrying a rate-limited WHOIS query in ms (default: 3000)",
    )
    parser.add_argument(
        "--proxy", "-p",
        help='SOCKS proxy, "<ip>:<port>" or socks5://[user:pass@]host:port',
    )
    parser.add_argument(
        "--config",
        help="Path to a JSON configuration file",
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file with DOMAIN_SWEEP_* variables",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - no real network requests",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text", "both"],
        help="Emit structured logs to stderr in this format",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config = build_config(args)
    if config is None:
        print(f"Error: Could not load config from {args.config}", file=sys.stderr)
        return EXIT_USAGE

    problems = config.validate()
    if problems:
        for problem in problems:
            print(f"Error: {problem}", file=sys.stderr)
        return EXIT_USAGE

    logger = None
    if args.log_format or args.verbose:
        logger = AuditLogger.from_config(config.logging)

    stdin = None if sys.stdin is None or sys.stdin.isatty() else sys.stdin

    exit_code = asyncio.run(run_sweep(
        domains=args.domains,
        config=config,
        print_taken=args.print_taken,
        stdin=stdin,
        logger=logger,
    ))

    if exit_code == EXIT_USAGE:
        parser.print_help(sys.stderr)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
