"""
Configuration dataclasses for the domain sweep system.

This module defines the configuration structure shared by the availability
checker, the WHOIS client and the processor, together with loaders for JSON
files and environment variables. Defaults are resolved once, at construction
time.
"""

import json
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


ENV_PREFIX = "DOMAIN_SWEEP_"

PROXY_SCHEMES = ("socks4", "socks5", "http")

# Either "<host>:<port>" or "<scheme>://[user:pass@]<host>:<port>"
PROXY_PATTERN = re.compile(
    r"^(?:(?P<scheme>[a-z0-9]+)://)?"
    r"(?:[^:@/\s]+:[^@/\s]*@)?"
    r"(?P<host>[^:@/\s]+|\[[0-9a-fA-F:]+\])"
    r":(?P<port>\d{1,5})$"
)

LOG_LEVELS = ("debug", "info", "warn", "error")
LOG_FORMATS = ("json", "text", "both")

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class CheckerConfig:
    """
    Options shared by the availability checker, WHOIS client and processor.

    Attributes:
        concurrency: How many checks may run in parallel
        trust_dns: Treat NXDOMAIN as conclusive proof of availability
        proxy: SOCKS proxy, "<host>:<port>" or a socks4/socks5/http URL
        timeout_ms: Connect/read timeout of one WHOIS attempt
        max_retries: Retries allowed after the first WHOIS attempt
        retry_time_ms: Delay before retrying a rate-limited WHOIS query
        simulation_mode: If True, no real network requests are made
    """

    concurrency: int = 30
    trust_dns: bool = False
    proxy: Optional[str] = None
    timeout_ms: int = 3000
    max_retries: int = 2
    retry_time_ms: int = 3000
    simulation_mode: bool = False
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def retry_time_seconds(self) -> float:
        return self.retry_time_ms / 1000.0

    @property
    def proxy_url(self) -> Optional[str]:
        """Proxy as a URL; a bare "<host>:<port>" is taken to be SOCKS5."""
        if not self.proxy:
            return None
        if "://" in self.proxy:
            return self.proxy
        return f"socks5://{self.proxy}"

    def validate(self) -> list[str]:
        """
        Check the configuration for values the system cannot work with.

        Returns:
            List of problems, empty if the configuration is usable
        """
        errors: list[str] = []

        if self.concurrency < 1:
            errors.append(f"concurrency must be at least 1, got {self.concurrency}")
        if self.timeout_ms < 0:
            errors.append(f"timeout_ms must not be negative, got {self.timeout_ms}")
        if self.max_retries < 0:
            errors.append(f"max_retries must not be negative, got {self.max_retries}")
        if self.retry_time_ms < 0:
            errors.append(f"retry_time_ms must not be negative, got {self.retry_time_ms}")

        if self.proxy:
            match = PROXY_PATTERN.match(self.proxy)
            if not match:
                errors.append(f"proxy must look like <host>:<port>, got {self.proxy!r}")
            else:
                scheme = match.group("scheme")
                if scheme and scheme not in PROXY_SCHEMES:
                    errors.append(f"unsupported proxy scheme: {scheme}")
                if not 0 < int(match.group("port")) < 65536:
                    errors.append(f"proxy port out of range: {match.group('port')}")

        if self.logging.level not in LOG_LEVELS:
            errors.append(f"unknown log level: {self.logging.level}")
        if self.logging.output_format not in LOG_FORMATS:
            errors.append(f"unknown log output format: {self.logging.output_format}")

        return errors


def _parse_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    raise ValueError(f"expected a boolean, got {value!r}")


def config_from_dict(data: dict, base: Optional[CheckerConfig] = None) -> CheckerConfig:
    """
    Build a configuration from a plain dictionary.

    Missing keys fall back to `base`, or to the defaults when no base is given.

    Raises:
        ValueError: If a boolean field holds something other than a boolean
                    or a recognised true/false string
    """
    defaults = base or CheckerConfig()
    logging_data = data.get("logging") or {}

    return CheckerConfig(
        concurrency=int(data.get("concurrency", defaults.concurrency)),
        trust_dns=_parse_bool(data.get("trust_dns"), defaults.trust_dns),
        proxy=data.get("proxy", defaults.proxy) or None,
        timeout_ms=int(data.get("timeout_ms", defaults.timeout_ms)),
        max_retries=int(data.get("max_retries", defaults.max_retries)),
        retry_time_ms=int(data.get("retry_time_ms", defaults.retry_time_ms)),
        simulation_mode=_parse_bool(data.get("simulation_mode"), defaults.simulation_mode),
        logging=LoggingConfig(
            level=logging_data.get("level", defaults.logging.level),
            output_format=logging_data.get("output_format", defaults.logging.output_format),
        ),
    )


def config_to_dict(config: CheckerConfig) -> dict:
    """Convert a configuration to a JSON-serializable dictionary."""
    return {
        "concurrency": config.concurrency,
        "trust_dns": config.trust_dns,
        "proxy": config.proxy,
        "timeout_ms": config.timeout_ms,
        "max_retries": config.max_retries,
        "retry_time_ms": config.retry_time_ms,
        "simulation_mode": config.simulation_mode,
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
    }


def load_config_from_file(
    config_path: Path,
    base: Optional[CheckerConfig] = None,
) -> Optional[CheckerConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file
        base: Configuration supplying values for keys the file omits

    Returns:
        CheckerConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            print(f"Error loading config: expected an object in {config_path}", file=sys.stderr)
            return None

        return config_from_dict(data, base)

    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: CheckerConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: CheckerConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(ENV_PREFIX + name, str(default)))
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(ENV_PREFIX + name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


def load_config_from_env(env_file: Optional[Path] = None) -> CheckerConfig:
    """
    Load configuration from DOMAIN_SWEEP_* environment variables.

    Args:
        env_file: Optional .env file loaded before reading the environment.
                  Variables already set in the environment take precedence.

    Returns:
        CheckerConfig with environment overrides applied to the defaults
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)

    defaults = CheckerConfig()

    return CheckerConfig(
        concurrency=_int_env("CONCURRENCY", defaults.concurrency),
        trust_dns=_bool_env("TRUST_DNS", defaults.trust_dns),
        proxy=(os.getenv(ENV_PREFIX + "PROXY") or "").strip() or None,
        timeout_ms=_int_env("TIMEOUT_MS", defaults.timeout_ms),
        max_retries=_int_env("MAX_RETRIES", defaults.max_retries),
        retry_time_ms=_int_env("RETRY_TIME_MS", defaults.retry_time_ms),
        simulation_mode=_bool_env("SIMULATION_MODE", defaults.simulation_mode),
        logging=LoggingConfig(
            level=(os.getenv(ENV_PREFIX + "LOG_LEVEL") or defaults.logging.level).lower(),
            output_format=(
                os.getenv(ENV_PREFIX + "LOG_FORMAT") or defaults.logging.output_format
            ).lower(),
        ),
    )
