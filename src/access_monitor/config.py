"""Configuration for the access monitor package."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .exceptions import ConfigError


DEFAULT_LOG_PATH = "file_monitor.log"
DEFAULT_FLUSH_INTERVAL = 60
DEFAULT_LOCK_PATH = "/var/run/lock/file_monitor.lock"

ENV_LOG_PATH = "ACCESS_MONITOR_LOG"
ENV_FLUSH_INTERVAL = "ACCESS_MONITOR_INTERVAL"
ENV_LOCK_PATH = "ACCESS_MONITOR_LOCK"


@dataclass
class MonitorConfig:
    """
    Configuration options for the access monitor.

    Attributes:
        log_path: Text file that accumulates every distinct accessed path
        flush_interval: Seconds between flushes of newly seen paths
        verbose: Whether progress messages are reported; the front-end
            sets the root log level from it before the monitor starts
        roots: Directories (or files) to watch recursively
        lock_path: Advisory lock file enforcing a single running instance
        poll_timeout: Maximum seconds to block waiting for events, which
            bounds how late a due flush can be noticed
    """
    log_path: Path = field(default_factory=lambda: Path(DEFAULT_LOG_PATH))
    flush_interval: int = DEFAULT_FLUSH_INTERVAL
    verbose: bool = True
    roots: List[Path] = field(default_factory=list)
    lock_path: Path = field(default_factory=lambda: Path(DEFAULT_LOCK_PATH))
    poll_timeout: float = 1.0

    def __post_init__(self):
        self.log_path = Path(self.log_path)
        self.lock_path = Path(self.lock_path)
        self.roots = [Path(r) for r in self.roots]

    def validate(self) -> None:
        """
        Check the configuration before monitoring starts.

        Raises:
            ConfigError: If the flush interval or poll timeout is not
                positive, or no roots are configured
        """
        if isinstance(self.flush_interval, bool) or not isinstance(self.flush_interval, int):
            raise ConfigError(f"flush interval must be an integer: {self.flush_interval!r}")
        if self.flush_interval <= 0:
            raise ConfigError(f"flush interval must be greater than 0: {self.flush_interval}")
        if self.poll_timeout <= 0:
            raise ConfigError(f"poll timeout must be greater than 0: {self.poll_timeout}")
        if not self.roots:
            raise ConfigError("at least one root path is required")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides,
    ) -> "MonitorConfig":
        """
        Build a config from ACCESS_MONITOR_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Field values that take precedence over the environment

        Returns:
            The resulting configuration (not yet validated)

        Raises:
            ConfigError: If ACCESS_MONITOR_INTERVAL is not an integer
        """
        env = os.environ if environ is None else environ
        values = {}

        if env.get(ENV_LOG_PATH):
            values["log_path"] = Path(env[ENV_LOG_PATH])
        if env.get(ENV_LOCK_PATH):
            values["lock_path"] = Path(env[ENV_LOCK_PATH])
        if env.get(ENV_FLUSH_INTERVAL):
            try:
                values["flush_interval"] = int(env[ENV_FLUSH_INTERVAL])
            except ValueError:
                raise ConfigError(
                    f"{ENV_FLUSH_INTERVAL} must be an integer: {env[ENV_FLUSH_INTERVAL]!r}"
                ) from None

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
