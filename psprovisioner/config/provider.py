"""Runtime configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

DEFAULT_RETRY_SLEEP = 2.0


@dataclass
class RuntimeConfig:
    """Process-level settings that are not part of a provisioner config."""
    log_level: str
    retry_sleep: float


class ConfigProvider(Protocol):
    """Protocol for runtime configuration providers."""

    def get_runtime_config(self) -> RuntimeConfig:
        """Get runtime configuration."""
        ...

    def get_http_addr(self) -> Optional[str]:
        """Get the address of the host's file server, if one is running."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_runtime_config(self) -> RuntimeConfig:
        """Get runtime configuration from environment variables."""
        retry_sleep_env = os.getenv("PSPROV_RETRY_SLEEP", str(DEFAULT_RETRY_SLEEP))
        try:
            retry_sleep = float(retry_sleep_env)
        except ValueError:
            raise ValueError(
                f"PSPROV_RETRY_SLEEP must be a number of seconds, got '{retry_sleep_env}'"
            )

        return RuntimeConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            retry_sleep=max(retry_sleep, 0.0),
        )

    def get_http_addr(self) -> Optional[str]:
        """Read PSPROV_HTTP_ADDR each time it is asked for."""
        return os.getenv("PSPROV_HTTP_ADDR") or None
