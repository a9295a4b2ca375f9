from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..environment import DEFAULT_ENV_VAR_FORMAT
from ..template import time_ordered_id

DEFAULT_EXECUTE_COMMAND = (
    "if (Test-Path variable:global:ProgressPreference)"
    "{$ProgressPreference='SilentlyContinue'};{{.Vars}}&'{{.Path}}';exit $LastExitCode"
)

DEFAULT_ELEVATED_EXECUTE_COMMAND = (
    "if (Test-Path variable:global:ProgressPreference)"
    "{$ProgressPreference='SilentlyContinue'}; . {{.Vars}}; &'{{.Path}}'; exit $LastExitCode"
)

DEFAULT_START_RETRY_TIMEOUT = 5 * 60.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Any) -> float:
    """Parse seconds (number or digit string) or a duration such as '1h30m'."""
    if isinstance(value, bool):
        raise ValueError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        if re.fullmatch(r"\d+(?:\.\d+)?", text):
            seconds = float(text)
        else:
            parts = _DURATION_PART.findall(text)
            if not parts or "".join(n + u for n, u in parts) != text:
                raise ValueError(f"invalid duration {value!r}")
            seconds = sum(float(n) * _DURATION_UNITS[u] for n, u in parts)
    if seconds < 0:
        raise ValueError(f"duration must not be negative: {value!r}")
    return seconds


def default_remote_path() -> str:
    return f"c:/Windows/Temp/script-{time_ordered_id()}.ps1"


class ProvisionerConfig(BaseModel):
    """User-facing provisioner configuration with every default resolved."""

    model_config = ConfigDict(extra="forbid")

    binary: bool = False
    inline: Optional[List[str]] = None
    script: str = ""
    scripts: List[str] = Field(default_factory=list)
    environment_vars: List[str] = Field(default_factory=list)
    remote_path: str = Field(default_factory=default_remote_path)
    execute_command: str = DEFAULT_EXECUTE_COMMAND
    elevated_execute_command: str = DEFAULT_ELEVATED_EXECUTE_COMMAND
    start_retry_timeout: float = DEFAULT_START_RETRY_TIMEOUT
    env_var_format: str = DEFAULT_ENV_VAR_FORMAT
    elevated_env_var_format: str = DEFAULT_ENV_VAR_FORMAT
    elevated_user: str = ""
    elevated_password: str = ""
    valid_exit_codes: List[int] = Field(default_factory=lambda: [0])
    build_name: str = ""
    builder_type: str = ""

    @model_validator(mode="before")
    @classmethod
    def unset_means_default(cls, data: Any) -> Any:
        """Treat null and empty-string values as 'use the default'."""
        if not isinstance(data, dict):
            return data
        return {k: v for k, v in data.items() if v is not None and v != ""}

    @field_validator("start_retry_timeout", mode="before")
    @classmethod
    def parse_start_retry_timeout(cls, v: Any) -> float:
        seconds = parse_duration(v)
        # Zero is the unset value, same as an omitted key
        if seconds == 0:
            return DEFAULT_START_RETRY_TIMEOUT
        return seconds

    @field_validator("inline")
    @classmethod
    def empty_inline_is_none(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is not None and len(v) == 0:
            return None
        return v


# Configuration Contract: every recognized key and its documented default

CONFIG_KEYS: Dict[str, Dict[str, Any]] = {
    "binary": {
        "description": "Upload scripts byte-for-byte instead of normalizing line endings to CRLF",
        "default": False,
    },
    "inline": {
        "description": "Commands concatenated one per line into a single script",
        "default": None,
    },
    "script": {
        "description": "Local path of a single script to upload and run",
        "default": None,
    },
    "scripts": {
        "description": "Local paths of scripts to upload and run in order",
        "default": [],
    },
    "environment_vars": {
        "description": "'key=value' assignments injected before each script runs",
        "default": [],
    },
    "remote_path": {
        "description": "Writable remote path the script is uploaded to",
        "default": "c:/Windows/Temp/script-<id>.ps1",
    },
    "execute_command": {
        "description": "Template for running the script; fields {{.Vars}} and {{.Path}}",
        "default": DEFAULT_EXECUTE_COMMAND,
    },
    "elevated_execute_command": {
        "description": "Template for running the script elevated; {{.Vars}} is the env-var script path",
        "default": DEFAULT_ELEVATED_EXECUTE_COMMAND,
    },
    "start_retry_timeout": {
        "description": "How long to keep retrying upload+start (seconds or '5m', '1h30m'; 0 means the default)",
        "default": "5m",
    },
    "env_var_format": {
        "description": "printf-style pattern for one environment variable",
        "default": DEFAULT_ENV_VAR_FORMAT,
    },
    "elevated_env_var_format": {
        "description": "printf-style pattern for one environment variable in elevated mode",
        "default": DEFAULT_ENV_VAR_FORMAT,
    },
    "elevated_user": {
        "description": "Identity the scheduled task runs as (requires elevated_password)",
        "default": None,
    },
    "elevated_password": {
        "description": "Password for elevated_user (requires elevated_user)",
        "default": None,
    },
    "valid_exit_codes": {
        "description": "Exit codes treated as success",
        "default": [0],
    },
    "build_name": {
        "description": "Exposed to scripts as PSPROV_BUILD_NAME",
        "default": "",
    },
    "builder_type": {
        "description": "Exposed to scripts as PSPROV_BUILDER_TYPE",
        "default": "",
    },
}
