"""
psprovisioner shared data models.

These models define the structure of all data passed between
components of the provisioner.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

# Enums


class ScriptState(str, Enum):
    """Lifecycle of one script within a provisioning run."""

    PENDING = "pending"
    UPLOADING = "uploading"
    STARTING = "starting"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Request Models


@dataclass(frozen=True)
class ProvisioningRequest:
    """
    Resolved provisioning configuration.

    Built once by Provisioner.prepare() with every default filled in and
    never mutated afterwards.
    """

    scripts: Tuple[str, ...]
    inline: Tuple[str, ...]
    remote_path: str
    execute_command: str
    elevated_execute_command: str
    env_var_format: str
    elevated_env_var_format: str
    start_retry_timeout: float
    environment_vars: Tuple[str, ...] = ()
    valid_exit_codes: Tuple[int, ...] = (0,)
    elevated_user: Optional[str] = None
    elevated_password: Optional[str] = None
    binary: bool = False
    build_name: str = ""
    builder_type: str = ""

    @property
    def elevated(self) -> bool:
        """True when commands run through the scheduled-task wrapper."""
        return bool(self.elevated_user)

    def is_valid_exit_code(self, exit_status: int) -> bool:
        return exit_status in self.valid_exit_codes


# Remote Artifacts


@dataclass(frozen=True)
class RemoteFile:
    """
    One uploaded file and the two ways of naming it.

    upload_path is what the channel's upload API accepts, shell_path is
    what the invoking shell resolves. Both point at the same file but the
    strings are never interchangeable.
    """

    upload_path: str
    shell_path: str


@dataclass
class ElevatedTaskSpec:
    """Inputs for one scheduled-task wrapper script."""

    user: str
    password: str
    task_description: str
    task_name: str
    encoded_command: str


# Execution State


@dataclass
class RetryState:
    """Deadline bookkeeping for one upload+start attempt sequence."""

    timeout: float
    delay: float
    started_at: float = field(default_factory=time.monotonic)
    attempts: int = 0

    @property
    def deadline(self) -> float:
        return self.started_at + self.timeout

    def expired(self) -> bool:
        return time.monotonic() >= self.deadline


@dataclass
class ScriptRun:
    """Outcome of a single script within a provisioning run."""

    path: str
    state: ScriptState = ScriptState.PENDING
    attempts: int = 0
    exit_status: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == ScriptState.SUCCEEDED


@dataclass
class ProvisionResult:
    """Result of a complete provisioning run."""

    runs: List[ScriptRun] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.runs) and all(run.succeeded for run in self.runs)
