"""
Shared pytest fixtures for psprovisioner tests.

This module provides common fixtures including:
- FakeChannel: In-memory remote channel recording uploads and starts
- Script files on disk for provisioning runs
- Request builders with every default filled in
"""

import itertools
import os
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Tuple

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from psprovisioner.logging_config import clear_secrets
from psprovisioner.modules.api import ProvisioningRequest
from psprovisioner.modules.config import (
    DEFAULT_ELEVATED_EXECUTE_COMMAND,
    DEFAULT_EXECUTE_COMMAND,
)
from psprovisioner.modules.environment import DEFAULT_ENV_VAR_FORMAT


# =============================================================================
# Remote Channel Fake
# =============================================================================

@dataclass
class UploadRecord:
    """Record of an upload made during testing."""
    remote_path: str
    content: bytes


class FakeProcess:
    """Remote process handle that reports a canned exit status."""

    def __init__(self, channel: "FakeChannel", command: str, exit_status: int):
        self.channel = channel
        self.command = command
        self.exit_status = exit_status

    def wait(self) -> int:
        self.channel.events.append(("wait", self.command))
        fail, self.channel._wait_failures = self.channel._consume(self.channel._wait_failures)
        if fail:
            raise self.channel.wait_error
        return self.exit_status


class FakeChannel:
    """
    In-memory RemoteChannel.

    Usage:
        def test_reboot(fake_channel):
            fake_channel.fail_starts(times=2)
            fake_channel.queue_exit_status(0)
            ...
            assert len(fake_channel.starts) == 3
    """

    def __init__(self):
        self.uploads: List[UploadRecord] = []
        self.starts: List[str] = []
        self.events: List[Tuple[str, str]] = []
        self._exit_statuses: List[int] = []
        self._start_failures: Optional[int] = 0
        self._upload_failures: Optional[int] = 0
        self._wait_failures: Optional[int] = 0
        self.start_error: Exception = ConnectionError("remote machine is restarting")
        self.upload_error: Exception = ConnectionError("connection refused")
        self.wait_error: Exception = ConnectionError("connection reset while waiting")

    def fail_starts(self, times: Optional[int] = None) -> "FakeChannel":
        """Fail the next `times` starts (None: every start)."""
        self._start_failures = times
        return self

    def fail_uploads(self, times: Optional[int] = None) -> "FakeChannel":
        """Fail the next `times` uploads (None: every upload)."""
        self._upload_failures = times
        return self

    def fail_waits(self, times: Optional[int] = None) -> "FakeChannel":
        """Drop the connection during the next `times` waits (None: every wait)."""
        self._wait_failures = times
        return self

    def queue_exit_status(self, *codes: int) -> "FakeChannel":
        """Exit statuses for successive started commands (0 once exhausted)."""
        self._exit_statuses.extend(codes)
        return self

    @staticmethod
    def _consume(remaining: Optional[int]) -> Tuple[bool, Optional[int]]:
        if remaining is None:
            return True, None
        if remaining > 0:
            return True, remaining - 1
        return False, 0

    def upload(self, remote_path: str, data: BinaryIO) -> None:
        self.events.append(("upload", remote_path))
        fail, self._upload_failures = self._consume(self._upload_failures)
        if fail:
            raise self.upload_error
        self.uploads.append(UploadRecord(remote_path=remote_path, content=data.read()))

    def start(self, command: str) -> FakeProcess:
        self.events.append(("start", command))
        self.starts.append(command)
        fail, self._start_failures = self._consume(self._start_failures)
        if fail:
            raise self.start_error
        exit_status = self._exit_statuses.pop(0) if self._exit_statuses else 0
        return FakeProcess(self, command, exit_status)

    def uploads_to(self, remote_path: str) -> List[UploadRecord]:
        return [u for u in self.uploads if u.remote_path == remote_path]

    @property
    def uploaded(self) -> Dict[str, bytes]:
        return {u.remote_path: u.content for u in self.uploads}


@pytest.fixture
def fake_channel():
    """Fresh FakeChannel for each test."""
    return FakeChannel()


# =============================================================================
# Request and Script Fixtures
# =============================================================================

REMOTE_PATH = "c:/Windows/Temp/script.ps1"


def make_request(**overrides) -> ProvisioningRequest:
    """ProvisioningRequest with defaults for every field not overridden."""
    values = {
        "scripts": ("local.ps1",),
        "inline": (),
        "remote_path": REMOTE_PATH,
        "execute_command": DEFAULT_EXECUTE_COMMAND,
        "elevated_execute_command": DEFAULT_ELEVATED_EXECUTE_COMMAND,
        "env_var_format": DEFAULT_ENV_VAR_FORMAT,
        "elevated_env_var_format": DEFAULT_ENV_VAR_FORMAT,
        "start_retry_timeout": 300.0,
    }
    values.update(overrides)
    return ProvisioningRequest(**values)


@pytest.fixture
def request_factory():
    """Factory for ProvisioningRequest objects."""
    return make_request


@pytest.fixture
def sequential_ids():
    """Deterministic id factory producing id0, id1, ..."""
    counter = itertools.count()
    return lambda: f"id{next(counter)}"


@pytest.fixture
def script_file(tmp_path):
    """Write a local script and return its path."""

    def _write(name: str = "setup.ps1", content: bytes = b"Write-Host 'hello'\n") -> str:
        path = tmp_path / name
        path.write_bytes(content)
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def _reset_secrets():
    """Secrets registered by one test must not leak into the next."""
    yield
    clear_secrets()


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Tests that drive a full provisioning run through a fake channel"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
