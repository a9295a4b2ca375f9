"""
Provisioner error hierarchy.

Every failure the provisioner reports to its host derives from
ProvisionerError so callers can catch a single type.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional


class ProvisionerError(RuntimeError):
    """Base exception for provisioning failures."""


@dataclass(frozen=True)
class ValidationFailure:
    """A single configuration problem."""

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


class ConfigValidationError(ProvisionerError):
    """Raised once with every configuration problem found."""

    def __init__(self, failures: Iterable[ValidationFailure]):
        self.failures: List[ValidationFailure] = list(failures)
        super().__init__(self._format())

    def _format(self) -> str:
        count = len(self.failures)
        noun = "error" if count == 1 else "errors"
        joined = "; ".join(str(f) for f in self.failures)
        return f"{count} {noun} occurred: {joined}"

    @property
    def fields(self) -> List[str]:
        return [f.field for f in self.failures]


class InlineScriptError(ProvisionerError):
    """Raised when inline commands cannot be written to a local script."""


class ScriptOpenError(ProvisionerError):
    """Raised when a local script cannot be opened for reading."""


class TemplateError(ProvisionerError):
    """Raised when a command template cannot be rendered."""


class EncodingError(ProvisionerError):
    """Raised when a command cannot be encoded for the remote shell."""


class UploadError(ProvisionerError):
    """Raised when the remote channel rejects an upload."""


class TransientStartError(ProvisionerError):
    """Raised when a remote command could not be started."""


class StartRetryTimeoutError(TransientStartError):
    """Raised when start failures persist past the retry window."""

    def __init__(self, message: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class RemoteWaitError(ProvisionerError):
    """Raised when a started command is lost before it reports an exit status."""


class NonZeroExitError(ProvisionerError):
    """Raised when a script exits with a code outside the allowed set."""

    def __init__(self, exit_status: int, valid_exit_codes: Iterable[int]):
        self.exit_status = exit_status
        self.valid_exit_codes = list(valid_exit_codes)
        super().__init__(
            f"Script exited with non-zero exit status: {exit_status}. "
            f"Allowed exit codes are: {self.valid_exit_codes}"
        )


__all__ = [
    "ProvisionerError",
    "ValidationFailure",
    "ConfigValidationError",
    "InlineScriptError",
    "ScriptOpenError",
    "TemplateError",
    "EncodingError",
    "UploadError",
    "TransientStartError",
    "StartRetryTimeoutError",
    "RemoteWaitError",
    "NonZeroExitError",
]
