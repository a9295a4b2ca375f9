"""
API Module - Black Box Interface

Purpose: Shared models and the contracts of external collaborators
Interface: ProvisioningRequest, RemoteFile, RemoteChannel, Ui
Hidden: Nothing - this module only declares shapes

Every other module talks to the remote machine and the user only through
the protocols declared here.
"""

from .interfaces import LoggingUi, RemoteChannel, RemoteProcess, Ui
from .models import (
    ElevatedTaskSpec,
    ProvisioningRequest,
    ProvisionResult,
    RemoteFile,
    RetryState,
    ScriptRun,
    ScriptState,
)

__all__ = [
    "ElevatedTaskSpec",
    "LoggingUi",
    "ProvisioningRequest",
    "ProvisionResult",
    "RemoteChannel",
    "RemoteFile",
    "RemoteProcess",
    "RetryState",
    "ScriptRun",
    "ScriptState",
    "Ui",
]
