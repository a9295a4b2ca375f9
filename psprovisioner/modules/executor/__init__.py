"""
Executor Module - Black Box Interface

Purpose: Upload and run provisioning scripts on the remote machine
Interface: Provisioner.prepare(), Provisioner.provision(), Provisioner.cancel()
Hidden: Script list assembly, retry window, exit code checking

Can be driven by any host orchestrator that supplies a RemoteChannel.
"""

from .provisioner import Provisioner, extract_script, normalize_line_endings
from .retry import retryable

__all__ = ["Provisioner", "extract_script", "normalize_line_endings", "retryable"]
