"""Collaborator interfaces following Black Box Design principles."""
import logging
from typing import BinaryIO, Protocol

logger = logging.getLogger("psprovisioner.ui")


class RemoteProcess(Protocol):
    """Handle to a command started on the remote machine."""

    def wait(self) -> int:
        """
        Block until the remote command finishes.

        Returns:
            Exit status reported by the remote shell
        """
        ...


class RemoteChannel(Protocol):
    """Protocol for remote channels - allows swappable transports (WinRM, SSH)."""

    def upload(self, remote_path: str, data: BinaryIO) -> None:
        """
        Upload a file to the remote machine.

        Args:
            remote_path: Destination in the channel's upload path syntax
            data: Readable binary stream positioned at the start of content

        Raises:
            Any exception if the upload was rejected
        """
        ...

    def start(self, command: str) -> RemoteProcess:
        """
        Start a command on the remote machine.

        Args:
            command: Complete command line for the remote shell

        Returns:
            RemoteProcess handle

        Raises:
            Any exception if the command could not be started
        """
        ...


class Ui(Protocol):
    """Protocol for the user-facing progress sink."""

    def say(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LoggingUi:
    """Ui sink that forwards progress and errors to the logging system."""

    def say(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)
