"""
Elevated command wrapper.

Privileged commands cannot be run directly by the channel's user. Instead
the inner command is embedded in a scheduled-task script that runs it as
the elevated user; that script is uploaded and its path handed back for
invocation.
"""

import io
import logging
from typing import Callable
from xml.sax.saxutils import escape

from ...errors import UploadError
from ..api import ElevatedTaskSpec, RemoteChannel, RemoteFile
from ..encoder import powershell_encode
from ..template import render, time_ordered_id
from .elevated_template import ELEVATED_TEMPLATE

logger = logging.getLogger("psprovisioner.elevation")

TASK_DESCRIPTION = "psprovisioner elevated task"
TASK_NAME_PREFIX = "psprov"
ELEVATED_SHELL_PREFIX = "psprov-elevated-shell"

# Characters PowerShell accepts as single-quote string delimiters
_PS_SINGLE_QUOTES = ("'", "‘", "’", "‚", "‛")


def remote_temp_file(prefix: str, unique_id: str) -> RemoteFile:
    """Name a .ps1 file in the remote user's TEMP directory."""
    filename = f"{prefix}-{unique_id}.ps1"
    return RemoteFile(
        upload_path=f"${{env:TEMP}}\\{filename}",
        shell_path=f"%TEMP%\\{filename}",
    )


def escape_single_quoted(value: str) -> str:
    """Escape a value for a single-quoted PowerShell string literal."""
    for quote in _PS_SINGLE_QUOTES:
        value = value.replace(quote, quote * 2)
    return value


class ElevationWrapper:
    """Generates and uploads scheduled-task wrappers for elevated commands."""

    def __init__(
        self,
        channel: RemoteChannel,
        user: str,
        password: str,
        id_factory: Callable[[], str] = time_ordered_id,
    ):
        """
        Initialize wrapper.

        Args:
            channel: Remote channel used for the wrapper upload
            user: Identity the scheduled task runs as
            password: Password for that identity
            id_factory: Unique id source for task and file names
        """
        self.channel = channel
        self.user = user
        self.password = password
        self.id_factory = id_factory

    def build_spec(self, command: str) -> ElevatedTaskSpec:
        """Encode the inner command and name a fresh task for it."""
        return ElevatedTaskSpec(
            user=self.user,
            password=self.password,
            task_description=TASK_DESCRIPTION,
            task_name=f"{TASK_NAME_PREFIX}-{self.id_factory()}",
            encoded_command=powershell_encode(command),
        )

    def render_script(self, spec: ElevatedTaskSpec) -> str:
        """Populate the wrapper template from a task spec."""
        return render(
            ELEVATED_TEMPLATE,
            {
                "User": escape(spec.user),
                "Password": escape_single_quoted(spec.password),
                "TaskDescription": escape(spec.task_description),
                "TaskName": spec.task_name,
                "EncodedCommand": spec.encoded_command,
            },
        )

    def generate(self, command: str) -> RemoteFile:
        """
        Wrap a rendered command in an uploaded scheduled-task script.

        Args:
            command: Fully rendered inner command

        Returns:
            RemoteFile for the uploaded wrapper; invoke it by shell_path

        Raises:
            EncodingError: If the inner command cannot be encoded
            TemplateError: If the wrapper template cannot be rendered
            UploadError: If the channel rejects the upload
        """
        logger.info(f"Building elevated command wrapper for: {command}")

        spec = self.build_spec(command)
        script = self.render_script(spec)

        remote_file = remote_temp_file(ELEVATED_SHELL_PREFIX, self.id_factory())
        logger.info(f"Uploading elevated shell wrapper for task {spec.task_name} to {remote_file.upload_path}")

        # BOM so Windows PowerShell reads a non-ASCII user or password as UTF-8
        try:
            self.channel.upload(remote_file.upload_path, io.BytesIO(script.encode("utf-8-sig")))
        except Exception as e:
            raise UploadError(f"Error preparing elevated powershell script: {e}") from e

        return remote_file
