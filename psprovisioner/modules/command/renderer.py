"""
Remote command line construction.

Turns a ProvisioningRequest into the exact command line handed to the
remote channel, for both plain and elevated execution.
"""

import io
import logging
from typing import Callable, Optional

from ...errors import EncodingError, TemplateError, UploadError
from ..api import ProvisioningRequest, RemoteChannel
from ..elevation import ElevationWrapper, remote_temp_file
from ..encoder import powershell_encode
from ..environment import EnvironmentAssembler
from ..template import render, time_ordered_id

logger = logging.getLogger("psprovisioner.command")

POWERSHELL = "powershell -executionpolicy bypass"
ENV_VARS_PREFIX = "psprov-env-vars"


class CommandRenderer:
    """Builds remote command lines from the configured templates."""

    def __init__(
        self,
        request: ProvisioningRequest,
        channel: RemoteChannel,
        assembler: Optional[EnvironmentAssembler] = None,
        id_factory: Callable[[], str] = time_ordered_id,
    ):
        """
        Initialize renderer.

        Args:
            request: Resolved provisioning configuration
            channel: Remote channel for the uploads privileged mode needs
            assembler: Environment assembler (defaults to one built from request)
            id_factory: Unique id source for remote temp names
        """
        self.request = request
        self.channel = channel
        self.assembler = assembler or EnvironmentAssembler(
            build_name=request.build_name,
            builder_type=request.builder_type,
        )
        self.id_factory = id_factory

    def render(self) -> str:
        """Return the command line for the configured execution mode."""
        if self.request.elevated:
            return self.render_privileged()
        return self.render_non_privileged()

    def _flatten(self, elevated: bool) -> str:
        return self.assembler.flatten(
            self.request.environment_vars,
            elevated=elevated,
            env_var_format=self.request.env_var_format,
            elevated_env_var_format=self.request.elevated_env_var_format,
        )

    def render_non_privileged(self) -> str:
        """
        Render execute_command and wrap it in an encoded powershell call.

        Raises:
            TemplateError: If execute_command cannot be rendered
            EncodingError: If the rendered command cannot be encoded
        """
        flattened = self._flatten(elevated=False)

        try:
            command = render(
                self.request.execute_command,
                {"Vars": flattened, "Path": self.request.remote_path},
            )
        except TemplateError as e:
            raise TemplateError(f"Error processing command: {e}") from e

        return self.command_line_runner(command)

    def command_line_runner(self, command: str) -> str:
        """Wrap a command as powershell -encodedCommand <token>."""
        logger.info(f"Building command line for: {command}")

        try:
            encoded = powershell_encode(command)
        except EncodingError as e:
            raise EncodingError(f"Error generating command line runner: {e}") from e

        return f"{POWERSHELL} -encodedCommand {encoded}"

    def render_privileged(self) -> str:
        """
        Upload the environment as a script, then wrap the elevated command.

        Raises:
            UploadError: If the env var script or wrapper upload fails
            TemplateError: If elevated_execute_command cannot be rendered
            EncodingError: If the inner command cannot be encoded
        """
        # Env vars cannot be escaped twice, so they are dot-sourced from a file
        flattened = self._flatten(elevated=True)
        env_file = remote_temp_file(ENV_VARS_PREFIX, self.id_factory())

        logger.info(f"Uploading env vars to {env_file.upload_path}")
        # Windows PowerShell reads BOM-less scripts in the ANSI code page
        try:
            self.channel.upload(env_file.upload_path, io.BytesIO(flattened.encode("utf-8-sig")))
        except Exception as e:
            raise UploadError(f"Error preparing elevated powershell script: {e}") from e

        try:
            command = render(
                self.request.elevated_execute_command,
                {"Vars": env_file.upload_path, "Path": self.request.remote_path},
            )
        except TemplateError as e:
            raise TemplateError(f"Error processing command: {e}") from e

        wrapper = ElevationWrapper(
            self.channel,
            self.request.elevated_user or "",
            self.request.elevated_password or "",
            id_factory=self.id_factory,
        )
        wrapper_file = wrapper.generate(command)

        return f'{POWERSHELL} -file "{wrapper_file.shell_path}"'
