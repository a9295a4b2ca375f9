"""
PowerShell provisioner - uploads scripts and runs them on a remote machine.

Scripts run strictly one after another. Each script is uploaded and
started inside one retryable unit so that a reboot between upload and
start cannot leave the command pointing at a file that no longer exists.
"""

import io
import logging
import os
import tempfile
from typing import Any, BinaryIO, Callable, List, Mapping, Optional, Sequence

from ...config.provider import ConfigProvider, EnvConfigProvider
from ...errors import (
    InlineScriptError,
    NonZeroExitError,
    ProvisionerError,
    RemoteWaitError,
    ScriptOpenError,
    TransientStartError,
    UploadError,
)
from ...logging_config import redacting
from ..api import (
    ProvisioningRequest,
    ProvisionResult,
    RemoteChannel,
    RemoteProcess,
    RetryState,
    ScriptRun,
    ScriptState,
    Ui,
)
from ..command import CommandRenderer
from ..config import build_request, parse_config
from ..environment import EnvironmentAssembler
from ..template import time_ordered_id
from .retry import retryable

logger = logging.getLogger("psprovisioner.executor")

INLINE_SCRIPT_PREFIX = "psprov-powershell-provisioner"


def extract_script(commands: Sequence[str]) -> str:
    """
    Write inline commands, one per line, to a fresh local temp file.

    Returns:
        Path of the temp file; the caller removes it

    Raises:
        InlineScriptError: If the file cannot be created or written
    """
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            prefix=INLINE_SCRIPT_PREFIX,
            suffix=".ps1",
            delete=False,
            encoding="utf-8",
            newline="",
        ) as temp:
            for command in commands:
                logger.debug(f"Found command: {command}")
                temp.write(command + "\n")
            return temp.name
    except OSError as e:
        raise InlineScriptError(f"Error preparing powershell script: {e}") from e


def normalize_line_endings(data: bytes) -> bytes:
    """Convert LF and CRLF line endings to CRLF."""
    return data.replace(b"\r\n", b"\n").replace(b"\n", b"\r\n")


class Provisioner:
    """Runs configured PowerShell scripts through a remote channel."""

    def __init__(
        self,
        config_provider: Optional[ConfigProvider] = None,
        retry_sleep: Optional[float] = None,
        id_factory: Callable[[], str] = time_ordered_id,
    ):
        """
        Initialize provisioner.

        Args:
            config_provider: Source of runtime settings and the HTTP address
            retry_sleep: Override for the delay between retry attempts
            id_factory: Unique id source for remote temp and task names
        """
        self.config_provider = config_provider or EnvConfigProvider()
        self.retry_sleep = retry_sleep
        self.id_factory = id_factory
        self.request: Optional[ProvisioningRequest] = None

    def prepare(self, *raws: Mapping[str, Any]) -> ProvisioningRequest:
        """
        Parse and validate configuration.

        Args:
            raws: Raw config mappings, merged left to right

        Returns:
            The resolved ProvisioningRequest

        Raises:
            ConfigValidationError: With every problem found
        """
        self.request = build_request(parse_config(*raws))

        logger.info(
            f"Prepared {len(self.request.scripts)} script(s), "
            f"inline={bool(self.request.inline)}, elevated={self.request.elevated}"
        )
        return self.request

    def provision(self, ui: Ui, channel: RemoteChannel) -> ProvisionResult:
        """
        Upload and run every script in order.

        Args:
            ui: Progress sink
            channel: Remote channel to the machine being provisioned

        Returns:
            ProvisionResult with one ScriptRun per script

        Raises:
            ProvisionerError: On the first failing script; later scripts do not run
        """
        request = self._require_request()
        ui.say("Provisioning with Powershell...")

        scripts: List[str] = list(request.scripts)
        inline_path: Optional[str] = None
        if request.inline:
            inline_path = extract_script(request.inline)
            scripts.append(inline_path)

        result = ProvisionResult(runs=[ScriptRun(path=path) for path in scripts])
        try:
            with redacting(request.elevated_password):
                for run in result.runs:
                    self._run_script(run, request, ui, channel)
        finally:
            if inline_path:
                self._remove_local(inline_path)

        return result

    def cancel(self) -> None:
        """Hard exit; whatever is running remotely is left running."""
        logger.warning("Cancel requested, exiting immediately")
        os._exit(0)

    def command_renderer(self, channel: RemoteChannel) -> CommandRenderer:
        """Renderer for the prepared request, wired to the runtime HTTP address."""
        request = self._require_request()
        assembler = EnvironmentAssembler(
            build_name=request.build_name,
            builder_type=request.builder_type,
            http_addr_provider=self.config_provider.get_http_addr,
        )
        return CommandRenderer(request, channel, assembler=assembler, id_factory=self.id_factory)

    def _require_request(self) -> ProvisioningRequest:
        if self.request is None:
            raise ProvisionerError("Provisioner.prepare() must be called before provision()")
        return self.request

    def _retry_sleep(self) -> float:
        if self.retry_sleep is not None:
            return self.retry_sleep
        return self.config_provider.get_runtime_config().retry_sleep

    def _run_script(
        self,
        run: ScriptRun,
        request: ProvisioningRequest,
        ui: Ui,
        channel: RemoteChannel,
    ) -> None:
        ui.say(f"Provisioning with powershell script: {run.path}")

        logger.info(f"Opening {run.path} for reading")
        try:
            f = open(run.path, "rb")
        except OSError as e:
            self._fail(run, e)
            raise ScriptOpenError(f"Error opening powershell script: {e}") from e

        with f:
            try:
                command = self.command_renderer(channel).render()
            except ProvisionerError as e:
                self._fail(run, e)
                raise

            state = RetryState(timeout=request.start_retry_timeout, delay=self._retry_sleep())

            def attempt() -> RemoteProcess:
                run.state = ScriptState.UPLOADING
                f.seek(0)
                payload = self._payload(f, request.binary)
                try:
                    channel.upload(request.remote_path, payload)
                except Exception as e:
                    raise UploadError(f"Error uploading script: {e}") from e

                run.state = ScriptState.STARTING
                try:
                    return channel.start(command)
                except Exception as e:
                    raise TransientStartError(f"Error starting command: {e}") from e

            try:
                process = retryable(attempt, request.start_retry_timeout, state=state)
            except ProvisionerError as e:
                run.attempts = state.attempts
                self._fail(run, e)
                raise
            run.attempts = state.attempts

        # A started command is never retried; losing it while waiting is fatal
        run.state = ScriptState.RUNNING
        try:
            exit_status = process.wait()
        except Exception as e:
            error = RemoteWaitError(f"Error waiting for powershell script: {e}")
            self._fail(run, error)
            raise error from e

        run.exit_status = exit_status
        if not request.is_valid_exit_code(exit_status):
            error = NonZeroExitError(exit_status, request.valid_exit_codes)
            self._fail(run, error)
            raise error

        run.state = ScriptState.SUCCEEDED
        logger.info(f"Script {run.path} finished with exit status {exit_status}")

    @staticmethod
    def _payload(f: BinaryIO, binary: bool) -> BinaryIO:
        if binary:
            return f
        return io.BytesIO(normalize_line_endings(f.read()))

    @staticmethod
    def _fail(run: ScriptRun, error: BaseException) -> None:
        run.state = ScriptState.FAILED
        run.error = str(error)
        logger.error(f"Script {run.path} failed: {error}")

    @staticmethod
    def _remove_local(path: str) -> None:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Could not remove temporary script {path}: {e}")
