"""
Environment variable assembly.

Merges the provisioner's reserved variables with user assignments and
flattens them into a single prefix string for the remote shell.
"""

import logging
from typing import Callable, Dict, Iterable, Optional

logger = logging.getLogger("psprovisioner.environment")

BUILD_NAME_VAR = "PSPROV_BUILD_NAME"
BUILDER_TYPE_VAR = "PSPROV_BUILDER_TYPE"
HTTP_ADDR_VAR = "PSPROV_HTTP_ADDR"

DEFAULT_ENV_VAR_FORMAT = '$env:%s="%s"; '


def split_assignment(assignment: str) -> tuple[str, str]:
    """Split 'key=value' on the first '=' only."""
    key, value = assignment.split("=", 1)
    return key, value


class EnvironmentAssembler:
    """Builds the sorted, formatted environment prefix for a command."""

    def __init__(
        self,
        build_name: str = "",
        builder_type: str = "",
        http_addr_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        """
        Initialize assembler.

        Args:
            build_name: Value for the reserved build name variable
            builder_type: Value for the reserved builder type variable
            http_addr_provider: Read-only accessor queried at render time;
                the HTTP address variable is only set when it returns a value
        """
        self.build_name = build_name
        self.builder_type = builder_type
        self.http_addr_provider = http_addr_provider

    def collect(self, assignments: Iterable[str]) -> Dict[str, str]:
        """Merge reserved and user variables, user entries winning."""
        env_vars = {
            BUILD_NAME_VAR: self.build_name,
            BUILDER_TYPE_VAR: self.builder_type,
        }

        if self.http_addr_provider is not None:
            http_addr = self.http_addr_provider()
            if http_addr:
                env_vars[HTTP_ADDR_VAR] = http_addr

        for assignment in assignments:
            key, value = split_assignment(assignment)
            env_vars[key] = value

        return env_vars

    def flatten(
        self,
        assignments: Iterable[str],
        elevated: bool = False,
        env_var_format: str = DEFAULT_ENV_VAR_FORMAT,
        elevated_env_var_format: str = DEFAULT_ENV_VAR_FORMAT,
    ) -> str:
        """
        Render variables in key order using the mode's format string.

        Args:
            assignments: Validated 'key=value' strings
            elevated: Use the elevated format instead of the plain one
            env_var_format: printf-style pattern taking (key, value)
            elevated_env_var_format: Same, for elevated execution

        Returns:
            Concatenated assignments with no extra separator
        """
        env_vars = self.collect(assignments)
        fmt = elevated_env_var_format if elevated else env_var_format

        flattened = "".join(fmt % (key, env_vars[key]) for key in sorted(env_vars))
        logger.debug(f"Flattened {len(env_vars)} environment variables (elevated={elevated})")
        return flattened
