"""
Semantic validation of provisioner configuration.

Problems are collected into a list rather than raised one at a time, so a
user sees every mistake in a single report.
"""

import os
from typing import List

from pydantic import ValidationError

from ...errors import TemplateError, ValidationFailure
from ..template import check
from .schema import ProvisionerConfig

# Fields available to execute_command and elevated_execute_command
TEMPLATE_FIELDS = ("Vars", "Path")


def failures_from_pydantic(error: ValidationError) -> List[ValidationFailure]:
    """Convert pydantic's error list into validation failures."""
    failures = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "config"
        failures.append(ValidationFailure(field=field, message=f"{field}: {err['msg']}"))
    return failures


def _check_format(name: str, fmt: str) -> List[ValidationFailure]:
    try:
        fmt % ("KEY", "VALUE")
    except (TypeError, ValueError) as e:
        return [
            ValidationFailure(
                field=name,
                message=f"'{name}' must take exactly two %s placeholders (key, value): {e}",
            )
        ]
    return []


def _check_template(name: str, template: str) -> List[ValidationFailure]:
    try:
        check(template, TEMPLATE_FIELDS)
    except TemplateError as e:
        return [ValidationFailure(field=name, message=f"Error parsing '{name}': {e}")]
    return []


def validate_config(config: ProvisionerConfig) -> List[ValidationFailure]:
    """
    Check cross-field rules the schema cannot express.

    Args:
        config: Type-checked configuration

    Returns:
        Every failure found, in a stable order (empty if valid)
    """
    failures: List[ValidationFailure] = []

    if config.script and config.scripts:
        failures.append(
            ValidationFailure("script", "Only one of script or scripts can be specified.")
        )

    if config.elevated_user and not config.elevated_password:
        failures.append(
            ValidationFailure(
                "elevated_password",
                "Must supply an 'elevated_password' if 'elevated_user' provided",
            )
        )

    if not config.elevated_user and config.elevated_password:
        failures.append(
            ValidationFailure(
                "elevated_user",
                "Must supply an 'elevated_user' if 'elevated_password' provided",
            )
        )

    scripts = [config.script] if config.script else list(config.scripts)

    if not scripts and config.inline is None:
        failures.append(
            ValidationFailure("inline", "Either a script file or inline script must be specified.")
        )
    elif scripts and config.inline is not None:
        failures.append(
            ValidationFailure(
                "inline", "Only a script file or an inline script can be specified, not both."
            )
        )

    for path in scripts:
        try:
            os.stat(path)
        except OSError as e:
            failures.append(ValidationFailure("scripts", f"Bad script '{path}': {e}"))

    # Reject assignments such as '=foo' or 'foobar'
    for kv in config.environment_vars:
        key, sep, _ = kv.partition("=")
        if not sep or not key:
            failures.append(
                ValidationFailure(
                    "environment_vars",
                    f"Environment variable not in format 'key=value': {kv}",
                )
            )

    failures.extend(_check_format("env_var_format", config.env_var_format))
    failures.extend(_check_format("elevated_env_var_format", config.elevated_env_var_format))
    failures.extend(_check_template("execute_command", config.execute_command))
    failures.extend(_check_template("elevated_execute_command", config.elevated_execute_command))

    return failures
