"""
Environment Module - Black Box Interface

Purpose: Assemble environment variable assignments for remote commands
Interface: EnvironmentAssembler.flatten(), split_assignment()
Hidden: Reserved variable names, merge order, formatting

Output ordering is lexicographic by key so rendered commands are stable.
"""

from .assembler import (
    BUILD_NAME_VAR,
    BUILDER_TYPE_VAR,
    DEFAULT_ENV_VAR_FORMAT,
    HTTP_ADDR_VAR,
    EnvironmentAssembler,
    split_assignment,
)

__all__ = [
    "BUILD_NAME_VAR",
    "BUILDER_TYPE_VAR",
    "DEFAULT_ENV_VAR_FORMAT",
    "HTTP_ADDR_VAR",
    "EnvironmentAssembler",
    "split_assignment",
]
