"""
Elevation Module - Black Box Interface

Purpose: Run commands as another identity via a scheduled task
Interface: ElevationWrapper.generate(), remote_temp_file()
Hidden: Task XML, credential escaping, wrapper naming

Every call uploads one wrapper file; nothing here removes it again.
"""

from .elevated_template import ELEVATED_TEMPLATE
from .wrapper import (
    TASK_DESCRIPTION,
    ElevationWrapper,
    escape_single_quoted,
    remote_temp_file,
)

__all__ = [
    "ELEVATED_TEMPLATE",
    "TASK_DESCRIPTION",
    "ElevationWrapper",
    "escape_single_quoted",
    "remote_temp_file",
]
