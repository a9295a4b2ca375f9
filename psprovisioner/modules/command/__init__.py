"""
Command Module - Black Box Interface

Purpose: Produce the remote command line for each script
Interface: CommandRenderer.render()
Hidden: Template fields, encoding, elevated env-var script upload

Plain mode returns an -encodedCommand invocation; elevated mode returns an
invocation of an uploaded scheduled-task wrapper.
"""

from .renderer import POWERSHELL, CommandRenderer

__all__ = ["POWERSHELL", "CommandRenderer"]
