"""
Template Module - Black Box Interface

Purpose: Render command templates and generate unique remote names
Interface: render(), check(), time_ordered_id()
Hidden: Placeholder parsing, id layout

Can be replaced with a full template engine as long as {{.Field}}
placeholders keep their meaning.
"""

from .ids import time_ordered_id
from .renderer import check, render

__all__ = ["check", "render", "time_ordered_id"]
