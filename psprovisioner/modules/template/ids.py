"""Unique identifiers for remote temp files and scheduled task names."""

import secrets
import time


def time_ordered_id() -> str:
    """
    Return a UUID-shaped token whose first group is the current Unix time.

    Tokens sort by creation second; the 12 random bytes keep collisions
    negligible within a run.
    """
    unix = int(time.time()) & 0xFFFFFFFF
    b = secrets.token_bytes(12)
    return (
        f"{unix:08x}-{b[0:2].hex()}-{b[2:4].hex()}-{b[4:6].hex()}-"
        f"{b[6:8].hex()}{b[8:12].hex()}"
    )
