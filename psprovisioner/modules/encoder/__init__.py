"""
Encoder Module - Black Box Interface

Purpose: Turn arbitrary script text into a single transport-safe token
Interface: powershell_encode(), powershell_decode()
Hidden: Wide-character encoding and base64 details

PowerShell's -EncodedCommand expects base64 over UTF-16LE, so quotes,
newlines and non-ASCII text survive any command-line quoting.
"""

import base64
import binascii
import logging

from ...errors import EncodingError

logger = logging.getLogger("psprovisioner.encoder")

WIDE_ENCODING = "utf-16-le"


def powershell_encode(command: str) -> str:
    """
    Encode a command for powershell -EncodedCommand.

    Args:
        command: PowerShell source text

    Returns:
        Base64 token (standard alphabet) of the UTF-16LE bytes

    Raises:
        EncodingError: If the text cannot be represented in UTF-16LE
    """
    try:
        wide = command.encode(WIDE_ENCODING)
    except UnicodeEncodeError as e:
        raise EncodingError(f"Error encoding command: {e}") from e
    return base64.b64encode(wide).decode("ascii")


def powershell_decode(token: str) -> str:
    """Inverse of powershell_encode()."""
    try:
        return base64.b64decode(token, validate=True).decode(WIDE_ENCODING)
    except (binascii.Error, UnicodeDecodeError) as e:
        raise EncodingError(f"Error decoding command: {e}") from e


__all__ = ["powershell_encode", "powershell_decode"]
