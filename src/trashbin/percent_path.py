"""Reversible percent-encoding of absolute paths for sidecar files."""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import quote_from_bytes, unquote_to_bytes

from .errors import PercentDecodeError

# Characters left literal besides ASCII letters, digits and "_.-~". Everything
# else, including "=", "%", whitespace and control bytes, is escaped.
SAFE_CHARACTERS = "/!$&'()*+,;:@"


class PercentPath:
    """Percent-encoded form of an absolute path.

    Instances are immutable and compare by their encoded text.
    """

    __slots__ = ("_encoded",)

    def __init__(self, encoded: str) -> None:
        self._encoded = encoded

    @classmethod
    def from_path(cls, path: Path | str) -> PercentPath:
        """Encode a filesystem path.

        Args:
            path: Path to encode. Undecodable bytes smuggled through the
                filesystem encoding are preserved byte-for-byte.

        Returns:
            PercentPath: Encoded representation safe for a single text line.
        """
        return cls(quote_from_bytes(os.fsencode(path), safe=SAFE_CHARACTERS))

    @property
    def encoded(self) -> str:
        """Return the encoded text as stored on disk."""
        return self._encoded

    def decoded(self) -> str:
        """Return the original path text.

        Raises:
            PercentDecodeError: If the decoded bytes are not valid UTF-8.
        """
        raw = unquote_to_bytes(self._encoded)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PercentDecodeError(self._encoded) from exc

    def __str__(self) -> str:
        return self._encoded

    def __repr__(self) -> str:
        return f"PercentPath({self._encoded!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PercentPath):
            return NotImplemented
        return self._encoded == other._encoded

    def __hash__(self) -> int:
        return hash(self._encoded)


def encode(path: Path | str) -> PercentPath:
    """Encode ``path`` into its percent form."""
    return PercentPath.from_path(path)


def decode(percent_path: PercentPath) -> str:
    """Decode ``percent_path`` back into a path string."""
    return percent_path.decoded()


__all__ = ["PercentPath", "SAFE_CHARACTERS", "encode", "decode"]
