"""Collision-free naming for trash entries."""

from __future__ import annotations

from collections.abc import Set
from itertools import count


def resolve_unique_name(candidate: str, existing: Set[str]) -> str:
    """Return the first of ``candidate``, ``candidate_1``, ``candidate_2``, ... not in ``existing``.

    The suffix sequence is injective, so at most ``len(existing) + 1`` names
    are tried. The caller must pass one coherent snapshot of ``existing``.

    Args:
        candidate: Preferred base name.
        existing: Names already taken.

    Returns:
        str: A name that is not a member of ``existing``.
    """
    if candidate not in existing:
        return candidate
    for suffix in count(1):
        name = f"{candidate}_{suffix}"
        if name not in existing:
            return name
    raise AssertionError("unreachable")  # pragma: no cover


__all__ = ["resolve_unique_name"]
