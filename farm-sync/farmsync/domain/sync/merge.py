# farmsync/domain/sync/merge.py
"""Conflict policy applied when a client record meets the stored row.

A policy is a pure function ``(existing, incoming) -> merged``:

- ``existing`` is the stored row as a dict, or None when the key is new;
- ``incoming`` holds the mutable fields the client submitted;
- the result holds the values to write for exactly those fields.

Policies never see the session and never write, so the reconciler can swap
one for another (for example a comparison of client and server timestamps)
without touching the transaction handling.
"""
from typing import Any, Callable, Dict, Mapping, Optional

MergePolicy = Callable[[Optional[Mapping[str, Any]], Mapping[str, Any]], Dict[str, Any]]


def last_write_wins(
    existing: Optional[Mapping[str, Any]],
    incoming: Mapping[str, Any],
) -> Dict[str, Any]:
    """Most recently applied write wins, by arrival order.

    Every submitted value replaces the stored one. A field the client left
    out (None) keeps the stored value. Nothing is compared by timestamp, so a
    stale edit arriving late overwrites a newer one.
    """
    stored = existing or {}
    return {
        field: value if value is not None else stored.get(field)
        for field, value in incoming.items()
    }
