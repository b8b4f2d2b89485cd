"""Diff computation logic - stable module for computing version changes."""

from typing import List, Optional

from .core import Change, Snapshot


def diff_snapshots(prev: Optional[Snapshot], next_: Optional[Snapshot]) -> List[Change]:
    """
    Compute version transitions between two snapshots of the same manifest.

    Args:
        prev: Baseline snapshot, or None if the manifest was never recorded.
        next_: Fresh snapshot, or None if the manifest is currently unreadable.

    Returns:
        Changes grouped by field, in discovery order.

    Note:
        A missing ``next_`` yields no changes rather than "everything
        removed". A missing ``prev`` reports every dependency as added.
    """
    changes: List[Change] = []

    if next_ is None:
        return changes

    if prev is None:
        for field, name, version in next_.iter_dependencies():
            changes.append(Change(field=field, name=name, to=version))
        return changes

    # dict keys keep insertion order; union preserving prev-then-next order
    fields = dict.fromkeys([*prev.fields, *next_.fields])
    for field in fields:
        before = prev.fields.get(field, {})
        after = next_.fields.get(field, {})
        for name in dict.fromkeys([*before, *after]):
            old = before.get(name)
            new = after.get(name)
            if old != new:
                changes.append(Change(field=field, name=name, from_=old, to=new))

    return changes
