"""
Undo history — deep snapshots of the match taken before each point.
"""

from __future__ import annotations

import copy
from typing import Optional

from tennistracker.models.match import MatchState


class UndoHistory:
    """
    Stack of pre-point snapshots, one per resolved point.

    begin() is called before a point's first event. If the point resolves the
    snapshot stays; if it is aborted, discard() drops it again.
    """

    def __init__(self):
        self._stack: list[MatchState] = []

    def __len__(self) -> int:
        return len(self._stack)

    @property
    def is_empty(self) -> bool:
        return not self._stack

    def begin(self, match: MatchState) -> None:
        self._stack.append(copy.deepcopy(match))

    def discard(self) -> None:
        if not self._stack:
            raise RuntimeError("No point transaction to discard")
        self._stack.pop()

    def pop(self) -> Optional[MatchState]:
        """Most recent snapshot, or None when there is nothing to undo."""
        if not self._stack:
            return None
        return self._stack.pop()

    def clear(self) -> None:
        self._stack.clear()
