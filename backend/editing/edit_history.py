"""
Linear undo/redo history of generated images.

Appending after an undo discards the redo branch, so the history is always
a single line of versions with a cursor.
"""

from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class EditHistory(Generic[T]):
    """
    Ordered versions plus a current index.

    Entries are opaque (image bytes, URLs); only their order matters.
    Navigation past either end is a no-op returning None.
    """

    def __init__(self):
        self._entries: List[T] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def index(self) -> int:
        """Current position, -1 while empty."""
        return self._index

    @property
    def entries(self) -> List[T]:
        return list(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def append(self, entry: T) -> None:
        """Drop anything after the cursor, then add `entry` as the newest version."""
        del self._entries[self._index + 1:]
        self._entries.append(entry)
        self._index = len(self._entries) - 1

    def undo(self) -> Optional[T]:
        if not self.can_undo:
            return None
        self._index -= 1
        return self._entries[self._index]

    def redo(self) -> Optional[T]:
        if not self.can_redo:
            return None
        self._index += 1
        return self._entries[self._index]

    def current(self) -> Optional[T]:
        if not self._entries:
            return None
        return self._entries[self._index]

    def reset(self) -> None:
        self._entries = []
        self._index = -1
