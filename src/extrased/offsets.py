"""Index bookkeeping across edits applied in separate batches.

Edits are applied last-to-first so earlier indexes stay valid, but the
text style, paragraph style and break passes run after *all* text edits
and need the post-edit position of each range. :class:`OffsetTracker`
records every replacement and maps an index computed against the
original snapshot to where it ends up.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Edit:
    """``[start, end)`` was replaced by ``inserted`` code units."""

    start: int
    end: int
    inserted: int

    @property
    def delta(self) -> int:
        return self.inserted - (self.end - self.start)


@dataclass
class OffsetTracker:
    """Records replacements and maps snapshot indexes through them.

    Every recorded edit must have been computed against the document
    as it stood after the previous recorded edits, which holds when
    edits are applied in descending index order.
    """

    edits: list[Edit] = field(default_factory=list)

    def replace(self, start: int, end: int, inserted: int) -> int:
        """Record a replacement; returns a checkpoint for :meth:`map`."""
        if end != start or inserted:
            self.edits.append(Edit(start, end, inserted))
        return len(self.edits)

    def checkpoint(self) -> int:
        return len(self.edits)

    def map(self, index: int, since: int = 0, until: int | None = None) -> int:
        """Where ``index`` lands after the edits recorded in ``[since, until)``.

        An index inside a replaced range is clamped into the inserted text.
        """
        for edit in self.edits[since:until]:
            if index >= edit.end:
                index += edit.delta
            elif index > edit.start:
                index = edit.start + min(index - edit.start, edit.inserted)
        return index

    def map_range(
        self, start: int, end: int, since: int = 0, until: int | None = None
    ) -> tuple[int, int]:
        return self.map(start, since, until), self.map(end, since, until)
