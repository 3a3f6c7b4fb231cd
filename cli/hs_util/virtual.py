from __future__ import annotations


class VirtualState:
    """A floating range anchored where range mode started.

    `fixed` is the anchor, `moving` follows the cursor.
    """

    def __init__(self, index: int) -> None:
        self.fixed = index
        self.moving = index

    def set_point(self, index: int) -> None:
        self.moving = index

    def range(self) -> tuple[int, int]:
        if self.fixed < self.moving:
            return self.fixed, self.moving + 1
        return self.moving, self.fixed + 1

    def in_range(self, index: int) -> bool:
        lo, hi = self.range()
        return lo <= index < hi

    def truncate(self, length: int) -> None:
        last = max(0, length - 1)
        self.fixed = min(last, self.fixed)
        self.moving = min(last, self.moving)

    def __repr__(self) -> str:
        return f"VirtualState(fixed={self.fixed}, moving={self.moving})"
