"""Maximal-rectangles bin packing, used to lay sprites out on one texture."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Sequence

_WORST = 2**31 - 1


@dataclass(frozen=True, slots=True)
class RectSize:
    """Size of a rectangle waiting to be packed."""

    width: int
    height: int


@dataclass(frozen=True, slots=True)
class Rect:
    """A placed (or free) rectangle inside the bin."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contained_in(self, other: Rect) -> bool:
        return (
            self.x >= other.x
            and self.y >= other.y
            and self.right <= other.right
            and self.bottom <= other.bottom
        )


class PackMode(IntEnum):
    """Heuristic that picks the free spot for each rectangle."""

    SHORT_SIDE = 1
    LONG_SIDE = 2
    BEST_AREA = 3
    BOTTOM_LEFT = 4
    CONTACT_POINT = 5


def _common_interval_length(start1: int, end1: int, start2: int, end2: int) -> int:
    if end1 < start2 or end2 < start1:
        return 0
    return min(end1, end2) - max(start1, start2)


class MaxRects:
    """A bin of fixed size into which rectangles are packed one by one."""

    def __init__(self, width: int, height: int, rotate: bool = True) -> None:
        self.width = width
        self.height = height
        self.rotate = rotate
        self._used: list[Rect] = []
        self._free: list[Rect] = [Rect(0, 0, width, height)]

    @property
    def used(self) -> list[Rect]:
        return list(self._used)

    def insert(
        self,
        mode: int,
        rects: Sequence[RectSize],
        indices: Sequence[int] | None = None,
    ) -> list[tuple[Rect, int]]:
        """Pack the rectangles ``rects[i]`` for each ``i`` in ``indices`` (all by default).

        Returns ``(placed rectangle, index)`` pairs in placement order; rectangles
        that did not fit are left out.
        """
        mode = PackMode(mode)
        remaining = list(range(len(rects)) if indices is None else indices)
        placed: list[tuple[Rect, int]] = []
        while remaining:
            best_node = Rect()
            best_scores = (_WORST, _WORST)
            best_position = -1
            for position, index in enumerate(remaining):
                size = rects[index]
                node, score1, score2 = self._score_rect(size.width, size.height, mode)
                if (score1, score2) < best_scores:
                    best_scores = (score1, score2)
                    best_node = node
                    best_position = position
            if best_node.height == 0 or best_position == -1:
                break
            self._place_rect(best_node)
            placed.append((best_node, remaining.pop(best_position)))
        return placed

    def _place_rect(self, node: Rect) -> None:
        kept: list[Rect] = []
        added: list[Rect] = []
        for free in self._free:
            pieces = self._split_free_node(free, node)
            if pieces is None:
                kept.append(free)
            else:
                added.extend(pieces)
        self._free = kept + added
        self._prune_free_list()
        self._used.append(node)

    def _score_rect(self, width: int, height: int, mode: PackMode) -> tuple[Rect, int, int]:
        if mode is PackMode.SHORT_SIDE:
            node, score1, score2 = self._find_short_side(width, height)
        elif mode is PackMode.BOTTOM_LEFT:
            node, score1, score2 = self._find_bottom_left(width, height)
        elif mode is PackMode.CONTACT_POINT:
            node, contact = self._find_contact_point(width, height)
            score1, score2 = -contact, _WORST
        elif mode is PackMode.LONG_SIDE:
            node, short_fit, long_fit = self._find_long_side(width, height)
            score1, score2 = long_fit, short_fit
        else:
            node, score1, score2 = self._find_best_area(width, height)
        if node.height == 0:
            score1 = score2 = _WORST
        return node, score1, score2

    def _orientations(self, free: Rect, width: int, height: int):
        if free.width >= width and free.height >= height:
            yield width, height
        if self.rotate and free.width >= height and free.height >= width:
            yield height, width

    def _find_bottom_left(self, width: int, height: int) -> tuple[Rect, int, int]:
        best = Rect()
        best_y, best_x = _WORST, _WORST
        for free in self._free:
            for w, h in self._orientations(free, width, height):
                top = free.y + h
                if top < best_y or (top == best_y and free.x < best_x):
                    best = Rect(free.x, free.y, w, h)
                    best_y, best_x = top, free.x
        return best, best_y, best_x

    def _find_short_side(self, width: int, height: int) -> tuple[Rect, int, int]:
        best = Rect()
        best_short, best_long = _WORST, _WORST
        for free in self._free:
            for w, h in self._orientations(free, width, height):
                horizontal = abs(free.width - w)
                vertical = abs(free.height - h)
                short_fit, long_fit = min(horizontal, vertical), max(horizontal, vertical)
                if short_fit < best_short or (short_fit == best_short and long_fit < best_long):
                    best = Rect(free.x, free.y, w, h)
                    best_short, best_long = short_fit, long_fit
        return best, best_short, best_long

    def _find_long_side(self, width: int, height: int) -> tuple[Rect, int, int]:
        best = Rect()
        best_short, best_long = _WORST, _WORST
        for free in self._free:
            for w, h in self._orientations(free, width, height):
                horizontal = abs(free.width - w)
                vertical = abs(free.height - h)
                short_fit, long_fit = min(horizontal, vertical), max(horizontal, vertical)
                if long_fit < best_long or (long_fit == best_long and short_fit < best_short):
                    best = Rect(free.x, free.y, w, h)
                    best_short, best_long = short_fit, long_fit
        return best, best_short, best_long

    def _find_best_area(self, width: int, height: int) -> tuple[Rect, int, int]:
        best = Rect()
        best_area, best_short = _WORST, _WORST
        for free in self._free:
            area_fit = free.width * free.height - width * height
            for w, h in self._orientations(free, width, height):
                short_fit = min(abs(free.width - w), abs(free.height - h))
                if area_fit < best_area or (area_fit == best_area and short_fit < best_short):
                    best = Rect(free.x, free.y, w, h)
                    best_area, best_short = area_fit, short_fit
        return best, best_area, best_short

    def _contact_score(self, x: int, y: int, width: int, height: int) -> int:
        score = 0
        if x == 0 or x + width == self.width:
            score += height
        if y == 0 or y + height == self.height:
            score += width
        for used in self._used:
            if used.x == x + width or used.right == x:
                score += _common_interval_length(used.y, used.bottom, y, y + height)
            if used.y == y + height or used.bottom == y:
                score += _common_interval_length(used.x, used.right, x, x + width)
        return score

    def _find_contact_point(self, width: int, height: int) -> tuple[Rect, int]:
        best = Rect()
        best_score = -1
        for free in self._free:
            for w, h in self._orientations(free, width, height):
                score = self._contact_score(free.x, free.y, w, h)
                if score > best_score:
                    best = Rect(free.x, free.y, w, h)
                    best_score = score
        return best, best_score

    @staticmethod
    def _split_free_node(free: Rect, used: Rect) -> list[Rect] | None:
        if used.x >= free.right or used.right <= free.x or used.y >= free.bottom or used.bottom <= free.y:
            return None
        pieces: list[Rect] = []
        if used.x < free.right and used.right > free.x:
            if free.y < used.y < free.bottom:
                pieces.append(replace(free, height=used.y - free.y))
            if used.bottom < free.bottom:
                pieces.append(replace(free, y=used.bottom, height=free.bottom - used.bottom))
        if used.y < free.bottom and used.bottom > free.y:
            if free.x < used.x < free.right:
                pieces.append(replace(free, width=used.x - free.x))
            if used.right < free.right:
                pieces.append(replace(free, x=used.right, width=free.right - used.right))
        return pieces

    def _prune_free_list(self) -> None:
        free = self._free
        i = 0
        while i < len(free):
            j = i + 1
            removed = False
            while j < len(free):
                if free[i].contained_in(free[j]):
                    del free[i]
                    removed = True
                    break
                if free[j].contained_in(free[i]):
                    del free[j]
                    continue
                j += 1
            if not removed:
                i += 1