"""Chart model in the official judgeline format, shared by the chart converters."""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from typing import Iterable

OLD_OFFICIAL_VERSION = 1
OFFICIAL_VERSION = 3
OPTIMIZER_VERSION = 13

BASIC_BPM = 120.0
TAIL_TIME = 999999.0
HOLD_NOTE = 3

# Easing numbers of external editors mapped to the chart's easing indices.
PEC_EASING_MAP = (
    0, 0, 0,
    17, 18, 19,
    1, 2, 3,
    5, 6, 7,
    9, 10, 11,
    13, 14, 15,
    21, 22, 23,
    25, 26, 27,
    33, 34, 35,
    29, 30, 31,
    0, 0, 0,
)
NOTE_TYPE_MAP = (0, 1, 3, 4, 2)


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


@dataclass
class Note:
    """A note attached to a judgeline; times are in chart ticks."""

    type: int
    line_id: int
    time: float
    end_time: float
    offset_x: float
    is_above: bool
    is_fake: bool
    speed: float = 1.0
    size: float = 1.0
    y_offset: float = 0.0
    visible_time: float = TAIL_TIME
    alpha: float = 1.0
    floor_position: float = 0.0

    def to_json(self) -> dict:
        return {
            "type": self.type,
            "judgeline": self.line_id,
            "time": self.time,
            "holdTime": self.end_time - self.time,
            "positionX": self.offset_x,
            "isAbove": bool(self.is_above),
            "isFake": bool(self.is_fake),
            "speed": self.speed,
            "size": self.size,
            "yOffset": self.y_offset,
            "visibleTime": self.visible_time,
            "alpha": self.alpha,
            "floorPosition": self.floor_position,
        }


@dataclass
class SpeedEvent:
    """A linear change of scroll speed, with the floor position reached at its start."""

    start_time: float
    end_time: float
    start: float
    end: float
    floor_position: float = 0.0

    def to_json(self) -> dict:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "start": self.start,
            "end": self.end,
            "floorPosition": self.floor_position,
        }


@dataclass
class Event:
    """An eased move, rotate or alpha event of a judgeline."""

    start_time: float
    end_time: float
    start: float
    end: float
    easing: int = 0
    easing_left: float = 0.0
    easing_right: float = 1.0
    bezier: bool = False
    bezier_p1: float = 0.0
    bezier_p2: float = 0.0
    bezier_p3: float = 0.0
    bezier_p4: float = 0.0

    def to_json(self) -> dict:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "start": self.start,
            "end": self.end,
            "easing": self.easing,
            "easingLeft": self.easing_left,
            "easingRight": self.easing_right,
            "bezier": bool(self.bezier),
            "bezierP1": self.bezier_p1,
            "bezierP2": self.bezier_p2,
            "bezierP3": self.bezier_p3,
            "bezierP4": self.bezier_p4,
        }


@dataclass
class Judgeline:
    """A judgeline with its event lists and notes."""

    bpm: float = BASIC_BPM
    speed_events: list[SpeedEvent] = field(default_factory=list)
    move_x_events: list[Event] = field(default_factory=list)
    move_y_events: list[Event] = field(default_factory=list)
    rotate_events: list[Event] = field(default_factory=list)
    disappear_events: list[Event] = field(default_factory=list)
    notes_above: list[Note] = field(default_factory=list)
    notes_below: list[Note] = field(default_factory=list)
    father: int = -1

    def to_json(self) -> dict:
        return {
            "bpm": self.bpm,
            "numOfNotes": len(self.notes_above) + len(self.notes_below),
            "numOfNotesAbove": len(self.notes_above),
            "numOfNotesBelow": len(self.notes_below),
            "speedEvents": [e.to_json() for e in self.speed_events],
            "judgeLineMoveXEvents": [e.to_json() for e in self.move_x_events],
            "judgeLineMoveYEvents": [e.to_json() for e in self.move_y_events],
            "judgeLineRotateEvents": [e.to_json() for e in self.rotate_events],
            "judgeLineDisappearEvents": [e.to_json() for e in self.disappear_events],
            "notesAbove": [n.to_json() for n in self.notes_above],
            "notesBelow": [n.to_json() for n in self.notes_below],
            "father": self.father,
        }


class BpmTimeline:
    """BPM changes given as (start beat, bpm) pairs, converting beats into chart ticks."""

    def __init__(self, changes: Iterable[tuple[float, float]]) -> None:
        ordered = sorted(((float(beat), float(bpm)) for beat, bpm in changes), key=lambda c: c[0])
        self.changes: list[tuple[float, float, float]] = []
        for beat, bpm in ordered:
            if self.changes:
                prev_beat, prev_bpm, prev_time = self.changes[-1]
                basic_time = prev_time + (beat - prev_beat) / prev_bpm
            else:
                basic_time = 0.0
            self.changes.append((beat, bpm, basic_time))
        self._starts = [beat for beat, _, _ in self.changes]

    def __len__(self) -> int:
        return len(self.changes)

    def to_pgr(self, beat: float, factor: float = 1.0) -> float:
        """Chart tick of ``beat``; beats at or before the first change map to 0."""
        index = bisect.bisect_left(self._starts, beat) - 1
        if index < 0:
            return 0.0
        start, bpm, basic_time = self.changes[index]
        return _round_half_away(((beat - start) / bpm + basic_time) * BASIC_BPM * factor * 32)


def trim(text: str) -> str:
    """Strip control characters, spaces and non-ASCII characters from both ends."""
    def keep(ch: str) -> bool:
        return 32 < ord(ch) < 127

    start = 0
    while start < len(text) and not keep(text[start]):
        start += 1
    end = len(text)
    while end > start and not keep(text[end - 1]):
        end -= 1
    return text[start:end]


def _place(note: Note, events: list[SpeedEvent], starts: list[float], bpm: float) -> None:
    index = max(bisect.bisect_left(starts, note.time) - 1, 0)
    event = events[index]
    duration = event.end_time - event.start_time
    v1 = event.start
    if duration:
        v2 = event.start + (note.time - event.start_time) * (event.end - event.start) / duration
    else:
        v2 = event.start
    if note.type == HOLD_NOTE:
        note.speed *= v2
    note.floor_position = event.floor_position + (note.time - event.start_time) * (v1 + v2) / 2 / bpm * 1.875


def place_notes(judgeline: Judgeline) -> None:
    """Fill in the floor position of every note from the line's speed events.

    Speed events must be sorted and carry their floor positions; hold notes also
    have their speed scaled by the line speed at their start.
    """
    events = judgeline.speed_events
    if not events:
        raise ValueError("judgeline has no speed events")
    starts = [event.start_time for event in events]
    for note in (*judgeline.notes_above, *judgeline.notes_below):
        _place(note, events, starts, judgeline.bpm)