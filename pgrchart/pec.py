"""Conversion of PEC text charts into the official judgeline format."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Iterable, Sequence

from .chart import (
    BASIC_BPM,
    HOLD_NOTE,
    NOTE_TYPE_MAP,
    OPTIMIZER_VERSION,
    PEC_EASING_MAP,
    TAIL_TIME,
    BpmTimeline,
    Event,
    Judgeline,
    Note,
    SpeedEvent,
    place_notes,
)
from .encoding import json_encode

OFFSET_SHIFT = 0.175
SPEED_SCALE = 5.85
DEFAULT_EASING = 2

_WITH_END_TIME = frozenset("mrf")
_WITH_POSITION = frozenset("pm")
_WITH_ROTATION = frozenset("dr")
_WITH_ALPHA = frozenset("af")
_WITH_EASING = frozenset("mr")


@dataclass
class _LineCommand:
    """A raw line event as written in the chart, times still in beats."""

    kind: str
    line_id: int
    start_time: float
    end_time: float
    speed: float = 0.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    rotate: float = 0.0
    alpha: float = 0.0
    easing: int = DEFAULT_EASING


class _Reader:
    """Whitespace-separated words of a PEC chart."""

    def __init__(self, text: str) -> None:
        self._words = iter(text.split())

    def next_word(self) -> str | None:
        return next(self._words, None)

    def _require(self, what: str) -> str:
        word = next(self._words, None)
        if word is None:
            raise ValueError(f"PEC chart ends before {what}")
        return word

    def number(self, what: str) -> float:
        word = self._require(what)
        try:
            return float(word)
        except ValueError:
            raise ValueError(f"invalid {what} in PEC chart: {word!r}") from None

    def integer(self, what: str) -> int:
        word = self._require(what)
        try:
            return int(word)
        except ValueError:
            raise ValueError(f"invalid {what} in PEC chart: {word!r}") from None

    def line_id(self) -> int:
        value = self.integer("judgeline number")
        if value < 0:
            raise ValueError(f"negative judgeline number in PEC chart: {value}")
        return value


def _time_key(event: Event | SpeedEvent) -> tuple[float, float]:
    return event.start_time, event.end_time


def solve_pec_events(events: Sequence[Event]) -> list[Event]:
    """Chain event values, fill gaps with holding events, trim overlaps and sort.

    Each event starts from the value the one before it ends with; the input is left unchanged.
    """
    solved = [dataclasses.replace(event) for event in events]
    for previous, current in zip(solved, solved[1:]):
        current.start = previous.end
    gaps: list[Event] = []
    for previous, current in reversed(list(zip(solved, solved[1:]))):
        if previous.end_time < current.start_time:
            gaps.append(Event(previous.end_time, current.start_time, previous.end, previous.end))
        elif previous.end_time > current.start_time:
            current.start_time = previous.end_time
    return sorted(solved + gaps, key=_time_key)


def _read_note(word: str, reader: _Reader) -> Note:
    code = ord(word[1]) - ord("0") if len(word) > 1 else -1
    if not 0 <= code < len(NOTE_TYPE_MAP):
        raise ValueError(f"unknown note command in PEC chart: {word!r}")
    note_type = NOTE_TYPE_MAP[code]
    line_id = reader.line_id()
    time = reader.number("note time")
    end_time = reader.number("note end time") if note_type == HOLD_NOTE else time
    offset_x = reader.number("note position")
    above = reader.integer("note side")
    fake = reader.integer("note fake flag")
    return Note(
        type=note_type,
        line_id=line_id,
        time=time,
        end_time=end_time,
        offset_x=offset_x / 1024.0 * 160.0 / 18.0,
        is_above=above == 1,
        is_fake=fake != 0,
    )


def _read_line_command(word: str, reader: _Reader) -> _LineCommand:
    kind = word[1] if len(word) > 1 else ""
    line_id = reader.line_id()
    start_time = reader.number("event start time")
    command = _LineCommand(kind, line_id, start_time, start_time)
    if kind == "v":
        command.speed = reader.number("speed")
    if kind in _WITH_END_TIME:
        command.end_time = reader.number("event end time")
    if kind in _WITH_POSITION:
        command.offset_x = reader.number("line x position")
        command.offset_y = reader.number("line y position")
    if kind in _WITH_ROTATION:
        command.rotate = reader.number("line rotation")
    if kind in _WITH_ALPHA:
        command.alpha = reader.number("line alpha")
    if kind in _WITH_EASING:
        command.easing = reader.integer("easing")
        if not 0 <= command.easing < len(PEC_EASING_MAP):
            raise ValueError(f"unknown easing in PEC chart: {command.easing}")
    return command


def _last_note(notes: list[Note], word: str) -> Note:
    if not notes:
        raise ValueError(f"{word!r} appears before any note in PEC chart")
    return notes[-1]


def _parse(text: str) -> tuple[float, list[tuple[float, float]], list[Note], list[_LineCommand], int]:
    reader = _Reader(text)
    offset = reader.number("offset")
    bpms: list[tuple[float, float]] = []
    notes: list[Note] = []
    commands: list[_LineCommand] = []
    max_line_id = 0
    while (word := reader.next_word()) is not None:
        if word == "bp":
            bpms.append((reader.number("BPM start beat"), reader.number("BPM value")))
        elif word[0] == "n":
            notes.append(_read_note(word, reader))
            max_line_id = max(max_line_id, notes[-1].line_id)
        elif word[0] == "c":
            commands.append(_read_line_command(word, reader))
            max_line_id = max(max_line_id, commands[-1].line_id)
        elif word[0] == "#":
            _last_note(notes, word).speed = reader.number("note speed")
        elif word[0] == "&":
            _last_note(notes, word).size = reader.number("note size")
    return offset, bpms, notes, commands, max_line_id


def _add_command(line: Judgeline, command: _LineCommand, timeline: BpmTimeline) -> None:
    start = timeline.to_pgr(command.start_time)
    end = timeline.to_pgr(command.end_time)
    easing = PEC_EASING_MAP[command.easing]
    kind = command.kind
    if kind == "v":
        speed = command.speed / SPEED_SCALE
        line.speed_events.append(SpeedEvent(start, end, speed, speed))
    if kind in _WITH_ALPHA:
        line.disappear_events.append(Event(start, end, 0.0, command.alpha / 255.0, easing))
    if kind in _WITH_POSITION:
        line.move_x_events.append(Event(start, end, 0.0, command.offset_x / 2048.0, easing))
        line.move_y_events.append(Event(start, end, 0.0, command.offset_y / 1400.0, easing))
    if kind in _WITH_ROTATION:
        line.rotate_events.append(Event(start, end, 0.0, -command.rotate, easing))


def _tail(events: list, index: int, name: str, make) -> None:
    if not events:
        raise ValueError(f"judgeline {index} has no {name} events")
    last = events[-1]
    events.append(make(last.end_time, TAIL_TIME, last.end, last.end))


def _solve_line(line: Judgeline) -> None:
    line.bpm = BASIC_BPM
    line.speed_events.sort(key=_time_key)
    for current, following in zip(line.speed_events, line.speed_events[1:]):
        current.end_time = following.start_time
    line.move_x_events = solve_pec_events(sorted(line.move_x_events, key=_time_key))
    line.move_y_events = solve_pec_events(sorted(line.move_y_events, key=_time_key))
    line.rotate_events = solve_pec_events(sorted(line.rotate_events, key=_time_key))
    line.disappear_events = solve_pec_events(sorted(line.disappear_events, key=_time_key))


def _add_tails(line: Judgeline, index: int) -> None:
    _tail(line.speed_events, index, "speed", SpeedEvent)
    _tail(line.move_x_events, index, "move", Event)
    _tail(line.move_y_events, index, "move", Event)
    _tail(line.rotate_events, index, "rotate", Event)
    _tail(line.disappear_events, index, "alpha", Event)


def _assign_floor_positions(events: Iterable[SpeedEvent], bpm: float) -> None:
    floor_position = 0.0
    for event in events:
        event.floor_position = floor_position
        floor_position += (event.end_time - event.start_time) * (event.end + event.start) / 2 / bpm * 1.875


def from_pec(text: str, bgm_offset: float = 0.0) -> str:
    """Convert a PEC chart into an official-format chart (format version 13) as JSON text."""
    offset, bpms, notes, commands, max_line_id = _parse(text)
    offset = offset / 1000.0 - OFFSET_SHIFT + bgm_offset
    timeline = BpmTimeline(bpms)
    lines = [Judgeline() for _ in range(max_line_id + 1)]

    for command in commands:
        _add_command(lines[command.line_id], command, timeline)

    for note in notes:
        note.time = timeline.to_pgr(note.time)
        note.end_time = timeline.to_pgr(note.end_time)
        line = lines[note.line_id]
        (line.notes_above if note.is_above else line.notes_below).append(note)

    for line in lines:
        _solve_line(line)
    for index, line in enumerate(lines):
        _add_tails(line, index)
    for line in lines:
        _assign_floor_positions(line.speed_events, line.bpm)
        place_notes(line)

    chart = {
        "formatVersion": OPTIMIZER_VERSION,
        "judgeLineList": [line.to_json() for line in lines],
        "offset": offset,
    }
    return json_encode(chart)