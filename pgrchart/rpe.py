"""Conversion of RPE JSON charts into the official judgeline format."""

from __future__ import annotations

import dataclasses
import math
import sys
from collections import deque
from typing import Any, Callable, Sequence

from .chart import (
    BASIC_BPM,
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
from .encoding import json_decode, json_encode

DEFAULT_TEXTURE = "line.png"


def _warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


def _number(obj: Any, key: str) -> float:
    value = obj.get(key) if isinstance(obj, dict) else None
    if value is None:
        return 0.0
    if isinstance(value, (bool, int, float)):
        return float(value)
    raise ValueError(f"expected a number for {key!r} in RPE chart, got {value!r}")


def _flag(obj: Any, key: str) -> bool:
    return bool(_number(obj, key))


def _list(obj: Any, key: str) -> list:
    value = obj.get(key) if isinstance(obj, dict) else None
    return value if isinstance(value, list) else []


def _field(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, dict) else None


def _divide(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def _describe(line_id: int, event: Event | SpeedEvent) -> str:
    return (
        f"[{line_id}, {event.start_time:.2f}, {event.end_time:.2f}, "
        f"{event.start:.2f}, {event.end:.2f}]"
    )


def _time_key(event: Event | SpeedEvent) -> tuple[float, float]:
    return event.start_time, event.end_time


def beat_to_float(beat: Any) -> float:
    """Turn an RPE beat ``[whole, numerator, denominator]`` into a number of beats."""
    if not isinstance(beat, (list, tuple)) or len(beat) < 3:
        raise ValueError(f"invalid beat in RPE chart: {beat!r}")
    try:
        whole, numerator, denominator = (float(part) for part in beat[:3])
    except (TypeError, ValueError):
        raise ValueError(f"invalid beat in RPE chart: {beat!r}") from None
    if denominator == 0:
        raise ValueError(f"beat with zero denominator in RPE chart: {beat!r}")
    return whole + numerator / denominator


def solve_rpe_speed_events(events: Sequence[SpeedEvent], line_id: int, factor: float) -> list[SpeedEvent]:
    """Sort speed events, repair invalid and overlapping ones, fill gaps, add a tail
    and compute floor positions. The input is left unchanged."""
    if factor == 0:
        raise ValueError("speed factor must not be zero")
    solved = sorted((dataclasses.replace(event) for event in events), key=_time_key)
    if not solved:
        _warn(f"Invalid Speed Event List [{line_id}]: Empty Speed Event List.")
        return [SpeedEvent(0.0, TAIL_TIME, 0.0, 0.0)]
    if solved[0].start_time > 0:
        solved.insert(0, SpeedEvent(0.0, solved[0].start_time, 0.0, 0.0))

    extra: list[SpeedEvent] = []
    last_time, last_value = solved[0].start_time, 0.0
    for index, event in enumerate(solved):
        if event.start_time > event.end_time:
            _warn(f"Invalid Speed Event {_describe(line_id, event)}: Start Time is greater than End Time.")
            event.end_time = event.start_time
            event.start = event.end
        if last_time < event.start_time:
            extra.append(SpeedEvent(last_time, event.start_time, last_value, last_value))
        elif last_time > event.start_time:
            previous = solved[index - 1]
            _warn(
                f"Overlapped Speed Event {_describe(line_id, previous)} "
                f"and {_describe(line_id, event)}."
            )
            previous.end = previous.start + _divide(
                (event.start_time - previous.start_time) * (previous.end - previous.start),
                previous.end_time - previous.start_time,
            )
            previous.end_time = event.start_time
        last_time, last_value = event.end_time, event.end

    solved = sorted(solved + extra, key=_time_key)
    last = solved[-1]
    if last.end_time < TAIL_TIME:
        solved.append(SpeedEvent(last.end_time, TAIL_TIME, last.end, last.end))

    solved[0].floor_position = 0.0
    for previous, current in zip(solved, solved[1:]):
        current.floor_position = previous.floor_position + (
            (previous.start + previous.end)
            * (previous.end_time - previous.start_time)
            / 2
            / BASIC_BPM
            / factor
            * 1.875
        )
    return solved


def solve_rpe_events(events: Sequence[Event], line_id: int, name: str) -> list[Event]:
    """Sort eased events, extend the first back to time 0, repair invalid and
    overlapping ones, fill gaps and add a tail. The input is left unchanged."""
    solved = sorted((dataclasses.replace(event) for event in events), key=_time_key)
    if not solved:
        _warn(f"Invalid {name} List [{line_id}]: Empty {name} List.")
        return [Event(0.0, TAIL_TIME, 0.0, 0.0)]

    first = solved[0]
    if first.start_time > 0:
        first.easing_left = first.easing_right - _divide(
            first.easing_right - first.easing_left, first.end_time - first.start_time
        ) * first.end_time
        first.start_time = 0.0

    extra: list[Event] = []
    for index, event in enumerate(solved):
        if event.start_time > event.end_time:
            _warn(f"Invalid {name} {_describe(line_id, event)}: Start Time is greater than End Time.")
            event.end_time = event.start_time
            event.start = event.end
        if index == 0:
            continue
        previous = solved[index - 1]
        if previous.end_time < event.start_time:
            extra.append(Event(previous.end_time, event.start_time, previous.end, previous.end))
        elif previous.end_time > event.start_time:
            _warn(f"Overlapped {name} {_describe(line_id, previous)} and {_describe(line_id, event)}.")
            previous.easing_right = previous.easing_left + _divide(
                previous.easing_right - previous.easing_left,
                previous.end_time - previous.start_time,
            ) * (event.start_time - previous.start_time)
            previous.end_time = event.start_time

    solved = sorted(solved + extra, key=_time_key)
    last = solved[-1]
    if last.end_time < TAIL_TIME:
        solved.append(Event(last.end_time, TAIL_TIME, last.end, last.end))
    return solved


def order_by_father(judgelines: Sequence[Judgeline]) -> list[Judgeline]:
    """Reorder judgelines so every father comes before its children.

    Lines caught in a father cycle are kept together and reported. Returns
    shallow copies whose ``father`` indices refer to the new order.
    """
    count = len(judgelines)
    fathers = [line.father for line in judgelines]
    for index, father in enumerate(fathers):
        if father != -1 and not 0 <= father < count:
            raise ValueError(f"judgeline {index} has an unknown father {father}")

    sons = [0] * count
    for father in fathers:
        if father != -1:
            sons[father] += 1

    queue = deque(index for index in range(count) if sons[index] == 0)
    order: list[int] = []
    while queue:
        current = queue.popleft()
        order.append(current)
        father = fathers[current]
        if father == -1:
            continue
        sons[father] -= 1
        if sons[father] == 0:
            queue.append(father)

    for index in range(count):
        if sons[index] <= 0:
            continue
        cycle = [index]
        sons[index] = 0
        current = index
        while fathers[current] != index:
            current = fathers[current]
            cycle.append(current)
            sons[current] = 0
        _warn(f"Circular Dependency Detected in JudgeLine [{', '.join(map(str, cycle))}].")
        order.extend(cycle)

    order.reverse()
    place = {old: new for new, old in enumerate(order)}
    result: list[Judgeline] = []
    for old in order:
        line = dataclasses.replace(judgelines[old])
        if line.father != -1:
            line.father = place[line.father]
        result.append(line)
    return result


def _ignored_line() -> Judgeline:
    return Judgeline(
        bpm=BASIC_BPM,
        father=-1,
        speed_events=[SpeedEvent(0.0, TAIL_TIME, 0.0, 0.0)],
        move_x_events=[Event(0.0, TAIL_TIME, 0.0, 0.0)],
        move_y_events=[Event(0.0, TAIL_TIME, 0.0, 0.0)],
        rotate_events=[Event(0.0, TAIL_TIME, 0.0, 0.0)],
        disappear_events=[Event(0.0, TAIL_TIME, 0.0, 0.0)],
    )


def _alpha(value: float) -> float:
    level = int(value)
    if level > 255:
        level &= 255
    return 1.0 * level / 255.0


def _read_event(raw: Any, timeline: BpmTimeline, factor: float, convert: Callable[[float], float]) -> Event:
    easing_type = int(_number(raw, "easingType"))
    if not 0 <= easing_type < len(PEC_EASING_MAP):
        raise ValueError(f"unknown easing in RPE chart: {easing_type}")
    return Event(
        start_time=timeline.to_pgr(beat_to_float(_field(raw, "startTime")), factor),
        end_time=timeline.to_pgr(beat_to_float(_field(raw, "endTime")), factor),
        start=convert(_number(raw, "start")),
        end=convert(_number(raw, "end")),
        easing=PEC_EASING_MAP[easing_type],
        easing_left=_number(raw, "easingLeft"),
        easing_right=_number(raw, "easingRight"),
        bezier=_flag(raw, "bezier"),
        bezier_p1=_number(raw, "bezierP1"),
        bezier_p2=_number(raw, "bezierP2"),
        bezier_p3=_number(raw, "bezierP3"),
        bezier_p4=_number(raw, "bezierP4"),
    )


def _read_speed_event(raw: Any, timeline: BpmTimeline, factor: float) -> SpeedEvent:
    return SpeedEvent(
        timeline.to_pgr(beat_to_float(_field(raw, "startTime")), factor),
        timeline.to_pgr(beat_to_float(_field(raw, "endTime")), factor),
        _number(raw, "start") * 11 / 45,
        _number(raw, "end") * 11 / 45,
    )


def _read_note(raw: Any, line_id: int, timeline: BpmTimeline, factor: float) -> Note:
    code = int(_number(raw, "type"))
    if not 0 <= code < len(NOTE_TYPE_MAP):
        raise ValueError(f"unknown note type in RPE chart: {code}")
    return Note(
        type=NOTE_TYPE_MAP[code],
        line_id=line_id,
        time=timeline.to_pgr(beat_to_float(_field(raw, "startTime")), factor),
        end_time=timeline.to_pgr(beat_to_float(_field(raw, "endTime")), factor),
        offset_x=_number(raw, "positionX") / 75.375,
        is_above=_flag(raw, "above"),
        is_fake=_flag(raw, "isFake"),
        speed=_number(raw, "speed"),
        size=_number(raw, "size"),
        y_offset=_number(raw, "yOffset") / 900.0,
        visible_time=_number(raw, "visibleTime"),
        alpha=_number(raw, "alpha") / 255.0,
        floor_position=0.0,
    )


def _read_line(index: int, item: Any, timeline: BpmTimeline) -> Judgeline:
    if not isinstance(item, dict):
        item = {}
    texture = item.get("Texture")
    if texture != DEFAULT_TEXTURE:
        shown = texture if isinstance(texture, str) else ""
        _warn(f'Invalid Texture [{index}]: "{shown}", which will be ignored in Sonolus.')
        return _ignored_line()
    if "attachUI" in item:
        _warn(f"UI Attached Judgeline [{index}], which will be ignored in Sonolus.")
        return _ignored_line()
    extended = item.get("extended")
    if isinstance(extended, dict) and "textEvents" in extended:
        _warn(f"Texts Included Judgeline [{index}], which will be ignored in Sonolus.")
        return _ignored_line()

    factor = _number(item, "bpmfactor")
    if factor == 0:
        raise ValueError(f"judgeline {index} has a zero or missing bpmfactor")
    line = Judgeline(bpm=BASIC_BPM * factor, father=int(_number(item, "father")))
    for layer in _list(item, "eventLayers"):
        line.speed_events.extend(_read_speed_event(raw, timeline, factor) for raw in _list(layer, "speedEvents"))
        line.move_x_events.extend(
            _read_event(raw, timeline, factor, lambda v: (v + 675.0) / 1350.0)
            for raw in _list(layer, "moveXEvents")
        )
        line.move_y_events.extend(
            _read_event(raw, timeline, factor, lambda v: (v + 450.0) / 900.0)
            for raw in _list(layer, "moveYEvents")
        )
        line.rotate_events.extend(
            _read_event(raw, timeline, factor, lambda v: -v) for raw in _list(layer, "rotateEvents")
        )
        line.disappear_events.extend(
            _read_event(raw, timeline, factor, _alpha) for raw in _list(layer, "alphaEvents")
        )
    for raw in _list(item, "notes"):
        note = _read_note(raw, index, timeline, factor)
        (line.notes_above if note.is_above else line.notes_below).append(note)
    return line


def from_rpe(text: str | bytes, bgm_offset: float = 0.0) -> str:
    """Convert an RPE chart into an official-format chart (format version 13) as JSON text."""
    chart = json_decode(text)
    if not isinstance(chart, dict):
        raise ValueError("RPE chart must be a JSON object")
    offset = _number(chart.get("META"), "offset") + bgm_offset
    timeline = BpmTimeline(
        (beat_to_float(_field(change, "startTime")), _number(change, "bpm"))
        for change in _list(chart, "BPMList")
    )

    lines = [_read_line(index, item, timeline) for index, item in enumerate(_list(chart, "judgeLineList"))]

    for index, line in enumerate(lines):
        line.speed_events = solve_rpe_speed_events(line.speed_events, index, line.bpm / BASIC_BPM)
        line.move_x_events = solve_rpe_events(line.move_x_events, index, "MoveX Event")
        line.move_y_events = solve_rpe_events(line.move_y_events, index, "MoveY Event")
        line.rotate_events = solve_rpe_events(line.rotate_events, index, "Rotate Event")
        line.disappear_events = solve_rpe_events(line.disappear_events, index, "Alpha Event")

    for line in lines:
        place_notes(line)

    ordered = order_by_father(lines)
    result = {
        "formatVersion": OPTIMIZER_VERSION,
        "judgeLineList": [line.to_json() for line in ordered],
        "offset": offset,
    }
    return json_encode(result)