import json

import pytest

from pgrchart.chart import Event, PEC_EASING_MAP
from pgrchart.pec import from_pec, solve_pec_events

LINE0 = "cv 0 0 5.85\ncp 0 0 1024 700\ncd 0 0 0\nca 0 0 255\n"


def convert(body="", offset="0", bpm="bp 0 120\n", bgm=0.0):
    return json.loads(from_pec(f"{offset}\n{bpm}{LINE0}{body}", bgm))


EVENT_KEYS = (
    "speedEvents",
    "judgeLineMoveXEvents",
    "judgeLineMoveYEvents",
    "judgeLineRotateEvents",
    "judgeLineDisappearEvents",
)


def test_format_version_and_offset():
    chart = convert()
    assert chart["formatVersion"] == 13
    assert chart["offset"] == pytest.approx(-0.175)


def test_bgm_offset_is_added():
    shifted = convert(bgm=0.5)
    plain = convert()
    assert shifted["offset"] - plain["offset"] == pytest.approx(0.5)


def test_every_event_list_ends_with_tail():
    chart = convert("n1 0 1 1024 1 0\n")
    line = chart["judgeLineList"][0]
    for key in EVENT_KEYS:
        assert line[key][-1]["endTime"] == 999999
        assert line[key][-1]["start"] == line[key][-1]["end"]


def test_event_values_are_scaled():
    chart = convert("cp 0 1 2048 1400\nca 0 1 255\n")
    line = chart["judgeLineList"][0]
    assert line["speedEvents"][-1]["end"] == pytest.approx(1.0)
    assert line["judgeLineMoveXEvents"][-1]["end"] == pytest.approx(1.0)
    assert line["judgeLineMoveYEvents"][-1]["end"] == pytest.approx(1.0)
    assert line["judgeLineDisappearEvents"][-1]["end"] == pytest.approx(1.0)


def test_rotation_is_negated():
    chart = json.loads(from_pec("0\nbp 0 120\ncv 0 0 5.85\ncp 0 0 0 0\ncd 0 0 30\nca 0 0 255\n"))
    rotate = chart["judgeLineList"][0]["judgeLineRotateEvents"]
    assert rotate[-1]["end"] == pytest.approx(-30)


def test_event_lists_are_sorted_and_chained():
    chart = convert("cm 0 1 2 2048 1400 3\ncr 0 3 4 90 4\n")
    line = chart["judgeLineList"][0]
    for key in EVENT_KEYS[1:]:
        events = line[key]
        for previous, current in zip(events, events[1:]):
            assert previous["startTime"] <= current["startTime"]
            assert current["start"] == pytest.approx(previous["end"])


def test_move_easing_is_mapped():
    chart = convert("cm 0 1 2 2048 1400 3\n")
    moves = chart["judgeLineList"][0]["judgeLineMoveXEvents"]
    eased = [e for e in moves if e["endTime"] != 999999 and e["endTime"] > e["startTime"] and e["easing"]]
    assert [e["easing"] for e in eased] == [PEC_EASING_MAP[3]]


def test_speed_event_end_times_follow_next_start():
    chart = convert("cv 0 2 11.7\ncv 0 4 5.85\n")
    speeds = chart["judgeLineList"][0]["speedEvents"]
    for previous, current in zip(speeds, speeds[1:]):
        assert previous["endTime"] == current["startTime"]
        assert previous["floorPosition"] <= current["floorPosition"]


def test_note_split_and_counts():
    chart = convert("n1 0 1 1024 1 0\nn2 0 2 1024 2 0\nn4 0 3 1024 1 1\n")
    line = chart["judgeLineList"][0]
    assert line["numOfNotes"] == 3
    assert line["numOfNotesAbove"] == 2
    assert all(n["isAbove"] for n in line["notesAbove"])
    assert not any(n["isAbove"] for n in line["notesBelow"])
    assert [n["isFake"] for n in line["notesAbove"]] == [False, True]


def test_note_at_start_has_zero_floor_position():
    chart = convert("n1 0 0 1024 1 0\n")
    assert chart["judgeLineList"][0]["notesAbove"][0]["floorPosition"] == 0


def test_floor_positions_increase_with_time():
    chart = convert("n1 0 1 1024 1 0\nn1 0 2 1024 1 0\nn1 0 3 1024 1 0\n")
    positions = [n["floorPosition"] for n in chart["judgeLineList"][0]["notesAbove"]]
    assert positions == sorted(positions)
    assert positions[0] < positions[-1]


def test_bpm_change_affects_tick_spacing():
    chart = convert("n1 0 3 1024 1 0\nn1 0 4 1024 1 0\nn1 0 5 1024 1 0\n", bpm="bp 0 120\nbp 4 60\n")
    t3, t4, t5 = (n["time"] for n in chart["judgeLineList"][0]["notesAbove"])
    assert t5 - t4 == pytest.approx(2 * (t4 - t3))


def test_hold_note_time_and_modifiers():
    chart = convert("n2 0 1 2 1024 1 0\n# 2.5\n& 1.5\n")
    note = chart["judgeLineList"][0]["notesAbove"][0]
    assert note["holdTime"] > 0
    assert note["size"] == pytest.approx(1.5)
    assert note["speed"] == pytest.approx(2.5)


def test_hold_speed_scales_with_line_speed():
    slow = json.loads(from_pec("0\nbp 0 120\ncv 0 0 5.85\ncp 0 0 0 0\ncd 0 0 0\nca 0 0 255\nn2 0 1 2 0 1 0\n# 2\n"))
    fast = json.loads(from_pec("0\nbp 0 120\ncv 0 0 11.7\ncp 0 0 0 0\ncd 0 0 0\nca 0 0 255\nn2 0 1 2 0 1 0\n# 2\n"))
    slow_speed = slow["judgeLineList"][0]["notesAbove"][0]["speed"]
    fast_speed = fast["judgeLineList"][0]["notesAbove"][0]["speed"]
    assert fast_speed == pytest.approx(2 * slow_speed)


def test_tap_speed_is_not_scaled():
    chart = json.loads(from_pec("0\nbp 0 120\ncv 0 0 11.7\ncp 0 0 0 0\ncd 0 0 0\nca 0 0 255\nn1 0 1 0 1 0\n# 3\n"))
    assert chart["judgeLineList"][0]["notesAbove"][0]["speed"] == pytest.approx(3)


def test_unknown_commands_are_ignored():
    assert convert("foo\nn1 0 1 1024 1 0\n") == convert("n1 0 1 1024 1 0\n")


def test_line_without_events_is_an_error():
    with pytest.raises(ValueError):
        convert("n1 1 1 1024 1 0\n")


def test_invalid_input_raises():
    with pytest.raises(ValueError):
        from_pec("")
    with pytest.raises(ValueError):
        convert("n9 0 1 1024 1 0\n")
    with pytest.raises(ValueError):
        from_pec("0\n# 2\n")
    with pytest.raises(ValueError):
        convert("cm 0 1 2 0 0 99\n")
    with pytest.raises(ValueError):
        convert("n1 0 1\n")


def test_solve_fills_gaps():
    events = [Event(0, 10, 0, 1), Event(20, 30, 0, 2)]
    solved = solve_pec_events(events)
    assert [(e.start_time, e.end_time) for e in solved] == [(0, 10), (10, 20), (20, 30)]
    assert (solved[1].start, solved[1].end) == (1, 1)
    assert solved[2].start == 1


def test_solve_trims_overlaps():
    solved = solve_pec_events([Event(0, 20, 0, 1), Event(10, 30, 0, 2)])
    assert [(e.start_time, e.end_time) for e in solved] == [(0, 20), (20, 30)]
    assert solved[1].start == 1


def test_solve_leaves_input_unchanged():
    events = [Event(0, 20, 0, 1), Event(10, 30, 0, 2)]
    solve_pec_events(events)
    assert events == [Event(0, 20, 0, 1), Event(10, 30, 0, 2)]


def test_solve_empty_list():
    assert solve_pec_events([]) == []