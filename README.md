# pgrchart

A Python library for working with Phigros-style rhythm game charts:

- convert PEC text charts and RPE JSON charts into the official chart
  JSON layout (format version 13, with separate X and Y move events);
- pack skin sprites into one texture atlas, bundle effect clips into a
  zip archive and describe engine configuration as JSON.

## Installation

```
pip install .
```

Pillow is the only runtime dependency. To run the test suite:

```
pip install ".[test]"
pytest
```

## Converting charts

```python
from pgrchart.pec import from_pec
from pgrchart.rpe import from_rpe

with open("chart.pec", encoding="utf-8") as f:
    official = from_pec(f.read(), 0.0)

with open("chart.json", encoding="utf-8") as f:
    official = from_rpe(f.read(), 0.0)
```

Both return the chart as a compact JSON string with sorted keys.

- `from_pec` reads the offset, `bp` BPM changes, `n1`–`n4` notes (with
  `#` speed and `&` size modifiers) and `cv`, `cp`, `cm`, `cd`, `cr`,
  `ca`, `cf` line events. Malformed input raises `ValueError`.
- `from_rpe` reads the BPM list, judge lines with their event layers and
  notes. Problems such as overlapping or reversed events, empty event
  lists, unsupported judge line textures, UI-attached lines, text events
  and circular parent links are reported as warnings on standard error
  and repaired or ignored rather than rejected.

The building blocks are public as well:

- `pgrchart.chart` holds the chart model (`Note`, `SpeedEvent`, `Event`,
  `Judgeline`, each with `to_json`), `BpmTimeline.to_pgr` for turning
  beats into chart ticks, `trim` and `place_notes`, which fills in note
  floor positions from a line's speed events.
- `pgrchart.pec.solve_pec_events` chains, gap-fills and sorts PEC events.
- `pgrchart.rpe` offers `beat_to_float`, `solve_rpe_speed_events`,
  `solve_rpe_events` and `order_by_father`, which orders lines so that
  each parent comes before its children.

## Resource packaging

- `pgrchart.maxrects.MaxRects` places rectangles into a fixed-size bin
  using the heuristics listed in `PackMode`; `insert` returns
  `(Rect, index)` pairs for the rectangles that fit.
- `pgrchart.skin.pack_skin` reads `<skin_dir>/<name>.png` sprites, grows
  a square atlas from 512×512 until every sprite fits, and writes the
  texture plus gzip compressed `SkinData` JSON.
- `pgrchart.effect.pack_effect` stores `<effect_dir>/<name>.mp3` clips in
  a zip archive under numbered member names and writes gzip compressed
  `EffectData` JSON.
- `pgrchart.configuration.EngineConfiguration` and its parts
  (`ConfigurationOption`, `ConfigurationUI`, `Visibility`, `Animation`,
  `AnimationTween`) produce the engine configuration JSON through their
  `to_json` methods.

Helpers for gzip and deflate (`pgrchart.compression`), base64, SHA-1 and
JSON (`pgrchart.encoding`), zip members (`pgrchart.archive`) and 8-bit
images (`pgrchart.image`) are used by the packers and can be used on
their own.

## What this package does not do

- It installs no command-line tool; everything is used from Python.
- It does not shrink or optimize the event lists of a chart.
- It does not evaluate easing curves: converted events carry an easing
  number, and interpreting it is left to whatever plays the chart.