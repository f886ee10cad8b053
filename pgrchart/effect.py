"""Effect data and packing of effect audio clips into an archive."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .archive import write_into_zip
from .compression import compress_gzip
from .encoding import json_encode


@dataclass
class EffectData:
    """Named effect clips and the archive members holding their audio."""

    clips: list[tuple[str, str]] = field(default_factory=list)

    def to_json(self) -> dict:
        return {"clips": [{"name": name, "filename": filename} for name, filename in self.clips]}


def pack_effect(
    clip_names: Iterable[str],
    effect_dir: str | os.PathLike,
    audio_zip_path: str | os.PathLike,
    data_path: str | os.PathLike,
) -> EffectData:
    """Store ``<effect_dir>/<name>.mp3`` clips as numbered archive members and write gzipped effect data."""
    print("Packing Effect Audios...")
    effect_dir = Path(effect_dir)
    data = EffectData()
    for index, name in enumerate(clip_names):
        filename = str(index)
        data.clips.append((name, filename))
        write_into_zip(audio_zip_path, filename, (effect_dir / f"{name}.mp3").read_bytes())

    print("Writing Effect Data...")
    Path(data_path).write_bytes(compress_gzip(json_encode(data.to_json())))
    return data