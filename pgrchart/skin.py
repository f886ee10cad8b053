"""Skin data and packing of sprite images into one texture atlas."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from .archive import file_exists
from .compression import compress_gzip
from .encoding import json_encode
from .image import Image, blank_image, read_image, write_image
from .maxrects import MaxRects, PackMode, Rect, RectSize

INITIAL_TEXTURE_SIZE = 512
_TRANSFORM_KEYS = ("x1", "x2", "x3", "x4", "y1", "y2", "y3", "y4")


@dataclass
class SkinSprite:
    """Placement of one named sprite on the texture."""

    name: str
    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0

    def to_json(self) -> dict:
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "transform": {key: {key: 1} for key in _TRANSFORM_KEYS},
        }


@dataclass
class SkinData:
    """Texture size and the sprites laid out on it."""

    width: int = 0
    height: int = 0
    interpolation: bool = False
    sprites: list[SkinSprite] = field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "interpolation": self.interpolation,
            "sprites": [sprite.to_json() for sprite in self.sprites],
        }


def _pack(images: Sequence[Image]) -> tuple[int, list[tuple[Rect, int]]]:
    sizes = [RectSize(image.width + 2, image.height + 2) for image in images]
    side = INITIAL_TEXTURE_SIZE
    while True:
        placed = MaxRects(side, side, rotate=False).insert(PackMode.SHORT_SIDE, sizes)
        if len(placed) == len(sizes):
            return side, placed
        side *= 2


def pack_skin(
    sprite_names: Iterable[str],
    skin_dir: str | os.PathLike,
    texture_path: str | os.PathLike,
    data_path: str | os.PathLike,
) -> SkinData:
    """Pack ``<skin_dir>/<name>.png`` sprites into a texture and write gzipped skin data."""
    print("Reading Skin Sprites...")
    skin_dir = Path(skin_dir)
    images: list[Image] = []
    data = SkinData()
    for name in sprite_names:
        path = skin_dir / f"{name}.png"
        if not file_exists(path):
            raise FileNotFoundError(f'Unknown Skin Sprite "{path}"')
        images.append(read_image(path))
        data.sprites.append(SkinSprite(name))

    print("Packing Skin Texture...")
    side, placed = _pack(images)

    print("Writing Skin Texture...")
    texture = blank_image(side, side)
    data.width = data.height = side
    for rect, index in placed:
        sprite = data.sprites[index]
        sprite.x, sprite.y = rect.x + 1, rect.y + 1
        sprite.w, sprite.h = rect.width - 2, rect.height - 2
        texture.paste(images[index], sprite.x, sprite.y)
    write_image(texture_path, texture)

    print("Writing Skin Data...")
    Path(data_path).write_bytes(compress_gzip(json_encode(data.to_json())))
    return data