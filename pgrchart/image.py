"""In-memory 8-bit images with PNG reading and writing."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from PIL import Image as PILImage

_MODES = {1: "L", 2: "LA", 3: "RGB", 4: "RGBA"}


@dataclass
class Image:
    """Row-major 8-bit pixels with 1 (gray), 2 (gray+alpha), 3 (RGB) or 4 (RGBA) channels."""

    width: int
    height: int
    channels: int = 4
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        if self.channels not in _MODES:
            raise ValueError(f"unsupported channel count {self.channels}")
        if self.width < 0 or self.height < 0:
            raise ValueError("image size must not be negative")
        size = self.width * self.height * self.channels
        self.data = bytearray(self.data) if self.data else bytearray(size)
        if len(self.data) != size:
            raise ValueError(f"expected {size} bytes of pixel data, got {len(self.data)}")

    @property
    def mode(self) -> str:
        return _MODES[self.channels]

    def pixel(self, x: int, y: int) -> tuple[int, ...]:
        """Channel values of the pixel at (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        offset = (y * self.width + x) * self.channels
        return tuple(self.data[offset : offset + self.channels])

    def to_pil(self) -> PILImage.Image:
        return PILImage.frombytes(self.mode, (self.width, self.height), bytes(self.data))

    def paste(self, source: Image, x: int, y: int) -> None:
        """Copy ``source`` with its top-left corner at (x, y); sources without alpha become opaque."""
        if x < 0 or y < 0 or x + source.width > self.width or y + source.height > self.height:
            raise ValueError(
                f"{source.width}x{source.height} image at ({x}, {y}) "
                f"does not fit in {self.width}x{self.height} image"
            )
        canvas = self.to_pil()
        canvas.paste(source.to_pil().convert("RGBA"), (x, y))
        self.data[:] = canvas.tobytes()


def blank_image(width: int, height: int) -> Image:
    """A fully transparent black RGBA image."""
    return Image(width, height, 4)


def _target_mode(picture: PILImage.Image) -> str:
    transparent = "transparency" in picture.info
    if picture.mode in ("P", "PA"):
        return "RGBA" if transparent or picture.mode == "PA" else "RGB"
    if picture.mode in ("L", "RGB"):
        return "RGBA" if transparent else picture.mode
    if picture.mode in ("1", "I", "I;16", "I;16B"):
        return "L"
    if picture.mode == "LA":
        return "LA"
    return "RGBA"


def read_image(path: str | os.PathLike) -> Image:
    """Load an image file, expanding palettes and transparency to full channels."""
    with PILImage.open(path) as picture:
        picture.load()
        converted = picture.convert(_target_mode(picture))
    channels = len(converted.getbands())
    return Image(converted.width, converted.height, channels, bytearray(converted.tobytes()))


def write_image(path: str | os.PathLike, image: Image) -> None:
    """Save ``image`` as an 8-bit RGBA PNG."""
    image.to_pil().convert("RGBA").save(path, format="PNG")