import json

import pytest

from pgrchart.compression import decompress_gzip
from pgrchart.image import Image, read_image, write_image
from pgrchart.skin import SkinData, SkinSprite, pack_skin


def _sprite(width, height, seed):
    data = bytearray((seed + i) % 256 for i in range(width * height * 3))
    return Image(width, height, 3, data)


def test_sprite_to_json_has_identity_transform():
    result = SkinSprite("#NOTE_HEAD_RED", 1, 2, 3, 4).to_json()
    assert result["name"] == "#NOTE_HEAD_RED"
    assert (result["x"], result["y"], result["w"], result["h"]) == (1, 2, 3, 4)
    keys = ["x1", "x2", "x3", "x4", "y1", "y2", "y3", "y4"]
    assert result["transform"] == {key: {key: 1} for key in keys}


def test_skin_data_to_json():
    data = SkinData(64, 32, False, [SkinSprite("a"), SkinSprite("b")])
    result = data.to_json()
    assert (result["width"], result["height"], result["interpolation"]) == (64, 32, False)
    assert [sprite["name"] for sprite in result["sprites"]] == ["a", "b"]


def test_pack_skin_places_every_sprite(tmp_path):
    images = {"a": _sprite(3, 2, 0), "b": _sprite(5, 4, 100), "c": _sprite(1, 1, 200)}
    for name, image in images.items():
        write_image(tmp_path / f"{name}.png", image)
    texture_path = tmp_path / "texture.png"
    data_path = tmp_path / "data"
    data = pack_skin(list(images), tmp_path, texture_path, data_path)

    assert (data.width, data.height) == (512, 512)
    texture = read_image(texture_path)
    assert (texture.width, texture.height) == (512, 512)
    for sprite in data.sprites:
        source = images[sprite.name]
        assert (sprite.w, sprite.h) == (source.width, source.height)
        for y in range(source.height):
            for x in range(source.width):
                assert texture.pixel(sprite.x + x, sprite.y + y) == source.pixel(x, y) + (255,)

    boxes = [(s.x - 1, s.y - 1, s.x + s.w + 1, s.y + s.h + 1) for s in data.sprites]
    for i, first in enumerate(boxes):
        for second in boxes[i + 1 :]:
            overlap = first[0] < second[2] and second[0] < first[2] and first[1] < second[3] and second[1] < first[3]
            assert not overlap

    written = json.loads(decompress_gzip(data_path.read_bytes()).decode("utf-8"))
    assert written == data.to_json()


def test_pack_skin_grows_texture(tmp_path):
    write_image(tmp_path / "wide.png", _sprite(600, 1, 0))
    data = pack_skin(["wide"], tmp_path, tmp_path / "t.png", tmp_path / "d")
    assert data.width == data.height == 1024
    assert (data.sprites[0].x, data.sprites[0].y) == (1, 1)


def test_pack_skin_missing_sprite(tmp_path):
    with pytest.raises(FileNotFoundError, match="Unknown Skin Sprite"):
        pack_skin(["missing"], tmp_path, tmp_path / "t.png", tmp_path / "d")