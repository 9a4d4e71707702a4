import struct
import zlib

import pytest

from sprite_import.discovery import discover_image_files, is_supported_file, read_image_dimensions
from sprite_import.errors import FileReadError
from sprite_import.models import SpriteType


def test_flat_and_fractal_files(sprites_root, png):
    png(sprites_root.joinpath("maps", "tree01.png"), 32, 32)
    png(sprites_root.joinpath("characters", "hero", "hero_walk_UP_02.png"), 64, 48)

    files = discover_image_files(sprites_root)

    tree, hero = files
    assert (tree.name, tree.parent, tree.sprite_type, tree.is_fractal) == ("tree01.png", "maps", SpriteType.MAPS, False)
    assert (tree.width, tree.height) == (32, 32)
    assert (hero.name, hero.parent, hero.sprite_type, hero.is_fractal) == \
           ("hero_walk_UP_02.png", "hero", SpriteType.CHARACTERS, True)
    assert (hero.width, hero.height) == (64, 48)
    assert hero.unity_path == "hero/hero_walk_UP_02"
    assert tree.unity_path == "tree01"


def test_type_folders_are_read_in_order(sprites_root, png):
    for sprite_type in reversed(list(SpriteType)):
        png(sprites_root.joinpath(sprite_type.value, f"{sprite_type.value}01.png"))

    files = discover_image_files(sprites_root)
    assert [f.sprite_type for f in files] == list(SpriteType)


def test_unsupported_and_deeper_files_are_skipped(sprites_root, png):
    png(sprites_root.joinpath("houses", "barn", "barn_01.png"))
    png(sprites_root.joinpath("houses", "barn", "old", "barn_02.png"))
    sprites_root.joinpath("houses", "notes.txt").write_text("not a sprite")
    sprites_root.joinpath("houses", "barn", "barn.psd").write_bytes(b"")
    sprites_root.joinpath("houses", "shed.PNG").write_bytes(b"")

    files = discover_image_files(sprites_root)
    assert [f.name for f in files] == ["barn_01.png"]


def test_files_within_a_folder_are_sorted(sprites_root, png):
    for name in ("c.png", "a.png", "b.png"):
        png(sprites_root.joinpath("decorations", name))
    assert [f.name for f in discover_image_files(sprites_root)] == ["a.png", "b.png", "c.png"]


def test_missing_type_folder_is_fatal(sprites_root):
    sprites_root.joinpath("zepps").rmdir()
    with pytest.raises(FileReadError, match="zepps"):
        discover_image_files(sprites_root)


def test_unreadable_image_is_fatal(sprites_root, png):
    png(sprites_root.joinpath("maps", "good01.png"))
    sprites_root.joinpath("maps", "broken.png").write_bytes(b"not a png")

    with pytest.raises(FileReadError, match="broken.png"):
        discover_image_files(sprites_root)


def test_read_image_dimensions(tmp_path, png):
    assert read_image_dimensions(png(tmp_path.joinpath("wide.png"), 96, 16)) == (96, 16)


def test_png_extension_is_case_sensitive(tmp_path):
    assert is_supported_file(tmp_path.joinpath("a.png"))
    assert not is_supported_file(tmp_path.joinpath("a.PNG"))
    assert not is_supported_file(tmp_path.joinpath("a.png.bak"))


def png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def test_dimensions_come_from_the_header_only(sprites_root):
    # valid 64x64 RGBA header, pixel data is not zlib at all
    header = png_chunk(b"IHDR", struct.pack(">IIBBBBB", 64, 64, 8, 6, 0, 0, 0))
    path = sprites_root.joinpath("maps", "torn01.png")
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + header + png_chunk(b"IDAT", b"garbage-not-zlib") + png_chunk(b"IEND", b""))

    assert read_image_dimensions(path) == (64, 64)
    assert [(f.width, f.height) for f in discover_image_files(sprites_root)] == [(64, 64)]
