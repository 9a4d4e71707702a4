import re
from dataclasses import dataclass
from typing import Iterable

from sprite_import.classify import compile_rule_pattern
from sprite_import.datatypes import ImageFile, SpriteInfo
from sprite_import.models import SpriteMegatileSize

DEFAULT_TILED_SIZE = (1, 1)


@dataclass(frozen=True)
class TileSizeRule:
    pattern: re.Pattern
    tiled_width: int
    tiled_height: int


def tile_size_rules_from_rows(rows: Iterable[SpriteMegatileSize]) -> list[TileSizeRule]:
    rules = []
    for row in rows:
        # the table name has to end on a word boundary, "house" fits "big_house" but not "house_2"
        if pattern := compile_rule_pattern(row.sprite_name + r"\b", re.ASCII):
            rules.append(TileSizeRule(pattern=pattern, tiled_width=row.tiled_width, tiled_height=row.tiled_height))
    return rules


def match_tiled_dimensions(sprite_name: str, tile_size_rules: list[TileSizeRule]) -> tuple[int, int]:
    for rule in tile_size_rules:
        if rule.pattern.search(sprite_name):
            return rule.tiled_width, rule.tiled_height
    return DEFAULT_TILED_SIZE


def aggregate_sprites(image_files: Iterable[ImageFile], tile_size_rules: list[TileSizeRule]) -> list[SpriteInfo]:
    """Groups classified image files into one SpriteInfo per sprite name

    The first file of a sprite fixes its type, pixels and tiled size.
    Direction flags are only collected from the files after it
    """
    sprites: dict[str, SpriteInfo] = {}

    for image_file in image_files:
        sprite_name = image_file.sprite_name

        if sprite := sprites.get(sprite_name):
            sprite.add_direction(image_file.direction)
            sprite.image_count += 1
            continue

        tiled_width, tiled_height = match_tiled_dimensions(sprite_name, tile_size_rules)
        sprites[sprite_name] = SpriteInfo(name=sprite_name,
                                          sprite_type=image_file.sprite_type,
                                          image_count=1,
                                          tiled_width=tiled_width,
                                          tiled_height=tiled_height,
                                          pixels=image_file.width)

    return list(sprites.values())
