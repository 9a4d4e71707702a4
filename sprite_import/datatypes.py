from __future__ import annotations
from dataclasses import dataclass

from sprite_import.models import Direction, SpriteType, Sprite

PNG_EXTENSION = ".png"

# action assigned to files no sprite_action name matches. Needs manual triage
MISSING_ACTION_ID = 0
MISSING_ACTION_NAME = "MISSING"


@dataclass
class ImageFile:
    """A png found during discovery

    Fractal files live one folder deeper, in a folder named after their sprite.
    action/direction/frame are filled in by classification
    """
    name: str
    parent: str
    sprite_type: SpriteType
    width: int
    height: int
    is_fractal: bool = False

    action_id: int = MISSING_ACTION_ID
    action_name: str = MISSING_ACTION_NAME
    direction: Direction = Direction.DOWN
    frame_number: int = 0

    @property
    def stem(self) -> str:
        return self.name[:-len(PNG_EXTENSION)]

    @property
    def sprite_name(self) -> str:
        if self.is_fractal:
            return self.parent
        return self.stem

    @property
    def unity_path(self) -> str:
        if self.is_fractal:
            return f"{self.parent}/{self.stem}"
        return self.stem


@dataclass
class SpriteInfo:
    """Sprite being assembled from the image files sharing its name"""
    name: str
    sprite_type: SpriteType
    image_count: int
    tiled_width: int
    tiled_height: int
    # sprites are assumed square, so only the width of the first file is kept
    pixels: int
    direction_support: int = 0

    has_up: bool = False
    has_right: bool = False
    has_down: bool = False
    has_left: bool = False

    def add_direction(self, direction: Direction):
        if direction is Direction.UP:
            self.has_up = True
        elif direction is Direction.RIGHT:
            self.has_right = True
        elif direction is Direction.DOWN:
            self.has_down = True
        elif direction is Direction.LEFT:
            self.has_left = True
        self.direction_support = sum((self.has_up, self.has_right, self.has_down, self.has_left))

    def to_row(self) -> Sprite:
        return Sprite(name=self.name,
                      type=self.sprite_type.value,
                      image_count=self.image_count,
                      tiled_width=self.tiled_width,
                      tiled_height=self.tiled_height,
                      pixels=self.pixels,
                      direction_support=self.direction_support)


@dataclass(frozen=True)
class SpriteSliceMetadata:
    frame_seconds: float
    event_id: int = 0
    event_json: str = ""
