from pathlib import Path

import cv2
import numpy as np
import pytest

from sprite_import import persistence
from sprite_import.models import SpriteType
from sprite_import.settings import make_session_factory


@pytest.fixture
def session_factory(tmp_path):
    factory = make_session_factory(f"sqlite:///{tmp_path.joinpath('sprites.db3').as_posix()}")
    persistence.create_schema(factory)
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture
def seeded_session_factory(session_factory):
    persistence.seed_lookup_tables(session_factory, {
        "sprite_action": [
            {"id": 1, "name": "walk"},
            {"id": 2, "name": "idle"},
        ],
        "sprite_megatile_size": [
            {"sprite_name": "house", "tiled_width": 2, "tiled_height": 3},
        ],
        "sprite_slice_meta": [
            {"match_text": "hero/.*", "start_frame": 0, "end_frame": 0, "frame_seconds": 0.12},
            {"match_text": "hero/hero_walk", "start_frame": 3, "end_frame": 5, "frame_seconds": 0.2,
             "event_id": 7, "event_json": '{"sound": "step"}'},
        ],
    })
    return session_factory


def write_png(path: Path, width: int = 32, height: int = 32) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    img = np.zeros((height, width, 4), dtype=np.uint8)
    assert cv2.imwrite(path.as_posix(), img)
    return path


@pytest.fixture
def png():
    return write_png


@pytest.fixture
def sprites_root(tmp_path) -> Path:
    root = tmp_path.joinpath("sprites")
    for sprite_type in SpriteType:
        root.joinpath(sprite_type.value).mkdir(parents=True)
    return root
