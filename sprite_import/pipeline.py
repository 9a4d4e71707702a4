import logging
import time
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.orm import sessionmaker

from sprite_import import persistence
from sprite_import.aggregate import aggregate_sprites
from sprite_import.classify import classify_files
from sprite_import.datatypes import ImageFile, SpriteInfo
from sprite_import.discovery import discover_image_files
from sprite_import.errors import NotFoundError
from sprite_import.metadata import MetadataResolver
from sprite_import.models import SpriteSlice
from sprite_import.settings import DEFAULT_FRAME_SECONDS

logger = logging.getLogger(__name__)


def read_version() -> str:
    with open(Path(__file__).parent.joinpath("VERSION")) as f:
        return f.read().strip()


@dataclass
class ScanResult:
    image_files: list[ImageFile]
    sprites: list[SpriteInfo]


@dataclass
class ImportResult:
    image_files: list[ImageFile]
    sprites: list[SpriteInfo]
    sprite_slices: list[SpriteSlice]


def build_sprite_slices(image_files: list[ImageFile], sprite_ids: dict[str, int],
                        resolver: MetadataResolver) -> list[SpriteSlice]:
    sprite_slices = []
    for image_file in image_files:
        try:
            sprite_id = sprite_ids[image_file.sprite_name]
        except KeyError:
            raise NotFoundError(f"no saved sprite named {image_file.sprite_name}", image_file.unity_path)

        meta = resolver.resolve(image_file.unity_path, image_file.frame_number)
        sprite_slices.append(SpriteSlice(sprite_id=sprite_id,
                                         frame_number=image_file.frame_number,
                                         direction=image_file.direction.value,
                                         sprite_action_id=image_file.action_id,
                                         frame_seconds=meta.frame_seconds,
                                         event_id=meta.event_id,
                                         event_json=meta.event_json,
                                         unity_path=image_file.unity_path))
    return sprite_slices


def scan_sprites(root: Path, session_factory: sessionmaker) -> ScanResult:
    """Reads and classifies every sprite under root without writing to the database"""
    start = time.time()
    image_files = discover_image_files(root)
    classify_files(image_files, persistence.load_action_rules(session_factory))
    sprites = aggregate_sprites(image_files, persistence.load_tile_size_rules(session_factory))
    end = time.time()
    logger.info(f"reading {len(image_files)} sprite files took {end - start} seconds")
    return ScanResult(image_files=image_files, sprites=sprites)


def run_import(root: Path, session_factory: sessionmaker,
               default_frame_seconds: float = DEFAULT_FRAME_SECONDS) -> ImportResult:
    """Inserts a sprite row per sprite and a sprite_slice row per file found under root

    Nothing is deduplicated, running twice inserts everything twice.
    """
    scan = scan_sprites(root, session_factory)

    logger.info(f"Will insert {len(scan.sprites)} new sprites")
    persistence.insert_sprites(session_factory, scan.sprites)

    resolver = persistence.load_metadata_resolver(session_factory, default_frame_seconds)
    sprite_ids = persistence.load_sprite_ids(session_factory)
    sprite_slices = build_sprite_slices(scan.image_files, sprite_ids, resolver)

    logger.info(f"Will insert {len(sprite_slices)} new sprite_slices")
    persistence.insert_sprite_slices(session_factory, sprite_slices)

    return ImportResult(image_files=scan.image_files, sprites=scan.sprites, sprite_slices=sprite_slices)
