import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from sprite_import.aggregate import TileSizeRule, tile_size_rules_from_rows
from sprite_import.classify import ActionRule, action_rules_from_rows
from sprite_import.datatypes import SpriteInfo
from sprite_import.errors import ConfigError, DatabaseError, NotFoundError
from sprite_import.metadata import MetadataResolver
from sprite_import.models import Base, SpriteAction, SpriteMegatileSize, SpriteSliceMeta, Sprite, SpriteSlice
from sprite_import.settings import DEFAULT_FRAME_SECONDS, make_session_factory

logger = logging.getLogger(__name__)


@contextmanager
def database_errors(label: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise DatabaseError(label, e) from e


def open_database(uri: str) -> sessionmaker:
    try:
        return make_session_factory(uri)
    except (SQLAlchemyError, ImportError) as e:
        raise DatabaseError("unable to open database", e) from e


def create_schema(session_factory: sessionmaker):
    with database_errors("unable to create tables"):
        Base.metadata.create_all(session_factory.kw["bind"])


def load_action_rules(session_factory: sessionmaker) -> list[ActionRule]:
    with database_errors("issue getting sprite actions"), session_factory() as session:
        rows = session.query(SpriteAction).order_by(SpriteAction.id).all()
        return action_rules_from_rows(rows)


def load_tile_size_rules(session_factory: sessionmaker) -> list[TileSizeRule]:
    with database_errors("unable to load dimensions"), session_factory() as session:
        rows = session.query(SpriteMegatileSize).order_by(SpriteMegatileSize.sprite_name).all()
        return tile_size_rules_from_rows(rows)


def load_metadata_resolver(session_factory: sessionmaker,
                           default_frame_seconds: float = DEFAULT_FRAME_SECONDS) -> MetadataResolver:
    with database_errors("issue getting sprite slice meta"), session_factory() as session:
        rows = session.query(SpriteSliceMeta).all()
        return MetadataResolver.from_rows(rows, default_frame_seconds)


def insert_sprites(session_factory: sessionmaker, sprites: list[SpriteInfo]):
    """Inserts one sprite row per SpriteInfo

    Each row is committed on its own. A failure stops the batch and rows already
    committed stay in the table.
    """
    with database_errors("problem inserting sprites"), session_factory() as session:
        for sprite in sprites:
            session.add(sprite.to_row())
            session.commit()


def load_sprite_ids(session_factory: sessionmaker) -> dict[str, int]:
    """Maps sprite name to id. When names repeat only the lowest id is kept"""
    with database_errors("problem reading sprite ids"), session_factory() as session:
        rows = session.query(Sprite.id, Sprite.name).order_by(Sprite.id).all()

    if not rows:
        raise NotFoundError("The Sprites have not been saved to the database yet")

    sprite_ids: dict[str, int] = {}
    for sprite_id, sprite_name in rows:
        if sprite_name in sprite_ids:
            logger.debug(f"duplicate sprite name {sprite_name}, keeping id {sprite_ids[sprite_name]}")
            continue
        sprite_ids[sprite_name] = sprite_id
    return sprite_ids


def insert_sprite_slices(session_factory: sessionmaker, sprite_slices: list[SpriteSlice]):
    with database_errors("problem inserting sprite slices"), session_factory() as session:
        for sprite_slice in sprite_slices:
            session.add(sprite_slice)
            session.commit()


SEED_SECTIONS = ("sprite_action", "sprite_megatile_size", "sprite_slice_meta")


def seed_rows(data: dict, section: str) -> list[dict]:
    rows = data.get(section, [])
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise ConfigError(f"{section} must be an array of tables, like [[{section}]]", type(rows).__name__)
    return rows


def seed_lookup_tables(session_factory: sessionmaker, data: dict):
    """Adds sprite_action, sprite_megatile_size and sprite_slice_meta rows from parsed toml data"""
    actions, sizes, metas = (seed_rows(data, section) for section in SEED_SECTIONS)

    try:
        with database_errors("problem seeding lookup tables"), session_factory() as session:
            for action in actions:
                session.add(SpriteAction(id=action["id"], name=action["name"]))

            for size in sizes:
                session.add(SpriteMegatileSize(sprite_name=size["sprite_name"],
                                               tiled_width=size["tiled_width"],
                                               tiled_height=size["tiled_height"]))

            for meta in metas:
                session.add(SpriteSliceMeta(match_text=meta["match_text"],
                                            start_frame=meta.get("start_frame", 0),
                                            end_frame=meta.get("end_frame", 0),
                                            frame_seconds=meta.get("frame_seconds", DEFAULT_FRAME_SECONDS),
                                            event_id=meta.get("event_id", 0),
                                            event_json=meta.get("event_json", "")))
            session.commit()
    except KeyError as e:
        raise ConfigError("seed row is missing a field", e) from e
