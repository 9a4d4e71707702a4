from __future__ import annotations
import enum

from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy import ForeignKey, String, Integer, Float, Column
from sqlalchemy.engine import Engine
from sqlalchemy import event

Base = declarative_base()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


class SpriteType(enum.Enum):
    """Top level folder a sprite lives in. Declaration order is the scan order"""
    MAPS = "maps"
    HOUSES = "houses"
    ZEPPS = "zepps"
    CHARACTERS = "characters"
    DECORATIONS = "decorations"


class Direction(enum.Enum):
    """Facing encoded in a sprite filename. Declaration order is the match order"""
    UP = "UP"
    RIGHT = "RIGHT"
    DOWN = "DOWN"
    LEFT = "LEFT"


class SpriteMegatileSize(Base):
    """How many map tiles a sprite covers"""
    __tablename__ = "sprite_megatile_size"
    sprite_name = Column(String, primary_key=True, nullable=False)
    tiled_width = Column(Integer, nullable=False)
    tiled_height = Column(Integer, nullable=False)

    def __repr__(self):
        return f"{SpriteMegatileSize.__name__}({self.sprite_name=},{self.tiled_width=},{self.tiled_height=})"


class SpriteAction(Base):
    __tablename__ = "sprite_action"
    id = Column("sprite_action_id", Integer, primary_key=True, nullable=False)
    name = Column("sprite_action_name", String, nullable=False)

    def __repr__(self):
        return f"{SpriteAction.__name__}({self.id=},{self.name=})"


class SpriteSliceMeta(Base):
    """Timing and event annotation for every slice whose unity path matches match_text

    start_frame == end_frame means the rule applies to every frame
    """
    __tablename__ = "sprite_slice_meta"
    match_text = Column(String, primary_key=True, nullable=False)
    start_frame = Column(Integer, nullable=False, default=0)
    end_frame = Column(Integer, nullable=False, default=0)
    frame_seconds = Column(Float, nullable=False)
    event_id = Column(Integer, nullable=False, default=0)
    event_json = Column(String, nullable=False, default="")

    def __repr__(self):
        return f"{SpriteSliceMeta.__name__}({self.match_text=},{self.start_frame=},{self.end_frame=})"


class Sprite(Base):
    """One logical sprite built from one or more image files

    sprite_name is not unique, every import run inserts a fresh row
    """
    __tablename__ = "sprite"
    id = Column("sprite_id", Integer, primary_key=True, nullable=False)
    name = Column("sprite_name", String, nullable=False, index=True)
    type = Column(String, nullable=False)
    image_count = Column(Integer, nullable=False)
    tiled_width = Column(Integer, nullable=False)
    tiled_height = Column(Integer, nullable=False)
    pixels = Column(Integer, nullable=False)
    direction_support = Column(Integer, nullable=False)

    slices = relationship("SpriteSlice", back_populates="sprite", viewonly=True)

    def __repr__(self):
        return f"{self.__tablename__}(id={self.id},name={self.name},type={self.type},image_count={self.image_count})"


class SpriteSlice(Base):
    """A single frame/direction variant of a sprite, one per image file"""
    __tablename__ = "sprite_slice"
    id = Column("sprite_slice_id", Integer, primary_key=True, nullable=False)
    sprite_id = Column(Integer, ForeignKey("sprite.sprite_id"), nullable=False, index=True)
    frame_number = Column(Integer, nullable=False)
    direction = Column(String, nullable=False)
    sprite_action_id = Column(Integer, nullable=False)
    frame_seconds = Column(Float, nullable=False)
    event_id = Column(Integer, nullable=False)
    event_json = Column(String, nullable=False)
    unity_path = Column(String, nullable=False)

    sprite = relationship("Sprite", back_populates="slices", viewonly=True)

    def __repr__(self):
        return f"{SpriteSlice.__name__}({self.sprite_id=},{self.unity_path=},{self.frame_number=},{self.direction=})"
