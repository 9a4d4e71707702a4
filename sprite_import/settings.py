from __future__ import annotations
import configparser
from dataclasses import dataclass, field
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from sprite_import.errors import ConfigError

DEFAULT_FRAME_SECONDS = 0.08


@dataclass()
class DatabaseConfig:
    uri: str = "sqlite:///sprites.db3"


DATABASE_CONFIG = DatabaseConfig()


def make_session_factory(uri: str = DATABASE_CONFIG.uri, echo: bool = False) -> sessionmaker:
    engine = create_engine(uri, echo=echo)
    return sessionmaker(engine, expire_on_commit=False)


@dataclass
class Config:
    sprites_root: Path = field(default_factory=lambda: Path("assets/resources/sprites"))
    database_uri: str = DATABASE_CONFIG.uri
    debug: bool = False

    # used for a slice when no sprite_slice_meta rule applies
    default_frame_seconds: float = DEFAULT_FRAME_SECONDS

    # empty disables error reporting
    sentry_dsn: str = ""

    def save_config(self, path: Path):
        ini = configparser.ConfigParser()

        ini["GENERAL"] = {
            "sprites_root": self.sprites_root.as_posix(),
            "debug": self.debug,
            "default_frame_seconds": self.default_frame_seconds,
        }

        ini["DATABASE"] = {
            "uri": self.database_uri,
        }

        ini["REPORTING"] = {
            "sentry_dsn": self.sentry_dsn,
        }

        with open(path, "w+", encoding="utf8") as f:
            ini.write(f)

    @classmethod
    def from_ini(cls, path: Path) -> Config:
        default_config = Config()
        ini = configparser.ConfigParser()
        ini.read(path.as_posix(), encoding="utf8")

        if ini.has_section("GENERAL"):
            general = ini["GENERAL"]
            default_config.sprites_root = Path(general.get("sprites_root", fallback=default_config.sprites_root.as_posix()))
            default_config.debug = general.getboolean("debug", fallback=default_config.debug)
            default_config.default_frame_seconds = general.getfloat("default_frame_seconds", fallback=default_config.default_frame_seconds)

        if ini.has_section("DATABASE"):
            default_config.database_uri = ini["DATABASE"].get("uri", fallback=default_config.database_uri)

        if ini.has_section("REPORTING"):
            default_config.sentry_dsn = ini["REPORTING"].get("sentry_dsn", fallback=default_config.sentry_dsn)

        return default_config


def load_config(path: Path) -> Config:
    if path.exists():
        try:
            return Config.from_ini(path)
        except (configparser.Error, ValueError) as e:
            raise ConfigError(f"invalid config file {path.as_posix()}", e) from e
    return Config()
