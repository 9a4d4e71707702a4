import logging
import sys
import traceback
from pathlib import Path
from typing import NoReturn, Optional

import click
import sentry_sdk
import toml

from sprite_import import persistence
from sprite_import.datatypes import MISSING_ACTION_ID
from sprite_import.errors import SpriteImportError
from sprite_import.pipeline import read_version, run_import, scan_sprites
from sprite_import.settings import Config, load_config

DEFAULT_CONFIG_PATH = Path("sprite_import.ini")
LOG_HANDLER_NAME = "sprite_import"


def setup_logging(debug: bool):
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == LOG_HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(LOG_HANDLER_NAME)
    level = logging.DEBUG if debug else logging.INFO
    root.setLevel(level)
    handler.setLevel(level)
    formatter = logging.Formatter('%(levelname)s %(relativeCreated)s: %(message)s')
    handler.setFormatter(formatter)
    root.addHandler(handler)


def before_send(event, hint):
    if "exc_info" in hint:
        event.setdefault("extra", {})["exception"] = ["".join(
            traceback.format_exception(*hint["exc_info"])
        )]
    return event


def fatal(label: str, detail: object, error: Optional[BaseException] = None) -> NoReturn:
    if error is not None:
        sentry_sdk.capture_exception(error)
    click.echo(f"FATAL:  {label}", err=True)
    click.echo(str(detail), err=True)
    sys.exit(1)


def fatal_import_error(error: SpriteImportError) -> NoReturn:
    fatal(error.label, error.detail if error.detail is not None else error, error)


def prepare(config_path: Path, root: Optional[Path], db: Optional[str], debug: bool) -> Config:
    try:
        config = load_config(config_path)
    except SpriteImportError as e:
        fatal_import_error(e)

    if root is not None:
        config.sprites_root = root
    if db is not None:
        config.database_uri = db
    config.debug = config.debug or debug

    setup_logging(config.debug)
    if config.sentry_dsn:
        sentry_sdk.init(config.sentry_dsn, before_send=before_send)
    return config


config_option = click.option("--config", "config_path", type=click.Path(path_type=Path),
                             default=DEFAULT_CONFIG_PATH, show_default=True, help="ini file with import settings")
root_option = click.option("--root", type=click.Path(path_type=Path), default=None,
                           help="folder holding the sprite type folders")
db_option = click.option("--db", default=None, help="SQLAlchemy database uri")
debug_option = click.option("--debug", is_flag=True, default=False)


@click.group()
def enter_cli():
    pass


@enter_cli.command()
@config_option
@root_option
@db_option
@debug_option
def run(config_path: Path, root: Optional[Path], db: Optional[str], debug: bool):
    """Insert every sprite and sprite slice found under the sprites root"""
    config = prepare(config_path, root, db, debug)
    click.echo(f"Regal Arbor Sprite Import v{read_version()}")

    try:
        session_factory = persistence.open_database(config.database_uri)
        run_import(config.sprites_root, session_factory, config.default_frame_seconds)
    except SpriteImportError as e:
        fatal_import_error(e)
    click.echo("done!")


@enter_cli.command()
@config_option
@root_option
@db_option
@debug_option
def scan(config_path: Path, root: Optional[Path], db: Optional[str], debug: bool):
    """Show the sprites an import would create, without writing anything"""
    config = prepare(config_path, root, db, debug)

    try:
        session_factory = persistence.open_database(config.database_uri)
        result = scan_sprites(config.sprites_root, session_factory)
    except SpriteImportError as e:
        fatal_import_error(e)

    for sprite in result.sprites:
        click.echo(f"{sprite.sprite_type.value}/{sprite.name} images={sprite.image_count} "
                   f"tiled={sprite.tiled_width}x{sprite.tiled_height} pixels={sprite.pixels} "
                   f"directions={sprite.direction_support}")

    missing = [image_file for image_file in result.image_files if image_file.action_id == MISSING_ACTION_ID]
    if missing:
        click.echo(f"{len(missing)} files have no sprite action:")
        for image_file in missing:
            click.echo(f"  {image_file.sprite_type.value}/{image_file.unity_path}")


@enter_cli.command("create-db")
@config_option
@db_option
def create_db(config_path: Path, db: Optional[str]):
    """Create any missing sprite tables"""
    config = prepare(config_path, None, db, False)
    try:
        persistence.create_schema(persistence.open_database(config.database_uri))
    except SpriteImportError as e:
        fatal_import_error(e)
    click.echo(f"tables ready in {config.database_uri}")


@enter_cli.command()
@click.argument("seed_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@db_option
def seed(seed_file: Path, config_path: Path, db: Optional[str]):
    """Fill the lookup tables from a toml file"""
    config = prepare(config_path, None, db, False)
    try:
        data = toml.load(seed_file)
        persistence.seed_lookup_tables(persistence.open_database(config.database_uri), data)
    except toml.TomlDecodeError as e:
        fatal(f"invalid seed file {seed_file.as_posix()}", e, e)
    except SpriteImportError as e:
        fatal_import_error(e)
    click.echo(f"seeded lookup tables from {seed_file.name}")


if __name__ == "__main__":
    enter_cli()
