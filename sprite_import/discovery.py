import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from sprite_import.datatypes import ImageFile, PNG_EXTENSION
from sprite_import.errors import FileReadError
from sprite_import.models import SpriteType

logger = logging.getLogger(__name__)


def is_supported_file(path: Path) -> bool:
    # case-sensitive, "hero.PNG" is skipped
    return path.name.endswith(PNG_EXTENSION)


def read_image_dimensions(path: Path) -> tuple[int, int]:
    """Returns (width, height) from the image header, pixel data is never decoded"""
    try:
        with Image.open(path) as img:
            return img.size
    except (OSError, UnidentifiedImageError) as e:
        raise FileReadError(f"unable to read image {path.name}", e) from e


def list_dir(path: Path) -> list[Path]:
    try:
        return sorted(path.iterdir(), key=lambda child: child.name)
    except OSError as e:
        raise FileReadError(f"unable to list directory {path.as_posix()}", e) from e


def discover_image_files(root: Path, sprite_types: tuple[SpriteType, ...] = tuple(SpriteType)) -> list[ImageFile]:
    """Collects every png under root/<sprite type>/ and root/<sprite type>/<sprite>/

    Folders are never read more than two levels below root
    """
    image_files: list[ImageFile] = []

    for sprite_type in sprite_types:
        type_dir = root.joinpath(sprite_type.value)

        for child in list_dir(type_dir):
            if child.is_dir():
                for sub_child in list_dir(child):
                    if sub_child.is_dir() or not is_supported_file(sub_child):
                        continue
                    width, height = read_image_dimensions(sub_child)
                    image_files.append(ImageFile(name=sub_child.name, parent=child.name, sprite_type=sprite_type,
                                                 width=width, height=height, is_fractal=True))
            elif is_supported_file(child):
                width, height = read_image_dimensions(child)
                image_files.append(ImageFile(name=child.name, parent=sprite_type.value, sprite_type=sprite_type,
                                             width=width, height=height, is_fractal=False))
            else:
                logger.debug(f"skipping unsupported file {child.as_posix()}")

    return image_files
