class SpriteImportError(Exception):
    """Base for every error that aborts an import run"""

    def __init__(self, label: str, detail: object = None):
        super().__init__(label if detail is None else f"{label}: {detail}")
        self.label = label
        self.detail = detail


class FileReadError(SpriteImportError):
    """A sprite directory could not be listed or an image header could not be read"""


class DatabaseError(SpriteImportError):
    """Connecting to, querying or inserting into the sprite database failed"""


class NotFoundError(SpriteImportError):
    """Data the pipeline depends on is missing from the database"""


class ConfigError(SpriteImportError):
    """A settings or seed file is malformed"""
