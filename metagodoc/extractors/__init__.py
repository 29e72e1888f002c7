"""Package documentation extractors."""

from .directory import Directory, File
from .go import ExtractorError, GoDocExtractor, PackageNotFound

__all__ = [
    "Directory",
    "File",
    "ExtractorError",
    "GoDocExtractor",
    "PackageNotFound",
]
