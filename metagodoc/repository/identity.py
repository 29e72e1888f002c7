"""Repository identity."""

import re

_SCHEME = re.compile(r"^https?://")


def repository_id(url: str) -> str:
    """Return the unique ID for a repository: its web URL without the scheme.

    For "https://github.com/stretchr/testify" this is
    "github.com/stretchr/testify". Package import paths are built on top of it.
    """
    return _SCHEME.sub("", url)
