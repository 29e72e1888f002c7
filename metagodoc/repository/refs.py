"""Selection of the refs that get indexed for a repository."""

import re
from typing import Iterable

VERSION_TAG = re.compile(r"^v?[0-9]+(?:\.[0-9]+)*$")
# The Go core repository names its release tags "go1", "go1.21.3", ...
CORE_VERSION_TAG = re.compile(r"^go[0-9]+(?:\.[0-9]+)*$")

MAX_VERSION_TAGS = 3


def parse_version(tag: str, is_core: bool = False) -> tuple[int, ...]:
    """Parse a version tag into a comparable tuple.

    Trailing zero segments are dropped so that "1.2" and "v1.2.0" compare
    equal.
    """
    name = tag[2:] if is_core else tag.lstrip("v")
    parts = [int(p) for p in name.split(".")]
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def select_version_tags(
    tags: Iterable[str],
    is_core: bool = False,
    limit: int = MAX_VERSION_TAGS,
) -> list[str]:
    """Return the ``limit`` highest version tags in ascending version order.

    Tags that do not look like versions are ignored. Walking the kept tags in
    ascending order keeps successive checkouts close to each other.
    """
    pattern = CORE_VERSION_TAG if is_core else VERSION_TAG
    versioned = [
        (parse_version(tag, is_core), tag)
        for tag in tags
        if pattern.match(tag)
    ]
    versioned.sort()
    if limit <= 0:
        return []
    return [tag for _, tag in versioned[-limit:]]
