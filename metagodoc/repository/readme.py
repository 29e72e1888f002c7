"""README detection."""

import re
from pathlib import Path

from .snapshot import About

README = re.compile(r"^readme(?:\.(.+))?$", re.IGNORECASE)
MARKDOWN_EXTENSIONS = {"md", "markdown"}


def find_readme(directory: Path | str) -> About | None:
    """Return the README at the top of ``directory``, if there is one."""
    for entry in sorted(Path(directory).iterdir()):
        match = README.match(entry.name)
        # Symlinks can point outside the clone.
        if match is None or entry.is_symlink() or not entry.is_file():
            continue

        extension = (match.group(1) or "").lower()
        content_type = "text/markdown" if extension in MARKDOWN_EXTENSIONS else "text/plain"
        return About(
            content=entry.read_text(encoding="utf-8", errors="replace"),
            content_type=content_type,
        )
    return None
