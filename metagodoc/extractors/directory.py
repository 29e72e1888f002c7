"""In-memory view of one source directory, as handed to the extractor."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class File:
    """A source file."""
    # File name with no directory.
    name: str
    data: str
    # Location of the file on the hosting service's website.
    browse_url: str


@dataclass
class Directory:
    path: Path
    import_path: str
    files: list[File] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path | str, import_path: str, browse_root: str) -> "Directory":
        """Read every documentable Go file of ``path``, ignoring symlinks."""
        path = Path(path)
        files = []
        for entry in sorted(path.iterdir()):
            if entry.is_symlink() or not entry.is_file() or not is_doc_file(entry.name):
                continue
            files.append(File(
                name=entry.name,
                data=entry.read_text(encoding="utf-8", errors="replace"),
                browse_url=f"{browse_root}/{entry.name}",
            ))
        return cls(path=path, import_path=import_path, files=files)


def is_doc_file(name: str) -> bool:
    """Go ignores files whose names start with "_" or "."."""
    return name.endswith(".go") and not name.startswith(("_", "."))
