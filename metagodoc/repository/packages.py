"""Discovery of Go packages in a checked-out tree."""

import logging
import os
from pathlib import Path
from typing import Iterator

from ..extractors.directory import Directory, is_doc_file
from ..extractors.go import GoDocExtractor, PackageNotFound
from .snapshot import Package

logger = logging.getLogger(__name__)

PRUNED_DIRS = {".git", "internal", "vendor"}
# The Go core keeps Go code for its own tests in testdata directories.
CORE_PRUNED_DIRS = PRUNED_DIRS | {"testdata"}


def find_package_dirs(root: Path | str, is_core: bool = False) -> Iterator[Path]:
    """Yield every directory under ``root`` that holds Go source, parents first.

    For the Go core only the ``src`` subtree contains packages.
    """
    root = Path(root)
    start = root / "src" if is_core else root
    if not start.is_dir():
        return
    pruned = CORE_PRUNED_DIRS if is_core else PRUNED_DIRS

    for dirpath, dirnames, filenames in os.walk(start):
        dirnames[:] = sorted(d for d in dirnames if d not in pruned)
        # One Go file is enough to make this a package directory.
        if any(is_doc_file(name) for name in filenames):
            yield Path(dirpath)


def import_path_for(root: Path, directory: Path, repo_id: str, is_core: bool = False) -> str:
    rel = directory.relative_to(root).as_posix()
    if is_core:
        # Core import paths are relative to src/ ("fmt", "net/http").
        rel = rel.removeprefix("src").lstrip("/")
        return rel.removeprefix("pkg/")
    return repo_id if rel == "." else f"{repo_id}/{rel}"


def collect_packages(
    root: Path | str,
    repo_id: str,
    browse_base: str,
    extractor: GoDocExtractor,
    is_core: bool = False,
) -> list[Package]:
    """Extract one package per package directory of the current checkout.

    ``browse_base`` is the web URL of the tree for the checked-out ref; the
    directory's path inside the repository is appended to it.
    """
    root = Path(root)
    packages = []
    for directory in find_package_dirs(root, is_core):
        import_path = import_path_for(root, directory, repo_id, is_core)
        rel = directory.relative_to(root).as_posix()
        browse_root = browse_base if rel == "." else f"{browse_base}/{rel}"

        try:
            pkg = extractor.extract(Directory.load(directory, import_path, browse_root))
        except PackageNotFound as e:
            logger.debug("Skipping %s: %s", import_path, e.reason)
            continue

        logger.info("      package = %s", pkg.import_path)
        packages.append(pkg)
    return packages
