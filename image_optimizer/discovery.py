"""
Recursive discovery of optimizable images under a source directory.
"""

import logging
import os
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from image_optimizer import classifier
from image_optimizer.errors import DiscoveryError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageRef:
    """An image found during discovery."""

    absolute_path: str
    relative_directory: str  # containing directory relative to the source root, '' for the root

    @property
    def filename(self) -> str:
        return os.path.basename(self.absolute_path)

    @property
    def stem(self) -> str:
        return os.path.splitext(self.filename)[0]

    @property
    def original_format(self) -> Optional[str]:
        return classifier.original_format(self.filename)


def _list_entries(directory: str) -> List[os.DirEntry]:
    """Read a directory, sorted by name so numbering is stable across filesystems."""
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        raise DiscoveryError(f"Cannot read directory '{directory}': {e.strerror or e}") from e
    return sorted(entries, key=lambda entry: entry.name)


def discover(root_dir: str, exclude: Iterable[str] = ()) -> List[ImageRef]:
    """
    Find every optimizable image under root_dir, depth first.

    A pending-directory stack replaces call recursion, but results come out in
    the same order a recursive walk would produce: a subdirectory's images
    appear at the position where the subdirectory is met.

    Args:
        root_dir: Directory to walk
        exclude: Directories to skip entirely (e.g. the output root)

    Returns:
        List of ImageRef, one per image file

    Raises:
        DiscoveryError: if any directory in the tree cannot be read
    """
    root = os.path.abspath(root_dir)
    skipped = {os.path.realpath(path) for path in exclude}

    images = []
    stack: List[Tuple[str, Iterator[os.DirEntry]]] = [(root, iter(_list_entries(root)))]

    while stack:
        directory, entries = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file()
        except OSError as e:
            raise DiscoveryError(f"Cannot inspect '{entry.path}': {e}") from e

        if is_dir:
            if os.path.realpath(entry.path) in skipped:
                log.debug("Skipping excluded directory %s", entry.path)
                continue
            stack.append((entry.path, iter(_list_entries(entry.path))))
        elif is_file and classifier.is_optimizable(entry.name):
            relative = os.path.relpath(directory, root)
            images.append(ImageRef(
                absolute_path=os.path.join(directory, entry.name),
                relative_directory='' if relative == os.curdir else relative,
            ))

    log.info("Discovered %d images under %s", len(images), root)
    return images
