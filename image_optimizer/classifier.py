"""Decide from a file name whether it is an image we can optimize."""

import os
from typing import Optional

OPTIMIZABLE_EXTENSIONS = {
    '.jpg': 'jpg',
    '.jpeg': 'jpg',
    '.png': 'png',
    '.webp': 'webp',
    '.svg': 'svg',
}


def original_format(name: str) -> Optional[str]:
    """
    Return the normalized format of a file name ('jpeg' becomes 'jpg').

    Returns:
        One of 'jpg', 'png', 'webp', 'svg', or None if the name is not an
        optimizable image.
    """
    ext = os.path.splitext(name)[1].lower()
    return OPTIMIZABLE_EXTENSIONS.get(ext)


def is_optimizable(name: str) -> bool:
    return original_format(name) is not None
