"""General utility functions and helper classes."""

import filecmp
from pathlib import Path


def files_are_identical(first: Path, second: Path) -> bool:
    """Return True when both files exist and have byte-identical contents."""
    if not first.is_file() or not second.is_file():
        return False
    return filecmp.cmp(first, second, shallow=False)
