import glob
import os
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from .cache import CacheStore


class FileType(str, Enum):
    SVG = "svg"
    PNG = "png"
    JPEG = "jpg"
    GIF = "gif"


EXTENSION_TYPES = {
    ".svg": FileType.SVG,
    ".png": FileType.PNG,
    ".jpg": FileType.JPEG,
    ".gif": FileType.GIF,
}


def classify(path: Path) -> Optional[FileType]:
    """File type by extension (case-insensitive); None for anything that is not an image we handle."""
    return EXTENSION_TYPES.get(Path(path).suffix.lower())


def expand_pattern(pattern: str, cwd: Path) -> List[Path]:
    """
    Expand one glob pattern (relative patterns are anchored at `cwd`) into
    real, absolute file paths. Directories are dropped.
    """
    anchored = pattern if os.path.isabs(pattern) else os.path.join(str(cwd), pattern)
    matches = sorted(glob.glob(anchored, recursive=True))
    return [Path(os.path.realpath(m)) for m in matches if os.path.isfile(m)]


def resolve_inputs(
    patterns: Iterable[str],
    cwd: Path,
    cache: Optional[CacheStore] = None,
) -> List[Path]:
    """
    Build the ordered list of input files for a run.

    - every pattern is expanded in order and the results flattened
    - exact duplicates are removed (first occurrence wins)
    - when a cache is given, files whose mtime matches the cached one are dropped

    Each surviving path is checked against the cache exactly once, which is
    also what records its current mtime for the next run.
    """
    seen = set()
    resolved: List[Path] = []
    for pattern in patterns:
        for path in expand_pattern(pattern, cwd):
            if path in seen:
                continue
            seen.add(path)
            resolved.append(path)

    if cache is None:
        return resolved
    return [path for path in resolved if cache.is_modified(path)]
