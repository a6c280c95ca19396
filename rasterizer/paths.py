import os
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]

EXTERNAL_DIR = "_external"


def relative_source_dir(src_path: PathLike, cwd: PathLike) -> Path:
    """
    Directory of `src_path` relative to `cwd`.

    Files outside `cwd` go under `_external/` followed by their full absolute
    directory (minus the root), so they never climb out of the dist tree with
    `..` segments and cannot collide with files inside `cwd` (short of `cwd`
    holding an `_external` directory of its own).
    """
    src_dir = Path(os.path.abspath(os.fspath(src_path))).parent
    base = Path(os.path.abspath(os.fspath(cwd)))
    try:
        return src_dir.relative_to(base)
    except ValueError:
        return Path(EXTERNAL_DIR) / src_dir.relative_to(src_dir.anchor)


def generate_dist_path(
    src_path: PathLike,
    cwd: PathLike,
    dist_dir: Optional[PathLike] = None,
    root_only: bool = False,
) -> Path:
    """
    Translate an input path into its location under the dist tree.

    `<cwd>/assets/icons/logo.svg` -> `<dist>/assets/icons/logo.svg`

    With `root_only` the dist prefix is left off and only the relative part
    is returned (used for rasterized variants, whose file name differs from
    the source's).
    """
    relative = relative_source_dir(src_path, cwd) / Path(src_path).name
    if root_only or dist_dir is None:
        return relative
    return Path(dist_dir) / relative
