import logging
import tempfile
from concurrent.futures import Executor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .concurrency import fan_out
from .inputs import FileType, classify
from .paths import generate_dist_path
from .tools import PngCompressor, SvgOptimizer


@dataclass(frozen=True)
class StagedFile:
    src: Path
    staged: Path
    dist: Path
    type: str


class StagingPipeline:
    """
    Produces one StagedFile per input:
    - svg: optimized copy written to the scratch dir
    - png: lossy-compressed copy written to the scratch dir
    - jpg / gif: registered as-is (the original is the staged file)

    Inputs of any other type are skipped.
    """

    def __init__(
        self,
        tmp_dir: Path,
        dist_dir: Path,
        cwd: Path,
        optimizer: SvgOptimizer,
        compressor: PngCompressor,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.tmp_dir = tmp_dir
        self.dist_dir = dist_dir
        self.cwd = cwd
        self.optimizer = optimizer
        self.compressor = compressor
        self.log = logger or logging.getLogger(__name__)
        self.strategies: Dict[FileType, Callable[[Path], StagedFile]] = {
            FileType.SVG: self.optimize_svg,
            FileType.PNG: self.optimize_png,
            FileType.JPEG: self.passthrough,
            FileType.GIF: self.passthrough,
        }

    def stage_inputs(self, inputs: Sequence[Path], pool: Executor) -> List[StagedFile]:
        stageable = [path for path in inputs if classify(path) is not None]
        skipped = len(inputs) - len(stageable)
        if skipped:
            self.log.debug(f"Skipping {skipped} input(s) with unsupported extensions")
        return fan_out(pool, self.stage_file, stageable)

    def stage_file(self, path: Path) -> StagedFile:
        file_type = classify(path)
        if file_type is None:
            raise ValueError(f"Unsupported input type: {path}")
        return self.strategies[file_type](path)

    def register(self, src: Path, staged: Path, file_type: str) -> StagedFile:
        staged_file = StagedFile(
            src=src,
            staged=staged,
            dist=generate_dist_path(src, self.cwd, self.dist_dir),
            type=file_type,
        )
        self.log.debug(f"Added file to staging: {staged_file}")
        return staged_file

    def scratch_file(self, suffix: str) -> Path:
        with tempfile.NamedTemporaryFile(dir=str(self.tmp_dir), suffix=suffix, delete=False) as f:
            return Path(f.name)

    def optimize_svg(self, path: Path) -> StagedFile:
        optimized = self.optimizer.optimize(path.read_bytes())
        tmp_file = self.scratch_file(".optimized.svg")
        tmp_file.write_bytes(optimized)
        self.log.debug(f"SVG optimization complete: {path} -> {tmp_file}")
        return self.register(path, tmp_file, FileType.SVG.value)

    def optimize_png(self, path: Path) -> StagedFile:
        tmp_file = self.compressor.compress(path, self.scratch_file(".optimized.png"))
        self.log.debug(f"PNG optimization complete: {path} -> {tmp_file}")
        return self.register(path, tmp_file, FileType.PNG.value)

    def passthrough(self, path: Path) -> StagedFile:
        return self.register(path, path, classify(path).value)
