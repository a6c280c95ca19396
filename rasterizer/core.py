import os
import shutil
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .cache import CacheStore
from .concurrency import fan_out
from .config import RasterizerConfig
from .errors import ConfigurationError
from .inputs import resolve_inputs
from .logger import get_logger
from .rasterize import RasterizationStage
from .staging import StagedFile, StagingPipeline
from .tools import (
    PillowPngCompressor,
    PngCompressor,
    PngquantCompressor,
    RasterRenderer,
    SvgexportRenderer,
    SvgOptimizer,
    SvgoOptimizer,
)


class RunState(str, Enum):
    INIT = "init"
    RESOLVE = "resolve"
    STAGE = "stage"
    PROCESS = "process"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunResult:
    files: List[Path]
    staged: List[StagedFile] = field(default_factory=list)
    elapsed: float = 0.0


class SVGRasterizer:
    """
    Orchestrates one rasterizer run:
    - create the scratch, dist (and cache) directories
    - resolve inputs, skipping files unchanged since the last run
    - stage every input (optimize svg / compress png / pass jpg & gif through)
    - rasterize staged svgs into each output format
    - copy everything staged to the dist tree
    - remove the scratch dir (unless debugging) and persist the cache
    """

    def __init__(
        self,
        config: RasterizerConfig,
        cwd: Optional[Path] = None,
        optimizer: Optional[SvgOptimizer] = None,
        renderer: Optional[RasterRenderer] = None,
        compressor: Optional[PngCompressor] = None,
    ) -> None:
        self.config = config
        self.cwd = Path(cwd or os.getcwd()).resolve()
        self.log = get_logger("lib", debug=config.debug)
        self.state = RunState.INIT

        self.staged_files: List[StagedFile] = []
        self.cache: Optional[CacheStore] = None

        self.dist_dir = self._resolve_dist_dir()
        self.tmp_dir: Optional[Path] = None

        self._optimizer = optimizer
        self._renderer = renderer
        self._compressor = compressor

    def _resolve_dist_dir(self) -> Path:
        dist = Path(self.config.output_dir)
        if not dist.is_absolute():
            dist = self.cwd / dist
        return Path(os.path.abspath(dist))

    def create_tmp_dir(self) -> Path:
        """Scratch directory for processed files: `<cwd>/tmp/<random>`."""
        parent = self.cwd / "tmp"
        parent.mkdir(parents=True, exist_ok=True)
        self.tmp_dir = Path(tempfile.mkdtemp(dir=str(parent)))
        self.log.info(f"Scratch directory: {self.tmp_dir}")
        return self.tmp_dir

    def create_dist_dir(self) -> Path:
        if self.config.clean_output_dir and self.dist_dir.exists():
            if self.dist_dir == self.cwd or self.dist_dir in self.cwd.parents:
                raise ConfigurationError(
                    f"Refusing to clean {self.dist_dir}: it contains the working directory"
                )
            self.log.debug(f"Cleaning output directory: {self.dist_dir}")
            shutil.rmtree(self.dist_dir)
        self.dist_dir.mkdir(parents=True, exist_ok=True)
        self.log.info(f"Output directory: {self.dist_dir}")
        return self.dist_dir

    def load_cache(self) -> Optional[CacheStore]:
        if not self.config.caching_enabled:
            return None
        cache_dir = Path(self.config.cache_dir)
        if not cache_dir.is_absolute():
            cache_dir = self.cwd / cache_dir
        cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache = CacheStore.load(cache_dir, self.config.fingerprint())
        self.log.debug(f"Cache file: {self.cache.path} ({len(self.cache.files)} entries)")
        return self.cache

    def build_collaborators(self) -> None:
        timeout = self.config.tool_timeout
        if self._optimizer is None:
            self._optimizer = SvgoOptimizer(self.config.svg_optimizer, self.tmp_dir, timeout=timeout)
        if self._renderer is None:
            self._renderer = SvgexportRenderer(timeout=timeout)
        if self._compressor is None:
            if self.config.png_compressor == "pillow":
                self._compressor = PillowPngCompressor()
            else:
                self._compressor = PngquantCompressor(timeout=timeout)

    def copy_to_dist(self, src: Path, dst: Path) -> Path:
        self.log.debug(f"Copying to dist: {src} -> {dst}")
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        return dst

    def process_staged_file(self, staged_file: StagedFile, rasterization: RasterizationStage) -> List[StagedFile]:
        """
        Returns what ended up in dist for one staged file: the rasterized
        variants for an svg, the file itself for everything else.
        """
        if staged_file.type == "svg":
            outputs = rasterization.process(staged_file)
        else:
            outputs = [staged_file]

        for output in outputs:
            self.copy_to_dist(output.staged, output.dist)
        return outputs

    def cleanup(self) -> None:
        if self.tmp_dir is None:
            return
        if self.config.debug:
            self.log.debug(f"Debug mode: keeping scratch directory {self.tmp_dir}")
            return
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def run(self) -> RunResult:
        started = time.monotonic()
        try:
            self.create_tmp_dir()
            self.create_dist_dir()
            self.load_cache()
            self.build_collaborators()

            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                self.state = RunState.RESOLVE
                inputs = resolve_inputs(self.config.input, self.cwd, self.cache)
                self.log.debug(f"Resolved {len(inputs)} input file(s)")

                self.state = RunState.STAGE
                staging = StagingPipeline(
                    self.tmp_dir, self.dist_dir, self.cwd, self._optimizer, self._compressor, self.log
                )
                self.staged_files.extend(staging.stage_inputs(inputs, pool))

                self.state = RunState.PROCESS
                rasterization = RasterizationStage(
                    self.tmp_dir,
                    self.dist_dir,
                    self.cwd,
                    self.config.output_formats,
                    self._renderer,
                    self._compressor,
                    self.log,
                )
                to_process = list(self.staged_files)
                processed = fan_out(
                    pool,
                    lambda staged: self.process_staged_file(staged, rasterization),
                    to_process,
                )
        except Exception as exc:
            self.state = RunState.FAILED
            self.log.error(f"Run failed: {exc}")
            self.cleanup()
            raise

        self.state = RunState.CLEANUP
        self.cleanup()

        for staged, outputs in zip(to_process, processed):
            if staged.type == "svg":
                self.staged_files.extend(outputs)
        files = [output.dist for outputs in processed for output in outputs]

        if self.cache is not None:
            self.cache.save()

        elapsed = time.monotonic() - started
        self.state = RunState.DONE
        self.log.info(f"Completed in {elapsed:.2f}s, {len(files)} file(s) written to {self.dist_dir}")
        return RunResult(files=files, staged=list(self.staged_files), elapsed=elapsed)
