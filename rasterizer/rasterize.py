import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import OutputFormatSpec
from .paths import generate_dist_path
from .staging import StagedFile
from .tools import PngCompressor, RasterRenderer


@dataclass(frozen=True)
class RasterRequest:
    input: Path
    output: Path
    dist: Path
    format: str
    options: Tuple[str, ...]

    @property
    def option_string(self) -> str:
        return " ".join(self.options)


class RasterizationStage:
    """
    Expands one staged SVG into a variant per configured output format.

    All variants of an SVG are rendered with a single renderer call; png
    variants then go through the png compressor before being registered.
    """

    def __init__(
        self,
        tmp_dir: Path,
        dist_dir: Path,
        cwd: Path,
        output_formats: Sequence[OutputFormatSpec],
        renderer: RasterRenderer,
        compressor: PngCompressor,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.tmp_dir = tmp_dir
        self.dist_dir = dist_dir
        self.cwd = cwd
        self.output_formats = list(output_formats)
        self.renderer = renderer
        self.compressor = compressor
        self.log = logger or logging.getLogger(__name__)

    def build_requests(self, staged_file: StagedFile, work_dir: Path) -> List[RasterRequest]:
        """
        One request per output format. Names come from the original source
        (not the optimized scratch copy) so `{{filename}}` expands to the
        source's base name and variants land next to where the source would.
        """
        source = staged_file.src
        requests = []
        for fmt in self.output_formats:
            filename = fmt.output_filename(source.stem)
            relative = generate_dist_path(source.parent / filename, self.cwd, root_only=True)
            requests.append(
                RasterRequest(
                    input=staged_file.staged,
                    output=work_dir / filename,
                    dist=self.dist_dir / relative,
                    format=fmt.format,
                    options=tuple(fmt.render_options()),
                )
            )
        return requests

    def process(self, staged_file: StagedFile) -> List[StagedFile]:
        work_dir = Path(tempfile.mkdtemp(prefix=f"{staged_file.src.stem}-", dir=str(self.tmp_dir)))
        requests = self.build_requests(staged_file, work_dir)
        if not requests:
            return []

        self.log.debug(f"Rasterizing {staged_file.src} into {len(requests)} variant(s)")
        self.renderer.render(requests)

        variants = []
        for request in requests:
            staged = request.output
            if request.format.lower() == "png":
                staged = self.compressor.compress(
                    request.output, request.output.with_name(request.output.stem + ".optimized.png")
                )
                self.log.debug(f"PNG optimization complete: {request.output} -> {staged}")
            variant = StagedFile(src=staged_file.src, staged=staged, dist=request.dist, type=request.format)
            self.log.debug(f"Added file to staging: {variant}")
            variants.append(variant)
        return variants
