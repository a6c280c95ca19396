import json
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Sequence, TYPE_CHECKING

from PIL import Image

from .errors import ExternalToolError

if TYPE_CHECKING:
    from .rasterize import RasterRequest

SVGO_ENV = "SVG_RASTERIZER_SVGO"
SVGEXPORT_ENV = "SVG_RASTERIZER_SVGEXPORT"
PNGQUANT_ENV = "SVG_RASTERIZER_PNGQUANT"


class SvgOptimizer(Protocol):
    def optimize(self, data: bytes) -> bytes: ...


class RasterRenderer(Protocol):
    def render(self, requests: Sequence["RasterRequest"]) -> None: ...


class PngCompressor(Protocol):
    def compress(self, input_path: Path, output_path: Path) -> Path: ...


def run_external_step(
    tool: str,
    args: Sequence[str],
    input_data: Optional[bytes] = None,
    timeout: Optional[float] = None,
) -> bytes:
    """
    Run one external tool to completion and return its raw stdout.

    Input and output stay bytes so documents are passed through in whatever
    encoding they declare.

    A missing binary, a non-zero exit status and a timeout all surface as
    ExternalToolError so callers only have one failure type to deal with.
    """
    argv = [tool, *args]
    try:
        proc = subprocess.run(
            argv,
            input=input_data,
            capture_output=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise ExternalToolError(tool, argv, f"executable not found ({exc})") from exc
    except subprocess.TimeoutExpired as exc:
        raise ExternalToolError(tool, argv, f"timed out after {timeout}s") from exc

    if proc.returncode != 0:
        stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
        raise ExternalToolError(
            tool, argv, "non-zero exit status", returncode=proc.returncode, stderr=stderr
        )
    return proc.stdout


class SvgoOptimizer:
    """
    Optimizes SVG markup with the `svgo` CLI, piping the document through
    stdin/stdout. The optimizer options are passed through untouched as a
    CommonJS config file.
    """

    def __init__(
        self,
        options: Dict[str, Any],
        work_dir: Path,
        binary: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.binary = binary or os.environ.get(SVGO_ENV) or "svgo"
        self.timeout = timeout
        self.config_path: Optional[Path] = None
        if options:
            self.config_path = Path(work_dir) / "svgo.config.cjs"
            self.config_path.write_text(
                "module.exports = " + json.dumps(options, indent=2) + ";\n", encoding="utf-8"
            )

    def optimize(self, data: bytes) -> bytes:
        args = ["--input", "-", "--output", "-"]
        if self.config_path is not None:
            args += ["--config", str(self.config_path)]
        return run_external_step(self.binary, args, input_data=data, timeout=self.timeout)


class SvgexportRenderer:
    """Renders a batch of requests for one SVG with a single `svgexport <datafile>` call."""

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.binary = binary or os.environ.get(SVGEXPORT_ENV) or "svgexport"
        self.timeout = timeout

    @staticmethod
    def build_datafile(requests: Sequence["RasterRequest"]) -> list:
        by_input: Dict[str, list] = {}
        for request in requests:
            by_input.setdefault(str(request.input), []).append(
                [str(request.output), *request.options]
            )
        return [{"input": [svg], "output": outputs} for svg, outputs in by_input.items()]

    def render(self, requests: Sequence["RasterRequest"]) -> None:
        if not requests:
            return
        work_dir = Path(requests[0].output).parent
        fd, datafile = tempfile.mkstemp(prefix="svgexport-", suffix=".json", dir=str(work_dir))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(self.build_datafile(requests), f)
        run_external_step(self.binary, [datafile], timeout=self.timeout)


class PngquantCompressor:
    """Lossy PNG compression through the `pngquant` binary."""

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.binary = binary or os.environ.get(PNGQUANT_ENV) or "pngquant"
        self.timeout = timeout

    def compress(self, input_path: Path, output_path: Path) -> Path:
        run_external_step(
            self.binary,
            ["--force", "--output", str(output_path), str(input_path)],
            timeout=self.timeout,
        )
        return output_path


class PillowPngCompressor:
    """
    Palette quantization with Pillow, for hosts without pngquant.

    Alpha is kept (fast octree is the only quantizer Pillow supports for RGBA).
    """

    def __init__(self, colors: int = 256) -> None:
        self.colors = colors

    def compress(self, input_path: Path, output_path: Path) -> Path:
        try:
            with Image.open(input_path) as img:
                quantized = img.convert("RGBA").quantize(
                    colors=self.colors, method=Image.Quantize.FASTOCTREE
                )
            quantized.save(output_path, format="PNG", optimize=True)
        except (OSError, ValueError) as exc:
            raise ExternalToolError("pillow", [str(input_path)], str(exc)) from exc
        return output_path
