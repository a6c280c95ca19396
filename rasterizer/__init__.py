"""
Rasterizer package: batch-optimizes and rasterizes image assets into a dist tree.

Modules:
- core: run orchestration (directories, fan-out, cleanup, cache persistence)
- config: configuration loading, output format specs & fingerprinting
- cache: per-fingerprint modification-time cache
- inputs: glob expansion, de-duplication & file type classification
- paths: source path -> dist path mapping
- staging: per-type optimization of inputs into the scratch area
- rasterize: svg -> output format variants via the external renderer
- tools: wrappers around the external optimizer, renderer and png compressor
"""

from .config import OutputFormatSpec, RasterizerConfig, load_config
from .core import RunResult, RunState, SVGRasterizer
from .errors import ConfigurationError, ExternalToolError, RasterizerError

__all__ = [
    "ConfigurationError",
    "ExternalToolError",
    "OutputFormatSpec",
    "RasterizerConfig",
    "RasterizerError",
    "RunResult",
    "RunState",
    "SVGRasterizer",
    "load_config",
]
