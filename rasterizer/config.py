import hashlib
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .errors import ConfigurationError

FILENAME_PLACEHOLDER = "{{filename}}"
PNG_COMPRESSORS = ("pngquant", "pillow")


def _default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class OutputFormatSpec:
    format: str
    filename: str = FILENAME_PLACEHOLDER
    quality: Optional[Any] = None
    input_viewbox: Optional[str] = None
    output_size: Optional[str] = None
    viewbox_mode: Optional[str] = None
    styles: Optional[Dict[str, Any]] = None
    # the entry exactly as it appeared in the config file, for fingerprinting
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.format:
            raise ConfigurationError(
                f'outputFormat item lacks "format" type! (filename={self.filename!r})'
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputFormatSpec":
        if not isinstance(data, dict):
            raise ConfigurationError(f"outputFormats entries must be objects, got {data!r}")
        return cls(
            format=data.get("format") or "",
            filename=data.get("filename") or FILENAME_PLACEHOLDER,
            quality=data.get("quality"),
            input_viewbox=data.get("inputViewbox"),
            output_size=data.get("outputSize"),
            viewbox_mode=data.get("viewboxMode"),
            styles=data.get("styles"),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "format": self.format,
            "quality": self.quality,
            "inputViewbox": self.input_viewbox,
            "outputSize": self.output_size,
            "viewboxMode": self.viewbox_mode,
            "styles": self.styles,
        }

    def output_filename(self, source_stem: str) -> str:
        """`{{filename}}-2x` + `png` for `logo` -> `logo-2x.png`."""
        return self.filename.replace(FILENAME_PLACEHOLDER, source_stem) + "." + self.format

    def render_options(self) -> List[str]:
        """
        Renderer options in svgexport order. Unset or falsy options (None, "",
        0) are left out entirely rather than passed as blanks.
        """
        options = [self.format]
        for value in (self.quality, self.input_viewbox, self.output_size, self.viewbox_mode):
            if value:
                options.append(str(value))
        if self.styles:
            options.append(json.dumps(self.styles, separators=(",", ":"), sort_keys=True))
        return options


@dataclass(frozen=True)
class RasterizerConfig:
    input: Tuple[str, ...] = ()
    output_dir: str = "dist"
    clean_output_dir: bool = False
    svg_optimizer: Dict[str, Any] = field(default_factory=dict)
    output_formats: Tuple[OutputFormatSpec, ...] = ()
    cache_dir: Optional[str] = None
    debug: bool = False
    max_workers: int = field(default_factory=_default_max_workers)
    png_compressor: str = "pngquant"
    tool_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ConfigurationError(f"maxWorkers must be a positive integer, got {self.max_workers}")
        if self.png_compressor not in PNG_COMPRESSORS:
            raise ConfigurationError(
                f"pngCompressor must be one of {', '.join(PNG_COMPRESSORS)}, got {self.png_compressor!r}"
            )

    @property
    def caching_enabled(self) -> bool:
        return bool(self.cache_dir)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RasterizerConfig":
        patterns = data.get("input") or []
        if isinstance(patterns, str):
            patterns = [patterns]

        kwargs: Dict[str, Any] = {}
        if data.get("maxWorkers") is not None:
            kwargs["max_workers"] = int(data["maxWorkers"])

        return cls(
            input=tuple(patterns),
            output_dir=data.get("outputDir") or "dist",
            clean_output_dir=bool(data.get("cleanOutputDir", False)),
            svg_optimizer=dict(data.get("svgOptimizer") or {}),
            output_formats=tuple(
                OutputFormatSpec.from_dict(fmt) for fmt in data.get("outputFormats") or []
            ),
            cache_dir=data.get("cacheDir"),
            debug=bool(data.get("debug", False)),
            png_compressor=data.get("pngCompressor") or "pngquant",
            tool_timeout=data.get("toolTimeout"),
            **kwargs,
        )

    def fingerprint(self) -> str:
        """
        Deterministic hash of the optimizer + output format settings.

        Used as the cache file name, so changing either setting starts a fresh
        cache and every input is treated as modified.
        """
        payload = {
            "svgOptimizer": self.svg_optimizer,
            "outputFormats": [
                fmt.raw if fmt.raw is not None else fmt.to_dict() for fmt in self.output_formats
            ],
        }
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
        return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


def load_config(path: Path) -> RasterizerConfig:
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    return RasterizerConfig.from_dict(data)
