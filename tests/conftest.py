"""Shared fixtures and fake collaborators for the rasterizer tests."""

import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Sequence

import pytest

from rasterizer.config import RasterizerConfig
from rasterizer.errors import ExternalToolError

SVG_SOURCE = '<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"><!-- c --><rect width="10" height="10"/></svg>'


class FakeOptimizer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[bytes] = []

    def optimize(self, data: bytes) -> bytes:
        self.calls.append(data)
        if self.fail:
            raise ExternalToolError("svgo", ["svgo"], "boom", returncode=1)
        return data.replace(b"<!-- c -->", b"")


class FakeRenderer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.batches: List[list] = []

    def render(self, requests: Sequence) -> None:
        self.batches.append(list(requests))
        if self.fail:
            raise ExternalToolError("svgexport", ["svgexport"], "boom", returncode=1)
        for request in requests:
            request.output.write_text(f"{request.format}:{request.option_string}", encoding="utf-8")


class FakeCompressor:
    def __init__(self) -> None:
        self.calls: List[Path] = []

    def compress(self, input_path: Path, output_path: Path) -> Path:
        self.calls.append(Path(input_path))
        shutil.copyfile(input_path, output_path)
        return output_path


@pytest.fixture
def workspace(tmp_path, monkeypatch) -> Path:
    root = tmp_path.resolve()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def pool():
    with ThreadPoolExecutor(max_workers=4) as executor:
        yield executor


@pytest.fixture
def fakes():
    return FakeOptimizer(), FakeRenderer(), FakeCompressor()


def write_file(path: Path, content: str = "data") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def make_config(**overrides) -> RasterizerConfig:
    data = {
        "input": ["assets/**/*"],
        "outputDir": "dist",
        "outputFormats": [
            {"filename": "{{filename}}-2x", "format": "png", "outputSize": "2x"},
            {"filename": "{{filename}}", "format": "jpg"},
        ],
    }
    data.update(overrides)
    return RasterizerConfig.from_dict(data)
