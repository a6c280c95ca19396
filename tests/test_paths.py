from pathlib import Path

from rasterizer.paths import generate_dist_path


def test_nested_source_keeps_its_directories(tmp_path):
    src = tmp_path / "assets" / "icons" / "logo.svg"
    assert generate_dist_path(src, tmp_path, tmp_path / "dist") == tmp_path / "dist" / "assets" / "icons" / "logo.svg"


def test_file_in_cwd(tmp_path):
    assert generate_dist_path(tmp_path / "logo.svg", tmp_path, "/out") == Path("/out/logo.svg")


def test_root_only_omits_dist_dir(tmp_path):
    src = tmp_path / "assets" / "logo-2x.png"
    assert generate_dist_path(src, tmp_path, tmp_path / "dist", root_only=True) == Path("assets/logo-2x.png")


def test_idempotent(tmp_path):
    src = tmp_path / "assets" / "logo.svg"
    first = generate_dist_path(src, tmp_path, tmp_path / "dist")
    second = generate_dist_path(src, tmp_path, tmp_path / "dist")
    assert first == second


def test_distinct_sources_get_distinct_paths(tmp_path):
    cwd = tmp_path / "project" / "web"
    dist = tmp_path / "dist"
    sources = [
        cwd / "a" / "logo.svg",
        cwd / "b" / "logo.svg",
        cwd / "a" / "b" / "logo.svg",
        cwd / "logo.svg",
        cwd / "shared" / "img" / "logo.svg",
        tmp_path / "shared" / "img" / "logo.svg",
    ]
    results = {generate_dist_path(src, cwd, dist) for src in sources}
    assert len(results) == len(sources)


def test_source_outside_cwd_goes_under_external_dir(tmp_path):
    cwd = tmp_path / "project" / "web"
    src = tmp_path / "shared" / "img" / "logo.svg"
    result = generate_dist_path(src, cwd, "/out")
    assert ".." not in result.parts
    assert result == Path("/out/_external") / src.parent.relative_to(src.anchor) / "logo.svg"


def test_outside_source_does_not_collide_with_inside_source(tmp_path):
    cwd = tmp_path / "project" / "web"
    outside = generate_dist_path(tmp_path / "shared" / "img" / "logo.svg", cwd, "/out")
    inside = generate_dist_path(cwd / "shared" / "img" / "logo.svg", cwd, "/out")
    assert inside == Path("/out/shared/img/logo.svg")
    assert outside != inside


def test_divergent_then_reconverging_directories(tmp_path):
    cwd = tmp_path / "x" / "assets"
    src = tmp_path / "y" / "assets" / "logo.svg"
    result = generate_dist_path(src, cwd, "/out")
    assert result.parts[:3] == ("/", "out", "_external")
    assert result.parts[-3:] == ("y", "assets", "logo.svg")
