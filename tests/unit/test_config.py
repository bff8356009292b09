from pathlib import Path

import numpy as np
import pytest
import yaml
from pydantic import ValidationError

from shapesim.config import load_config
from shapesim.config.schema import WorldConfig
from shapesim.core.shapes import Color, Cuboid, Plane, Sphere
from shapesim.runtime.builders import build_color, build_noise, build_sensor, build_world, build_writer
from shapesim.core.exporter import NpzWriter, PlyWriter


def _write(path: Path, data: dict) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f)
    return path


def test_load_config_builds_world(tmp_path: Path) -> None:
    cfg_path = _write(tmp_path / "world.yaml", {
        "bounds": {"min": [-2, -2, 0], "max": [2, 2, 3]},
        "ground": {"height": 0.0, "color": "gray"},
        "boundaries": {"x_min": -2, "x_max": 2, "y_min": -2, "y_max": 2},
        "objects": [
            {"kind": "sphere", "center": [0, 0, 1], "radius": 0.5, "color": [255, 0, 0]},
            {"kind": "cuboid", "center": [1, 1, 0.5], "half_extents": [0.5, 0.5, 0.5], "color": "blue"},
            {"kind": "plane", "center": [0, 0, 3], "normal": [0, 0, -4]},
        ],
        "output": {"path": "out/cloud.npz"},
    })
    cfg = load_config(cfg_path)
    assert cfg.output.path == (tmp_path / "out" / "cloud.npz").resolve()

    world = build_world(cfg)
    assert len(world) == 1 + 4 + 3
    sphere, box, ceiling = world.objects[-3:]
    assert isinstance(sphere, Sphere) and sphere.get_color() == Color.red()
    assert isinstance(box, Cuboid) and box.get_color() == Color.blue()
    assert isinstance(ceiling, Plane)
    np.testing.assert_allclose(ceiling.normal, [0.0, 0.0, -1.0])
    assert world.objects[0].get_color() == Color.gray()
    assert world.bounds() == (-2.0, 2.0, -2.0, 2.0, 0.0, 3.0)


@pytest.mark.parametrize("obj", [
    {"kind": "sphere", "center": [0, 0, 0], "radius": -1.0},
    {"kind": "cuboid", "center": [0, 0, 0], "half_extents": [1, -1, 1]},
    {"kind": "plane", "center": [0, 0, 0], "normal": [0, 0, 0]},
    {"kind": "torus", "center": [0, 0, 0]},
])
def test_invalid_objects_rejected(obj: dict) -> None:
    with pytest.raises(ValidationError):
        WorldConfig.model_validate({"objects": [obj]})


def test_inverted_bounds_rejected() -> None:
    with pytest.raises(ValidationError):
        WorldConfig.model_validate({"bounds": {"min": [0, 0, 0], "max": [1, -1, 1]}})


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_build_color() -> None:
    assert build_color("pink") == Color.pink()
    assert build_color((1, 2, 3, 4)) == Color(1, 2, 3, 4)


def test_build_sensor_noise_and_writer(tmp_path: Path) -> None:
    cfg = WorldConfig.model_validate({
        "viewpoint": {"origin": [0, 0, 5], "direction": [0, 0, -1], "resolution_px": [4, 2], "fov_h_deg": 45},
        "noise": {"sigma_range_m": 0.02, "keep_prob": 0.9},
        "output": {"path": str(tmp_path / "a.ply"), "format": "ply"},
    })
    noise = build_noise(cfg)
    assert noise.sigma_range_m == pytest.approx(0.02)
    sensor = build_sensor(cfg, noise)
    assert sensor.noise is noise
    assert sensor.pattern.width == 4
    assert isinstance(build_writer(cfg), PlyWriter)

    cfg.output.format = "npz"
    assert isinstance(build_writer(cfg), NpzWriter)


def test_build_sensor_requires_viewpoint() -> None:
    with pytest.raises(ValueError):
        build_sensor(WorldConfig())
    assert build_noise(WorldConfig()) is None
