import numpy as np
import pytest

from shapesim.core.shapes import Color, Cuboid, Sphere, UnsupportedQueryError
from shapesim.core.world import SimulationWorld


def _ground_and_sphere() -> SimulationWorld:
    world = SimulationWorld()
    world.add_ground_level(0.0, color=Color.gray())
    world.add_object(Sphere(center=(0.0, 0.0, 2.0), radius=1.0, color=Color.red()))
    return world


def test_empty_world_distance_is_truncation() -> None:
    world = SimulationWorld()
    assert world.distance_to_point((0.0, 0.0, 0.0), max_dist=2.0) == 2.0
    assert world.distance_to_point((0.0, 0.0, 0.0)) == float("inf")


def test_distance_is_minimum_over_objects() -> None:
    world = _ground_and_sphere()
    assert world.distance_to_point((0.0, 0.0, 2.5)) == pytest.approx(-0.5)
    assert world.distance_to_point((5.0, 0.0, 0.5)) == pytest.approx(0.5)
    assert world.distance_to_point((5.0, 0.0, 4.0), max_dist=1.0) == pytest.approx(1.0)


def test_cast_ray_returns_nearest_hit() -> None:
    world = _ground_and_sphere()
    result = world.cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), 10.0)
    assert result is not None
    hit, color, idx = result
    assert idx == 1
    assert color == Color.red()
    assert hit.distance == pytest.approx(2.0)
    np.testing.assert_allclose(hit.point, [0.0, 0.0, 3.0])


def test_cast_ray_falls_through_to_ground() -> None:
    world = _ground_and_sphere()
    hit, color, idx = world.cast_ray((3.0, 0.0, 5.0), (0.0, 0.0, -1.0), 10.0)
    assert idx == 0
    assert color == Color.gray()
    assert hit.distance == pytest.approx(5.0)


def test_cast_ray_without_hit() -> None:
    world = _ground_and_sphere()
    assert world.cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), 10.0) is None


def test_cast_ray_with_cuboid_is_unsupported() -> None:
    world = _ground_and_sphere()
    world.add_object(Cuboid(center=(3.0, 3.0, 0.5), half_extents=(0.5, 0.5, 0.5)))
    with pytest.raises(UnsupportedQueryError):
        world.cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), 10.0)
    # distance queries still work with boxes present
    assert world.distance_to_point((3.0, 3.0, 2.0)) == pytest.approx(1.0)


def test_plane_boundaries_face_inwards() -> None:
    world = SimulationWorld()
    world.add_plane_boundaries(-2.0, 2.0, -2.0, 2.0)
    assert len(world) == 4
    assert world.distance_to_point((0.0, 0.0, 0.0)) == pytest.approx(2.0)
    assert world.distance_to_point((1.5, 0.0, 0.0)) == pytest.approx(0.5)
    assert world.distance_to_point((3.0, 0.0, 0.0)) == pytest.approx(-1.0)


def test_clear_removes_objects() -> None:
    world = _ground_and_sphere()
    assert len(world.objects) == 2
    world.clear()
    assert len(world) == 0
    assert world.cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), 10.0) is None


def test_distance_grid_truncates() -> None:
    world = SimulationWorld(min_bound=(0.0, 0.0, 0.0), max_bound=(1.0, 1.0, 1.0))
    world.add_ground_level(0.0)
    centers, distances = world.distance_grid(voxel_size=0.5, max_dist=0.5)
    assert centers.shape == (8, 3)
    assert distances.shape == (8,)
    np.testing.assert_allclose(centers[0], [0.25, 0.25, 0.25])
    low = np.isclose(centers[:, 2], 0.25)
    np.testing.assert_allclose(distances[low], 0.25)
    np.testing.assert_allclose(distances[~low], 0.5)


def test_distance_grid_rejects_bad_voxel_size() -> None:
    with pytest.raises(ValueError):
        SimulationWorld().distance_grid(voxel_size=0.0, max_dist=1.0)


def test_world_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        SimulationWorld(min_bound=(0.0, 0.0, 0.0), max_bound=(-1.0, 1.0, 1.0))
    assert SimulationWorld().bounds() == (-5.0, 5.0, -5.0, 5.0, -1.0, 6.0)
