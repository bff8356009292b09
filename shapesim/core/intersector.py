from __future__ import annotations
from dataclasses import dataclass, field
from typing import Protocol, List
import numpy as np
from .world import SimulationWorld
from .utils import ensure_unit_vectors


@dataclass
class RayBundle:
    origins: np.ndarray          # (M, 3)
    directions: np.ndarray       # (M, 3) unit
    max_range: float = 1e6
    meta: dict[str, np.ndarray] = field(default_factory=dict)  # per-ray metadata

    def __post_init__(self) -> None:
        assert self.origins.shape == self.directions.shape
        self.directions = ensure_unit_vectors(self.directions)


@dataclass
class RayHits:
    points: np.ndarray                 # (K, 3)
    distances: np.ndarray              # (K,)
    ray_index: np.ndarray              # (K,) maps each hit to a source ray
    shape_ids: np.ndarray              # (K,) index of the hit object in the world
    colors: np.ndarray                 # (K, 3) uint8
    hit_count_per_ray: np.ndarray      # (M,)

    @staticmethod
    def empty(n_rays: int) -> "RayHits":
        return RayHits(
            points=np.zeros((0, 3), dtype=np.float32),
            distances=np.zeros((0,), dtype=np.float32),
            ray_index=np.zeros((0,), dtype=np.int64),
            shape_ids=np.zeros((0,), dtype=np.int64),
            colors=np.zeros((0, 3), dtype=np.uint8),
            hit_count_per_ray=np.zeros((n_rays,), dtype=np.int64),
        )


class Intersector(Protocol):
    def intersect(self, world: SimulationWorld, bundle: RayBundle) -> RayHits: ...


class ShapeIntersector:
    """Brute-force nearest hit per ray over every object in the world.

    ``UnsupportedQueryError`` from objects without ray support propagates.
    """

    def intersect(self, world: SimulationWorld, bundle: RayBundle) -> RayHits:
        origins = np.asarray(bundle.origins, dtype=np.float64)
        dirs = np.asarray(bundle.directions, dtype=np.float64)
        n_rays = origins.shape[0]
        max_range = float(bundle.max_range)

        points_list: List[np.ndarray] = []
        distances_list: List[float] = []
        ray_index_list: List[int] = []
        shape_ids_list: List[int] = []
        colors_list: List[np.ndarray] = []
        hit_counts = np.zeros((n_rays,), dtype=np.int64)

        for ray_idx in range(n_rays):
            result = world.cast_ray(origins[ray_idx], dirs[ray_idx], max_range)
            if result is None:
                continue
            hit, color, shape_idx = result
            hit_counts[ray_idx] = 1
            points_list.append(hit.point)
            distances_list.append(hit.distance)
            ray_index_list.append(ray_idx)
            shape_ids_list.append(shape_idx)
            colors_list.append(color.rgb())

        if not points_list:
            return RayHits.empty(n_rays)

        return RayHits(
            points=np.vstack(points_list).astype(np.float32, copy=False),
            distances=np.asarray(distances_list, dtype=np.float32),
            ray_index=np.asarray(ray_index_list, dtype=np.int64),
            shape_ids=np.asarray(shape_ids_list, dtype=np.int64),
            colors=np.vstack(colors_list).astype(np.uint8, copy=False),
            hit_count_per_ray=hit_counts,
        )
