from __future__ import annotations
from typing import Iterable, List, Optional, Tuple
import numpy as np

from .shapes import AnyShape, Color, Plane, RayHit
from .utils import get_logger, as_point

_log = get_logger()


class SimulationWorld:
    """Flat collection of shapes plus the scene-level queries built on them.

    Shapes never reference each other; the world only aggregates their
    answers (minimum distance, nearest ray hit). Cuboids do not support ray
    queries, so ``cast_ray`` raises ``UnsupportedQueryError`` when one is
    present rather than treating it as transparent.
    """
    def __init__(
        self,
        min_bound: Iterable[float] = (-5.0, -5.0, -1.0),
        max_bound: Iterable[float] = (5.0, 5.0, 6.0),
    ) -> None:
        self.min_bound = as_point(min_bound)
        self.max_bound = as_point(max_bound)
        if np.any(self.max_bound < self.min_bound):
            raise ValueError("max_bound must not be below min_bound.")
        self._objects: List[AnyShape] = []

    def __len__(self) -> int:
        return len(self._objects)

    @property
    def objects(self) -> Tuple[AnyShape, ...]:
        return tuple(self._objects)

    def bounds(self) -> tuple[float, float, float, float, float, float]:
        mn, mx = self.min_bound, self.max_bound
        return (float(mn[0]), float(mx[0]), float(mn[1]), float(mx[1]), float(mn[2]), float(mx[2]))

    # -- composition --
    def add_object(self, shape: AnyShape) -> None:
        self._objects.append(shape)

    def add_ground_level(self, height: float, color: Optional[Color] = None) -> None:
        self.add_object(Plane(
            center=(0.0, 0.0, float(height)),
            normal=(0.0, 0.0, 1.0),
            color=color or Color.white(),
        ))

    def add_plane_boundaries(
        self,
        x_min: float,
        x_max: float,
        y_min: float,
        y_max: float,
        color: Optional[Color] = None,
    ) -> None:
        # Normals face into the enclosed region.
        c = color or Color.white()
        self.add_object(Plane(center=(x_min, 0.0, 0.0), normal=(1.0, 0.0, 0.0), color=c))
        self.add_object(Plane(center=(x_max, 0.0, 0.0), normal=(-1.0, 0.0, 0.0), color=c))
        self.add_object(Plane(center=(0.0, y_min, 0.0), normal=(0.0, 1.0, 0.0), color=c))
        self.add_object(Plane(center=(0.0, y_max, 0.0), normal=(0.0, -1.0, 0.0), color=c))

    def clear(self) -> None:
        self._objects.clear()

    # -- queries --
    def distance_to_point(self, point, max_dist: float = float("inf")) -> float:
        p = as_point(point)
        dist = float(max_dist)
        for obj in self._objects:
            dist = min(dist, obj.distance_to(p))
        return dist

    def cast_ray(
        self, origin, direction, max_dist: float
    ) -> Optional[Tuple[RayHit, Color, int]]:
        """Nearest hit over all objects as ``(hit, color, object_index)``."""
        o = as_point(origin)
        d = as_point(direction)
        best: Optional[Tuple[RayHit, Color, int]] = None
        for idx, obj in enumerate(self._objects):
            hit = obj.intersect_ray(o, d, max_dist)
            if hit is None:
                continue
            if best is None or hit.distance < best[0].distance:
                best = (hit, obj.get_color(), idx)
        return best

    def distance_grid(self, voxel_size: float, max_dist: float) -> Tuple[np.ndarray, np.ndarray]:
        """Sample truncated distances at voxel centres covering the bounds.

        Returns ``(centers, distances)`` with shapes ``(N, 3)`` and ``(N,)``.
        """
        if voxel_size <= 0.0:
            raise ValueError("voxel_size must be positive.")
        counts = np.maximum(np.ceil((self.max_bound - self.min_bound) / voxel_size).astype(np.int64), 1)
        axes = [self.min_bound[i] + (np.arange(counts[i], dtype=np.float64) + 0.5) * voxel_size for i in range(3)]
        xx, yy, zz = np.meshgrid(*axes, indexing="ij")
        centers = np.column_stack([xx.ravel(), yy.ravel(), zz.ravel()])

        distances = np.empty((centers.shape[0],), dtype=np.float64)
        for i, c in enumerate(centers):
            distances[i] = self.distance_to_point(c, max_dist)
        _log.info("Sampled %d voxels at %.3f m from %d objects.", len(centers), voxel_size, len(self._objects))
        return centers, distances
