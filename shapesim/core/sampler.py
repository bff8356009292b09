from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional
import numpy as np

from .world import SimulationWorld
from .intersector import RayBundle, Intersector, ShapeIntersector
from .pointcloud import PointBatch
from .utils import get_logger

_log = get_logger()

@dataclass
class SamplerConfig:
    batch_size_rays: int = 100_000

class Sampler:
    """Casts ray bundles through a world and streams the hits to a writer.

    Each hit becomes a point with ``rgb`` (object color), ``range_m`` and
    ``shape_id`` attributes; per-ray metadata is carried over per hit. With a
    noise model, ranges are jittered and points re-placed along their ray.
    """
    def __init__(
        self,
        world: SimulationWorld,
        intersector: Optional[Intersector] = None,
        cfg: Optional[SamplerConfig] = None,
        noise: Optional[Any] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.world = world
        self.cfg = cfg or SamplerConfig()
        self.intersector = intersector if intersector is not None else ShapeIntersector()
        self.noise = noise
        self.rng = rng if rng is not None else np.random.default_rng()

    def _ray_bundle_chunks(self, bundle: RayBundle) -> Iterable[RayBundle]:
        limit = int(self.cfg.batch_size_rays or 0)
        n_rays = len(bundle.origins)
        if limit <= 0 or n_rays <= limit:
            yield bundle
            return

        for start in range(0, n_rays, limit):
            stop = min(start + limit, n_rays)
            chunk_meta: Dict[str, np.ndarray] = {}
            for key, value in bundle.meta.items():
                arr = np.asarray(value)
                chunk_meta[key] = arr[start:stop] if arr.ndim >= 1 and arr.shape[0] == n_rays else arr
            yield RayBundle(
                origins=bundle.origins[start:stop],
                directions=bundle.directions[start:stop],
                max_range=bundle.max_range,
                meta=chunk_meta,
            )

    def run_to_writer(self, writer, ray_batches: Iterable[RayBundle]) -> Dict[str, int]:
        """Stream: for each RayBundle → intersect → PointBatch → write.

        Returns run statistics. The writer is closed at the end.
        """
        total_rays = 0
        total_points = 0

        for bundle in ray_batches:
            total_rays += len(bundle.origins)
            for chunk in self._ray_bundle_chunks(bundle):
                hits = self.intersector.intersect(self.world, chunk)
                if hits.points.shape[0] == 0:
                    continue

                xyz = hits.points
                ranges = hits.distances
                if self.noise is not None:
                    ranges = self.noise.jitter_ranges(ranges, self.rng)
                    origins = np.asarray(chunk.origins, dtype=np.float64)[hits.ray_index]
                    dirs = np.asarray(chunk.directions, dtype=np.float64)[hits.ray_index]
                    xyz = origins + dirs * ranges[:, None]

                attrs: Dict[str, np.ndarray] = {
                    "rgb": hits.colors,
                    "range_m": np.asarray(ranges, dtype=np.float32),
                    "shape_id": hits.shape_ids.astype(np.int32, copy=False),
                }
                n_rays = len(chunk.origins)
                for key, value in chunk.meta.items():
                    arr = np.asarray(value)
                    if arr.ndim >= 1 and arr.shape[0] == n_rays:
                        attrs[key] = arr[hits.ray_index]

                batch = PointBatch(xyz=xyz, attrs=attrs)
                writer.write_batch(batch)
                total_points += len(batch)

        writer.close()
        stats = {"rays": total_rays, "points": total_points}
        _log.info("Sampler finished: %d rays → %d points", total_rays, total_points)
        return stats
