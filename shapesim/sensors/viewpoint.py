from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import numpy as np

from ..core.intersector import RayBundle
from ..core.utils import ensure_unit_vectors
from ..motion.pose import Pose
from .noise import RangeNoise
from .patterns import CameraPattern


@dataclass
class SensorBatch:
    bundle: RayBundle


@dataclass
class ViewpointSensor:
    """Depth camera at a fixed pose casting one ray per (strided) pixel."""

    pattern: CameraPattern
    pose: Pose
    max_range_m: float = 10.0
    noise: Optional[RangeNoise] = None

    def __post_init__(self) -> None:
        if self.max_range_m <= 0.0:
            raise ValueError("max_range_m must be positive.")

    def batches(self, rng: Optional[np.random.Generator] = None) -> Iterable[SensorBatch]:
        if rng is None:
            rng = np.random.default_rng()

        sample = self.pattern.sample()
        dirs_world = ensure_unit_vectors((self.pose.R @ sample.directions.T).T)
        origins = np.tile(self.pose.t, (dirs_world.shape[0], 1))
        meta: Dict[str, np.ndarray] = dict(sample.meta)

        if self.noise is not None:
            keep = self.noise.dropout_mask(dirs_world.shape[0], rng)
            if not np.any(keep):
                return
            origins = origins[keep]
            dirs_world = dirs_world[keep]
            meta = {k: v[keep] for k, v in meta.items()}

        bundle = RayBundle(
            origins=origins,
            directions=dirs_world,
            max_range=float(self.max_range_m),
            meta=meta,
        )
        yield SensorBatch(bundle=bundle)
