from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import numpy as np

from ..core.utils import ensure_unit_vectors


@dataclass
class PatternSample:
    """Bundle of unit directions and per-ray metadata from a scan pattern."""

    directions: np.ndarray
    meta: Dict[str, np.ndarray]


class CameraPattern:
    """Pinhole camera looking along -z, parameterised by its horizontal FOV."""

    def __init__(
        self,
        resolution_px: tuple[int, int],
        fov_h_deg: float,
        pixel_stride: int = 1,
    ) -> None:
        width, height = resolution_px
        if width <= 0 or height <= 0:
            raise ValueError("resolution_px must be positive")
        if not (0.0 < fov_h_deg < 180.0):
            raise ValueError("fov_h_deg must lie in (0, 180)")
        if pixel_stride <= 0:
            raise ValueError("pixel_stride must be positive")

        self.width = int(width)
        self.height = int(height)
        self.fov_h_deg = float(fov_h_deg)
        # Square pixels: the same focal length on both axes.
        self.focal_px = (self.width / 2.0) / np.tan(np.deg2rad(self.fov_h_deg) / 2.0)
        self.cx = (self.width - 1) / 2.0
        self.cy = (self.height - 1) / 2.0
        self.pixel_stride = int(pixel_stride)

    def sample(self) -> PatternSample:
        us = np.arange(0, self.width, self.pixel_stride, dtype=np.float64)
        vs = np.arange(0, self.height, self.pixel_stride, dtype=np.float64)
        uu, vv = np.meshgrid(us, vs, indexing="xy")
        uu = uu.reshape(-1)
        vv = vv.reshape(-1)

        dirs = self.directions_from_pixels(np.column_stack([uu, vv]))
        meta = {
            "pixel_u": uu.astype(np.float32, copy=False),
            "pixel_v": vv.astype(np.float32, copy=False),
        }
        return PatternSample(directions=dirs, meta=meta)

    def directions_from_pixels(self, pixels: np.ndarray) -> np.ndarray:
        uv = np.asarray(pixels, dtype=np.float64)
        x = (uv[:, 0] - self.cx) / self.focal_px
        y = -(uv[:, 1] - self.cy) / self.focal_px  # image rows grow downwards
        z = np.full_like(x, -1.0)
        return ensure_unit_vectors(np.column_stack([x, y, z]))
