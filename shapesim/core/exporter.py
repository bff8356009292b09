from __future__ import annotations
import pathlib
from typing import Dict, List
import numpy as np

from .pointcloud import PointBatch
from .utils import get_logger

_log = get_logger()


class PlyWriter:
    """ASCII PLY with xyz and, when every batch carries it, rgb.

    A file is always written on ``close``; with no batches it has an empty body.
    """
    def __init__(self, path: str) -> None:
        self.path = path
        self._batches: List[PointBatch] = []

    def write_batch(self, batch: PointBatch) -> None:
        self._batches.append(batch)

    def close(self) -> None:
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        xyz = _stack_xyz(self._batches)
        rgb = None
        if self._batches and all("rgb" in b.attrs for b in self._batches):
            rgb = np.vstack([b.attrs["rgb"] for b in self._batches]).astype(np.uint8)
        with open(path, "w", encoding="utf-8") as f:
            f.write("ply\nformat ascii 1.0\n")
            f.write(f"element vertex {len(xyz)}\n")
            f.write("property float x\nproperty float y\nproperty float z\n")
            if rgb is not None:
                f.write("property uchar red\nproperty uchar green\nproperty uchar blue\n")
            f.write("end_header\n")
            for i, (x, y, z) in enumerate(xyz):
                if rgb is None:
                    f.write(f"{float(x)} {float(y)} {float(z)}\n")
                else:
                    r, g, b = rgb[i]
                    f.write(f"{float(x)} {float(y)} {float(z)} {int(r)} {int(g)} {int(b)}\n")
        _log.info("Wrote %d points to %s", len(xyz), path.name)
        self._batches.clear()


class NpzWriter:
    """Compressed npz with an ``xyz`` array plus one array per point attribute.

    Batches lacking an attribute that others carry are zero-filled for it.
    An empty run still produces a file holding a ``(0, 3)`` ``xyz`` array.
    """
    def __init__(self, path: str) -> None:
        self.path = path
        self._batches: List[PointBatch] = []

    def write_batch(self, batch: PointBatch) -> None:
        self._batches.append(batch)

    def _merged_attrs(self) -> Dict[str, np.ndarray]:
        layouts: Dict[str, np.ndarray] = {}
        for b in self._batches:
            for name, values in b.attrs.items():
                layouts.setdefault(name, values)

        merged: Dict[str, np.ndarray] = {}
        for name in sorted(layouts):
            proto = layouts[name]
            parts = [
                b.attrs[name].astype(proto.dtype, copy=False) if name in b.attrs
                else np.zeros((len(b),) + proto.shape[1:], dtype=proto.dtype)
                for b in self._batches
            ]
            merged[name] = np.concatenate(parts, axis=0)
        return merged

    def close(self) -> None:
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        xyz = _stack_xyz(self._batches)
        np.savez_compressed(path, xyz=xyz, **self._merged_attrs())
        _log.info("Wrote %d points to %s", len(xyz), path.name)
        self._batches.clear()


def _stack_xyz(batches: List[PointBatch]) -> np.ndarray:
    if not batches:
        return np.zeros((0, 3), dtype=np.float32)
    return np.vstack([b.xyz for b in batches])


def write_distance_grid(path: str | pathlib.Path, centers: np.ndarray, distances: np.ndarray, voxel_size: float) -> pathlib.Path:
    """Store a sampled ground-truth distance grid as a compressed npz."""
    out = pathlib.Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(
        out,
        centers=centers.astype(np.float32, copy=False),
        distances=distances.astype(np.float32, copy=False),
        voxel_size=np.float32(voxel_size),
    )
    return out
