from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from ..core.utils import as_point

@dataclass
class Pose:
    t: np.ndarray   # (3,)
    R: np.ndarray   # (3,3)

    @staticmethod
    def from_xyz_rpy(xyz: tuple[float,float,float], rpy_deg: tuple[float,float,float]) -> "Pose":
        rx, ry, rz = np.deg2rad(rpy_deg)
        cx, sx = np.cos(rx), np.sin(rx)
        cy, sy = np.cos(ry), np.sin(ry)
        cz, sz = np.cos(rz), np.sin(rz)
        Rx = np.array([[1,0,0],[0,cx,-sx],[0,sx,cx]])
        Ry = np.array([[cy,0,sy],[0,1,0],[-sy,0,cy]])
        Rz = np.array([[cz,-sz,0],[sz,cz,0],[0,0,1]])
        R = Rz @ Ry @ Rx
        return Pose(t=np.array(xyz, dtype=float), R=R.astype(float))

    @staticmethod
    def look_along(origin, direction) -> "Pose":
        """Camera pose at ``origin`` whose -z axis points along ``direction``.

        The camera's +y stays as close to world +z as possible.
        """
        forward = as_point(direction)
        norm = np.linalg.norm(forward)
        if norm < 1e-12:
            raise ValueError("direction must be non-zero.")
        forward = forward / norm
        up = np.array([0.0, 0.0, 1.0])
        if abs(np.dot(forward, up)) > 1.0 - 1e-9:
            up = np.array([0.0, 1.0, 0.0])
        right = np.cross(forward, up)
        right /= np.linalg.norm(right)
        true_up = np.cross(right, forward)
        R = np.column_stack([right, true_up, -forward])
        return Pose(t=as_point(origin), R=R)

    def apply(self, p_body: np.ndarray) -> np.ndarray:
        return (self.R @ p_body.T).T + self.t
