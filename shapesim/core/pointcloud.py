from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from typing import Dict

@dataclass
class PointBatch:
    """Simulated points with per-point attributes (rgb, range_m, shape_id, ...)."""
    xyz: np.ndarray                       # (N, 3)
    attrs: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.xyz = np.asarray(self.xyz).astype(np.float32, copy=False)
        n = len(self.xyz)
        for k, v in self.attrs.items():
            if v.ndim >= 1 and v.shape[0] != n:
                raise ValueError(f"Attribute '{k}' length {v.shape[0]} != {n}")

    def __len__(self) -> int:
        return len(self.xyz)
