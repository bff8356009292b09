from __future__ import annotations

import numpy as np


class RangeNoise:
    """Gaussian noise along each ray plus Bernoulli dropouts of returns."""

    def __init__(self, sigma_range_m: float = 0.0, keep_prob: float = 1.0) -> None:
        if not (0.0 < keep_prob <= 1.0):
            raise ValueError("keep_prob must be in (0, 1].")
        self.sigma_range_m = float(max(0.0, sigma_range_m))
        self.keep_prob = float(keep_prob)

    def jitter_ranges(self, ranges: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        if self.sigma_range_m == 0.0:
            return ranges
        noise = rng.normal(scale=self.sigma_range_m, size=ranges.shape)
        out = np.clip(ranges + noise, 0.0, None)
        return out.astype(np.float32, copy=False)

    def dropout_mask(self, n: int, rng: np.random.Generator) -> np.ndarray:
        if self.keep_prob >= 1.0:
            return np.ones(n, dtype=bool)
        return rng.random(n) < self.keep_prob
