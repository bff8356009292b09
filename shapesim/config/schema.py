from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

import numpy as np
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

Vec3 = tuple[float, float, float]
ColorSpec = Union[str, tuple[int, int, int], tuple[int, int, int, int]]


class SphereConfig(BaseModel):
    kind: Literal["sphere"]
    center: Vec3
    radius: float = Field(ge=0.0)
    color: ColorSpec = "white"


class CuboidConfig(BaseModel):
    kind: Literal["cuboid"]
    center: Vec3
    half_extents: Vec3
    color: ColorSpec = "white"

    @field_validator("half_extents")
    @classmethod
    def _non_negative(cls, v: Vec3) -> Vec3:
        if any(h < 0.0 for h in v):
            raise ValueError("half_extents must be non-negative")
        return v


class PlaneConfig(BaseModel):
    kind: Literal["plane"]
    center: Vec3 = (0.0, 0.0, 0.0)
    normal: Vec3
    color: ColorSpec = "white"

    @field_validator("normal")
    @classmethod
    def _normalize(cls, v: Vec3) -> Vec3:
        # Planes require unit normals; the config layer is where that is enforced.
        n = np.asarray(v, dtype=np.float64)
        norm = float(np.linalg.norm(n))
        if norm < 1e-12:
            raise ValueError("normal must be non-zero")
        n = n / norm
        return (float(n[0]), float(n[1]), float(n[2]))


ShapeConfig = Annotated[
    Union[SphereConfig, CuboidConfig, PlaneConfig],
    Field(discriminator="kind"),
]


class BoundsConfig(BaseModel):
    min: Vec3 = (-5.0, -5.0, -1.0)
    max: Vec3 = (5.0, 5.0, 6.0)

    @model_validator(mode="after")
    def _ordered(self) -> "BoundsConfig":
        if any(hi < lo for lo, hi in zip(self.min, self.max)):
            raise ValueError("bounds.max must not be below bounds.min")
        return self


class BoundariesConfig(BaseModel):
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    color: ColorSpec = "white"


class GroundConfig(BaseModel):
    height: float = 0.0
    color: ColorSpec = "white"


class ViewpointConfig(BaseModel):
    origin: Vec3
    direction: Vec3
    resolution_px: tuple[int, int] = (320, 240)
    fov_h_deg: float = Field(default=90.0, gt=0.0, lt=180.0)
    pixel_stride: int = Field(default=1, gt=0)
    max_range_m: float = Field(default=10.0, gt=0.0)


class NoiseConfig(BaseModel):
    sigma_range_m: float = Field(default=0.0, ge=0.0)
    keep_prob: float = Field(default=1.0, gt=0.0, le=1.0)


class SamplerConfigModel(BaseModel):
    batch_size_rays: int = 100_000


class OutputConfig(BaseModel):
    path: Path
    format: Literal["npz", "ply"] = "npz"


class WorldConfig(BaseModel):
    bounds: BoundsConfig = BoundsConfig()
    ground: Optional[GroundConfig] = None
    boundaries: Optional[BoundariesConfig] = None
    objects: List[ShapeConfig] = Field(default_factory=list)
    viewpoint: Optional[ViewpointConfig] = None
    noise: Optional[NoiseConfig] = None
    sampler: SamplerConfigModel = SamplerConfigModel()
    output: Optional[OutputConfig] = None
    seed: Optional[int] = None


def load_config(path: str | Path) -> WorldConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = WorldConfig.model_validate(data)
    if cfg.output is not None and not cfg.output.path.is_absolute():
        cfg.output.path = (path.parent / cfg.output.path).resolve()
    return cfg
