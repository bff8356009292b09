from __future__ import annotations

from typing import Optional

from ..config.schema import (
    ColorSpec,
    CuboidConfig,
    PlaneConfig,
    ShapeConfig,
    SphereConfig,
    WorldConfig,
)
from ..core.exporter import NpzWriter, PlyWriter
from ..core.shapes import AnyShape, Color, Cuboid, Plane, Sphere
from ..core.utils import get_logger
from ..core.world import SimulationWorld
from ..motion.pose import Pose
from ..sensors.noise import RangeNoise
from ..sensors.patterns import CameraPattern
from ..sensors.viewpoint import ViewpointSensor

_log = get_logger()


def build_color(value: ColorSpec) -> Color:
    if isinstance(value, str):
        return Color.from_name(value)
    return Color(*value)


def build_shape(shape_cfg: ShapeConfig) -> AnyShape:
    color = build_color(shape_cfg.color)
    if isinstance(shape_cfg, SphereConfig):
        return Sphere(center=shape_cfg.center, radius=shape_cfg.radius, color=color)
    if isinstance(shape_cfg, CuboidConfig):
        return Cuboid(center=shape_cfg.center, half_extents=shape_cfg.half_extents, color=color)
    if isinstance(shape_cfg, PlaneConfig):
        return Plane(center=shape_cfg.center, normal=shape_cfg.normal, color=color)
    raise ValueError(f"Unsupported shape kind: {getattr(shape_cfg, 'kind', shape_cfg)}")


def build_world(cfg: WorldConfig) -> SimulationWorld:
    world = SimulationWorld(min_bound=cfg.bounds.min, max_bound=cfg.bounds.max)
    if cfg.ground is not None:
        world.add_ground_level(cfg.ground.height, color=build_color(cfg.ground.color))
    if cfg.boundaries is not None:
        b = cfg.boundaries
        world.add_plane_boundaries(b.x_min, b.x_max, b.y_min, b.y_max, color=build_color(b.color))
    for shape_cfg in cfg.objects:
        world.add_object(build_shape(shape_cfg))
    _log.info("Built world with %d objects.", len(world))
    return world


def build_noise(cfg: WorldConfig) -> Optional[RangeNoise]:
    if cfg.noise is None:
        return None
    return RangeNoise(sigma_range_m=cfg.noise.sigma_range_m, keep_prob=cfg.noise.keep_prob)


def build_sensor(cfg: WorldConfig, noise: Optional[RangeNoise] = None) -> ViewpointSensor:
    vp = cfg.viewpoint
    if vp is None:
        raise ValueError("Scenario requires a viewpoint configuration")
    pattern = CameraPattern(
        resolution_px=vp.resolution_px,
        fov_h_deg=vp.fov_h_deg,
        pixel_stride=vp.pixel_stride,
    )
    return ViewpointSensor(
        pattern=pattern,
        pose=Pose.look_along(vp.origin, vp.direction),
        max_range_m=vp.max_range_m,
        noise=noise,
    )


def build_writer(cfg: WorldConfig):
    out_cfg = cfg.output
    if out_cfg is None:
        raise ValueError("Scenario requires an output configuration")
    if out_cfg.format == "npz":
        return NpzWriter(str(out_cfg.path))
    if out_cfg.format == "ply":
        return PlyWriter(str(out_cfg.path))
    raise ValueError(f"Unsupported output format: {out_cfg.format}")
