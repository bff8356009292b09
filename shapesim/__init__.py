"""shapesim – analytic scene objects for synthetic range sensing.

This package contains:
- Sphere / Cuboid / Plane shapes answering distance and ray queries (core.shapes)
- SimulationWorld aggregating nearest hits and minimum distances (core.world)
- RayBundle, RayHits & ShapeIntersector (core.intersector)
- PointBatch and NPZ/PLY writers (core.pointcloud, core.exporter)
- Sampler streaming sensor rays into point clouds (core.sampler)
- A viewpoint depth camera with optional range noise (sensors)
"""

from .core.shapes import (
    AnyShape, Color, Cuboid, Plane, RayHit, Shape, ShapeKind, Sphere,
    UnsupportedQueryError,
)
from .core.world import SimulationWorld
from .core.intersector import RayBundle, RayHits, Intersector, ShapeIntersector
from .core.pointcloud import PointBatch
from .core.exporter import NpzWriter, PlyWriter
from .core.sampler import Sampler, SamplerConfig
from .sensors.viewpoint import ViewpointSensor
from .sensors.patterns import CameraPattern
