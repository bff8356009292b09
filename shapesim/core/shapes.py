"""Analytic scene objects for synthetic range sensing and ground-truth SDFs.

Every shape answers the same two queries:

- ``distance_to(point)``: distance from ``point`` to the surface. Sphere and
  plane distances are signed; the cuboid uses a nearest-point distance with an
  interior fallback (see :class:`Cuboid`).
- ``intersect_ray(origin, direction, max_distance)``: first surface crossing
  along a unit-length ray, or ``None``.

Inputs are preconditions, not runtime checks: plane normals and ray
directions must already be unit length, radii and half extents non-negative.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, Dict, Optional, Protocol, Union
import numpy as np

from .utils import as_point

INTERIOR_EPSILON = 1e-6
PARALLEL_EPSILON = 1e-6


class UnsupportedQueryError(NotImplementedError):
    """Raised when a shape variant cannot answer a query."""


class ShapeKind(str, Enum):
    SPHERE = "sphere"
    CUBOID = "cuboid"
    PLANE = "plane"


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            value = int(getattr(self, name))
            if not 0 <= value <= 255:
                raise ValueError(f"Color channel '{name}' out of range: {value}")
            object.__setattr__(self, name, value)

    def rgb(self) -> np.ndarray:
        return np.array([self.r, self.g, self.b], dtype=np.uint8)

    @classmethod
    def white(cls) -> "Color":
        return cls(255, 255, 255)

    @classmethod
    def black(cls) -> "Color":
        return cls(0, 0, 0)

    @classmethod
    def gray(cls) -> "Color":
        return cls(127, 127, 127)

    @classmethod
    def red(cls) -> "Color":
        return cls(255, 0, 0)

    @classmethod
    def green(cls) -> "Color":
        return cls(0, 255, 0)

    @classmethod
    def blue(cls) -> "Color":
        return cls(0, 0, 255)

    @classmethod
    def yellow(cls) -> "Color":
        return cls(255, 255, 0)

    @classmethod
    def orange(cls) -> "Color":
        return cls(255, 127, 0)

    @classmethod
    def purple(cls) -> "Color":
        return cls(127, 0, 255)

    @classmethod
    def teal(cls) -> "Color":
        return cls(0, 255, 255)

    @classmethod
    def pink(cls) -> "Color":
        return cls(255, 0, 127)

    @classmethod
    def from_name(cls, name: str) -> "Color":
        factory = _PRESETS.get(name.lower())
        if factory is None:
            raise ValueError(f"Unknown color preset '{name}'")
        return factory()


_PRESETS: Dict[str, Callable[[], Color]] = {
    name: getattr(Color, name)
    for name in ("white", "black", "gray", "red", "green", "blue",
                 "yellow", "orange", "purple", "teal", "pink")
}


@dataclass(frozen=True, eq=False)
class RayHit:
    point: np.ndarray     # (3,)
    distance: float       # along the ray, in [0, max_distance]


def _frozen_point(p) -> np.ndarray:
    arr = as_point(p).copy()
    arr.setflags(write=False)
    return arr


class Shape(Protocol):
    kind: ClassVar[ShapeKind]
    center: np.ndarray
    color: Color

    def distance_to(self, point) -> float: ...

    def intersect_ray(self, origin, direction, max_distance: float) -> Optional[RayHit]: ...

    def get_color(self) -> Color: ...


@dataclass(frozen=True, eq=False)
class Sphere:
    """Solid ball. Signed distance, near-root ray intersection."""

    kind: ClassVar[ShapeKind] = ShapeKind.SPHERE

    center: np.ndarray
    radius: float
    color: Color = field(default_factory=Color.white)

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _frozen_point(self.center))
        object.__setattr__(self, "radius", float(self.radius))

    def get_color(self) -> Color:
        return self.color

    def distance_to(self, point) -> float:
        p = as_point(point)
        return float(np.linalg.norm(self.center - p) - self.radius)

    def intersect_ray(self, origin, direction, max_distance: float) -> Optional[RayHit]:
        # Line-sphere intersection with x = o + d*u substituted into |x - c| = r.
        if max_distance <= 0.0:
            return None
        o = as_point(origin)
        u = as_point(direction)
        oc = o - self.center
        b = float(np.dot(u, oc))
        discriminant = b * b - float(np.dot(oc, oc)) + self.radius * self.radius
        if discriminant < 0.0:
            return None

        # Entry point only, never the exit point.
        d = -b - float(np.sqrt(discriminant))
        if d < 0.0:
            return None
        if d > max_distance:
            return None
        return RayHit(point=o + d * u, distance=d)


@dataclass(frozen=True, eq=False)
class Cuboid:
    """Axis-aligned box given by its center and per-axis half extents.

    The distance is the nearest-point-on-box distance outside the box. Inside
    (and on the surface) every clamped axis term is zero, so the norm falls
    below ``INTERIOR_EPSILON`` and the unclamped per-axis maximum is returned
    instead: a non-positive penetration depth of the least-penetrating axis.
    The two branches do not meet smoothly at the surface.

    Ray intersection is not available for boxes and raises
    :class:`UnsupportedQueryError`.
    """

    kind: ClassVar[ShapeKind] = ShapeKind.CUBOID

    center: np.ndarray
    half_extents: np.ndarray
    color: Color = field(default_factory=Color.white)

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _frozen_point(self.center))
        object.__setattr__(self, "half_extents", _frozen_point(self.half_extents))

    def get_color(self) -> Color:
        return self.color

    def distance_to(self, point) -> float:
        p = as_point(point)
        below = self.center - self.half_extents - p
        above = p - self.center - self.half_extents
        distance = float(np.linalg.norm(np.maximum(np.maximum(below, 0.0), above)))
        if distance < INTERIOR_EPSILON:
            distance = float(np.max(np.maximum(below, above)))
        return distance

    def intersect_ray(self, origin, direction, max_distance: float) -> Optional[RayHit]:
        raise UnsupportedQueryError("Ray intersection is not implemented for cuboids.")


@dataclass(frozen=True, eq=False)
class Plane:
    """Infinite plane through ``center``. ``normal`` must be unit length."""

    kind: ClassVar[ShapeKind] = ShapeKind.PLANE

    center: np.ndarray
    normal: np.ndarray
    color: Color = field(default_factory=Color.white)

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _frozen_point(self.center))
        object.__setattr__(self, "normal", _frozen_point(self.normal))

    def get_color(self) -> Color:
        return self.color

    def distance_to(self, point) -> float:
        p = as_point(point)
        # 'd' of the implicit form n.x + d = 0.
        d = -float(np.dot(self.normal, self.center))
        return (float(np.dot(self.normal, p)) + d) / float(np.linalg.norm(self.normal))

    def intersect_ray(self, origin, direction, max_distance: float) -> Optional[RayHit]:
        if max_distance <= 0.0:
            return None
        o = as_point(origin)
        u = as_point(direction)
        denominator = float(np.dot(u, self.normal))
        if abs(denominator) < PARALLEL_EPSILON:
            return None
        d = float(np.dot(self.center - o, self.normal)) / denominator
        if d < 0.0:
            return None
        if d > max_distance:
            return None
        return RayHit(point=o + d * u, distance=d)


AnyShape = Union[Sphere, Cuboid, Plane]
