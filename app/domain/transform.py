from __future__ import annotations

"""World transforms for spawned entities.

Transforms are mutable (the editor grabs and scales boxes in place) and
serialise to plain dicts for level files:

    {position: {x, y, z}, rotation: {x, y, z, w}, scale: {x, y, z}}
"""

from dataclasses import dataclass, field
from typing import Any, Mapping


def _num(mapping: Any, key: str, default: float) -> float:
    if not isinstance(mapping, Mapping):
        return float(default)
    value = mapping.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("Expected a number for {!r}, got {!r}".format(key, value))
    return float(value)


@dataclass
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"x": float(self.x), "y": float(self.y), "z": float(self.z)}

    @classmethod
    def from_dict(cls, data: Any, default: float = 0.0) -> "Vec3":
        return cls(_num(data, "x", default), _num(data, "y", default), _num(data, "z", default))

    @classmethod
    def uniform(cls, value: float) -> "Vec3":
        return cls(float(value), float(value), float(value))


@dataclass
class Quaternion:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def to_dict(self) -> dict[str, float]:
        return {"x": float(self.x), "y": float(self.y), "z": float(self.z), "w": float(self.w)}

    @classmethod
    def from_dict(cls, data: Any) -> "Quaternion":
        return cls(_num(data, "x", 0.0), _num(data, "y", 0.0), _num(data, "z", 0.0), _num(data, "w", 1.0))


@dataclass
class Transform:
    position: Vec3 = field(default_factory=Vec3)
    rotation: Quaternion = field(default_factory=Quaternion)
    scale: Vec3 = field(default_factory=lambda: Vec3(1.0, 1.0, 1.0))

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {
            "position": self.position.to_dict(),
            "rotation": self.rotation.to_dict(),
            "scale": self.scale.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Transform":
        """Build a Transform from a level record; raises ValueError on bad input."""
        if not isinstance(data, Mapping):
            raise ValueError("Transform must be a mapping, got {!r}".format(type(data).__name__))
        return cls(
            position=Vec3.from_dict(data.get("position"), 0.0),
            rotation=Quaternion.from_dict(data.get("rotation")),
            scale=Vec3.from_dict(data.get("scale"), 1.0),
        )

    def copy(self) -> "Transform":
        return Transform.from_dict(self.to_dict())
