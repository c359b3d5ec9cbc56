from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .enums import EntityState
from .topology import JOINT_COUNT


# Lightweight value types, immutable so snapshots can be shared across threads
@dataclass(frozen=True)
class Position:
    """3D position with reduced memory footprint via __slots__"""
    __slots__ = ("x", "y", "z")
    x: float
    y: float
    z: float

    def to_list(self) -> List[float]:
        """Convert to list for compact JSON serialization"""
        return [float(self.x), float(self.y), float(self.z)]

    @staticmethod
    def from_list(d: Sequence[float]) -> "Position":
        """Create from the [x, y, z] list written by to_list"""
        return Position(x=float(d[0]), y=float(d[1]), z=float(d[2]))


@dataclass(frozen=True)
class Quaternion:
    """Quaternion orientation with reduced memory footprint via __slots__"""
    __slots__ = ("x", "y", "z", "w")
    x: float
    y: float
    z: float
    w: float

    def to_list(self) -> List[float]:
        """Convert to list [x, y, z, w] (scipy order)"""
        return [float(self.x), float(self.y), float(self.z), float(self.w)]

    @staticmethod
    def identity() -> "Quaternion":
        return Quaternion(0.0, 0.0, 0.0, 1.0)


ORIGIN = Position(0.0, 0.0, 0.0)
IDENTITY = Quaternion.identity()


@dataclass(frozen=True)
class FrameSnapshot:
    """One fully formed set of render-space joint positions.

    `positions` always holds JOINT_COUNT entries; None marks an unknown joint.
    A snapshot with `detected=False` is the "no detection" value and carries
    no positions at all. `version` and `timestamp` are bookkeeping and do not
    take part in equality, so two ingestions of the same detector output
    compare equal.
    """
    detected: bool
    positions: Tuple[Optional[Position], ...] = ()
    version: int = field(default=0, compare=False)
    timestamp: float = field(default=0.0, compare=False)

    @staticmethod
    def no_detection(version: int = 0, timestamp: float = 0.0) -> "FrameSnapshot":
        return FrameSnapshot(detected=False, positions=(), version=version, timestamp=timestamp)

    def is_valid(self, index: int) -> bool:
        """True if the joint at index has a known position in this snapshot"""
        if not self.detected or not (0 <= index < len(self.positions)):
            return False
        return self.positions[index] is not None

    def get(self, index: int) -> Optional[Position]:
        if not self.is_valid(index):
            return None
        return self.positions[index]

    @property
    def valid_count(self) -> int:
        return sum(1 for p in self.positions if p is not None)

    def to_dict(self):
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "detected": self.detected,
            "positions": [p.to_list() if p is not None else None for p in self.positions],
        }

    @staticmethod
    def from_dict(d):
        if not d.get("detected"):
            return FrameSnapshot.no_detection(d.get("version", 0), d.get("timestamp", 0.0))
        positions = tuple(Position.from_list(p) if p is not None else None for p in d["positions"])
        if len(positions) != JOINT_COUNT:
            raise ValueError(f"Snapshot must hold {JOINT_COUNT} positions, got {len(positions)}")
        return FrameSnapshot(
            detected=True,
            positions=positions,
            version=d.get("version", 0),
            timestamp=d.get("timestamp", 0.0),
        )


@dataclass(frozen=True)
class BoneTransform:
    """Solved placement of one bone segment"""
    placement: Position     # midpoint between the two joints
    length: float           # scale along the reference axis
    orientation: Quaternion  # rotation taking the reference axis onto the bone
    degenerate: bool = False  # coincident joints, nothing to draw


@dataclass
class EntityTransform:
    """Per-entity output handed to the scene layer.

    Joints use a uniform `scale` (their radius) and identity rotation; bones use
    `scale` as their length along the reference axis.
    """
    placement: Position = ORIGIN
    scale: float = 0.0
    rotation: Quaternion = IDENTITY
    state: EntityState = EntityState.HIDDEN

    @property
    def shown(self) -> bool:
        return self.state == EntityState.SHOWN

    def hide(self):
        self.state = EntityState.HIDDEN
