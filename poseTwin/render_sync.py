#!/usr/bin/env python3
"""
Render Sync Loop

Owns one render entity per joint and per bone and refreshes their transforms
from the FrameBuffer once per render tick. The scene layer (OpenGL widget or
any other consumer) only reads the entities; nothing outside this loop
writes them.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .bone_solver import solve
from .enums import EntityState
from .frame_buffer import FrameBuffer
from .protocol import EntityTransform, FrameSnapshot, IDENTITY
from .topology import DEFAULT_TOPOLOGY, JointRole, SkeletonTopology

logger = logging.getLogger(__name__)


@dataclass
class JointEntity:
    index: int
    role: JointRole
    transform: EntityTransform = field(default_factory=EntityTransform)

    @property
    def shown(self) -> bool:
        return self.transform.shown


@dataclass
class BoneEntity:
    index: int
    endpoints: Tuple[int, int]
    radius: float
    transform: EntityTransform = field(default_factory=EntityTransform)

    @property
    def shown(self) -> bool:
        return self.transform.shown


class RenderSyncLoop:
    """Copies the newest snapshot into the joint and bone entities"""

    def __init__(self, frame_buffer: FrameBuffer, topology: SkeletonTopology = DEFAULT_TOPOLOGY,
                 on_tick: Optional[Callable[[FrameSnapshot], None]] = None):
        self.frame_buffer = frame_buffer
        self.topology = topology
        self.on_tick = on_tick

        self.joints: List[JointEntity] = [
            JointEntity(index=i, role=role) for i, role in enumerate(topology.joints)
        ]
        self.bones: List[BoneEntity] = [
            BoneEntity(index=b, endpoints=pair, radius=topology.bone_radius)
            for b, pair in enumerate(topology.bones)
        ]

        self.tick_count = 0
        self.snapshot: Optional[FrameSnapshot] = None  # snapshot used by the last tick

    def tick(self) -> int:
        """Run one render tick and return the snapshot version it used."""
        # One read per tick; every entity below sees the same frame
        snapshot = self.frame_buffer.latest()
        self.apply(snapshot)

        self.tick_count += 1
        if self.snapshot is None or snapshot.version != self.snapshot.version:
            logger.debug(f"Tick {self.tick_count}: rendering snapshot v{snapshot.version}")
        self.snapshot = snapshot

        if self.on_tick:
            self.on_tick(snapshot)
        return snapshot.version

    def apply(self, snapshot: FrameSnapshot):
        """Update every entity from the given snapshot."""
        if not snapshot.detected:
            self.hide_all()
            return

        for joint in self.joints:
            pos = snapshot.get(joint.index)
            t = joint.transform
            if pos is None:
                t.hide()
                continue
            t.placement = pos
            t.scale = joint.role.radius
            t.rotation = IDENTITY
            t.state = EntityState.SHOWN

        for bone in self.bones:
            t = bone.transform
            a = snapshot.get(bone.endpoints[0])
            b = snapshot.get(bone.endpoints[1])
            if a is None or b is None:
                t.hide()
                continue

            solved = solve(a, b)
            t.placement = solved.placement
            t.scale = solved.length
            t.rotation = solved.orientation
            t.state = EntityState.HIDDEN if solved.degenerate else EntityState.SHOWN

    def hide_all(self):
        for joint in self.joints:
            joint.transform.hide()
        for bone in self.bones:
            bone.transform.hide()

    def shown_joints(self) -> List[JointEntity]:
        return [j for j in self.joints if j.shown]

    def shown_bones(self) -> List[BoneEntity]:
        return [b for b in self.bones if b.shown]
