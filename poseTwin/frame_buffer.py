#!/usr/bin/env python3
"""
Frame Buffer - hand-off point between the detector thread and the render loop

The buffer holds a reference to the latest immutable FrameSnapshot. Publishing
builds a complete new snapshot and swaps the reference in one assignment, so a
reader always sees either the old frame or the new one, never a mix. The
writer lock only orders concurrent publishers and their version numbers;
readers never take it and never wait.
"""

import logging
import threading
import time
from typing import Optional, Sequence

from .protocol import FrameSnapshot, Position
from .topology import JOINT_COUNT

logger = logging.getLogger(__name__)


class FrameBuffer:
    """Single shared slot holding the newest FrameSnapshot"""

    def __init__(self, joint_count: int = JOINT_COUNT):
        self.joint_count = joint_count
        self._write_lock = threading.Lock()
        self._version = 0
        self._snapshot: FrameSnapshot = FrameSnapshot.no_detection(version=0)

    @property
    def version(self) -> int:
        """Version of the snapshot currently published"""
        return self._snapshot.version

    def latest(self) -> FrameSnapshot:
        """Return the current snapshot (non-blocking, safe from any thread)"""
        return self._snapshot

    def publish(self, positions: Optional[Sequence[Optional[Position]]],
                timestamp: Optional[float] = None) -> FrameSnapshot:
        """Build and publish a new snapshot.

        Args:
            positions: JOINT_COUNT render-space positions (None for unknown
                joints), or None for "no detection"
            timestamp: capture time; defaults to now

        Returns:
            The snapshot that was published
        """
        if timestamp is None:
            timestamp = time.time()

        if positions is not None and len(positions) != self.joint_count:
            raise ValueError(f"Expected {self.joint_count} positions, got {len(positions)}")

        with self._write_lock:
            self._version += 1
            if positions is None:
                snapshot = FrameSnapshot.no_detection(version=self._version, timestamp=timestamp)
            else:
                snapshot = FrameSnapshot(
                    detected=True,
                    positions=tuple(positions),
                    version=self._version,
                    timestamp=timestamp,
                )
            # Single reference swap; readers see old or new, never both
            self._snapshot = snapshot

        logger.debug(f"Published snapshot v{snapshot.version} (detected={snapshot.detected})")
        return snapshot

    def reset(self) -> FrameSnapshot:
        """Publish "no detection" (e.g. when the detector stops)"""
        return self.publish(None)
