#!/usr/bin/env python3
"""
Pose Ingestion

Turns raw pose-estimator output into a FrameSnapshot and publishes it to the
FrameBuffer. Runs in the detector callback context.

Accepted input shapes:
    - None or an empty collection: no detection
    - MediaPipe Solutions results (results.pose_landmarks.landmark)
    - MediaPipe Tasks results (result.pose_landmarks[0])
    - a sequence of up to 33 landmark records, or a mapping {index: record}

A landmark record is an object with x/y/z attributes, a mapping with x/y/z
keys, a 3-sequence, or None for a missing landmark. Missing, malformed and
non-finite landmarks become unknown joints; they are never replaced by a
default position.
"""

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np

from .frame_buffer import FrameBuffer
from .protocol import FrameSnapshot, Position
from .topology import DEFAULT_TOPOLOGY, SkeletonTopology
from .vecMathHelper import is_finite_point, to_render_space

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class IngestionStats:
    """Counters kept by the ingestion context"""
    frames: int = 0
    no_detection_frames: int = 0
    missing_landmarks: int = 0
    rejected_landmarks: int = 0


class PoseIngestor:
    """Validates detector output and publishes render-space snapshots"""

    def __init__(self,
                 frame_buffer: FrameBuffer,
                 topology: SkeletonTopology = DEFAULT_TOPOLOGY,
                 min_visibility: Optional[float] = None):
        """
        Args:
            frame_buffer: buffer receiving every new snapshot
            topology: skeleton topology; its joint count bounds landmark slots
            min_visibility: if set, landmarks reporting a visibility below this
                value are treated as unknown
        """
        if frame_buffer.joint_count != topology.joint_count:
            raise ValueError(
                f"Frame buffer holds {frame_buffer.joint_count} joints, topology has {topology.joint_count}")
        self.frame_buffer = frame_buffer
        self.topology = topology
        self.min_visibility = min_visibility
        self.stats = IngestionStats()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def ingest(self, raw: Any, timestamp: Optional[float] = None) -> FrameSnapshot:
        """Convert raw detector output and publish it as the newest snapshot."""
        positions = self._convert(raw)
        self.stats.frames += 1
        if positions is None:
            self.stats.no_detection_frames += 1
        return self.frame_buffer.publish(positions, timestamp)

    def build_snapshot(self, raw: Any, timestamp: Optional[float] = None) -> FrameSnapshot:
        """Convert raw detector output without publishing it (version 0)."""
        if timestamp is None:
            timestamp = time.time()
        positions = self._convert(raw)
        if positions is None:
            return FrameSnapshot.no_detection(timestamp=timestamp)
        return FrameSnapshot(detected=True, positions=tuple(positions), timestamp=timestamp)

    # Detector callbacks can hand results straight to the ingestor
    __call__ = ingest

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def _convert(self, raw: Any) -> Optional[List[Optional[Position]]]:
        records = self._landmark_slots(raw)
        if records is None:
            return None

        positions: List[Optional[Position]] = []
        for index, record in enumerate(records):
            if record is None:
                self.stats.missing_landmarks += 1
                positions.append(None)
                continue

            point = self._read_record(index, record)
            if point is None:
                self.stats.rejected_landmarks += 1
                positions.append(None)
                continue

            x, y, z = to_render_space(point).tolist()
            positions.append(Position(x, y, z))
        return positions

    def _landmark_slots(self, raw: Any) -> Optional[List[Any]]:
        """Normalise raw output to a list of joint_count records, or None."""
        landmarks = _unwrap_results(raw)
        if landmarks is None:
            return None

        count = self.topology.joint_count
        slots: List[Any] = [None] * count

        if isinstance(landmarks, Mapping):
            if not landmarks:
                return None
            for key, record in landmarks.items():
                if isinstance(key, int) and 0 <= key < count:
                    slots[key] = record
                else:
                    logger.debug(f"Ignoring landmark with index {key!r}")
            return slots

        try:
            landmarks = list(landmarks)
        except TypeError:
            logger.debug(f"Unsupported detector output {type(landmarks).__name__}, treating as no detection")
            return None
        if not landmarks:
            return None
        if len(landmarks) > count:
            logger.debug(f"Ignoring {len(landmarks) - count} landmarks beyond index {count - 1}")
        for i, record in enumerate(landmarks[:count]):
            slots[i] = record
        return slots

    def _read_record(self, index: int, record: Any) -> Optional[Tuple[float, float, float]]:
        """Extract a finite (x, y, z) from one landmark record, None if unusable."""
        try:
            if isinstance(record, Mapping):
                x, y, z = float(record["x"]), float(record["y"]), float(record["z"])
                visibility = record.get("visibility")
            elif hasattr(record, "x") and hasattr(record, "y") and hasattr(record, "z"):
                x, y, z = float(record.x), float(record.y), float(record.z)
                visibility = getattr(record, "visibility", None)
            elif isinstance(record, (Sequence, np.ndarray)) and not isinstance(record, (str, bytes)) and len(record) >= 3:
                x, y, z = float(record[0]), float(record[1]), float(record[2])
                visibility = None
            else:
                logger.debug(f"Landmark {index}: unsupported record type {type(record).__name__}")
                return None
            if visibility is not None:
                visibility = float(visibility)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Landmark {index}: malformed record ({e})")
            return None

        if not is_finite_point((x, y, z)):
            logger.debug(f"Landmark {index}: non-finite coordinates ({x}, {y}, {z})")
            return None

        if self.min_visibility is not None and visibility is not None:
            if visibility < self.min_visibility:
                return None

        return x, y, z


def _unwrap_results(raw: Any) -> Any:
    """Strip MediaPipe result wrappers down to the landmark collection."""
    if raw is None:
        return None

    pose_landmarks = getattr(raw, "pose_landmarks", _MISSING)
    if pose_landmarks is not _MISSING:
        if pose_landmarks is None:
            return None
        # Solutions API: NormalizedLandmarkList
        if hasattr(pose_landmarks, "landmark"):
            return pose_landmarks.landmark
        # Tasks API: one landmark list per detected pose, first pose wins
        if isinstance(pose_landmarks, Sequence):
            return pose_landmarks[0] if pose_landmarks else None
        return None

    if hasattr(raw, "landmark"):
        return raw.landmark
    return raw
