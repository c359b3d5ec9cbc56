#!/usr/bin/env python3
"""Tests for pose ingestion and the frame buffer"""
import math
import threading
from types import SimpleNamespace

import numpy as np
import pytest

from conftest import Landmark, full_pose
from poseTwin.frame_buffer import FrameBuffer
from poseTwin.ingestion import PoseIngestor
from poseTwin.protocol import FrameSnapshot, Position
from poseTwin.topology import JOINT_COUNT


@pytest.fixture
def buffer():
    return FrameBuffer()


@pytest.fixture
def ingestor(buffer):
    return PoseIngestor(buffer)


# -----------------------------------------------------------------------------
# Frame buffer
# -----------------------------------------------------------------------------

def test_buffer_starts_with_no_detection(buffer):
    snap = buffer.latest()
    assert not snap.detected
    assert snap.version == 0


def test_publish_bumps_version(buffer):
    first = buffer.publish(None)
    second = buffer.publish([None] * JOINT_COUNT)
    assert (first.version, second.version) == (1, 2)
    assert buffer.latest() is second
    assert buffer.version == 2


def test_publish_rejects_wrong_joint_count(buffer):
    with pytest.raises(ValueError):
        buffer.publish([None] * 10)


def test_published_snapshot_does_not_alias_input(buffer):
    positions = [Position(0.0, 0.0, 0.0)] * JOINT_COUNT
    snap = buffer.publish(positions)
    positions[0] = None
    assert snap.positions[0] == Position(0.0, 0.0, 0.0)


def test_reset_publishes_no_detection(buffer):
    buffer.publish([Position(1.0, 1.0, 1.0)] * JOINT_COUNT)
    buffer.reset()
    assert not buffer.latest().detected


def test_reader_never_sees_mixed_frames(buffer):
    """Every joint of frame k sits at (k, k, k); a mixed read would disagree"""
    stop = threading.Event()
    frames = 3000

    def writer():
        for k in range(1, frames + 1):
            buffer.publish([Position(k, k, k)] * JOINT_COUNT)
        stop.set()

    t = threading.Thread(target=writer)
    t.start()
    reads = 0
    while not stop.is_set() or reads == 0:
        snap = buffer.latest()
        if snap.detected:
            values = {p.x for p in snap.positions}
            assert len(values) == 1
            assert values.pop() == snap.version
        reads += 1
    t.join()
    assert buffer.latest().version == frames


# -----------------------------------------------------------------------------
# Ingestion
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("raw", [
    None,
    [],
    {},
    SimpleNamespace(pose_landmarks=None),
    SimpleNamespace(pose_landmarks=[]),
])
def test_no_detection_inputs(ingestor, buffer, raw):
    snap = ingestor.ingest(raw)
    assert not snap.detected
    assert buffer.latest() is snap
    assert ingestor.stats.no_detection_frames == 1


def test_full_frame_is_transformed(ingestor, landmarks):
    snap = ingestor.ingest(landmarks)
    assert snap.detected
    assert snap.valid_count == JOINT_COUNT
    for lm, pos in zip(landmarks, snap.positions):
        assert pos == Position(-lm.x, -lm.y, -lm.z)


def test_missing_landmarks_are_unknown(ingestor):
    raw = [Landmark(0.0, 0.0, 0.0), Landmark(1.0, 1.0, 0.0)]
    snap = ingestor.ingest(raw)
    assert snap.detected
    assert len(snap.positions) == JOINT_COUNT
    assert snap.get(0) == Position(0.0, 0.0, 0.0)
    assert snap.get(1) == Position(-1.0, -1.0, 0.0)
    assert all(p is None for p in snap.positions[2:])
    assert not snap.is_valid(2)


def test_none_entries_are_unknown_not_zero(ingestor, landmarks):
    landmarks[5] = None
    snap = ingestor.ingest(landmarks)
    assert snap.positions[5] is None
    assert snap.valid_count == JOINT_COUNT - 1
    assert ingestor.stats.missing_landmarks == 1


@pytest.mark.parametrize("bad", [
    Landmark(math.nan, 0.0, 0.0),
    Landmark(0.0, math.inf, 0.0),
    Landmark(0.0, 0.0, -math.inf),
    {"x": 0.1, "y": 0.2},
    "not a landmark",
    (0.1, "y", 0.3),
    Landmark(0.1, 0.2, 0.3, visibility="high"),
])
def test_malformed_landmarks_are_rejected(ingestor, landmarks, bad):
    landmarks[3] = bad
    snap = ingestor.ingest(landmarks)
    assert snap.positions[3] is None
    assert snap.valid_count == JOINT_COUNT - 1
    assert ingestor.stats.rejected_landmarks == 1


@pytest.mark.parametrize("visibility", ["high", None, object()])
def test_unreadable_visibility_with_threshold(buffer, landmarks, visibility):
    ingestor = PoseIngestor(buffer, min_visibility=0.5)
    landmarks[3].visibility = visibility
    snap = ingestor.ingest(landmarks)
    assert snap.detected
    if visibility is None:
        # no visibility reported, nothing to filter on
        assert snap.positions[3] is not None
        assert ingestor.stats.rejected_landmarks == 0
    else:
        assert snap.positions[3] is None
        assert ingestor.stats.rejected_landmarks == 1
    assert snap.is_valid(4)


@pytest.mark.parametrize("raw", [42, 3.5, object()])
def test_unsupported_output_is_no_detection(ingestor, buffer, raw):
    snap = ingestor.ingest(raw)
    assert not snap.detected
    assert buffer.latest() is snap
    assert ingestor.stats.no_detection_frames == 1


def test_record_shapes(ingestor):
    raw = [
        {"x": 0.1, "y": 0.2, "z": 0.3},
        (0.4, 0.5, 0.6),
        np.array([0.7, 0.8, 0.9]),
        Position(1.0, 1.1, 1.2),
    ]
    snap = ingestor.ingest(raw)
    assert snap.get(0) == Position(-0.1, -0.2, -0.3)
    assert snap.get(1) == Position(-0.4, -0.5, -0.6)
    assert snap.get(2) == Position(-0.7, -0.8, -0.9)
    assert snap.get(3) == Position(-1.0, -1.1, -1.2)


def test_mapping_input(ingestor):
    snap = ingestor.ingest({0: Landmark(0.0, 0.0, 0.0), 32: Landmark(0.5, 0.5, 0.5), 40: Landmark(1, 1, 1)})
    assert snap.is_valid(0)
    assert snap.is_valid(32)
    assert snap.valid_count == 2


def test_extra_landmarks_are_ignored(ingestor, landmarks):
    snap = ingestor.ingest(landmarks + [Landmark(9.0, 9.0, 9.0)] * 5)
    assert len(snap.positions) == JOINT_COUNT
    assert snap.valid_count == JOINT_COUNT


def test_mediapipe_solutions_results(ingestor, landmarks):
    results = SimpleNamespace(pose_landmarks=SimpleNamespace(landmark=landmarks))
    snap = ingestor.ingest(results)
    assert snap.valid_count == JOINT_COUNT


def test_mediapipe_tasks_results(ingestor, landmarks):
    result = SimpleNamespace(pose_landmarks=[landmarks, full_pose(0.02)])
    snap = ingestor.ingest(result)
    assert snap.get(1) == Position(-landmarks[1].x, -landmarks[1].y, -landmarks[1].z)


def test_min_visibility(buffer, landmarks):
    ingestor = PoseIngestor(buffer, min_visibility=0.5)
    landmarks[7].visibility = 0.2
    landmarks[8].visibility = 0.5
    snap = ingestor.ingest(landmarks)
    assert snap.positions[7] is None
    assert snap.positions[8] is not None


def test_same_input_gives_identical_snapshots(ingestor, landmarks):
    first = ingestor.ingest(landmarks)
    second = ingestor.ingest(landmarks)
    assert first == second
    assert first.positions == second.positions
    assert second.version == first.version + 1


def test_build_snapshot_does_not_publish(ingestor, buffer, landmarks):
    snap = ingestor.build_snapshot(landmarks)
    assert snap.detected
    assert buffer.version == 0
    assert snap == ingestor.ingest(landmarks)


def test_ingestor_is_callable_with_timestamp(ingestor, landmarks):
    snap = ingestor(landmarks, 123.5)
    assert snap.timestamp == 123.5


def test_topology_and_buffer_must_agree():
    with pytest.raises(ValueError):
        PoseIngestor(FrameBuffer(joint_count=17))


def test_snapshot_dict_conversion(ingestor, landmarks):
    landmarks[4] = None
    snap = ingestor.ingest(landmarks)
    restored = FrameSnapshot.from_dict(snap.to_dict())
    assert restored == snap
    assert restored.version == snap.version
    assert not FrameSnapshot.from_dict(FrameSnapshot.no_detection().to_dict()).detected
