"""poseTwin

Live 3D stick-figure twin driven by pose-estimator landmarks.

This file intentionally avoids importing heavy optional dependencies (OpenGL,
PyQt5, MediaPipe, OpenCV) so that the core can be imported on headless
machines. Import vizWidget, visualization, detector and twinClient lazily
from application entrypoints.
"""

from .enums import EntityState, PoseLandmark, RadiusClass
from .topology import DEFAULT_TOPOLOGY, JOINT_COUNT, POSE_CONNECTIONS, SkeletonTopology, TopologyError
from .protocol import BoneTransform, EntityTransform, FrameSnapshot, Position, Quaternion
from .vecMathHelper import rotation_from_vector_to_vector, to_render_space
from .bone_solver import solve, solve_bone
from .frame_buffer import FrameBuffer
from .ingestion import PoseIngestor
from .render_sync import RenderSyncLoop

__all__ = [
    'EntityState', 'PoseLandmark', 'RadiusClass',
    'DEFAULT_TOPOLOGY', 'JOINT_COUNT', 'POSE_CONNECTIONS', 'SkeletonTopology', 'TopologyError',
    'BoneTransform', 'EntityTransform', 'FrameSnapshot', 'Position', 'Quaternion',
    'rotation_from_vector_to_vector', 'to_render_space',
    'solve', 'solve_bone',
    'FrameBuffer', 'PoseIngestor', 'RenderSyncLoop',
]
