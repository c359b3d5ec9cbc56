import math

import pytest

from poseTwin.topology import JOINT_COUNT


class Landmark:
    """Stand-in for a MediaPipe NormalizedLandmark"""
    def __init__(self, x, y, z, visibility=1.0):
        self.x = x
        self.y = y
        self.z = z
        self.visibility = visibility


def full_pose(scale=0.01):
    """33 landmarks at distinct, non-coincident positions"""
    return [Landmark(i * scale, 2 * i * scale, math.sin(i) * scale) for i in range(JOINT_COUNT)]


@pytest.fixture
def landmarks():
    return full_pose()
