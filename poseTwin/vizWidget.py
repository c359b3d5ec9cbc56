#!/usr/bin/env python3
"""
Qt OpenGL viewer widget for the pose twin

The widget's QTimer is the render context: each timeout repaints, and every
paint runs exactly one RenderSyncLoop tick before drawing.
"""

import logging
import math
import time
from typing import Optional

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtOpenGL import QGLWidget
from OpenGL.GL import *
from OpenGL.GLU import *

from .protocol import FrameSnapshot
from .render_sync import RenderSyncLoop
from .visualization import SkeletonVisualizer3D, draw_floor_grid

logger = logging.getLogger(__name__)


class SkeletonGLWidget(QGLWidget):
    """OpenGL widget drawing the joints and bones of a RenderSyncLoop

    Override individual draw_* methods to customize visualization without
    changing the core rendering loop.
    """

    def __init__(self, sync: RenderSyncLoop, fps: float = 60.0, parent=None):
        super(SkeletonGLWidget, self).__init__(parent)

        self.sync = sync
        self.visualizer = SkeletonVisualizer3D()

        # Fixed camera looking at the middle of the landmark space
        self.camera_distance = 2.2
        self.camera_azimuth = 0.0
        self.camera_elevation = 10.0
        self.camera_target = [-0.5, -0.5, 0.0]

        self._fps_time = time.time()
        self._fps_frames = 0
        self.render_fps = 0.0

        # Render timer
        self.update_timer = QTimer()
        self.update_timer.timeout.connect(self.update)
        self.update_timer.start(max(1, int(round(1000.0 / fps))))

        self.setFocusPolicy(Qt.StrongFocus)

    def close(self):
        """Stop the render timer and free GL resources"""
        if hasattr(self, 'update_timer'):
            self.update_timer.stop()
        self.makeCurrent()
        self.visualizer.release()
        super().close()

    # =========================================================================
    # OpenGL Initialization & Setup
    # =========================================================================

    def initializeGL(self):
        """Initialize OpenGL context - override to customize GL settings"""
        glEnable(GL_DEPTH_TEST)
        glEnable(GL_LIGHTING)
        glEnable(GL_LIGHT0)
        glEnable(GL_COLOR_MATERIAL)
        glColorMaterial(GL_FRONT_AND_BACK, GL_AMBIENT_AND_DIFFUSE)
        glLightfv(GL_LIGHT0, GL_POSITION, (0.0, 1.0, 1.0, 0.0))
        glClearColor(1.0, 1.0, 1.0, 1.0)

    def resizeGL(self, width, height):
        """Handle window resize"""
        glViewport(0, 0, width, height)
        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        aspect = width / max(1, height)
        gluPerspective(45.0, aspect, 0.01, 100.0)
        glMatrixMode(GL_MODELVIEW)

    def setup_camera_view(self):
        """Set up camera transformation - override for custom camera behavior"""
        yaw_rad = math.radians(self.camera_azimuth)
        pitch_rad = math.radians(self.camera_elevation)
        cam_x = self.camera_target[0] + self.camera_distance * math.cos(pitch_rad) * math.sin(yaw_rad)
        cam_y = self.camera_target[1] + self.camera_distance * math.sin(pitch_rad)
        cam_z = self.camera_target[2] + self.camera_distance * math.cos(pitch_rad) * math.cos(yaw_rad)
        gluLookAt(cam_x, cam_y, cam_z,
                  self.camera_target[0], self.camera_target[1], self.camera_target[2],
                  0, 1, 0)

    # =========================================================================
    # Main Rendering
    # =========================================================================

    def paintGL(self):
        """Main render loop - one sync tick, then the individual draw methods"""
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        glLoadIdentity()
        self.setup_camera_view()

        self.sync.tick()
        self._count_fps()

        self.draw_floor()
        self.draw_skeleton()
        self.draw_overlay(self.sync.snapshot)

    def draw_floor(self):
        """Draw floor grid below the figure"""
        glDisable(GL_LIGHTING)
        draw_floor_grid(size=2.0, spacing=0.1, height=-1.0,
                        center=(self.camera_target[0], self.camera_target[2]),
                        color=(0.8, 0.8, 0.8))
        glEnable(GL_LIGHTING)

    def draw_skeleton(self):
        """Draw shown joints and bones - override to customize skeleton visualization"""
        self.visualizer.draw_skeleton(self.sync)

    def draw_overlay(self, snapshot: Optional[FrameSnapshot]):
        """Draw detection status as 2D text"""
        glDisable(GL_LIGHTING)
        glColor3f(0.1, 0.1, 0.1)
        if snapshot is None or not snapshot.detected:
            status_text = "No pose detected"
        else:
            status_text = f"Joints: {snapshot.valid_count}/{len(snapshot.positions)}"
        try:
            self.renderText(10, 20, status_text)
            self.renderText(10, 38, f"Render: {self.render_fps:.0f} fps")
        except Exception as e:
            logger.debug(f"Overlay text failed: {e}")
        glEnable(GL_LIGHTING)

    def _count_fps(self):
        self._fps_frames += 1
        now = time.time()
        if now - self._fps_time >= 1.0:
            self.render_fps = self._fps_frames / (now - self._fps_time)
            self._fps_frames = 0
            self._fps_time = now

    def keyPressEvent(self, event):
        """Escape closes the window"""
        if event.key() == Qt.Key_Escape:
            self.window().close()
        else:
            super().keyPressEvent(event)
