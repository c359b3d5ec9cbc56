import numpy as np
from OpenGL.GL import *
from OpenGL.GLU import *

from .render_sync import BoneEntity, JointEntity, RenderSyncLoop
from .topology import BONE_COLOR
from .vecMathHelper import quat_to_axis_angle


class SkeletonVisualizer3D:
    """
    Draws the entities of a RenderSyncLoop with OpenGL: spheres for joints and
    cylinders for bones. Must be used from the thread owning the GL context.
    """
    def __init__(self, slices=12, stacks=8):
        self.slices = slices
        self.stacks = stacks
        self._quadric = None

    def _get_quadric(self):
        # Quadrics need a current GL context, so create on first draw
        if self._quadric is None:
            self._quadric = gluNewQuadric()
            gluQuadricNormals(self._quadric, GLU_SMOOTH)
        return self._quadric

    def release(self):
        if self._quadric is not None:
            gluDeleteQuadric(self._quadric)
            self._quadric = None

    def draw_joint(self, joint: JointEntity, color=None):
        """
        Draws one joint as a sphere.
        :param joint: JointEntity (placement + uniform scale = radius)
        :param color: RGB tuple, defaults to the joint's colour class
        """
        t = joint.transform
        glColor3f(*(color or joint.role.color))
        glPushMatrix()
        glTranslatef(t.placement.x, t.placement.y, t.placement.z)
        gluSphere(self._get_quadric(), t.scale, self.slices, self.stacks)
        glPopMatrix()

    def draw_bone(self, bone: BoneEntity, color=BONE_COLOR):
        """
        Draws one bone as a cylinder centred on its placement.
        The solved rotation maps +Y onto the bone; gluCylinder extrudes along +Z,
        so the cylinder is first turned from +Z to +Y.
        """
        t = bone.transform
        angle, axis = quat_to_axis_angle(t.rotation)

        glColor3f(*color)
        glPushMatrix()
        glTranslatef(t.placement.x, t.placement.y, t.placement.z)
        if angle != 0.0:
            glRotatef(angle, axis[0], axis[1], axis[2])
        glRotatef(-90.0, 1.0, 0.0, 0.0)
        glTranslatef(0.0, 0.0, -0.5 * t.scale)
        gluCylinder(self._get_quadric(), bone.radius, bone.radius, t.scale, self.slices, 1)
        glPopMatrix()

    def draw_skeleton(self, sync: RenderSyncLoop, bone_color=BONE_COLOR):
        """Draws every shown bone, then every shown joint on top."""
        for bone in sync.bones:
            if bone.shown:
                self.draw_bone(bone, bone_color)
        for joint in sync.joints:
            if joint.shown:
                self.draw_joint(joint)


def draw_floor_grid(size=2.0, spacing=0.1, height=-1.0, center=(0.0, 0.0), color=(0.3, 0.3, 0.3)):
    """
    Draw a floor grid for spatial reference.
    :param size: Total size of the grid (render-space units)
    :param spacing: Spacing between grid lines
    :param height: Y-coordinate of the floor
    :param center: (x, z) centre of the grid
    :param color: RGB tuple for grid line color
    """
    glColor3f(*color)
    glLineWidth(1.0)
    glBegin(GL_LINES)

    half_size = size / 2.0
    cx, cz = center
    steps = np.arange(-half_size, half_size + spacing * 0.5, spacing)

    # Lines parallel to X-axis (running along Z)
    for z in steps:
        glVertex3f(cx - half_size, height, cz + z)
        glVertex3f(cx + half_size, height, cz + z)

    # Lines parallel to Z-axis (running along X)
    for x in steps:
        glVertex3f(cx + x, height, cz - half_size)
        glVertex3f(cx + x, height, cz + half_size)

    glEnd()
