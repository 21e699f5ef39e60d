"""Object, camera and player transforms, plus projection helpers.

Matrices are 4x4 numpy arrays in mathematical (row, column) order, so a
point ``p`` is transformed as ``m @ p``.  Transpose before uploading to a
column-major graphics API.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

MOVE_SPEED = 0.05
DEFAULT_ZOOM = 10.0


def _vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    return np.array((x, y, z), dtype=np.float64)


def _identity() -> np.ndarray:
    return np.identity(4, dtype=np.float64)


def _rotation(angle: float, axis: np.ndarray) -> np.ndarray:
    """Rotation of ``angle`` radians about ``axis`` (right-handed)."""
    a = np.asarray(axis, dtype=np.float64)
    a = a / np.linalg.norm(a)
    c, s = math.cos(angle), math.sin(angle)
    cross = np.array(
        ((0.0, -a[2], a[1]), (a[2], 0.0, -a[0]), (-a[1], a[0], 0.0))
    )
    m = _identity()
    m[:3, :3] = c * np.identity(3) + s * cross + (1.0 - c) * np.outer(a, a)
    return m


@dataclass(eq=False)
class Object:
    """A placed object with a position, Euler angles and a model matrix."""

    position: np.ndarray = field(default_factory=_vec3)
    eulers: np.ndarray = field(default_factory=_vec3)
    transmat: np.ndarray = field(default_factory=_identity)

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=np.float64)
        self.eulers = np.asarray(self.eulers, dtype=np.float64)
        self.transmat = np.asarray(self.transmat, dtype=np.float64)

    def make_transmat(self) -> np.ndarray:
        """Rebuild the model matrix from the Euler angles and position."""
        m = (
            _rotation(self.eulers[0], _vec3(1, 0, 0))
            @ _rotation(self.eulers[1], _vec3(0, 1, 0))
            @ _rotation(self.eulers[2], _vec3(0, 0, 1))
        )
        m[:3, 3] = self.position
        self.transmat = m
        return m


@dataclass(eq=False)
class Camera(Object):
    """Orbit camera that looks at a centre from ``zoom`` units away."""

    forward: np.ndarray = field(default_factory=lambda: _vec3(0, 0, 1))
    right: np.ndarray = field(default_factory=lambda: _vec3(1, 0, 0))
    up: np.ndarray = field(default_factory=lambda: _vec3(0, 1, 0))
    zoom: float = DEFAULT_ZOOM
    view: np.ndarray = field(default_factory=_identity)

    def update(self) -> tuple[float, float]:
        """Recompute the basis vectors from the Euler angles.

        Returns the cosine and sine of the yaw angle.
        """
        cos_x, sin_x = math.cos(self.eulers[0]), math.sin(self.eulers[0])
        cos_y, sin_y = math.cos(self.eulers[1]), math.sin(self.eulers[1])

        self.forward = _vec3(cos_x * cos_y, sin_y, -sin_x * cos_y)
        self.right = _vec3(sin_x, 0.0, cos_x)
        self.up = _vec3(-cos_x * sin_y, cos_y, sin_x * sin_y)
        return cos_x, sin_x

    def make_view(self, center) -> np.ndarray:
        """Place the camera behind ``center`` and rebuild the view matrix."""
        self.position = np.asarray(center, dtype=np.float64) - self.forward * self.zoom

        view = _identity()
        view[0, :3] = self.right
        view[0, 3] = -np.dot(self.right, self.position)
        view[1, :3] = self.up
        view[1, 3] = -np.dot(self.up, self.position)
        view[2, :3] = -self.forward
        view[2, 3] = np.dot(self.forward, self.position)
        self.view = view
        return view


@dataclass(eq=False)
class Player(Object):
    """The controllable object, carrying its own camera."""

    cam: Camera = field(default_factory=Camera)
    forward: np.ndarray = field(default_factory=lambda: _vec3(0, 0, 1))
    right: np.ndarray = field(default_factory=lambda: _vec3(1, 0, 0))

    def update(self, move_x: float, move_y: float, update_cam: bool) -> np.ndarray:
        """Move the player, refresh the camera and the model matrix.

        Returns the camera's new view matrix.
        """
        if update_cam:
            cos_x, sin_x = self.cam.update()
            self.forward = _vec3(cos_x, 0.0, -sin_x)
            self.right = _vec3(-sin_x, 0.0, -cos_x)

        self.position = self.position - self.right * move_x * MOVE_SPEED
        self.position = self.position + self.forward * move_y * MOVE_SPEED

        view = self.cam.make_view(self.position)
        self.make_transmat()
        return view


def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection onto a [-1, 1] depth range."""
    if aspect == 0 or near == far:
        raise ValueError("aspect must be non-zero and near must differ from far")
    f = 1.0 / math.tan(fovy / 2.0)
    m = np.zeros((4, 4), dtype=np.float64)
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = -(far + near) / (far - near)
    m[2, 3] = -(2.0 * far * near) / (far - near)
    m[3, 2] = -1.0
    return m


def look_at(eye, center, up) -> np.ndarray:
    """Right-handed view matrix looking from ``eye`` towards ``center``."""
    eye = np.asarray(eye, dtype=np.float64)
    center = np.asarray(center, dtype=np.float64)
    up = np.asarray(up, dtype=np.float64)

    f = center - eye
    f = f / np.linalg.norm(f)
    s = np.cross(f, up)
    s = s / np.linalg.norm(s)
    u = np.cross(s, f)

    m = _identity()
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -np.dot(s, eye)
    m[1, 3] = -np.dot(u, eye)
    m[2, 3] = np.dot(f, eye)
    return m