"""The render loop: input handling, frame timing and model drawing."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from nexusview.gltf import AttributeData, ModelData, PrimitiveData, TextureImage

MOVE_RATE = 0.3
MOUSE_SENSITIVITY = 0.001
FPS_INTERVAL_MS = 1000


class FrameTimer:
    """Tracks the time between frames and builds an FPS title once a second."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self.previous_frame_time = start_ms
        self.last_time = start_ms
        self.frame_count = 0
        self.delta_time = 0.0

    def tick(self, now_ms: float) -> str | None:
        """Record a finished frame; return a new window title when due."""
        self.frame_count += 1
        self.delta_time = now_ms - self.previous_frame_time
        self.previous_frame_time = now_ms

        elapsed = now_ms - self.last_time
        if elapsed < FPS_INTERVAL_MS:
            return None
        fps = self.frame_count * 1000.0 / elapsed
        avg_frame_time = elapsed / self.frame_count
        self.frame_count = 0
        self.last_time = now_ms
        return f"FPS: {int(fps)} | Frame Time: {avg_frame_time:f}"[:0] + (
            f"FPS: {int(fps)} | Frame Time: {f'{avg_frame_time:f}'[:5]} ms"
        )


def movement_from_keys(pressed: Iterable[str], delta_time: float) -> tuple[float, float]:
    """Sideways and forward movement for the held keys.

    Keys are named ``w``/``up``, ``s``/``down``, ``a``/``left`` and
    ``d``/``right``; other names are ignored.
    """
    keys = set(pressed)
    step = MOVE_RATE * delta_time
    move_x = move_y = 0.0
    if keys & {"w", "up"}:
        move_y += step
    if keys & {"s", "down"}:
        move_y -= step
    if keys & {"a", "left"}:
        move_x -= step
    if keys & {"d", "right"}:
        move_x += step
    return move_x, move_y


@dataclass
class _MeshDraw:
    vao: int
    count: int
    index_type: int
    mode: int
    texture_index: int = -1


def _gen(gl, generator) -> int:
    handle = gl.GLuint()
    generator(1, handle)
    return handle.value


def _upload_texture(gl, image: TextureImage) -> int:
    tex = _gen(gl, gl.glGenTextures)
    gl.glBindTexture(gl.GL_TEXTURE_2D, tex)
    gl.glTexImage2D(
        gl.GL_TEXTURE_2D, 0, gl.GL_RGBA, image.width, image.height, 0,
        gl.GL_RGBA, gl.GL_UNSIGNED_BYTE, image.pixels,
    )
    gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MIN_FILTER, gl.GL_LINEAR)
    gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MAG_FILTER, gl.GL_LINEAR)
    gl.glGenerateMipmap(gl.GL_TEXTURE_2D)
    return tex


def _upload_attribute(gl, attribute: AttributeData) -> None:
    vbo = _gen(gl, gl.glGenBuffers)
    gl.glBindBuffer(gl.GL_ARRAY_BUFFER, vbo)
    gl.glBufferData(gl.GL_ARRAY_BUFFER, len(attribute.data), attribute.data, gl.GL_STATIC_DRAW)
    gl.glEnableVertexAttribArray(attribute.location)
    gl.glVertexAttribPointer(
        attribute.location, attribute.size, attribute.component_type,
        gl.GL_FALSE, attribute.stride, 0,
    )


def _upload_primitive(gl, primitive: PrimitiveData) -> _MeshDraw:
    vao = _gen(gl, gl.glGenVertexArrays)
    gl.glBindVertexArray(vao)
    for attribute in primitive.attributes:
        _upload_attribute(gl, attribute)

    index_vbo = _gen(gl, gl.glGenBuffers)
    gl.glBindBuffer(gl.GL_ELEMENT_ARRAY_BUFFER, index_vbo)
    gl.glBufferData(
        gl.GL_ELEMENT_ARRAY_BUFFER, len(primitive.indices), primitive.indices, gl.GL_STATIC_DRAW
    )
    return _MeshDraw(
        vao=vao,
        count=primitive.count,
        index_type=primitive.index_type,
        mode=primitive.mode,
        texture_index=primitive.texture_index,
    )


class GpuModel:
    """A loaded model whose buffers and textures live on the GPU."""

    def __init__(self, data: ModelData) -> None:
        from pyglet import gl

        self._gl = gl
        self.texture_map: dict[int, int] = {
            index: _upload_texture(gl, image) for index, image in data.textures.items()
        }
        self.meshdata: list[_MeshDraw] = [
            _upload_primitive(gl, primitive) for primitive in data.primitives
        ]

    def draw(self) -> None:
        """Draw every primitive with its base colour texture bound."""
        gl = self._gl
        for mesh in self.meshdata:
            if mesh.texture_index >= 0:
                gl.glActiveTexture(gl.GL_TEXTURE0)
                gl.glBindTexture(gl.GL_TEXTURE_2D, self.texture_map.get(mesh.texture_index, 0))
            gl.glBindVertexArray(mesh.vao)
            gl.glDrawElements(mesh.mode, mesh.count, mesh.index_type, 0)


def _column_major(matrix) -> np.ndarray:
    return np.asarray(matrix, dtype=np.float32).T


def _now_ms() -> float:
    return time.monotonic() * 1000.0


class Renderer:
    """Runs the frame loop for a player and the static scene objects."""

    def __init__(self, window, player, objects, model_location: int, view_buffer: int) -> None:
        from pyglet import gl
        from pyglet.window import key

        self._gl = gl
        self.window = window
        self.player = player
        self.objects = list(objects)
        self.model_location = model_location
        self.view_buffer = view_buffer
        self.timer = FrameTimer(_now_ms())
        self._camera_moved = False

        self._keys = key.KeyStateHandler()
        self._key_names = {
            key.W: "w", key.UP: "up",
            key.S: "s", key.DOWN: "down",
            key.A: "a", key.LEFT: "left",
            key.D: "d", key.RIGHT: "right",
        }
        window.push_handlers(self._keys)
        window.push_handlers(on_mouse_motion=self._on_mouse_motion)

    def _on_mouse_motion(self, x, y, dx, dy) -> None:
        eulers = self.player.object.cam.eulers
        eulers[0] -= dx * MOUSE_SENSITIVITY
        # Window y grows upwards, so the downward relative motion is -dy.
        eulers[1] += dy * MOUSE_SENSITIVITY
        self._camera_moved = True

    def _pressed(self) -> set[str]:
        return {name for code, name in self._key_names.items() if self._keys[code]}

    def _upload_view(self, view) -> None:
        gl = self._gl
        data = _column_major(view).tobytes()
        gl.glBindBuffer(gl.GL_UNIFORM_BUFFER, self.view_buffer)
        gl.glBufferSubData(gl.GL_UNIFORM_BUFFER, 0, len(data), data)

    def _set_model_matrix(self, matrix) -> None:
        gl = self._gl
        values = _column_major(matrix).ravel().tolist()
        gl.glUniformMatrix4fv(self.model_location, 1, gl.GL_FALSE, (gl.GLfloat * 16)(*values))

    def frame(self, dt: float) -> None:
        """Apply input using ``dt`` milliseconds of movement, then draw."""
        gl = self._gl
        move_x, move_y = movement_from_keys(self._pressed(), dt)
        update_cam = self._camera_moved
        self._camera_moved = False
        if move_x or move_y or update_cam:
            self._upload_view(self.player.object.update(move_x, move_y, update_cam))

        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        self._set_model_matrix(self.player.object.transmat)
        self.player.model.draw()
        for renderable in self.objects:
            self._set_model_matrix(renderable.object.transmat)
            renderable.model.draw()

    def run(self) -> None:
        """Render frames until the window is closed."""
        while True:
            self.window.dispatch_events()
            if self.window.has_exit:
                break
            self.frame(self.timer.delta_time)
            title = self.timer.tick(_now_ms())
            if title is not None:
                self.window.set_caption(title)
            self.window.flip()
        self.window.close()