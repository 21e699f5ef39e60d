"""Scene layout, scene loading and the program entry point."""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from nexusview.transforms import Object, Player, look_at, perspective

WIDTH = 2560
HEIGHT = 1400
VERTEX_SHADER = "shaders/shader3D.vs"
FRAGMENT_SHADER = "shaders/shader3D.fs"


@dataclass(frozen=True)
class Placement:
    """A model file and where in the world it stands."""

    model_path: str
    position: tuple[float, float, float]


@dataclass
class RenderableObject:
    """An object in the world together with the model drawn for it."""

    object: Object
    model: Any


_SCENES: dict[int, tuple[Placement, ...]] = {
    0: (
        Placement("models/vedal987/vedal987.gltf", (0, 0, 0)),
        Placement("models/V-nexus/Camilla's_tent/Camillas_tent.gltf", (-8, 5.55, 40)),
        Placement("models/V-nexus/drone_factory/drone_factory.gltf", (43, 2.35, 7.775)),
        Placement("models/V-nexus/floors/floors.gltf", (0, 2.5, 0)),
        Placement("models/V-nexus/item_factory/item_factory.gltf", (46, 6.31, -33.75)),
        Placement("models/V-nexus/item_shop/item_shop.gltf", (42, 0.1, 46)),
        Placement("models/V-nexus/street/street.gltf", (6, 0, 0)),
        Placement("models/V-nexus/upgrade_smith/upgrade_smith.gltf", (41.9, 3.2, -10.05)),
        Placement("models/V-nexus/utilities/utilities.gltf", (7.75, 0.6, -37)),
        Placement("models/V-nexus/walls/walls.gltf", (0, 2.5, 0)),
        Placement("models/V-nexus/world_center/world_center.gltf", (2, 51.1, 4)),
        Placement("models/V-nexus/vedal's_house/vedals_house.gltf", (-36.15, 5.5, 26)),
    ),
}


def scene_layout(scene_nr: int) -> tuple[Placement, ...]:
    """Placements of a scene, the player first; empty for an unknown scene."""
    return _SCENES.get(scene_nr, ())


def _setup_uniform_buffers(gl, program_id: int) -> tuple[int, int]:
    projection = perspective(math.radians(45.0), WIDTH / HEIGHT, 0.1, 100.0)
    view = look_at((0.0, 0.0, 3.0), (0.0, 0.0, 1.0), (0.0, 1.0, 0.0))

    buffers = []
    for binding, (name, matrix, usage) in enumerate(
        (
            (b"PROJ", projection, gl.GL_STATIC_DRAW),
            (b"VIEW", view, gl.GL_DYNAMIC_DRAW),
        )
    ):
        data = np.asarray(matrix, dtype=np.float32).T.tobytes()
        handle = gl.GLuint()
        gl.glGenBuffers(1, handle)
        gl.glBindBuffer(gl.GL_UNIFORM_BUFFER, handle)
        block_index = gl.glGetUniformBlockIndex(program_id, name)
        gl.glUniformBlockBinding(program_id, block_index, binding)
        gl.glBufferData(gl.GL_UNIFORM_BUFFER, len(data), data, usage)
        gl.glBindBufferBase(gl.GL_UNIFORM_BUFFER, binding, handle)
        buffers.append(handle.value)

    model_location = gl.glGetUniformLocation(program_id, b"model")
    return model_location, buffers[1]


def load_scene(scene_nr: int, program):
    """Load a scene's models onto the GPU.

    Returns the player, the other objects, the location of the ``model``
    uniform and the handle of the view uniform buffer.
    """
    layout = scene_layout(scene_nr)
    if not layout:
        raise ValueError(f"unknown scene {scene_nr}")

    from pyglet import gl

    from nexusview.gltf import load_model
    from nexusview.render import GpuModel

    program_id = getattr(program, "id", program)
    gl.glUseProgram(program_id)
    model_location, view_buffer = _setup_uniform_buffers(gl, program_id)

    player_placement, *others = layout
    player = Player(position=player_placement.position)
    player.make_transmat()
    player_model = GpuModel(load_model(player_placement.model_path))

    objects = []
    for placement in others:
        obj = Object(position=placement.position)
        obj.make_transmat()
        objects.append(RenderableObject(obj, GpuModel(load_model(placement.model_path))))

    return RenderableObject(player, player_model), objects, model_location, view_buffer


def main(argv=None) -> int:
    """Open the window, load the first scene and run until closed."""
    parser = argparse.ArgumentParser(
        prog="nexusview", description="Walk around a glTF scene."
    )
    parser.parse_args(argv)

    from pyglet import gl

    from nexusview.glcontext import create_window
    from nexusview.render import Renderer
    from nexusview.shader import make_shader

    window = create_window(WIDTH, HEIGHT, 0)
    gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)

    program = make_shader(VERTEX_SHADER, FRAGMENT_SHADER)
    player, objects, model_location, view_buffer = load_scene(0, program)
    Renderer(window, player, objects, model_location, view_buffer).run()
    return 0