"""Window and OpenGL context creation."""

from __future__ import annotations

import sys
from dataclasses import dataclass

WINDOW_CAPTION = "..."


@dataclass(frozen=True)
class ContextSettings:
    """The OpenGL context a window is requested with."""

    profile: str
    major_version: int
    minor_version: int
    double_buffer: bool = True
    depth_size: int = 24


def context_settings(web: bool) -> ContextSettings:
    """Settings for a browser (OpenGL ES 2.0) or native (core 3.3) context."""
    if web:
        return ContextSettings(profile="es", major_version=2, minor_version=0)
    return ContextSettings(profile="core", major_version=3, minor_version=3)


def _is_web() -> bool:
    return sys.platform == "emscripten"


def _config_kwargs(settings: ContextSettings) -> dict:
    kwargs = {
        "double_buffer": settings.double_buffer,
        "depth_size": settings.depth_size,
        "major_version": settings.major_version,
        "minor_version": settings.minor_version,
    }
    if settings.profile == "es":
        kwargs["opengl_api"] = "gles"
    else:
        kwargs["forward_compatible"] = True
    return kwargs


def _version_string(gl_info) -> str:
    version = gl_info.get_version()
    if isinstance(version, tuple):
        return ".".join(str(part) for part in version)
    return str(version)


def create_window(width: int, height: int, swap_interval: int):
    """Open a window with a current OpenGL context and default render state."""
    if width <= 0 or height <= 0:
        raise ValueError(f"window size must be positive, got {width}x{height}")

    import pyglet
    from pyglet import gl

    print("Init OpenGL")
    settings = context_settings(_is_web())
    config = gl.Config(**_config_kwargs(settings))
    window = pyglet.window.Window(
        width,
        height,
        caption=WINDOW_CAPTION,
        config=config,
        vsync=swap_interval != 0,
        visible=True,
    )
    window.switch_to()

    gl.glEnable(gl.GL_DEPTH_TEST)
    gl.glDepthFunc(gl.GL_LESS)
    gl.glEnable(gl.GL_BLEND)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)
    gl.glViewport(0, 0, width, height)
    gl.glClearColor(0.0, 0.0, 0.0, 0.0)

    window.flip()
    window.set_exclusive_mouse(True)

    print("OpenGL initialized")
    print(f"GL_VERSION: {_version_string(gl.gl_info)}")
    return window