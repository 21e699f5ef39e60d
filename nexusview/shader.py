"""Reading and compiling vertex/fragment shader programs."""

from __future__ import annotations

from pathlib import Path


class ShaderError(Exception):
    """Raised when shader sources cannot be read, compiled or linked."""


def read_shader_sources(vertex_path, fragment_path) -> tuple[str, str]:
    """Return the text of the vertex and fragment shader files."""
    sources = []
    for label, path in (("vertex", vertex_path), ("fragment", fragment_path)):
        try:
            sources.append(Path(path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise ShaderError(f"cannot read {label} shader {path}: {exc}") from exc
    return sources[0], sources[1]


def make_shader(vertex_path, fragment_path):
    """Compile and link a shader program; needs a current GL context."""
    vertex_code, fragment_code = read_shader_sources(vertex_path, fragment_path)

    # Imported here so that reading sources works without a GL library.
    from pyglet.graphics.shader import Shader, ShaderException, ShaderProgram

    try:
        vertex_shader = Shader(vertex_code, "vertex")
    except ShaderException as exc:
        raise ShaderError(f"vertex shader failed\n{exc}") from exc
    try:
        fragment_shader = Shader(fragment_code, "fragment")
    except ShaderException as exc:
        vertex_shader.delete()
        raise ShaderError(f"fragment shader failed\n{exc}") from exc
    try:
        program = ShaderProgram(vertex_shader, fragment_shader)
    except ShaderException as exc:
        raise ShaderError(f"shader program linking failed\n{exc}") from exc
    finally:
        vertex_shader.delete()
        fragment_shader.delete()
    return program