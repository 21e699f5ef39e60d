"""OpenGL viewer for glTF scenes with a third-person player camera."""

__version__ = "0.1.0"