[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nexusview"
version = "0.1.0"
description = "A small OpenGL viewer that walks a player model through a glTF scene with a third-person orbit camera."
requires-python = ">=3.10"
keywords = ["gltf", "opengl", "3d", "viewer", "camera", "pyglet"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
    "Topic :: Multimedia :: Graphics :: Viewers",
]
dependencies = [
    "numpy",
    "pyglet",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
nexusview = "nexusview.scene:main"

[tool.hatch.build.targets.wheel]
packages = ["nexusview"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
