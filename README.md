# nexusview

nexusview opens an OpenGL window and loads a fixed set of glTF models into one
scene. A player model stands in the middle and a third-person camera orbits
behind it. Move the mouse to turn the camera and walk with the keyboard. While
the viewer runs, the window title shows the frame rate and the average frame
time.

## Installation

```
pip install .
```

The package needs numpy, pyglet and pillow. Your graphics driver must offer an
OpenGL 3.3 core context.

## Running

```
nexusview
```

The command takes no options apart from `--help`. It opens a 2560x1400 window
and loads scene 0. All paths are relative to the current directory, so start
it from a directory that holds:

- `shaders/shader3D.vs` and `shaders/shader3D.fs`. The vertex and fragment
  shaders. They must declare the uniform blocks `PROJ` and `VIEW` and a `mat4`
  uniform named `model`. Vertex attributes arrive at these locations: position
  at 0, texture coordinates at 1, normal at 2, joints at 3, weights at 4.
- `models/vedal987/vedal987.gltf`, which is the player model, and the building
  models under `models/V-nexus/`. `nexusview.scene.scene_layout(0)` lists every
  path and position.

Controls:

- Mouse: turn the camera. The window captures the pointer.
- `W` / `Up`: walk forward
- `S` / `Down`: walk backward
- `A` / `Left`: strafe left
- `D` / `Right`: strafe right
- Close the window to quit.

## Using the pieces

Most of the package works without a window or a GPU.

- `nexusview.transforms` holds the maths. `Object`, `Camera` and `Player`
  provide `make_transmat`, `Camera.update`, `Camera.make_view` and
  `Player.update`. The matrix helpers are `perspective` and `look_at`. Matrices
  are 4x4 numpy arrays in row/column order.
- `nexusview.gltf` reads `.gltf` JSON documents with `load_document`.
  `load_model` returns a `ModelData` for the default scene. It holds
  `PrimitiveData` entries, each with `AttributeData`, index bytes, count, index
  type and mode, plus the decoded base-colour textures as `TextureImage`
  objects. `decode_image` decodes one image to RGBA. Unreadable or malformed
  documents raise `GltfError`.
- `nexusview.shader` reads shader files with `read_shader_sources`.
  `make_shader` compiles and links them into a pyglet `ShaderProgram` and needs
  a current GL context. Read, compile and link failures raise `ShaderError`.
- `nexusview.glcontext` gives the requested context through
  `context_settings(web)`. `create_window` opens the window and sets up the
  render state.
- `nexusview.render` holds `FrameTimer` and `movement_from_keys`, which turns
  held key names into movement. It also holds `GpuModel` and the `Renderer`
  frame loop, and both of these need a GL context.
- `nexusview.scene` gives the object placements through `scene_layout`.
  `load_scene` uploads a scene to the GPU. `main` is the `nexusview` command.

```python
from nexusview.gltf import load_model
from nexusview.transforms import Player

model = load_model("models/vedal987/vedal987.gltf")
print(len(model.primitives))

player = Player()
player.update(0.0, 1.0, False)
print(player.position)  # [0.   0.   0.05]
```

## What it does not do

- It includes no shaders and no models. They must be in the working directory,
  as described above.
- Only scene 0 exists, and the set of models and their positions is fixed.
- It reads only `.gltf` JSON files. Binary `.glb` files are not supported.
  Embedded data must be a base64 `data:` URI.
- Node transforms, animation and skinning are ignored. Joint and weight
  attributes are uploaded but nothing uses them. Each primitive uses only its
  base-colour texture.

## Tests

```
pip install .[test]
pytest
```