"""Loading of glTF (JSON) models into draw-ready primitive data."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Iterator
from urllib.parse import unquote

from PIL import Image, UnidentifiedImageError

# Attribute name -> (shader location, component count)
ATTRIBUTE_LAYOUT: dict[str, tuple[int, int]] = {
    "POSITION": (0, 3),
    "TEXCOORD_0": (1, 2),
    "NORMAL": (2, 3),
    "JOINTS_0": (3, 4),
    "WEIGHTS_0": (4, 4),
}
MODE_TRIANGLES = 4


class GltfError(Exception):
    """Raised when a glTF file cannot be read or is malformed."""


@dataclass(frozen=True)
class AttributeData:
    """Raw bytes for one vertex attribute bound to a shader location."""

    name: str
    location: int
    size: int
    component_type: int
    data: bytes

    @property
    def stride(self) -> int:
        return self.size * 4


@dataclass
class PrimitiveData:
    """Everything needed to draw one mesh primitive."""

    attributes: list[AttributeData]
    indices: bytes
    count: int
    index_type: int
    mode: int = MODE_TRIANGLES
    texture_index: int = -1


@dataclass(frozen=True)
class TextureImage:
    """A decoded RGBA image."""

    index: int
    width: int
    height: int
    pixels: bytes


@dataclass
class ModelData:
    """All primitives of the default scene and the textures they use."""

    primitives: list[PrimitiveData] = field(default_factory=list)
    textures: dict[int, TextureImage] = field(default_factory=dict)


def load_document(filename) -> dict:
    """Read and parse a glTF JSON document."""
    try:
        text = Path(filename).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise GltfError(f"Failed to load glTF: {filename}: {exc}") from exc
    try:
        document = json.loads(text)
    except ValueError as exc:
        raise GltfError(f"Failed to parse glTF: {filename}: {exc}") from exc
    if not isinstance(document, dict):
        raise GltfError(f"Failed to parse glTF: {filename}: top level is not an object")
    return document


def _element(document: dict, key: str, index) -> dict:
    items = document.get(key, [])
    if not isinstance(index, int) or not 0 <= index < len(items):
        raise GltfError(f"{key}[{index}] does not exist")
    return items[index]


def _resolve_uri(uri: str, base_dir: Path) -> bytes:
    if uri.startswith("data:"):
        header, sep, payload = uri.partition(",")
        if not sep or not header.endswith(";base64"):
            raise GltfError("only base64 data URIs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise GltfError(f"invalid base64 data URI: {exc}") from exc
    path = Path(base_dir) / unquote(uri)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise GltfError(f"cannot read {path}: {exc}") from exc


def _load_buffers(document: dict, base_dir: Path) -> list[bytes]:
    buffers = []
    for position, buffer in enumerate(document.get("buffers", [])):
        if "uri" not in buffer:
            raise GltfError(f"buffers[{position}] has no uri")
        data = _resolve_uri(buffer["uri"], base_dir)
        length = buffer.get("byteLength", len(data))
        if len(data) < length:
            raise GltfError(
                f"buffers[{position}] holds {len(data)} bytes, expected {length}"
            )
        buffers.append(data[:length])
    return buffers


def _view_bytes(document: dict, buffers: list[bytes], view_index) -> bytes:
    view = _element(document, "bufferViews", view_index)
    buffer_index = view.get("buffer", -1)
    if not isinstance(buffer_index, int) or not 0 <= buffer_index < len(buffers):
        raise GltfError(f"bufferViews[{view_index}] refers to missing buffer {buffer_index}")
    offset = view.get("byteOffset", 0)
    length = view.get("byteLength", 0)
    data = buffers[buffer_index]
    if offset + length > len(data):
        raise GltfError(f"bufferViews[{view_index}] runs past the end of its buffer")
    return bytes(data[offset : offset + length])


def _accessor_view(document: dict, buffers: list[bytes], accessor_index) -> tuple[dict, bytes]:
    accessor = _element(document, "accessors", accessor_index)
    if "bufferView" not in accessor:
        raise GltfError(f"accessors[{accessor_index}] has no bufferView")
    return accessor, _view_bytes(document, buffers, accessor["bufferView"])


def _decode_image(document: dict, index, base_dir: Path, buffers: list[bytes] | None) -> TextureImage:
    image = _element(document, "images", index)
    if "uri" in image:
        raw = _resolve_uri(image["uri"], base_dir)
    elif "bufferView" in image:
        if buffers is None:
            buffers = _load_buffers(document, base_dir)
        raw = _view_bytes(document, buffers, image["bufferView"])
    else:
        raise GltfError(f"images[{index}] has neither uri nor bufferView")
    try:
        with Image.open(BytesIO(raw)) as source:
            rgba = source.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise GltfError(f"images[{index}] cannot be decoded: {exc}") from exc
    return TextureImage(index=index, width=rgba.width, height=rgba.height, pixels=rgba.tobytes())


def decode_image(document: dict, index: int, base_dir) -> TextureImage:
    """Decode ``images[index]`` of a document to RGBA pixels."""
    return _decode_image(document, index, Path(base_dir), None)


def _mesh_indices(document: dict, node_index, visiting: set[int]) -> Iterator[int]:
    if node_index in visiting:
        raise GltfError(f"node hierarchy has a cycle at nodes[{node_index}]")
    node = _element(document, "nodes", node_index)
    visiting.add(node_index)
    mesh = node.get("mesh", -1)
    if mesh >= 0:
        yield mesh
    for child in node.get("children", []):
        if child >= 0:
            yield from _mesh_indices(document, child, visiting)
    visiting.discard(node_index)


def _build_primitive(
    document: dict, buffers: list[bytes], primitive: dict, model: ModelData, base_dir: Path
) -> PrimitiveData:
    attributes = []
    for name, accessor_index in sorted(primitive.get("attributes", {}).items()):
        if name not in ATTRIBUTE_LAYOUT:
            continue
        location, size = ATTRIBUTE_LAYOUT[name]
        accessor, data = _accessor_view(document, buffers, accessor_index)
        attributes.append(
            AttributeData(name, location, size, accessor.get("componentType", 0), data)
        )

    if "indices" not in primitive:
        raise GltfError("primitive has no indices")
    accessor, indices = _accessor_view(document, buffers, primitive["indices"])

    draw = PrimitiveData(
        attributes=attributes,
        indices=indices,
        count=accessor.get("count", 0),
        index_type=accessor.get("componentType", 0),
        mode=primitive.get("mode", MODE_TRIANGLES),
    )

    material_index = primitive.get("material", -1)
    if material_index >= 0:
        material = _element(document, "materials", material_index)
        texture = material.get("pbrMetallicRoughness", {}).get("baseColorTexture")
        if texture is not None:
            texture_index = texture.get("index", -1)
            draw.texture_index = texture_index
            if texture_index not in model.textures:
                model.textures[texture_index] = _decode_image(
                    document, texture_index, base_dir, buffers
                )
    return draw


def load_model(filename) -> ModelData:
    """Load the default scene of a glTF file into primitives and textures."""
    document = load_document(filename)
    base_dir = Path(filename).parent
    buffers = _load_buffers(document, base_dir)

    scene = _element(document, "scenes", document.get("scene", 0))
    model = ModelData()
    for node_index in scene.get("nodes", []):
        for mesh_index in _mesh_indices(document, node_index, set()):
            mesh = _element(document, "meshes", mesh_index)
            for primitive in mesh.get("primitives", []):
                model.primitives.append(
                    _build_primitive(document, buffers, primitive, model, base_dir)
                )
    return model