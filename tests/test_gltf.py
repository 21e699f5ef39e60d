import base64
import json
import struct
from io import BytesIO

import pytest
from PIL import Image

from nexusview.gltf import (
    GltfError,
    decode_image,
    load_document,
    load_model,
)

POSITIONS = struct.pack("<9f", 0, 0, 0, 1, 0, 0, 0, 1, 0)
INDICES = struct.pack("<3H", 0, 1, 2)
BUFFER = POSITIONS + INDICES + b"\x00\x00"


def _data_uri(data, mime="application/octet-stream"):
    return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")


def _png_bytes(pixels, size):
    image = Image.new("RGB", size)
    image.putdata(pixels)
    out = BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


def _document(buffer_uri=None, **extra):
    document = {
        "asset": {"version": "2.0"},
        "scene": 0,
        "scenes": [{"nodes": [0]}],
        "nodes": [{"mesh": 0}],
        "meshes": [{"primitives": [{"attributes": {"POSITION": 0}, "indices": 1}]}],
        "buffers": [{"uri": buffer_uri or _data_uri(BUFFER), "byteLength": len(BUFFER)}],
        "bufferViews": [
            {"buffer": 0, "byteOffset": 0, "byteLength": len(POSITIONS)},
            {"buffer": 0, "byteOffset": len(POSITIONS), "byteLength": len(INDICES)},
        ],
        "accessors": [
            {"bufferView": 0, "componentType": 5126, "count": 3, "type": "VEC3"},
            {"bufferView": 1, "componentType": 5123, "count": 3, "type": "SCALAR"},
        ],
    }
    document.update(extra)
    return document


def _write(tmp_path, document, name="model.gltf"):
    path = tmp_path / name
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_load_model_reads_single_primitive(tmp_path):
    model = load_model(_write(tmp_path, _document()))
    assert len(model.primitives) == 1
    prim = model.primitives[0]
    assert prim.count == 3
    assert prim.index_type == 5123
    assert prim.mode == 4
    assert prim.indices == INDICES
    assert prim.texture_index == -1
    assert model.textures == {}
    (attr,) = prim.attributes
    assert (attr.name, attr.location, attr.size, attr.component_type) == ("POSITION", 0, 3, 5126)
    assert attr.stride == 12
    assert attr.data == POSITIONS


def test_load_model_reads_external_buffer(tmp_path):
    (tmp_path / "data.bin").write_bytes(BUFFER)
    model = load_model(_write(tmp_path, _document(buffer_uri="data.bin")))
    assert model.primitives[0].attributes[0].data == POSITIONS


def test_attribute_layout_and_order(tmp_path):
    document = _document()
    document["meshes"][0]["primitives"][0]["attributes"] = {
        "TEXCOORD_0": 0,
        "NORMAL": 0,
        "POSITION": 0,
        "COLOR_0": 0,
    }
    prim = load_model(_write(tmp_path, document)).primitives[0]
    assert [(a.name, a.location, a.size) for a in prim.attributes] == [
        ("NORMAL", 2, 3),
        ("POSITION", 0, 3),
        ("TEXCOORD_0", 1, 2),
    ]


def test_child_nodes_are_traversed(tmp_path):
    document = _document(
        nodes=[{"children": [1, 2]}, {"mesh": 0}, {"mesh": 0, "children": []}]
    )
    model = load_model(_write(tmp_path, document))
    assert len(model.primitives) == 2


def test_node_cycle_is_rejected(tmp_path):
    document = _document(nodes=[{"children": [1]}, {"children": [0]}])
    with pytest.raises(GltfError):
        load_model(_write(tmp_path, document))


def test_base_color_texture_is_decoded(tmp_path):
    pixels = [(10, 20, 30), (40, 50, 60)]
    (tmp_path / "tex.png").write_bytes(_png_bytes(pixels, (2, 1)))
    document = _document(
        images=[{"uri": "tex.png"}],
        textures=[{"source": 0}],
        materials=[{"pbrMetallicRoughness": {"baseColorTexture": {"index": 0}}}],
    )
    document["meshes"][0]["primitives"][0]["material"] = 0
    model = load_model(_write(tmp_path, document))
    assert model.primitives[0].texture_index == 0
    texture = model.textures[0]
    assert (texture.width, texture.height) == (2, 1)
    assert texture.pixels == bytes([10, 20, 30, 255, 40, 50, 60, 255])


def test_decode_image_from_data_uri(tmp_path):
    png = _png_bytes([(1, 2, 3)], (1, 1))
    document = _document(images=[{"uri": _data_uri(png, "image/png")}])
    texture = decode_image(document, 0, tmp_path)
    assert texture.index == 0
    assert texture.pixels == bytes([1, 2, 3, 255])


def test_decode_image_from_buffer_view(tmp_path):
    png = _png_bytes([(7, 8, 9)], (1, 1))
    document = _document(
        buffers=[{"uri": _data_uri(png), "byteLength": len(png)}],
        bufferViews=[{"buffer": 0, "byteLength": len(png)}],
        images=[{"bufferView": 0, "mimeType": "image/png"}],
    )
    assert decode_image(document, 0, tmp_path).pixels == bytes([7, 8, 9, 255])


def test_decode_image_rejects_garbage(tmp_path):
    document = _document(images=[{"uri": _data_uri(b"not an image", "image/png")}])
    with pytest.raises(GltfError):
        decode_image(document, 0, tmp_path)


def test_decode_image_missing_index(tmp_path):
    with pytest.raises(GltfError):
        decode_image(_document(), 3, tmp_path)


def test_load_document_round_trips_json(tmp_path):
    document = _document()
    assert load_document(_write(tmp_path, document)) == document


def test_load_document_missing_file(tmp_path):
    with pytest.raises(GltfError):
        load_document(tmp_path / "absent.gltf")


def test_load_document_invalid_json(tmp_path):
    path = tmp_path / "broken.gltf"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(GltfError):
        load_document(path)


def test_primitive_without_indices_is_rejected(tmp_path):
    document = _document()
    del document["meshes"][0]["primitives"][0]["indices"]
    with pytest.raises(GltfError):
        load_model(_write(tmp_path, document))


def test_short_buffer_is_rejected(tmp_path):
    document = _document()
    document["buffers"][0]["byteLength"] = len(BUFFER) + 4
    with pytest.raises(GltfError):
        load_model(_write(tmp_path, document))


def test_missing_external_buffer_is_rejected(tmp_path):
    with pytest.raises(GltfError):
        load_model(_write(tmp_path, _document(buffer_uri="missing.bin")))


def test_missing_scene_is_rejected(tmp_path):
    document = _document(scene=2)
    with pytest.raises(GltfError):
        load_model(_write(tmp_path, document))