"""
Pytest configuration and fixtures for XConverter tests.
"""

import pytest

from core.scene_data import SceneModel
from core.tokens import TokenCursor
from readers.export_tokenizer import tokenize_export


# Twelve shading parameters as written after every MATERIAL line
MATERIAL_PARAMS = """\
COLOR 0.000000 0.000000 0.000000 1.000000
TRANSPARENCY 0.000000 0.000000 0.000000 1.000000
AMBIENTCOLOR 0.000000 0.000000 0.000000 1.000000
INCANDESCENCE 0.000000 0.000000 0.000000 1.000000
COEFFS 0.800000 0.000000
GLOW 0.000000 0
REFRACTIVE 6 1.000000
SPECULARCOLOR -1.000000 -1.000000 -1.000000 1.000000
REFLECTIVECOLOR -1.000000 -1.000000 -1.000000 1.000000
REFLECTIVE -1 -1.000000
BLINN -1.000000 -1.000000
PHONG -1.000000
"""

IDENTITY_ROWS = """\
X 1.000000, 0.000000, 0.000000
Y 0.000000, 1.000000, 0.000000
Z 0.000000, 0.000000, 1.000000
"""

# 90 degrees about +Z: X maps to +Y, Y maps to -X
ROT_Z_90_ROWS = """\
X 0.000000, 1.000000, 0.000000
Y -1.000000, 0.000000, 0.000000
Z 0.000000, 0.000000, 1.000000
"""

SAMPLE_MODEL = f"""\
// Export filename: sample.xmodel_export
MODEL
VERSION 6

NUMBONES 2
BONE 0 -1 "tag_origin"
BONE 1 0 "j_Spine"

BONE 0
OFFSET 0.000000, 0.000000, 0.000000
SCALE 1.000000, 1.000000, 1.000000
{IDENTITY_ROWS}
BONE 1
OFFSET 10.000000, 0.000000, 0.000000
SCALE 1.000000, 1.000000, 1.000000
{ROT_Z_90_ROWS}
NUMVERTS 3
VERT 0
OFFSET 0.000000, 0.000000, 0.000000
BONES 1
BONE 0 1.000000

VERT 1
OFFSET 1.000000, 0.000000, 0.000000
BONES 2
BONE 0 0.250000
BONE 1 0.250000

VERT 2
OFFSET 0.000000, 1.000000, 0.000000
BONES 1
BONE 1 1.000000

NUMFACES 1
TRI 0 0 0 0
VERT 0
NORMAL 0.000000 0.000000 1.000000
COLOR 1.000000 1.000000 1.000000 1.000000
UV 1 0.000000 0.000000
VERT 1
NORMAL 0.000000 0.000000 1.000000
COLOR 1.000000 1.000000 1.000000 1.000000
UV 1 1.000000 0.000000
VERT 2
NORMAL 0.000000 0.000000 1.000000
COLOR 1.000000 1.000000 1.000000 1.000000
UV 1 0.000000 1.000000

NUMOBJECTS 1
OBJECT 0 "body"

NUMMATERIALS 1
MATERIAL 0 "mtl_body" "Lambert" "body_c.tga"
{MATERIAL_PARAMS}"""

SAMPLE_ANIM = f"""\
// Export filename: sample.xanim_export
ANIMATION
VERSION 3

NUMPARTS 2
PART 0 "TAG_ORIGIN"
PART 1 "j_spine"

FRAMERATE 30
NUMFRAMES 2
FRAME 0
PART 0
OFFSET 0.000000, 0.000000, 0.000000
{IDENTITY_ROWS}PART 1
OFFSET 10.000000, 0.000000, 0.000000
{ROT_Z_90_ROWS}
FRAME 1
PART 0
OFFSET 0.000000, 0.000000, 1.000000
{IDENTITY_ROWS}PART 1
OFFSET 10.000000, 0.000000, 1.000000
{IDENTITY_ROWS}"""


def _fmt(values):
    return " ".join(f"{v:.6f}" for v in values)


@pytest.fixture
def make_cursor():
    """Build a TokenCursor over export text."""
    def _make(text):
        return TokenCursor(tokenize_export(text.splitlines()))
    return _make


@pytest.fixture
def corner_text():
    """Build the four lines describing one face corner."""
    def _corner(vertex, normal=(0.0, 0.0, 1.0), color=(1.0, 1.0, 1.0, 1.0), uv=(0.0, 0.0)):
        return (
            f"VERT {vertex}\n"
            f"NORMAL {_fmt(normal)}\n"
            f"COLOR {_fmt(color)}\n"
            f"UV 1 {_fmt(uv)}\n"
        )
    return _corner


@pytest.fixture
def vertex_text():
    """Build a vertex record with (bone, weight) influences."""
    def _vertex(index, position, weights=((0, 1.0),)):
        lines = [f"VERT {index}", f"OFFSET {_fmt(position)}", f"BONES {len(weights)}"]
        lines += [f"BONE {bone} {weight:.6f}" for bone, weight in weights]
        return "\n".join(lines) + "\n"
    return _vertex


@pytest.fixture
def material_text():
    """Build a material declaration followed by its shading parameters."""
    def _material(index, name):
        return f'MATERIAL {index} "{name}" "Lambert" "{name}_c.tga"\n' + MATERIAL_PARAMS
    return _material


@pytest.fixture
def sample_model_text():
    """Two bones, three vertices, one triangle, one material."""
    return SAMPLE_MODEL


@pytest.fixture
def sample_anim_text():
    """Two parts (one differing in case from its bone), two frames."""
    return SAMPLE_ANIM


@pytest.fixture
def model_file(tmp_path):
    """Sample model written to disk."""
    path = tmp_path / "sample.xmodel_export"
    path.write_text(SAMPLE_MODEL, encoding="utf-8")
    return path


@pytest.fixture
def anim_file(tmp_path):
    """Sample animation written to disk."""
    path = tmp_path / "sample.xanim_export"
    path.write_text(SAMPLE_ANIM, encoding="utf-8")
    return path


@pytest.fixture
def skeleton():
    """Skeleton matching the sample model: a root and a child rotated 90 degrees about Z."""
    s = 0.5 ** 0.5
    model = SceneModel()
    model.add_bone("tag_origin", -1, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 1.0),
                   (0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 1.0))
    model.add_bone("j_Spine", 0, (25.4, 0.0, 0.0), (0.0, 0.0, s, s),
                   (25.4, 0.0, 0.0), (0.0, 0.0, s, s))
    return model
