#!/usr/bin/env python3
"""
Geometry Module
Assembles per-material meshes from the vertex, face, and material sections.

The export format stores positions and skin weights per source vertex, but
normals, colors, and UVs per face corner. Output vertices carry all of them,
so corners are welded: corners of the same source vertex within the same
mesh that agree on normal and UV share one output vertex.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .errors import OutOfRange, StructuralMismatch
from .scene_data import Color, Material, Mesh, SimpleMaterial, Vertex, Weight
from .tokens import Tri, TokenCursor, TokenKind
from .transforms import scale_position

VERTEX_COUNT_NAMES = ("NUMVERTS", "NUMVERTS32")
VERTEX_NAMES = ("VERT", "VERT32")
TRI_NAMES = ("TRI", "TRI16")

# Shading parameters following each MATERIAL token (COLOR .. PHONG)
MATERIAL_PARAM_COUNT = 12

# Only the first UV layer is carried over
UV_LAYER = 0


@dataclass
class SourceVertex:
    """Position and raw skin weights of one source vertex"""
    position: Tuple[float, float, float]
    weights: List[Weight] = field(default_factory=list)

    @property
    def weight_sum(self) -> float:
        return sum(w.weight for w in self.weights)


@dataclass
class Corner:
    """One of a face's three per-corner attribute sets"""
    vertex_index: int
    normal: Tuple[float, float, float]
    color: Tuple[float, float, float, float]
    uv: Tuple[float, float]


@dataclass
class SourceFace:
    tri: Tri
    corners: List[Corner]


def quantize_color(color: Sequence[float]) -> Color:
    """Convert a [0, 1] float RGBA color to 8-bit channels by truncation"""
    return tuple(min(255, max(0, int(c * 255))) for c in color)


def flip_uv(uv: Sequence[float]) -> Tuple[float, float]:
    """Flip V so the origin moves from the top-left to the bottom-left"""
    return (float(uv[0]), 1.0 - float(uv[1]))


def read_vertices(cursor: TokenCursor, bone_count: int) -> List[SourceVertex]:
    """Read the vertex section, validating every weight against the skeleton"""
    vertex_count = cursor.request(VERTEX_COUNT_NAMES, TokenKind.UINT)
    vertices = []

    for i in range(vertex_count):
        cursor.request(VERTEX_NAMES, TokenKind.UINT)
        position = cursor.request("OFFSET", TokenKind.VECTOR3)
        weight_count = cursor.request("BONES", TokenKind.UINT)

        vertex = SourceVertex(position=tuple(position))
        for _ in range(weight_count):
            weight = cursor.request("BONE", TokenKind.BONE_WEIGHT)
            if not 0 <= weight.index < bone_count:
                raise OutOfRange(
                    f"Bone index {weight.index} for vertex {i} is outside "
                    f"the skeleton ({bone_count} bones)"
                )
            if weight.weight < 0:
                raise OutOfRange(f"Bone weight {weight.weight} for vertex {i} is negative")
            vertex.weights.append(Weight(bone_index=weight.index, weight=weight.weight))

        vertices.append(vertex)

    return vertices


def read_faces(cursor: TokenCursor, vertex_count: int) -> List[SourceFace]:
    """Read the face section (three corners per face)"""
    face_count = cursor.request("NUMFACES", TokenKind.UINT)
    faces = []

    for i in range(face_count):
        tri = cursor.request(TRI_NAMES, TokenKind.TRI)
        corners = []
        for _ in range(3):
            vertex_index = cursor.request(VERTEX_NAMES, TokenKind.UINT)
            normal = cursor.request("NORMAL", TokenKind.VECTOR3)
            color = cursor.request("COLOR", TokenKind.VECTOR4)
            uv_set = cursor.request("UV", TokenKind.UV_SET)

            if vertex_index >= vertex_count:
                raise OutOfRange(
                    f"Face {i} references vertex {vertex_index} of {vertex_count}"
                )
            if len(uv_set.uvs) <= UV_LAYER:
                raise OutOfRange(f"Face {i} has a corner without UV layer {UV_LAYER}")

            corners.append(Corner(
                vertex_index=vertex_index,
                normal=tuple(normal),
                color=tuple(color),
                uv=uv_set.uvs[UV_LAYER]
            ))
        faces.append(SourceFace(tri=tri, corners=corners))

    return faces


def skip_objects(cursor: TokenCursor):
    """Consume the object section; objects are not modelled"""
    object_count = cursor.request("NUMOBJECTS", TokenKind.UINT)
    cursor.skip(object_count)


def read_materials(cursor: TokenCursor) -> List[Material]:
    """Read material declarations, skipping their shading parameters"""
    material_count = cursor.request("NUMMATERIALS", TokenKind.UINT)
    materials = []

    for i in range(material_count):
        declared = cursor.request("MATERIAL", TokenKind.UINT_STRING_X3)
        if declared.index != i:
            raise StructuralMismatch("Material", declared.index, i, declared.name)
        materials.append(Material(name=declared.name, data=SimpleMaterial()))
        cursor.skip(MATERIAL_PARAM_COUNT)

    return materials


class VertexWelder:
    """Maps face corners to deduplicated output vertices

    Emissions are remembered by (source index, mesh index, normal, uv); a
    corner matching a previous emission reuses its output index.
    """

    def __init__(self, source_vertices: List[SourceVertex]):
        self.source_vertices = source_vertices
        self._emitted: Dict[tuple, int] = {}
        self._weight_sums = [v.weight_sum for v in source_vertices]

    def resolve(self, mesh_index: int, mesh: Mesh, corner: Corner) -> int:
        """Return the output vertex index for a corner, emitting if needed"""
        uv = flip_uv(corner.uv)
        key = (corner.vertex_index, mesh_index, corner.normal, uv)

        existing = self._emitted.get(key)
        if existing is not None:
            return existing

        source = self.source_vertices[corner.vertex_index]
        weight_sum = self._weight_sums[corner.vertex_index]

        # A zero sum leaves the weights as read rather than dividing by zero
        if weight_sum != 0:
            weights = [Weight(w.bone_index, w.weight / weight_sum) for w in source.weights]
        else:
            weights = [Weight(w.bone_index, w.weight) for w in source.weights]

        index = mesh.add_vertex(Vertex(
            position=scale_position(source.position),
            normal=corner.normal,
            color=quantize_color(corner.color),
            uv=uv,
            weights=weights
        ))
        self._emitted[key] = index
        return index


def build_meshes(source_vertices: List[SourceVertex], faces: List[SourceFace],
                 materials: List[Material]) -> List[Mesh]:
    """Create one mesh per material and route welded faces into them

    Face indices are stored in reverse corner order to flip the winding.
    """
    meshes = [Mesh(material_index=i) for i in range(len(materials))]
    welder = VertexWelder(source_vertices)

    for i, face in enumerate(faces):
        material_index = face.tri.material_index
        if not 0 <= material_index < len(meshes):
            raise OutOfRange(
                f"Face {i} uses material {material_index} of {len(meshes)}"
            )
        mesh = meshes[material_index]
        indices = [welder.resolve(material_index, mesh, corner) for corner in face.corners]
        mesh.add_face(indices[2], indices[1], indices[0])

    return meshes


def read_geometry(cursor: TokenCursor, bone_count: int) -> Tuple[List[Mesh], List[Material]]:
    """Read vertices, faces, objects, and materials, then weld the meshes

    Args:
        cursor: Token cursor positioned after the skeleton
        bone_count: Number of bones weights may reference

    Returns:
        tuple: (meshes, materials), one mesh per material
    """
    source_vertices = read_vertices(cursor, bone_count)
    faces = read_faces(cursor, len(source_vertices))
    skip_objects(cursor)
    materials = read_materials(cursor)
    meshes = build_meshes(source_vertices, faces, materials)
    return meshes, materials
