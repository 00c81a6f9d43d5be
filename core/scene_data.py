#!/usr/bin/env python3
"""
Scene Data Module
Format-agnostic data structures for a reconstructed model and animation.

Readers fill these structures from the token stream; exporters consume them
without knowledge of the source format. Bones live in a flat list and refer
to their parent by index, so a parent always sits at a smaller index than
its children.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Vector2 = Tuple[float, float]
Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]
Color = Tuple[int, int, int, int]


@dataclass
class Bone:
    """Skeleton joint with world and parent-relative transforms

    Attributes:
        name: Bone name, lowercased on read (lookups are case-insensitive)
        parent_index: Index of the parent bone, -1 for a root
        world_position: Position in root space (cm)
        world_rotation: (x, y, z, w) rotation in root space
        local_position: Position relative to the parent (cm)
        local_rotation: (x, y, z, w) rotation relative to the parent
        scale: Non-uniform scale
    """
    name: str
    parent_index: int
    world_position: Vector3
    world_rotation: Quaternion
    local_position: Vector3
    local_rotation: Quaternion
    scale: Vector3 = (1.0, 1.0, 1.0)

    @property
    def is_root(self) -> bool:
        return self.parent_index == -1


@dataclass
class Weight:
    """Single skin influence"""
    bone_index: int
    weight: float


@dataclass
class Vertex:
    """Welded output vertex

    Attributes:
        position: Position in cm
        normal: Vertex normal as read
        color: RGBA, 8 bits per channel
        uv: Single UV set, V flipped
        weights: Normalized skin weights
    """
    position: Vector3
    normal: Vector3
    color: Color
    uv: Vector2
    weights: List[Weight] = field(default_factory=list)


@dataclass
class Face:
    """Triangle as three indices into its mesh's vertex list"""
    a: int
    b: int
    c: int

    @property
    def indices(self) -> Tuple[int, int, int]:
        return (self.a, self.b, self.c)


@dataclass
class Mesh:
    """Vertex and face buffers drawn with a single material"""
    material_index: int
    vertices: List[Vertex] = field(default_factory=list)
    faces: List[Face] = field(default_factory=list)

    def add_vertex(self, vertex: Vertex) -> int:
        """Append a vertex and return its index"""
        self.vertices.append(vertex)
        return len(self.vertices) - 1

    def add_face(self, a: int, b: int, c: int) -> Face:
        face = Face(a, b, c)
        self.faces.append(face)
        return face


@dataclass
class SimpleMaterial:
    """Placeholder shading data; only the material name is read"""
    diffuse_map: str = ""
    normal_map: str = ""
    specular_map: str = ""


@dataclass
class Material:
    name: str
    data: SimpleMaterial = field(default_factory=SimpleMaterial)


@dataclass
class SceneModel:
    """Complete reconstructed model: skeleton, meshes, materials

    Attributes:
        bones: Bones in declaration order
        meshes: One mesh per material, in material order
        materials: Materials in declaration order
        version: Export format version read from the header
    """
    bones: List[Bone] = field(default_factory=list)
    meshes: List[Mesh] = field(default_factory=list)
    materials: List[Material] = field(default_factory=list)
    version: Optional[int] = None

    @property
    def bone_count(self) -> int:
        return len(self.bones)

    def add_bone(self, name: str, parent_index: int,
                 world_position: Vector3, world_rotation: Quaternion,
                 local_position: Vector3, local_rotation: Quaternion,
                 scale: Vector3 = (1.0, 1.0, 1.0)) -> Bone:
        bone = Bone(
            name=name,
            parent_index=parent_index,
            world_position=world_position,
            world_rotation=world_rotation,
            local_position=local_position,
            local_rotation=local_rotation,
            scale=scale
        )
        self.bones.append(bone)
        return bone

    def add_mesh(self, mesh: Mesh) -> Mesh:
        self.meshes.append(mesh)
        return mesh

    def add_material(self, material: Material) -> Material:
        self.materials.append(material)
        return material

    def find_bone(self, name: str) -> int:
        """Find a bone by case-insensitive name

        Args:
            name: Bone name to find

        Returns:
            int: Index of the first matching bone, -1 if none
        """
        wanted = name.casefold()
        for index, bone in enumerate(self.bones):
            if bone.name.casefold() == wanted:
                return index
        return -1


@dataclass
class PartTransform:
    """One part's pose in one frame, stored as read"""
    offset: Vector3
    rotation: Quaternion


@dataclass
class AnimationFrame:
    """Pose of every part at one frame, in part declaration order"""
    frame: int
    parts: List[PartTransform] = field(default_factory=list)


@dataclass
class Animation:
    """Per-frame part transforms keyed to a skeleton

    Attributes:
        frame_rate: Frames per second
        part_names: Part names in declaration order
        part_bones: Skeleton bone index per part, None where no bone matched.
                    Frames are not remapped through this; it is metadata for
                    consumers that retarget.
        frames: Frames in stream order
        version: Export format version read from the header
    """
    frame_rate: int = 30
    part_names: List[str] = field(default_factory=list)
    part_bones: List[Optional[int]] = field(default_factory=list)
    frames: List[AnimationFrame] = field(default_factory=list)
    version: Optional[int] = None

    @property
    def part_count(self) -> int:
        return len(self.part_names)

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def add_frame(self, frame: int) -> AnimationFrame:
        anim_frame = AnimationFrame(frame=frame)
        self.frames.append(anim_frame)
        return anim_frame

    def append_part(self, anim_frame: AnimationFrame, offset: Vector3,
                    rotation: Quaternion) -> PartTransform:
        part = PartTransform(offset=offset, rotation=rotation)
        anim_frame.parts.append(part)
        return part

    def unmapped_parts(self) -> List[str]:
        """Names of parts that matched no skeleton bone"""
        return [name for name, bone in zip(self.part_names, self.part_bones) if bone is None]
