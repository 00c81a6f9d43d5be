#!/usr/bin/env python3
"""
Skeleton Module
Rebuilds the bone hierarchy from bone declarations and world transforms.

The export format stores every bone in world space. Local (parent-relative)
transforms are derived here, which requires each parent to be decoded
before its children; declarations that break that order are rejected.
"""

from typing import List

from .errors import StructuralMismatch
from .scene_data import Bone
from .tokens import BoneInfo, TokenCursor, TokenKind
from .transforms import basis_to_quaternion, decompose_local, scale_position


def read_bone_infos(cursor: TokenCursor) -> List[BoneInfo]:
    """Read `NUMBONES`, the optional `NUMCOSMETICBONES`, and the declarations"""
    bone_count = cursor.request("NUMBONES", TokenKind.UINT)

    # Cosmetic bones are already part of NUMBONES
    cursor.try_request("NUMCOSMETICBONES", TokenKind.UINT)

    infos = []
    for i in range(bone_count):
        info = cursor.request("BONE", TokenKind.BONE_INFO)
        if info.index != i:
            raise StructuralMismatch("Bone", info.index, i, info.name)
        if info.parent != -1 and not 0 <= info.parent < i:
            raise StructuralMismatch(
                "Bone parent", info.parent, i,
                f"{info.name} must follow its parent"
            )
        infos.append(info)
    return infos


def read_bone(cursor: TokenCursor, info: BoneInfo, bones: List[Bone]) -> Bone:
    """Read one bone's world transform and derive its local transform

    Args:
        cursor: Token cursor positioned at the bone's `BONE` token
        info: The bone's declaration
        bones: Bones already decoded; the parent must be among them

    Returns:
        Bone: Fully decoded bone
    """
    index = cursor.request("BONE", TokenKind.UINT)
    if index != info.index:
        raise StructuralMismatch("Bone transform", index, info.index, info.name)

    world_position = scale_position(cursor.request("OFFSET", TokenKind.VECTOR3))

    scale = (1.0, 1.0, 1.0)
    result = cursor.try_request("SCALE", TokenKind.VECTOR3)
    if result.ok:
        scale = tuple(float(v) for v in result.value)

    x_row = cursor.request("X", TokenKind.VECTOR3)
    y_row = cursor.request("Y", TokenKind.VECTOR3)
    z_row = cursor.request("Z", TokenKind.VECTOR3)
    world_rotation = basis_to_quaternion(x_row, y_row, z_row)

    if info.parent == -1:
        local_position = world_position
        local_rotation = world_rotation
    else:
        parent = bones[info.parent]
        local_position, local_rotation = decompose_local(
            world_position, world_rotation,
            parent.world_position, parent.world_rotation
        )

    return Bone(
        name=info.name.lower(),
        parent_index=info.parent,
        world_position=world_position,
        world_rotation=world_rotation,
        local_position=local_position,
        local_rotation=local_rotation,
        scale=scale
    )


def read_skeleton(cursor: TokenCursor) -> List[Bone]:
    """Read the complete skeleton section

    Returns:
        list: Bones in declaration order
    """
    infos = read_bone_infos(cursor)
    bones: List[Bone] = []
    for info in infos:
        bones.append(read_bone(cursor, info, bones))
    return bones
