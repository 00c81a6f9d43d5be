#!/usr/bin/env python3
"""
Animation Module
Reads per-frame part transforms against an already built skeleton.
"""

from typing import Optional

from .errors import MissingDependency, StructuralMismatch
from .scene_data import Animation, SceneModel
from .tokens import TokenCursor, TokenKind
from .transforms import basis_to_quaternion, scale_position


def read_parts(cursor: TokenCursor, skeleton: SceneModel, animation: Animation):
    """Read part declarations and map each part to a bone by name"""
    part_count = cursor.request("NUMPARTS", TokenKind.UINT)

    for i in range(part_count):
        part = cursor.request("PART", TokenKind.UINT_STRING)
        if part.index != i:
            raise StructuralMismatch("Part", part.index, i, part.name)

        bone_index = skeleton.find_bone(part.name)
        animation.part_names.append(part.name)
        animation.part_bones.append(bone_index if bone_index != -1 else None)


def read_frames(cursor: TokenCursor, animation: Animation):
    """Read every frame's part transforms in declared part order"""
    animation.frame_rate = cursor.request("FRAMERATE", TokenKind.UINT)
    frame_count = cursor.request("NUMFRAMES", TokenKind.UINT)

    for _ in range(frame_count):
        frame = animation.add_frame(cursor.request("FRAME", TokenKind.UINT))

        for p in range(animation.part_count):
            part_index = cursor.request("PART", TokenKind.UINT)
            if part_index != p:
                raise StructuralMismatch(
                    "Frame part", part_index, p, f"frame {frame.frame}"
                )
            offset = scale_position(cursor.request("OFFSET", TokenKind.VECTOR3))
            x_row = cursor.request("X", TokenKind.VECTOR3)
            y_row = cursor.request("Y", TokenKind.VECTOR3)
            z_row = cursor.request("Z", TokenKind.VECTOR3)
            animation.append_part(frame, offset, basis_to_quaternion(x_row, y_row, z_row))


def read_animation(cursor: TokenCursor, skeleton: Optional[SceneModel]) -> Animation:
    """Read the part and frame sections of an animation

    Args:
        cursor: Token cursor positioned after the header
        skeleton: Model whose bones the parts are matched against

    Returns:
        Animation: Frames stored by part declaration order

    Raises:
        MissingDependency: If no skeleton with bones is given
    """
    if skeleton is None or skeleton.bone_count == 0:
        raise MissingDependency("Animation requires a skeleton with at least one bone")

    animation = Animation()
    read_parts(cursor, skeleton, animation)
    read_frames(cursor, animation)
    return animation
