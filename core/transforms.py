#!/usr/bin/env python3
"""
Transforms Module
Rotation and transform math shared by the skeleton and animation readers.

Quaternions are (x, y, z, w) with w the scalar part. Rotation matrices are
given as three basis rows (X, Y, Z): each row is the image of the matching
unit axis, the layout the export format writes.

All public functions accept sequences and return tuples of Python floats so
the scene data stays plain and comparable.
"""

from typing import Sequence, Tuple

import numpy as np

# Inches (source) to centimeters (output)
UNIT_SCALE = 2.54

Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]

IDENTITY_QUATERNION: Quaternion = (0.0, 0.0, 0.0, 1.0)


def _to_tuple(values) -> tuple:
    return tuple(float(v) for v in values)


def scale_position(position: Sequence[float]) -> Vector3:
    """Convert a source position to output units"""
    return _to_tuple(np.asarray(position, dtype=np.float64) * UNIT_SCALE)


def basis_to_quaternion(x_row: Sequence[float], y_row: Sequence[float],
                        z_row: Sequence[float]) -> Quaternion:
    """Convert three orthonormal basis rows to a unit quaternion

    Branches on the largest diagonal term (Shepperd) so the square root
    argument stays well away from zero.

    Args:
        x_row: X basis row
        y_row: Y basis row
        z_row: Z basis row

    Returns:
        tuple: (x, y, z, w) unit quaternion
    """
    m = np.array([x_row, y_row, z_row], dtype=np.float64)
    trace = m[0][0] + m[1][1] + m[2][2]

    if trace > 0.0:
        s = np.sqrt(trace + 1.0)
        w = s * 0.5
        s = 0.5 / s
        x = (m[1][2] - m[2][1]) * s
        y = (m[2][0] - m[0][2]) * s
        z = (m[0][1] - m[1][0]) * s
    elif m[0][0] >= m[1][1] and m[0][0] >= m[2][2]:
        s = np.sqrt(1.0 + m[0][0] - m[1][1] - m[2][2])
        inv_s = 0.5 / s
        x = 0.5 * s
        y = (m[0][1] + m[1][0]) * inv_s
        z = (m[0][2] + m[2][0]) * inv_s
        w = (m[1][2] - m[2][1]) * inv_s
    elif m[1][1] > m[2][2]:
        s = np.sqrt(1.0 + m[1][1] - m[0][0] - m[2][2])
        inv_s = 0.5 / s
        x = (m[1][0] + m[0][1]) * inv_s
        y = 0.5 * s
        z = (m[2][1] + m[1][2]) * inv_s
        w = (m[2][0] - m[0][2]) * inv_s
    else:
        s = np.sqrt(1.0 + m[2][2] - m[0][0] - m[1][1])
        inv_s = 0.5 / s
        x = (m[2][0] + m[0][2]) * inv_s
        y = (m[2][1] + m[1][2]) * inv_s
        z = 0.5 * s
        w = (m[0][1] - m[1][0]) * inv_s

    q = np.array([x, y, z, w])
    norm = np.linalg.norm(q)
    if norm > 0.0:
        q = q / norm
    return _to_tuple(q)


def quaternion_conjugate(q: Sequence[float]) -> Quaternion:
    """Negate the vector part; the inverse of a unit quaternion"""
    x, y, z, w = q
    return (-float(x), -float(y), -float(z), float(w))


def quaternion_multiply(a: Sequence[float], b: Sequence[float]) -> Quaternion:
    """Hamilton product a * b (apply b, then a)"""
    ax, ay, az, aw = (float(v) for v in a)
    bx, by, bz, bw = (float(v) for v in b)
    return (
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    )


def rotate_vector(q: Sequence[float], v: Sequence[float]) -> Vector3:
    """Rotate vector v by unit quaternion q"""
    u = np.asarray(q[:3], dtype=np.float64)
    w = float(q[3])
    v = np.asarray(v, dtype=np.float64)
    t = 2.0 * np.cross(u, v)
    return _to_tuple(v + w * t + np.cross(u, t))


def decompose_local(world_position: Sequence[float], world_rotation: Sequence[float],
                    parent_position: Sequence[float],
                    parent_rotation: Sequence[float]) -> Tuple[Vector3, Quaternion]:
    """Express a world transform relative to its parent's world transform

    Returns:
        tuple: (local_position, local_rotation)
    """
    inverse_parent = quaternion_conjugate(parent_rotation)
    local_rotation = quaternion_multiply(inverse_parent, world_rotation)
    delta = np.asarray(world_position, dtype=np.float64) - np.asarray(parent_position, dtype=np.float64)
    local_position = rotate_vector(inverse_parent, delta)
    return local_position, local_rotation


def compose_world(parent_position: Sequence[float], parent_rotation: Sequence[float],
                  local_position: Sequence[float],
                  local_rotation: Sequence[float]) -> Tuple[Vector3, Quaternion]:
    """Apply a local transform onto its parent's world transform

    Inverse of decompose_local.

    Returns:
        tuple: (world_position, world_rotation)
    """
    world_rotation = quaternion_multiply(parent_rotation, local_rotation)
    offset = np.asarray(rotate_vector(parent_rotation, local_position))
    world_position = _to_tuple(np.asarray(parent_position, dtype=np.float64) + offset)
    return world_position, world_rotation
