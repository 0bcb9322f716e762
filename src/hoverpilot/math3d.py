"""
3D math utilities for quaternions, rotations and frame transforms.

Quaternion convention: [w, x, y, z] (scalar-first, Hamilton convention).
Rotation convention: R rotates vectors from body to world frame.
World frame is Y-up; body axes are right = +X, up = +Y, forward = +Z.
"""

import numpy as np
from numpy.typing import NDArray


RIGHT = np.array([1.0, 0.0, 0.0])
UP = np.array([0.0, 1.0, 0.0])
FORWARD = np.array([0.0, 0.0, 1.0])


def quat_normalize(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Normalize a quaternion to unit length.

    Args:
        q: Quaternion [w, x, y, z], shape (4,)

    Returns:
        Normalized quaternion, shape (4,)
    """
    norm = np.linalg.norm(q)
    if norm < 1e-10:
        # Return identity quaternion if input is near-zero
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


def quat_mul(q1: NDArray[np.float64], q2: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Multiply two quaternions (Hamilton product).

    q1 * q2 represents: first rotate by q2, then by q1.
    """
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
    ])


def quat_to_R(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert quaternion to rotation matrix.

    The rotation matrix R rotates vectors from body to world frame:
        v_world = R @ v_body

    Args:
        q: Unit quaternion [w, x, y, z], shape (4,)

    Returns:
        Rotation matrix, shape (3, 3)
    """
    w, x, y, z = quat_normalize(q)

    return np.array([
        [1 - 2*(y*y + z*z),     2*(x*y - w*z),     2*(x*z + w*y)],
        [    2*(x*y + w*z), 1 - 2*(x*x + z*z),     2*(y*z - w*x)],
        [    2*(x*z - w*y),     2*(y*z + w*x), 1 - 2*(x*x + y*y)],
    ])


def quat_from_axis_angle(axis: NDArray[np.float64], angle: float) -> NDArray[np.float64]:
    """
    Build a unit quaternion rotating by ``angle`` [rad] about ``axis``.

    A near-zero axis yields the identity rotation.
    """
    axis = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(axis)
    if norm < 1e-10:
        return np.array([1.0, 0.0, 0.0, 0.0])
    half = 0.5 * angle
    xyz = axis / norm * np.sin(half)
    return np.array([np.cos(half), xyz[0], xyz[1], xyz[2]])


def quat_from_yaw(yaw: float) -> NDArray[np.float64]:
    """Rotation about world up (+Y) by ``yaw`` radians."""
    return quat_from_axis_angle(UP, yaw)


def quat_rotate_vec(q: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotate a body-frame vector into the world frame."""
    return quat_to_R(q) @ v


def quat_inverse_rotate_vec(q: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Express a world-frame vector in the body frame."""
    return quat_to_R(q).T @ v


def project(v: NDArray[np.float64], onto: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Project ``v`` onto the direction of ``onto``.

    Returns the zero vector when ``onto`` is near-zero.
    """
    denom = float(np.dot(onto, onto))
    if denom < 1e-12:
        return np.zeros(3)
    return (float(np.dot(v, onto)) / denom) * onto


def clamp_magnitude(v: NDArray[np.float64], max_norm: float) -> NDArray[np.float64]:
    """Scale ``v`` down so that its norm does not exceed ``max_norm``."""
    norm = np.linalg.norm(v)
    if norm > max_norm and norm > 0.0:
        return v * (max_norm / norm)
    return v


def tilt_angle(q: NDArray[np.float64]) -> float:
    """Angle [rad] between the body up-axis and world up."""
    body_up = quat_to_R(q) @ UP
    return float(np.arccos(np.clip(body_up[1], -1.0, 1.0)))


def safe_normalize(v: NDArray[np.float64], fallback: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Safely normalize a vector, returning fallback if near-zero.

    Args:
        v: Vector to normalize, shape (3,)
        fallback: Fallback unit vector if v is near-zero, shape (3,)

    Returns:
        Normalized vector or fallback, shape (3,)
    """
    norm = np.linalg.norm(v)
    if norm < 1e-6:
        return fallback
    return v / norm
