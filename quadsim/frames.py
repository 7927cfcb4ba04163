"""
Coordinate Frame Transformations

This module handles the rotations and unit conversions between frames:
- Inertial: world-fixed, X forward, Y left, Z up (gravity along -Z)
- Body: attached to the quadcopter, rotor thrust along body +Z
- Host/sim display frame: the game-side rotation convention, mirrored
  relative to the math frame on all three axes

Attitude is stored as Euler angles (roll, pitch, yaw) composed in the
standard aerospace yaw-pitch-roll order.
"""

import numpy as np
from typing import Tuple


# Host engines work in centimetres, the dynamics in metres
HOST_UNITS_PER_METER = 100.0

# Thrust axis in the body frame
BODY_THRUST_AXIS = np.array([0.0, 0.0, 1.0])


def euler_to_dcm(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """
    Direction Cosine Matrix for a yaw-pitch-roll (3-2-1) Euler sequence.

    Args:
        roll: Rotation about body X (rad)
        pitch: Rotation about body Y (rad)
        yaw: Rotation about inertial Z (rad)

    Returns:
        3x3 rotation matrix R_body_to_inertial
        v_inertial = R @ v_body
    """
    cr, sr = np.cos(roll), np.sin(roll)
    cp, sp = np.cos(pitch), np.sin(pitch)
    cy, sy = np.cos(yaw), np.sin(yaw)

    return np.array([
        [cy*cp, cy*sp*sr - sy*cr, cy*sp*cr + sy*sr],
        [sy*cp, sy*sp*sr + cy*cr, sy*sp*cr - cy*sr],
        [  -sp,            cp*sr,            cp*cr]
    ])


def thrust_direction(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """
    Unit vector of the body thrust axis expressed in the inertial frame.

    This is the third column of ``euler_to_dcm``, written out so the level
    case comes out exactly (0, 0, 1).

    Returns:
        3D unit vector in the inertial frame
    """
    cr, sr = np.cos(roll), np.sin(roll)
    cp, sp = np.cos(pitch), np.sin(pitch)
    cy, sy = np.cos(yaw), np.sin(yaw)

    return np.array([
        cy*sp*cr + sy*sr,
        sy*sp*cr - cy*sr,
        cp*cr
    ])


def to_sim_rotation(roll: float, pitch: float, yaw: float) -> Tuple[float, float, float]:
    """
    Map math-frame Euler angles into the host display convention.

    The host's rotator is mirrored relative to the math frame, so every
    axis is negated. Units pass through unchanged.

    Returns:
        (roll, pitch, yaw) in the host convention
    """
    return -roll, -pitch, -yaw


def host_to_meters(location: np.ndarray) -> np.ndarray:
    """Convert a host-unit location (cm) to metres."""
    return np.asarray(location, dtype=np.float64) / HOST_UNITS_PER_METER


def meters_to_host(position: np.ndarray) -> np.ndarray:
    """Convert a position in metres to host units (cm)."""
    return np.asarray(position, dtype=np.float64) * HOST_UNITS_PER_METER
