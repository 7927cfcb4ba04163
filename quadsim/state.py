"""
Quadcopter State Representation

The rigid-body state holds the translational motion in the inertial frame:
- Position (3): x, y, z in metres, z up
- Linear velocity (3): m/s
- Linear acceleration (3): m/s^2, recomputed every tick
- Orientation: roll, pitch, yaw Euler angles in radians

Angles are never wrapped; they accumulate until explicitly reset.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Tuple

from .frames import to_sim_rotation, meters_to_host


@dataclass
class EulerAngles:
    """Roll, pitch, yaw in radians (inertial frame)."""

    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0

    @classmethod
    def from_degrees(cls, roll: float = 0.0, pitch: float = 0.0,
                     yaw: float = 0.0) -> 'EulerAngles':
        """Build from angles given in degrees."""
        return cls(np.radians(roll), np.radians(pitch), np.radians(yaw))

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.roll, self.pitch, self.yaw

    def to_degrees(self) -> Tuple[float, float, float]:
        return tuple(float(np.degrees(a)) for a in self.as_tuple())

    def to_sim_frame(self) -> 'EulerAngles':
        """Angles in the host display convention (all axes negated)."""
        return EulerAngles(*to_sim_rotation(self.roll, self.pitch, self.yaw))

    def copy(self) -> 'EulerAngles':
        return EulerAngles(self.roll, self.pitch, self.yaw)


@dataclass
class RigidBodyState:
    """
    Translational state of the quadcopter.

    All values are in SI units (m, m/s, m/s^2, rad).
    """

    # Position in the inertial frame (m)
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # Velocity in the inertial frame (m/s)
    linear_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # Acceleration from the last tick (m/s^2)
    linear_acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))

    orientation: EulerAngles = field(default_factory=EulerAngles)

    # Simulation time (s)
    time: float = 0.0

    def __post_init__(self):
        """Ensure arrays are float64 numpy arrays."""
        self.position = np.array(self.position, dtype=np.float64)
        self.linear_velocity = np.array(self.linear_velocity, dtype=np.float64)
        self.linear_acceleration = np.array(self.linear_acceleration, dtype=np.float64)

    @property
    def altitude(self) -> float:
        """Height above the ground plane (m)."""
        return self.position[2]

    @property
    def climb_rate(self) -> float:
        """Vertical speed, positive up (m/s)."""
        return self.linear_velocity[2]

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.linear_velocity))

    @property
    def on_ground(self) -> bool:
        return self.position[2] <= 0.0

    def is_finite(self) -> bool:
        """True when no component is NaN or infinite."""
        return bool(
            np.all(np.isfinite(self.to_array()))
        )

    def to_array(self) -> np.ndarray:
        """
        Flatten state for logging and comparisons.

        Returns:
            12-element array: [pos(3), vel(3), accel(3), rpy(3)]
        """
        return np.concatenate([
            self.position,
            self.linear_velocity,
            self.linear_acceleration,
            np.array(self.orientation.as_tuple(), dtype=np.float64)
        ])

    def copy(self) -> 'RigidBodyState':
        """Create a deep copy of this state."""
        return RigidBodyState(
            position=self.position.copy(),
            linear_velocity=self.linear_velocity.copy(),
            linear_acceleration=self.linear_acceleration.copy(),
            orientation=self.orientation.copy(),
            time=self.time
        )


@dataclass
class Pose:
    """
    Published snapshot the host applies to its scene transform.

    ``position`` is in metres, ``orientation`` in the math frame. The
    host-side views apply the unit factor and the sign flip.
    """

    position: np.ndarray
    orientation: EulerAngles
    time: float = 0.0

    @property
    def host_location(self) -> np.ndarray:
        """Position in host units (cm)."""
        return meters_to_host(self.position)

    @property
    def host_rotation(self) -> EulerAngles:
        return self.orientation.to_sim_frame()
