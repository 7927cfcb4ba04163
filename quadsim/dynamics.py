"""
Quadcopter Translational Dynamics

Implements the point-mass equations of motion for a quadcopter:
- Thrust along the body +Z axis, rotated into the inertial frame
- Uniform gravity
- Linear drag through a diagonal drag tensor
- A crude ground plane that pins the vehicle at z = 0

Uses explicit (forward) Euler integration at a fixed tick.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple

from .state import RigidBodyState, EulerAngles, Pose
from .quadcopter import PhysicalParameters, InitialConditions
from .frames import thrust_direction, host_to_meters, meters_to_host


logger = logging.getLogger(__name__)


class NumericalInstabilityError(FloatingPointError):
    """Raised when the integrated state stops being finite."""


@dataclass
class SimulationConfig:
    """Simulation parameters."""

    # Enable/disable model components
    enable_drag: bool = True
    enable_ground_clamp: bool = True

    # Feed the control mapper's smoothed rates into the attitude
    integrate_attitude: bool = False

    # Raise NumericalInstabilityError on NaN/inf after each tick
    check_finite: bool = True

    # Maximum fixed ticks run per host frame
    max_substeps: int = 10


@dataclass
class AccelerationBreakdown:
    """
    Inertial-frame accelerations acting on the quadcopter (m/s^2).
    """

    total: np.ndarray = field(default_factory=lambda: np.zeros(3))
    gravity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    thrust: np.ndarray = field(default_factory=lambda: np.zeros(3))
    drag: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # Commanded thrust force (N)
    thrust_force: float = 0.0


def compute_linear_acceleration(
    orientation: EulerAngles,
    velocity: np.ndarray,
    throttle: float,
    params: PhysicalParameters,
    enable_drag: bool = True
) -> AccelerationBreakdown:
    """
    Compute the inertial linear acceleration for one tick.

    a = g + (k * throttle / m) * R(yaw, pitch, roll) [0, 0, 1] - (1/m) D v

    Args:
        orientation: Current Euler angles
        velocity: Inertial velocity (m/s)
        throttle: Throttle input
        params: Physical parameters
        enable_drag: Include the drag term

    Returns:
        AccelerationBreakdown with the total and each contribution
    """
    thrust_force = params.thrust_coefficient * throttle
    specific_thrust = thrust_force / params.mass
    thrust_accel = specific_thrust * thrust_direction(*orientation.as_tuple())

    if enable_drag:
        drag_accel = (1.0 / params.mass) * (params.drag_matrix @ velocity)
    else:
        drag_accel = np.zeros(3)

    gravity = params.gravity_vector

    return AccelerationBreakdown(
        total=gravity + thrust_accel - drag_accel,
        gravity=gravity,
        thrust=thrust_accel,
        drag=drag_accel,
        thrust_force=thrust_force
    )


class FlightDynamicsModel:
    """
    Quadcopter flight dynamics model.

    Owns the rigid-body state and the physical parameters, and advances
    them with ``step`` once per fixed tick. Orientation is held between
    ticks unless attitude rates are supplied.
    """

    def __init__(
        self,
        params: Optional[PhysicalParameters] = None,
        initial_position: Optional[Sequence[float]] = None,
        initial_conditions: Optional[InitialConditions] = None,
        sim_config: Optional[SimulationConfig] = None
    ):
        self.sim_config = sim_config or SimulationConfig()

        self.params: Optional[PhysicalParameters] = None
        self.initial_position = np.zeros(3)
        self.initial_conditions = InitialConditions()

        self.state = RigidBodyState()

        # Latest acceleration breakdown (for debugging)
        self.accelerations = AccelerationBreakdown()
        self.grounded = False
        self.throttle = 0.0

        # History (optional, for analysis)
        self.history: list = []
        self.record_history = False

        if params is not None:
            self.initialize(params, initial_position, initial_conditions)

    @property
    def initialized(self) -> bool:
        return self.params is not None

    def initialize(
        self,
        params: PhysicalParameters,
        initial_position: Optional[Sequence[float]] = None,
        initial_conditions: Optional[InitialConditions] = None
    ):
        """
        Set the physical constants and apply the initial conditions.

        Args:
            params: Physical parameters
            initial_position: Inertial position (m), origin if omitted
            initial_conditions: Initial orientation and velocity
        """
        self.params = params
        self.initial_position = (
            np.zeros(3) if initial_position is None
            else np.array(initial_position, dtype=np.float64)
        )
        self.initial_conditions = initial_conditions or InitialConditions()
        self.reset()

        logger.debug(
            "Initialized quad: mass=%.3f kg, g=%.3f m/s^2, k=%.3f, drag=%s",
            params.mass, params.gravity, params.thrust_coefficient,
            params.drag_coefficients
        )

    def initialize_from_host(
        self,
        params: PhysicalParameters,
        host_location: Sequence[float],
        initial_conditions: Optional[InitialConditions] = None
    ):
        """Initialize from a host placement given in host units (cm)."""
        self.initialize(params, host_to_meters(host_location), initial_conditions)

    def reset(self):
        """Reset the state to the stored initial conditions."""
        self.state = RigidBodyState(
            position=self.initial_position.copy(),
            linear_velocity=self.initial_conditions.velocity.copy(),
            linear_acceleration=np.zeros(3),
            orientation=self.initial_conditions.orientation.copy(),
            time=0.0
        )
        self.accelerations = AccelerationBreakdown()
        self.grounded = False
        self.throttle = 0.0
        self.history = []

    def set_orientation(self, orientation: EulerAngles):
        """Command the attitude directly (no angular dynamics)."""
        self.state.orientation = orientation.copy()

    def step(
        self,
        dt: float,
        throttle: float,
        attitude_rates: Optional[Sequence[float]] = None
    ) -> Tuple[np.ndarray, EulerAngles]:
        """
        Advance the dynamics by one fixed tick.

        Args:
            dt: Fixed tick period (s)
            throttle: Throttle input
            attitude_rates: Optional (roll, pitch, yaw) rates in rad/s added
                to the Euler angles after the linear update

        Returns:
            (position, orientation) after the tick
        """
        if not self.initialized:
            raise RuntimeError("initialize() must be called before step()")

        state = self.state
        self.throttle = throttle

        self.accelerations = compute_linear_acceleration(
            state.orientation,
            state.linear_velocity,
            throttle,
            self.params,
            self.sim_config.enable_drag
        )
        accel = self.accelerations.total
        state.linear_acceleration = accel.copy()

        logger.debug("Quad accel: x=%f y=%f z=%f", accel[0], accel[1], accel[2])

        # Pin to the ground plane while being pushed into it
        self.grounded = bool(
            self.sim_config.enable_ground_clamp and
            state.position[2] <= 0.0 and accel[2] <= 0.0
        )
        if self.grounded:
            state.position[2] = 0.0
        else:
            state.linear_velocity += accel * dt
            state.position += state.linear_velocity * dt

        if attitude_rates is not None:
            roll_rate, pitch_rate, yaw_rate = attitude_rates
            o = state.orientation
            state.orientation = EulerAngles(
                o.roll + roll_rate * dt,
                o.pitch + pitch_rate * dt,
                o.yaw + yaw_rate * dt
            )

        state.time += dt

        if self.sim_config.check_finite and not state.is_finite():
            raise NumericalInstabilityError(
                f"Non-finite state at t={state.time:.3f}s: {state.to_array()}"
            )

        if self.record_history:
            self.history.append({
                'time': state.time,
                'position': state.position.copy(),
                'velocity': state.linear_velocity.copy(),
                'acceleration': accel.copy(),
                'euler': state.orientation.as_tuple(),
                'throttle': throttle,
                'thrust': self.accelerations.thrust_force,
                'grounded': self.grounded
            })

        return self.position, self.orientation

    def run(
        self,
        duration: float,
        throttle_callback: Optional[Callable[[RigidBodyState, float], float]] = None,
        dt: Optional[float] = None
    ) -> list:
        """
        Run the dynamics for a specified duration at the fixed tick.

        Args:
            duration: Simulation duration (s)
            throttle_callback: Optional function(state, time) -> throttle;
                the last throttle is held if omitted
            dt: Tick period, the configured dynamics rate by default

        Returns:
            History list of tick records
        """
        if not self.initialized:
            raise RuntimeError("initialize() must be called before run()")

        dt = dt or self.params.dynamics_rate
        n_steps = int(np.ceil(duration / dt - 1e-9))

        self.record_history = True
        try:
            for _ in range(n_steps):
                if throttle_callback is not None:
                    throttle = throttle_callback(self.state, self.state.time)
                else:
                    throttle = self.throttle
                self.step(dt, throttle)
        finally:
            self.record_history = False

        return self.history

    @property
    def position(self) -> np.ndarray:
        """Inertial position (m)."""
        return self.state.position.copy()

    @property
    def orientation(self) -> EulerAngles:
        """Euler angles in the math frame (rad)."""
        return self.state.orientation.copy()

    @property
    def linear_velocity(self) -> np.ndarray:
        return self.state.linear_velocity.copy()

    @property
    def linear_acceleration(self) -> np.ndarray:
        return self.state.linear_acceleration.copy()

    @property
    def sim_orientation(self) -> EulerAngles:
        """Orientation in the host display convention."""
        return self.state.orientation.to_sim_frame()

    @property
    def host_location(self) -> np.ndarray:
        """Position in host units (cm)."""
        return meters_to_host(self.state.position)

    def pose(self) -> Pose:
        """Snapshot of position and orientation for the host."""
        return Pose(
            position=self.position,
            orientation=self.orientation,
            time=self.state.time
        )

    def get_diagnostic_string(self) -> str:
        """Get formatted diagnostic output for debugging."""
        s = self.state
        roll, pitch, yaw = s.orientation.to_degrees()
        status = " | GROUNDED" if self.grounded else ""

        return (
            f"t={s.time:.2f}s | "
            f"Alt={s.altitude:.2f}m | "
            f"Vz={s.climb_rate:.2f}m/s | "
            f"Az={s.linear_acceleration[2]:.2f}m/s² | "
            f"φ={roll:.1f}° θ={pitch:.1f}° ψ={yaw:.1f}° | "
            f"Throttle={self.throttle:.2f}"
            f"{status}"
        )
