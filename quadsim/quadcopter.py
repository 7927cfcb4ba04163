"""
Quadcopter Configuration

Defines the physical properties of the vehicle and its handling:
- Mass, gravity and thrust coefficient
- Per-axis linear drag coefficients
- Fixed dynamics tick period
- Initial conditions
- Control mapper tuning

Everything can be loaded from and saved to YAML.
"""

import numpy as np
import yaml
from dataclasses import dataclass, field
from typing import Dict, Any, Tuple

from .state import EulerAngles


@dataclass(frozen=True)
class PhysicalParameters:
    """Physical constants of the quadcopter. Immutable once built."""

    mass: float = 0.2                 # kg
    gravity: float = 9.8              # m/s^2, magnitude
    thrust_coefficient: float = 9.8   # N per unit throttle

    # Diagonal drag tensor (x, y, z), N per m/s
    drag_coefficients: Tuple[float, float, float] = (0.1, 0.1, 0.1)

    # Fixed dynamics tick period (s), 50 Hz
    dynamics_rate: float = 0.02

    def __post_init__(self):
        object.__setattr__(
            self, 'drag_coefficients',
            tuple(float(c) for c in self.drag_coefficients)
        )
        if len(self.drag_coefficients) != 3:
            raise ValueError(
                f"drag_coefficients needs 3 entries, got {len(self.drag_coefficients)}"
            )
        values = (self.mass, self.gravity, self.thrust_coefficient,
                  self.dynamics_rate) + self.drag_coefficients
        if not all(np.isfinite(values)):
            raise ValueError(f"Physical parameters must be finite: {self}")
        if self.mass <= 0.0:
            raise ValueError(f"mass must be positive, got {self.mass}")
        if self.dynamics_rate <= 0.0:
            raise ValueError(f"dynamics_rate must be positive, got {self.dynamics_rate}")

    @property
    def gravity_vector(self) -> np.ndarray:
        """Gravity acceleration in the inertial frame (m/s^2)."""
        return np.array([0.0, 0.0, -self.gravity])

    @property
    def drag_matrix(self) -> np.ndarray:
        """Diagonal drag tensor."""
        return np.diag(self.drag_coefficients)

    @property
    def max_specific_thrust(self) -> float:
        """Thrust acceleration at full throttle (m/s^2)."""
        return self.thrust_coefficient / self.mass

    @property
    def thrust_to_weight(self) -> float:
        return self.thrust_coefficient / (self.mass * self.gravity)


@dataclass
class InitialConditions:
    """State applied on initialize/reset, besides the position."""

    orientation: EulerAngles = field(default_factory=EulerAngles)

    # Inertial velocity (m/s)
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.velocity = np.array(self.velocity, dtype=np.float64)


@dataclass
class ControlTuning:
    """
    Handling parameters for the control mapper.

    Speeds are in host units (cm/s) and rates in deg/s, as the legacy
    channels feed the host directly.
    """

    acceleration: float = 500.0       # how quickly forward speed changes
    turn_speed: float = 50.0          # how quickly the pawn can steer
    max_speed: float = 4000.0
    min_speed: float = 500.0
    initial_forward_speed: float = 500.0

    def __post_init__(self):
        if self.min_speed > self.max_speed:
            raise ValueError(
                f"min_speed ({self.min_speed}) exceeds max_speed ({self.max_speed})"
            )
        if not self.min_speed <= self.initial_forward_speed <= self.max_speed:
            raise ValueError(
                f"initial_forward_speed ({self.initial_forward_speed}) outside "
                f"[{self.min_speed}, {self.max_speed}]"
            )


@dataclass
class QuadcopterConfig:
    """Complete quadcopter configuration."""

    name: str = "Generic Quad"

    physics: PhysicalParameters = field(default_factory=PhysicalParameters)
    initial: InitialConditions = field(default_factory=InitialConditions)
    controls: ControlTuning = field(default_factory=ControlTuning)

    # Spawn location in host units (cm)
    spawn_location: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.spawn_location = np.array(self.spawn_location, dtype=np.float64)

    @classmethod
    def from_yaml(cls, filepath: str) -> 'QuadcopterConfig':
        """Load quadcopter configuration from YAML file."""
        with open(filepath, 'r') as f:
            data = yaml.safe_load(f)

        return cls._from_dict(data or {})

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> 'QuadcopterConfig':
        """Create config from dictionary."""
        phys_data = dict(data.get('physics', {}))
        init_data = data.get('initial_conditions', {})
        ctrl_data = data.get('controls', {})

        if 'drag_coefficients' in phys_data:
            phys_data['drag_coefficients'] = tuple(phys_data['drag_coefficients'])

        orientation_deg = init_data.get('orientation_deg', {})
        initial = InitialConditions(
            orientation=EulerAngles.from_degrees(
                roll=orientation_deg.get('roll', 0.0),
                pitch=orientation_deg.get('pitch', 0.0),
                yaw=orientation_deg.get('yaw', 0.0)
            ),
            velocity=init_data.get('velocity', [0.0, 0.0, 0.0])
        )

        return cls(
            name=data.get('name', 'Unknown'),
            physics=PhysicalParameters(**phys_data) if phys_data else PhysicalParameters(),
            initial=initial,
            controls=ControlTuning(**ctrl_data) if ctrl_data else ControlTuning(),
            spawn_location=data.get('spawn_location', [0.0, 0.0, 0.0])
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        roll, pitch, yaw = self.initial.orientation.to_degrees()
        return {
            'name': self.name,
            'physics': {
                'mass': self.physics.mass,
                'gravity': self.physics.gravity,
                'thrust_coefficient': self.physics.thrust_coefficient,
                'drag_coefficients': list(self.physics.drag_coefficients),
                'dynamics_rate': self.physics.dynamics_rate,
            },
            'initial_conditions': {
                'orientation_deg': {'roll': roll, 'pitch': pitch, 'yaw': yaw},
                'velocity': self.initial.velocity.tolist(),
            },
            'controls': {
                'acceleration': self.controls.acceleration,
                'turn_speed': self.controls.turn_speed,
                'max_speed': self.controls.max_speed,
                'min_speed': self.controls.min_speed,
                'initial_forward_speed': self.controls.initial_forward_speed,
            },
            'spawn_location': self.spawn_location.tolist(),
        }

    def save_yaml(self, filepath: str):
        """Save configuration to YAML file."""
        with open(filepath, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)
