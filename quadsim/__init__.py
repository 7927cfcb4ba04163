"""
Quadcopter Flight Dynamics Simulator

A minimal fixed-timestep quadcopter model: throttle drives thrust along the
body axis, gravity and linear drag act in the inertial frame, and explicit
Euler integration produces a pose for a host to display.
"""

__version__ = "0.3.0"

# Core simulation modules
from .quadcopter import (
    PhysicalParameters,
    InitialConditions,
    ControlTuning,
    QuadcopterConfig
)
from .state import EulerAngles, RigidBodyState, Pose
from .dynamics import (
    FlightDynamicsModel,
    SimulationConfig,
    AccelerationBreakdown,
    NumericalInstabilityError,
    compute_linear_acceleration
)
from .controls import ControlMapper, ControlState, interp_to
from .simulation import QuadSimulation

# Analysis modules
from .trim import TrimCondition, TrimResult, hover_throttle, compute_trim

from .data_export import (
    history_to_dataframe,
    export_history_csv,
    load_history_csv,
    export_json
)

from .plotting import plot_flight_history
