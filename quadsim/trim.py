"""
Trim Solver

Finds the throttle and attitude that hold the quadcopter in steady-state
flight, i.e. zero linear acceleration at a target inertial velocity.

Supports:
- Hover (closed form)
- Constant-velocity climb, descent and cruise against drag
"""

import numpy as np
from scipy.optimize import least_squares
from typing import Dict, Optional, Tuple
from dataclasses import dataclass, field

from .state import EulerAngles
from .quadcopter import PhysicalParameters
from .dynamics import AccelerationBreakdown, SimulationConfig, compute_linear_acceleration


# Attitude bound for the solver, short of the thrust-horizontal singularity
MAX_TILT = np.radians(80.0)


@dataclass
class TrimCondition:
    """Desired steady flight condition."""

    # Target inertial velocity (m/s)
    velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    # Heading held during the trim (rad)
    yaw: float = 0.0

    # Throttle range available to the solver
    throttle_limits: Tuple[float, float] = (0.0, 1.0)

    # Maximum acceleration residual accepted as trimmed (m/s^2)
    tolerance: float = 1e-6


@dataclass
class TrimResult:
    """Result of trim solution."""

    success: bool
    throttle: float
    orientation: EulerAngles
    velocity: np.ndarray
    residuals: np.ndarray
    accelerations: AccelerationBreakdown
    iterations: int
    message: str = field(default="")


def hover_throttle(
    params: PhysicalParameters,
    orientation: Optional[EulerAngles] = None
) -> float:
    """
    Throttle whose vertical thrust component cancels gravity.

    Args:
        params: Physical parameters
        orientation: Attitude to hover at, level if omitted

    Returns:
        Throttle setting
    """
    orientation = orientation or EulerAngles()
    vertical = np.cos(orientation.pitch) * np.cos(orientation.roll)
    if vertical <= 1e-9:
        raise ValueError("Thrust axis has no upward component at this attitude")

    return params.gravity / (params.max_specific_thrust * vertical)


def compute_trim(
    condition: TrimCondition,
    params: PhysicalParameters,
    sim_config: Optional[SimulationConfig] = None,
    initial_guess: Optional[Dict[str, float]] = None
) -> TrimResult:
    """
    Compute throttle, roll and pitch for zero acceleration.

    Args:
        condition: Desired trim condition
        params: Physical parameters
        sim_config: Simulation configuration (drag toggle)
        initial_guess: Optional 'throttle', 'roll', 'pitch' starting values

    Returns:
        TrimResult with solution or failure info
    """
    sim_config = sim_config or SimulationConfig()
    velocity = np.array(condition.velocity, dtype=np.float64)
    low, high = condition.throttle_limits

    guess = initial_guess or {}
    x0 = np.array([
        guess.get('throttle', hover_throttle(params)),
        guess.get('roll', 0.0),
        guess.get('pitch', 0.0)
    ])
    x0[0] = np.clip(x0[0], low, high)

    def residuals(x):
        throttle, roll, pitch = x
        accel = compute_linear_acceleration(
            EulerAngles(roll, pitch, condition.yaw),
            velocity,
            throttle,
            params,
            sim_config.enable_drag
        )
        return accel.total

    result = least_squares(
        residuals, x0,
        bounds=([low, -MAX_TILT, -MAX_TILT], [high, MAX_TILT, MAX_TILT]),
        method='trf', xtol=1e-12, ftol=1e-12, gtol=1e-12
    )

    throttle, roll, pitch = result.x
    orientation = EulerAngles(float(roll), float(pitch), condition.yaw)
    final = compute_linear_acceleration(
        orientation, velocity, float(throttle), params, sim_config.enable_drag
    )

    max_residual = float(np.max(np.abs(final.total)))
    success = bool(result.success) and max_residual < condition.tolerance

    if success:
        message = "Trimmed"
    else:
        message = (f"Trim not reached: max residual {max_residual:.3e} m/s^2 "
                   f"({result.message})")

    return TrimResult(
        success=success,
        throttle=float(throttle),
        orientation=orientation,
        velocity=velocity,
        residuals=final.total,
        accelerations=final,
        iterations=int(result.nfev),
        message=message
    )
