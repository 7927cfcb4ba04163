"""
Control Mapping

Translates the host's raw analog axes into the throttle fed to the
dynamics, plus smoothed forward-speed and pitch/yaw/roll rate channels.

The smoothed channels are legacy display signals: the dynamics only
consume them when attitude integration is switched on.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Mapping, Optional

from .quadcopter import ControlTuning


logger = logging.getLogger(__name__)


# Host axis names
THRUST_AXIS = "Thrust"
MOVE_UP_AXIS = "MoveUp"
MOVE_RIGHT_AXIS = "MoveRight"

AXES = (THRUST_AXIS, MOVE_UP_AXIS, MOVE_RIGHT_AXIS)

# Inputs closer to zero than this count as released
INPUT_DEADBAND = 1e-8

# Stick deflection above which the vehicle is considered turning
TURN_THRESHOLD = 0.2

# Smoothing rate for all rate channels (1/s)
RATE_SMOOTHING = 2.0

# Fraction of acceleration applied as braking with the throttle released
COAST_DECELERATION = -0.5

# Yaw-to-pitch coupling for coordinated turns
YAW_PITCH_COUPLING = -0.2

# Roll command gains
TURN_ROLL_GAIN = 0.5
LEVELING_GAIN = -2.0


def interp_to(current: float, target: float, dt: float, speed: float) -> float:
    """
    First-order interpolation of ``current`` toward ``target``.

    Moves a fraction clamp(dt * speed, 0, 1) of the remaining gap. Snaps
    to the target when speed is non-positive or the gap is negligible.
    """
    if speed <= 0.0:
        return target

    gap = target - current
    if gap * gap < INPUT_DEADBAND:
        return target

    return current + gap * float(np.clip(dt * speed, 0.0, 1.0))


@dataclass
class ControlState:
    """Throttle and smoothed rate channels."""

    # Raw throttle fed to the thrust model
    throttle: float = 0.0

    # Legacy channels (cm/s, deg/s)
    forward_speed: float = 0.0
    pitch_speed: float = 0.0
    yaw_speed: float = 0.0
    roll_speed: float = 0.0

    @property
    def rates(self):
        """(roll, pitch, yaw) rates in deg/s, host convention."""
        return self.roll_speed, self.pitch_speed, self.yaw_speed


class ControlMapper:
    """
    Maps analog axes to control targets with smoothing.

    Each ``on_*`` handler is called once per host frame with the frame's
    variable delta time.
    """

    def __init__(self, tuning: Optional[ControlTuning] = None):
        self.tuning = tuning or ControlTuning()
        self.state = ControlState(forward_speed=self.tuning.initial_forward_speed)

    def reset(self):
        self.state = ControlState(forward_speed=self.tuning.initial_forward_speed)

    @property
    def throttle(self) -> float:
        return self.state.throttle

    def on_throttle(self, raw: float, dt: float):
        """Thrust axis: integrate forward speed and latch the throttle."""
        has_input = abs(raw) > INPUT_DEADBAND
        accel = (raw * self.tuning.acceleration if has_input
                 else COAST_DECELERATION * self.tuning.acceleration)

        new_speed = self.state.forward_speed + dt * accel
        self.state.forward_speed = float(np.clip(
            new_speed, self.tuning.min_speed, self.tuning.max_speed
        ))

        self.state.throttle = raw

    def on_pitch_stick(self, raw: float, dt: float):
        """MoveUp axis: pitch rate, nosing down slightly while yawing."""
        target = raw * self.tuning.turn_speed * -1.0
        target += abs(self.state.yaw_speed) * YAW_PITCH_COUPLING

        self.state.pitch_speed = interp_to(
            self.state.pitch_speed, target, dt, RATE_SMOOTHING
        )

    def on_roll_stick(self, raw: float, dt: float, current_roll: float = 0.0):
        """
        MoveRight axis: yaw rate, with roll following the turn.

        Args:
            raw: Stick deflection
            dt: Frame delta time (s)
            current_roll: Current roll in the host convention (deg), used
                to level the vehicle when the stick is centred
        """
        target_yaw = raw * self.tuning.turn_speed
        self.state.yaw_speed = interp_to(
            self.state.yaw_speed, target_yaw, dt, RATE_SMOOTHING
        )

        turning = abs(raw) > TURN_THRESHOLD
        if turning:
            target_roll = self.state.yaw_speed * TURN_ROLL_GAIN
        else:
            target_roll = current_roll * LEVELING_GAIN

        self.state.roll_speed = interp_to(
            self.state.roll_speed, target_roll, dt, RATE_SMOOTHING
        )

    def update(self, axes: Mapping[str, float], dt: float, current_roll: float = 0.0) -> ControlState:
        """
        Dispatch one frame of host axes. Missing axes read as zero.

        Returns:
            The updated control state
        """
        unknown = set(axes) - set(AXES)
        if unknown:
            logger.warning("Ignoring unknown input axes: %s", sorted(unknown))

        self.on_throttle(float(axes.get(THRUST_AXIS, 0.0)), dt)
        self.on_pitch_stick(float(axes.get(MOVE_UP_AXIS, 0.0)), dt)
        self.on_roll_stick(float(axes.get(MOVE_RIGHT_AXIS, 0.0)), dt, current_roll)
        return self.state

    def on_collision(self):
        """Host hit notification: stop the legacy forward-speed channel."""
        self.state.forward_speed = 0.0
