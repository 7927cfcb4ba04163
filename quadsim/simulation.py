"""
Simulation Loop

Explicit replacement for the host engine's timer and frame callbacks:
- A variable-rate frame update drives the control mapper
- A fixed-rate tick (50 Hz by default) drives the dynamics
- The resulting pose is published once per frame

Everything runs on one thread; the dynamics state has a single writer.
"""

import logging
import numpy as np
from typing import Mapping, Optional

from .quadcopter import QuadcopterConfig
from .dynamics import FlightDynamicsModel, SimulationConfig
from .controls import ControlMapper
from .state import Pose


logger = logging.getLogger(__name__)


class QuadSimulation:
    """
    Owns one dynamics model and one control mapper and schedules them.
    """

    def __init__(
        self,
        config: Optional[QuadcopterConfig] = None,
        sim_config: Optional[SimulationConfig] = None
    ):
        self.config = config or QuadcopterConfig()
        self.sim_config = sim_config or SimulationConfig()

        self.model = FlightDynamicsModel(sim_config=self.sim_config)
        self.mapper = ControlMapper(self.config.controls)

        self.fixed_dt = self.config.physics.dynamics_rate
        self._accumulator = 0.0
        self.ticks = 0
        self.frames = 0

        self.pose: Optional[Pose] = None
        self.reset()

    def reset(self):
        """Re-initialize the model at the spawn location and clear inputs."""
        self.model.initialize_from_host(
            self.config.physics,
            self.config.spawn_location,
            self.config.initial
        )
        self.mapper.reset()
        self._accumulator = 0.0
        self.ticks = 0
        self.frames = 0
        self.pose = self.model.pose()

    def _attitude_rates(self):
        """Mapper rates converted to math-frame rad/s, or None."""
        if not self.sim_config.integrate_attitude:
            return None
        # Host rates are mirrored relative to the math frame
        return tuple(-np.radians(r) for r in self.mapper.state.rates)

    def tick(self):
        """Run exactly one fixed dynamics tick with the latched throttle."""
        self.model.step(self.fixed_dt, self.mapper.throttle, self._attitude_rates())
        self.ticks += 1

    def advance(self, frame_dt: float, axes: Optional[Mapping[str, float]] = None) -> Pose:
        """
        Process one host frame.

        Args:
            frame_dt: Variable frame delta time (s)
            axes: Raw input axes for this frame

        Returns:
            Pose snapshot after any fixed ticks that came due
        """
        current_roll = self.model.sim_orientation.to_degrees()[0]
        self.mapper.update(axes or {}, frame_dt, current_roll)

        self._accumulator += frame_dt
        substeps = 0
        while self._accumulator >= self.fixed_dt - 1e-12:
            if substeps >= self.sim_config.max_substeps:
                logger.warning(
                    "Dropping %.3fs of simulation time after %d ticks",
                    self._accumulator, substeps
                )
                self._accumulator = 0.0
                break
            self.tick()
            self._accumulator -= self.fixed_dt
            substeps += 1

        self.frames += 1
        self.pose = self.model.pose()
        return self.pose

    def notify_collision(self):
        """Forward a host collision event to the control mapper."""
        self.mapper.on_collision()

