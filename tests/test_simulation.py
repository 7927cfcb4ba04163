"""
Tests for the fixed-tick simulation loop.
"""

import numpy as np
import pytest
from quadsim.quadcopter import QuadcopterConfig, PhysicalParameters
from quadsim.dynamics import SimulationConfig
from quadsim.simulation import QuadSimulation
from quadsim.controls import THRUST_AXIS, MOVE_RIGHT_AXIS


@pytest.fixture
def sim():
    return QuadSimulation(QuadcopterConfig(spawn_location=[0.0, 0.0, 1000.0]))


class TestScheduling:

    def test_fixed_ticks_per_frame(self, sim):
        for _ in range(10):
            sim.advance(0.04)

        assert sim.ticks == 20
        assert sim.frames == 10
        assert sim.model.state.time == pytest.approx(0.4)

    def test_short_frames_accumulate(self, sim):
        sim.advance(0.01)
        assert sim.ticks == 0

        sim.advance(0.01)
        assert sim.ticks == 1

    def test_substep_limit(self):
        sim = QuadSimulation(sim_config=SimulationConfig(max_substeps=5))
        sim.advance(1.0)

        assert sim.ticks == 5
        sim.advance(0.0)
        assert sim.ticks == 5

    def test_custom_tick_period(self):
        config = QuadcopterConfig(physics=PhysicalParameters(dynamics_rate=0.01))
        sim = QuadSimulation(config)
        sim.advance(0.05)

        assert sim.ticks == 5


class TestPose:

    def test_spawn_location_in_host_units(self, sim):
        np.testing.assert_array_almost_equal(sim.pose.position, [0.0, 0.0, 10.0])
        np.testing.assert_array_almost_equal(sim.pose.host_location, [0.0, 0.0, 1000.0])

    def test_thrust_axis_lifts_off(self):
        sim = QuadSimulation()
        for _ in range(30):
            pose = sim.advance(1 / 60, {THRUST_AXIS: 1.0})

        assert pose.position[2] > 0.0
        assert sim.model.linear_velocity[2] > 0.0

    def test_no_input_stays_on_ground(self):
        sim = QuadSimulation()
        for _ in range(30):
            pose = sim.advance(1 / 60)

        assert pose.position[2] == 0.0

    def test_reset(self, sim):
        for _ in range(10):
            sim.advance(0.04, {THRUST_AXIS: 1.0})
        sim.reset()

        assert sim.ticks == 0
        np.testing.assert_array_almost_equal(sim.pose.position, [0.0, 0.0, 10.0])
        assert sim.mapper.throttle == 0.0

    def test_collision_forwarded(self, sim):
        sim.notify_collision()
        assert sim.mapper.state.forward_speed == 0.0


class TestAttitude:

    def test_rates_ignored_by_default(self, sim):
        for _ in range(30):
            sim.advance(1 / 60, {MOVE_RIGHT_AXIS: 1.0})

        assert sim.model.orientation.as_tuple() == (0.0, 0.0, 0.0)
        assert sim.mapper.state.yaw_speed > 0.0

    def test_rates_integrated_when_enabled(self):
        sim = QuadSimulation(
            QuadcopterConfig(spawn_location=[0.0, 0.0, 1000.0]),
            SimulationConfig(integrate_attitude=True)
        )
        for _ in range(30):
            sim.advance(1 / 60, {MOVE_RIGHT_AXIS: 1.0})

        # Positive host yaw rate is a negative math-frame yaw
        assert sim.model.orientation.yaw < 0.0
        assert sim.pose.host_rotation.yaw > 0.0
