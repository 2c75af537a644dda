from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from orrery.core.clock import SimulationClock
from orrery.core.elements import InvalidParameterError, OrbitalElements
from orrery.core.kepler import KeplerSolver, position
from orrery.core.scene import Simulation, camera_position, camera_target, spin_angle
from orrery.data.config import Body, SystemConfig, default_config


class TestSpinAngle:

    def test_half_turn(self):
        el = OrbitalElements(semi_major_axis=1.0, eccentricity=0.0, orbital_period=1.0, rotation_period=2.0)
        assert spin_angle(1.0, el) == pytest.approx(math.pi)

    def test_wraps(self):
        el = OrbitalElements(semi_major_axis=1.0, eccentricity=0.0, orbital_period=1.0, rotation_period=2.0)
        assert spin_angle(5.0, el) == pytest.approx(math.pi)

    def test_retrograde_stays_in_range(self):
        el = OrbitalElements(semi_major_axis=1.0, eccentricity=0.0, orbital_period=1.0, rotation_period=-4.0)
        angle = spin_angle(1.0, el)
        assert 0.0 <= angle < 2 * math.pi
        assert angle == pytest.approx(1.5 * math.pi)

    def test_no_rotation(self):
        el = OrbitalElements(semi_major_axis=1.0, eccentricity=0.0, orbital_period=1.0, rotation_period=0.0)
        assert spin_angle(123.0, el) == 0.0


class TestCamera:

    def test_presets(self):
        assert camera_position("top") == (0.0, 30.0, 0.0)
        assert camera_position("side") == (25.0, 0.0, 0.0)
        assert camera_position("ecliptic") == (20.0, 5.0, 15.0)
        assert camera_position("default") == (15.0, 10.0, 15.0)

    def test_unknown_preset_falls_back(self):
        assert camera_position("nope") == camera_position("default")

    def test_free_mode_targets_origin(self):
        np.testing.assert_array_equal(camera_target(3.0, default_config()), np.zeros(3))

    def test_follow_mode_tracks_body(self):
        config = default_config().evolve(camera={"mode": "follow", "follow_body": 1})
        np.testing.assert_allclose(
            camera_target(3.0, config), position(3.0, config.bodies[1].elements)
        )

    def test_follow_out_of_range_targets_origin(self):
        config = default_config().evolve(camera={"mode": "follow", "follow_body": 9})
        np.testing.assert_array_equal(camera_target(3.0, config), np.zeros(3))


class TestSimulation:

    def test_default_config(self):
        sim = Simulation()
        assert len(sim.config.bodies) == 3
        assert sim.time == 0.0

    def test_tick_advances_once(self):
        sim = Simulation(default_config().evolve(time={"speed": 2.0}))
        frame = sim.tick(0.5)
        assert frame.time == pytest.approx(1.0)
        assert sim.time == pytest.approx(1.0)

    def test_all_bodies_share_frame_time(self):
        sim = Simulation()
        frame = sim.tick(1.25)
        for body, state in zip(sim.config.bodies, frame.bodies):
            np.testing.assert_allclose(state.position, position(frame.time, body.elements))

    def test_frame_does_not_advance(self):
        sim = Simulation()
        sim.tick(1.0)
        assert sim.frame().time == sim.frame().time == pytest.approx(1.0)

    def test_paused_config_holds_time(self):
        sim = Simulation(default_config().evolve(time={"paused": True}))
        assert sim.tick(5.0).time == 0.0

    def test_toggle_pause(self):
        sim = Simulation()
        assert sim.toggle_pause() is True
        assert sim.config.time.paused is True
        assert sim.clock.paused is True
        sim.tick(1.0)
        assert sim.time == 0.0
        assert sim.toggle_pause() is False
        sim.tick(1.0)
        assert sim.time == pytest.approx(1.0)

    def test_toggle_pause_after_direct_clock_pause(self):
        sim = Simulation()
        sim.clock.pause()
        assert sim.toggle_pause() is False
        assert sim.clock.paused is False
        assert sim.config.time.paused is False
        assert sim.tick(1.0).time == pytest.approx(1.0)

    def test_update_config_keeps_time(self):
        sim = Simulation()
        sim.tick(2.0)
        old = sim.config
        new = sim.update_config(time={"speed": 3.0})
        assert new is sim.config
        assert old.time.speed == 1.0
        assert sim.clock.speed == 3.0
        assert sim.tick(1.0).time == pytest.approx(5.0)

    def test_update_config_with_snapshot(self):
        sim = Simulation()
        body = Body(
            name="Solo",
            radius=1.0,
            color="#FFFFFF",
            elements=OrbitalElements(semi_major_axis=10.0, eccentricity=0.0, orbital_period=100.0),
        )
        sim.update_config(SystemConfig(bodies=(body,)))
        sim.tick(25.0)
        frame = sim.frame()
        assert [b.name for b in frame.bodies] == ["Solo"]
        np.testing.assert_allclose(frame.bodies[0].position, [0.0, 10.0, 0.0], atol=1e-9)

    def test_reset(self):
        sim = Simulation()
        sim.tick(4.0)
        sim.reset()
        assert sim.time == 0.0
        np.testing.assert_allclose(
            sim.frame().bodies[0].position, position(0.0, sim.config.bodies[0].elements)
        )

    def test_external_clock_synced_to_config(self):
        clock = SimulationClock(speed=4.0)
        sim = Simulation(default_config(), clock=clock)
        assert sim.clock is clock
        assert clock.speed == 1.0

    def test_rings_shown_by_default(self):
        frame = Simulation().frame()
        assert all(b.ring is not None and b.ring.shape == (65, 3) for b in frame.bodies)

    def test_rings_hidden(self):
        sim = Simulation(default_config().evolve(render={"show_orbits": False}))
        assert all(b.ring is None for b in sim.frame().bodies)

    def test_trails_hidden_by_default(self):
        assert all(b.trail == [] for b in Simulation().tick(10.0).bodies)

    def test_trails_shown(self):
        sim = Simulation(default_config().evolve(render={"show_trails": True, "trail_segments": 20}))
        frame = sim.tick(50.0)
        for state in frame.bodies:
            assert len(state.trail) == 20
            assert state.trail[0].opacity == 1.0
            assert state.trail[-1].opacity == 0.0
            np.testing.assert_allclose(state.trail[0].position, state.position)

    def test_axial_tilt_in_radians(self):
        frame = Simulation().frame()
        assert frame.bodies[2].axial_tilt == pytest.approx(math.radians(45.0))

    def test_frame_camera(self):
        sim = Simulation(default_config().evolve(camera={"mode": "follow", "follow_body": 2, "preset": "side"}))
        frame = sim.tick(1.0)
        np.testing.assert_allclose(frame.camera_target, frame.bodies[2].position)
        assert frame.camera_position == (25.0, 0.0, 0.0)

    def test_bad_delta(self):
        sim = Simulation()
        with pytest.raises(InvalidParameterError):
            sim.tick(-1.0)

    def test_high_eccentricity_warning(self, caplog):
        body = Body(
            name="Comet",
            radius=0.1,
            color="#AAAAAA",
            elements=OrbitalElements(semi_major_axis=20.0, eccentricity=0.9, orbital_period=50.0),
        )
        with caplog.at_level(logging.WARNING, logger="orrery.core.scene"):
            Simulation(SystemConfig(bodies=(body,)))
        assert "Comet" in caplog.text

    def test_newton_solver_no_warning(self, caplog):
        body = Body(
            name="Comet",
            radius=0.1,
            color="#AAAAAA",
            elements=OrbitalElements(semi_major_axis=20.0, eccentricity=0.9, orbital_period=50.0),
        )
        with caplog.at_level(logging.WARNING, logger="orrery.core.scene"):
            sim = Simulation(SystemConfig(bodies=(body,)), solver=KeplerSolver.NEWTON)
        assert caplog.text == ""
        r = np.linalg.norm(sim.tick(25.0).bodies[0].position)
        assert r == pytest.approx(20.0 * 1.9)
