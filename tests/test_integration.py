"""End-to-end: load a config file and run a short animation loop."""
from __future__ import annotations

import json

import numpy as np
import pytest

from orrery import Simulation, load_config, position, trail_segments


@pytest.fixture
def config_file(tmp_path):
    doc = {
        "bodies": [
            {
                "name": "Inner",
                "radius": 0.5,
                "color": "#CD5C5C",
                "elements": {"semi_major_axis": 10.0, "eccentricity": 0.0, "orbital_period": 100.0},
            },
            {
                "name": "Outer",
                "radius": 0.9,
                "color": "#FFC649",
                "elements": {
                    "semi_major_axis": 12.0,
                    "eccentricity": 0.1,
                    "orbital_period": 20.0,
                    "inclination_deg": -10.0,
                    "longitude_of_ascending_node_deg": 45.0,
                    "argument_of_periapsis_deg": 30.0,
                },
            },
        ],
        "render": {"show_trails": True},
        "camera": {"mode": "follow", "follow_body": 1},
    }
    path = tmp_path / "system.json"
    path.write_text(json.dumps(doc))
    return path


def test_animation_loop(config_file):
    sim = Simulation(load_config(config_file))

    frames = [sim.tick(0.25) for _ in range(100)]

    assert frames[-1].time == pytest.approx(25.0)
    np.testing.assert_allclose(frames[-1].bodies[0].position, [0.0, 10.0, 0.0], atol=1e-9)

    times = [f.time for f in frames]
    assert times == sorted(times)

    for frame in frames:
        np.testing.assert_allclose(frame.camera_target, frame.bodies[1].position)


def test_pause_and_resume_mid_loop(config_file):
    sim = Simulation(load_config(config_file))
    sim.tick(1.0)
    sim.toggle_pause()
    held = sim.tick(1.0)
    assert held.time == pytest.approx(1.0)
    sim.toggle_pause()
    assert sim.tick(1.0).time == pytest.approx(2.0)


def test_trail_segments_from_frame(config_file):
    sim = Simulation(load_config(config_file))
    frame = sim.tick(60.0)
    outer = frame.bodies[1]
    segments = trail_segments(outer.trail)
    assert len(segments) == len(outer.trail) - 1
    opacities = [s.opacity for s in segments]
    assert opacities == sorted(opacities)
    np.testing.assert_allclose(segments[-1].end, outer.position)


def test_reset_restarts_orbit(config_file):
    sim = Simulation(load_config(config_file))
    start = sim.frame()
    sim.tick(37.0)
    sim.reset()
    again = sim.frame()
    for a, b in zip(start.bodies, again.bodies):
        np.testing.assert_array_equal(a.position, b.position)
    np.testing.assert_allclose(
        again.bodies[1].position, position(0.0, sim.config.bodies[1].elements)
    )
