"""orrery quickstart — animate the demo system for a few seconds."""

from orrery import OrbitalElements, Simulation, default_config, orbit_ring, position

# Evaluate a single orbit directly
earthish = OrbitalElements(semi_major_axis=10.0, eccentricity=0.0, orbital_period=100.0)
print(f"t=25: {position(25.0, earthish).round(3)}")
print(f"Ring has {len(orbit_ring(earthish))} points")

# Drive the demo system at 60 fps for two seconds of wall-clock time
config = default_config().evolve(
    time={"speed": 2.0},
    render={"show_trails": True},
    camera={"mode": "follow", "follow_body": 2},
)
sim = Simulation(config)

for _ in range(120):
    frame = sim.tick(1 / 60)

print(f"\nSimulation time: {frame.time:.2f}")
for body in frame.bodies:
    x, y, z = body.position
    print(f"  {body.name:8s} ({x:7.3f}, {y:7.3f}, {z:7.3f})  trail={len(body.trail)} samples")
print(f"Camera looking at {frame.camera_target.round(3)} from {frame.camera_position}")
