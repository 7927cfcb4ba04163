"""
Main Entry Point

Run the quadcopter simulator behind the WebSocket server, headless for
batch rollouts, or as a quick physics self-check.
"""

import argparse
import logging
import numpy as np

from .quadcopter import QuadcopterConfig
from .state import EulerAngles
from .dynamics import FlightDynamicsModel, SimulationConfig
from .simulation import QuadSimulation
from .trim import hover_throttle


def run_validation_tests(config: QuadcopterConfig, verbose: bool = True) -> bool:
    """
    Run physics validation checks.

    Returns:
        True when every check passed
    """
    params = config.physics
    dt = params.dynamics_rate
    results = []

    if verbose:
        print("\n" + "="*60)
        print("QUADCOPTER DYNAMICS VALIDATION")
        print("="*60)

    # === TEST 1: Free fall ===
    if verbose:
        print("\n[Test 1] Free Fall - Gravity Only")

    model = FlightDynamicsModel(params, [0.0, 0.0, 100.0])
    model.step(dt, 0.0)
    error = abs(model.linear_acceleration[2] + params.gravity)
    passed = error == 0.0
    results.append(passed)

    if verbose:
        print(f"  Expected vertical acceleration: {-params.gravity:.3f} m/s²")
        print(f"  Actual vertical acceleration: {model.linear_acceleration[2]:.3f} m/s²")
        print(f"  Result: {'PASS' if passed else 'FAIL'}")

    # === TEST 2: Ground clamp ===
    if verbose:
        print("\n[Test 2] Ground Clamp - Resting On The Ground")

    model = FlightDynamicsModel(params, [0.0, 0.0, 0.0])
    for _ in range(50):
        model.step(dt, 0.0)
    passed = model.position[2] == 0.0 and np.all(model.linear_velocity == 0.0)
    results.append(passed)

    if verbose:
        print(f"  Altitude after 1s: {model.position[2]:.3f} m")
        print(f"  Result: {'PASS' if passed else 'FAIL'}")

    # === TEST 3: Lift-off ===
    if verbose:
        print("\n[Test 3] Lift-off - Full Throttle")

    model = FlightDynamicsModel(params, [0.0, 0.0, 0.0])
    model.step(dt, 1.0)
    passed = params.thrust_to_weight <= 1.0 or (
        model.linear_velocity[2] > 0.0 and model.position[2] > 0.0
    )
    results.append(passed)

    if verbose:
        print(f"  Thrust to weight: {params.thrust_to_weight:.2f}")
        print(f"  Climb rate after one tick: {model.linear_velocity[2]:.3f} m/s")
        print(f"  Result: {'PASS' if passed else 'FAIL'}")

    # === TEST 4: Hover ===
    if verbose:
        print("\n[Test 4] Hover - Trim Throttle Holds Altitude")

    model = FlightDynamicsModel(params, [0.0, 0.0, 10.0])
    throttle = hover_throttle(params)
    model.run(5.0, lambda state, t: throttle)
    drift = abs(model.position[2] - 10.0)
    passed = drift < 1e-6
    results.append(passed)

    if verbose:
        print(f"  Hover throttle: {throttle:.3f}")
        print(f"  Altitude drift after 5s: {drift:.2e} m")
        print(f"  Result: {'PASS' if passed else 'FAIL'}")

    # === TEST 5: Thrust axis ===
    if verbose:
        print("\n[Test 5] Tilted Thrust - Drag-Limited Drift")

    model = FlightDynamicsModel(params, [0.0, 0.0, 10.0])
    model.set_orientation(EulerAngles.from_degrees(pitch=10.0))
    model.run(10.0, lambda state, t: hover_throttle(params, state.orientation))
    vx = model.linear_velocity[0]
    drag = params.drag_coefficients[0]
    expected = (params.gravity * np.tan(np.radians(10.0)) * params.mass / drag
                if drag > 0 else np.inf)
    passed = vx > 0.0 and (not np.isfinite(expected) or vx <= expected * 1.001)
    results.append(passed)

    if verbose:
        print(f"  Forward speed after 10s: {vx:.2f} m/s (terminal {expected:.2f} m/s)")
        print(f"  Result: {'PASS' if passed else 'FAIL'}")

    if verbose:
        print("\n" + "="*60)
        print(f"VALIDATION COMPLETE: {sum(results)}/{len(results)} passed")
        print("="*60 + "\n")

    return all(results)


def run_headless_simulation(
    config: QuadcopterConfig,
    duration: float = 10.0,
    throttle: float = 0.0,
    output_file: str = None,
    plot_file: str = None
):
    """Run headless simulation at a constant throttle for batch processing."""
    model = FlightDynamicsModel(sim_config=SimulationConfig())
    model.initialize_from_host(config.physics, config.spawn_location, config.initial)

    print(f"Running {duration}s simulation at throttle {throttle:.2f}...")
    history = model.run(duration, lambda state, t: throttle)
    print(f"Simulation complete. {len(history)} ticks recorded.")

    if output_file:
        from .data_export import export_history_csv
        export_history_csv(history, output_file, metadata={
            'vehicle': config.name,
            'throttle': throttle,
            'dt': config.physics.dynamics_rate,
        })
        print(f"Saved to {output_file}")

    if plot_file:
        from .plotting import plot_flight_history
        plot_flight_history(history, title=f"{config.name} at throttle {throttle:.2f}",
                            save_path=plot_file)
        print(f"Plot saved to {plot_file}")

    print("\nFinal state:")
    print(f"  {model.get_diagnostic_string()}")
    return history


def run_interactive_simulation(config: QuadcopterConfig, port: int = 8765):
    """Run the simulation behind the WebSocket server."""
    from .visualization import run_server

    simulation = QuadSimulation(config)

    print("\nStarting simulation server...")
    print(f"WebSocket running on ws://localhost:{port}")
    print("Send {\"type\": \"axes\", \"Thrust\": ..., \"MoveUp\": ..., \"MoveRight\": ...}")
    print("Press Ctrl+C to stop\n")

    try:
        run_server(simulation, port=port)
    except KeyboardInterrupt:
        print("\nShutdown requested")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Quadcopter Flight Dynamics Simulator")

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Path to quadcopter configuration YAML'
    )
    parser.add_argument(
        '--validate',
        action='store_true',
        help='Run validation checks'
    )
    parser.add_argument(
        '--headless',
        action='store_true',
        help='Run without the server'
    )
    parser.add_argument(
        '--duration', '-d',
        type=float,
        default=10.0,
        help='Simulation duration for headless mode (seconds)'
    )
    parser.add_argument(
        '--throttle', '-t',
        type=float,
        default=0.0,
        help='Constant throttle for headless mode'
    )
    parser.add_argument(
        '--output', '-o',
        type=str,
        help='CSV output file for headless simulation'
    )
    parser.add_argument(
        '--plot',
        type=str,
        help='PNG output file for a time-history plot'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=8765,
        help='WebSocket port'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log per-tick debug output'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if args.config:
        config = QuadcopterConfig.from_yaml(args.config)
        print(f"Loaded quadcopter: {config.name}")
    else:
        config = QuadcopterConfig()
        print(f"Using default quadcopter: {config.name}")

    if args.validate:
        return 0 if run_validation_tests(config) else 1
    elif args.headless:
        run_headless_simulation(config, args.duration, args.throttle,
                                args.output, args.plot)
    else:
        run_interactive_simulation(config, args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
