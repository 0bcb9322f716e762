"""
Main entry point for scripted stabilizer flights.

Run with: python -m hoverpilot.main

Examples:
    python -m hoverpilot.main                  # Run all scenarios
    python -m hoverpilot.main --scenario hover
    python -m hoverpilot.main --scenario climb
    python -m hoverpilot.main --scenario tilt
    python -m hoverpilot.main --scenario wind
    python -m hoverpilot.main --no-plot        # Run without showing plots
"""

import argparse

import matplotlib.pyplot as plt

from hoverpilot.params import FlightParams, default_params
from hoverpilot.disturbances import WindField, WindParams
from hoverpilot.sim import run_hover_test, run_climb_test, run_tilt_test
from hoverpilot.log import FlightLog, print_statistics
from hoverpilot.plots import plot_altitude, plot_controls, plot_tilt_angle, plot_ground_track


def run_hover(params: FlightParams, show_plots: bool = True) -> FlightLog:
    """Start at 2 m and hold 5 m."""
    print("\n" + "=" * 60)
    print("HOVER TEST")
    print("=" * 60)
    print("Target: hold Y = 5 m, starting from Y = 2 m")

    log = run_hover_test(params, hover_height=5.0, start_height=2.0, t_final=8.0)
    print_statistics(log, "Hover")

    if show_plots:
        plot_altitude(log, "Hover: Altitude")
        plot_controls(log, "Hover: Controls")

    return log


def run_climb(params: FlightParams, show_plots: bool = True) -> FlightLog:
    """Full climb command for 2 s, then hold."""
    print("\n" + "=" * 60)
    print("CLIMB TEST")
    print("=" * 60)
    print(f"Climb command 1.0 for 2 s at {params.climb_rate} m/s, then release")

    log = run_climb_test(params, start_height=2.0, climb_time=2.0, settle_time=6.0)
    print_statistics(log, "Climb")

    if show_plots:
        plot_altitude(log, "Climb: Altitude")
        plot_controls(log, "Climb: Controls")

    return log


def run_tilt(params: FlightParams, show_plots: bool = True) -> FlightLog:
    """Lean forward at full command, then release and level."""
    print("\n" + "=" * 60)
    print("TILT TEST")
    print("=" * 60)
    print(f"Pitch command 1.0 (bias {params.max_tilt_bias_deg:.0f} deg) for 2 s, then release")

    log = run_tilt_test(params, tilt_cmd=(0.0, 1.0), lean_time=2.0, settle_time=3.0)
    print_statistics(log, "Tilt")

    if show_plots:
        plot_tilt_angle(log, "Tilt: Tilt Angle")
        plot_ground_track(log, "Tilt: Ground Track")
        plot_controls(log, "Tilt: Controls")

    return log


def run_wind(params: FlightParams, show_plots: bool = True) -> FlightLog:
    """Hold altitude in mean wind with gusts."""
    print("\n" + "=" * 60)
    print("WIND HOVER TEST")
    print("=" * 60)
    wind = WindParams(wind_vel=(2.0, 0.0, 0.0), gust_std=1.0, enabled=True)
    print(f"Wind: {wind.wind_vel} m/s, gust std {wind.gust_std} m/s")

    log = run_hover_test(params, hover_height=5.0, start_height=5.0, t_final=10.0,
                         environment=WindField(wind))
    print_statistics(log, "Wind Hover")

    if show_plots:
        plot_altitude(log, "Wind: Altitude")
        plot_tilt_angle(log, "Wind: Tilt Angle")
        plot_ground_track(log, "Wind: Ground Track")

    return log


SCENARIOS = {
    "hover": run_hover,
    "climb": run_climb,
    "tilt": run_tilt,
    "wind": run_wind,
}


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Hover stabilizer scripted flights",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m hoverpilot.main                   # Run all scenarios
  python -m hoverpilot.main --scenario hover  # Run only hover test
  python -m hoverpilot.main --no-plot         # Run without plots
        """,
    )

    parser.add_argument(
        "--scenario", "-s",
        type=str,
        choices=[*SCENARIOS, "all"],
        default="all",
        help="Which scenario to run (default: all)",
    )

    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Disable plot display",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("  HOVERPILOT: Altitude Hold & Attitude Stabilization")
    print("=" * 60)

    params = default_params()
    print("\nVehicle Parameters:")
    print(f"  Mass: {params.mass} kg")
    print(f"  Hover force: {params.hover_force:.2f} N "
          f"({params.hover_force / len(params.lift_points):.3f} N per rotor)")
    print(f"  PID gains: kp={params.kp} ki={params.ki} kd={params.kd}")

    show_plots = not args.no_plot

    names = list(SCENARIOS) if args.scenario == "all" else [args.scenario]
    for name in names:
        SCENARIOS[name](params, show_plots=show_plots)

    print("\n" + "=" * 60)
    print("SIMULATION COMPLETE")
    print("=" * 60)

    if show_plots:
        print("\nDisplaying plots... Close plot windows to exit.")
        plt.show()
    else:
        print("\nPlots disabled. Use without --no-plot to see visualizations.")


if __name__ == "__main__":
    main()
