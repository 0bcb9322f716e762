"""
Visualization functions for flight logs.

Provides plots for analyzing altitude hold and attitude leveling.
"""

import numpy as np

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from hoverpilot.log import FlightLog


def plot_ground_track(
    log: FlightLog,
    title: str = "Ground Track",
    show: bool = False,
) -> Figure:
    """
    Plot the horizontal path (X right, Z forward) seen from above.

    Args:
        log: Flight log
        title: Plot title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=(8, 8))

    ax.plot(log.p[:, 0], log.p[:, 2], 'r-', label='Path', linewidth=1.5)
    ax.plot(log.p[0, 0], log.p[0, 2], 'go', markersize=10, label='Start')
    ax.plot(log.p[-1, 0], log.p[-1, 2], 'rx', markersize=10, label='End')

    ax.set_xlabel('X [m]')
    ax.set_ylabel('Z [m]')
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)
    ax.axis('equal')

    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_altitude(
    log: FlightLog,
    title: str = "Altitude vs Time",
    show: bool = False,
) -> Figure:
    """
    Plot altitude against the held target, and the altitude error.

    Args:
        log: Flight log
        title: Plot title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, axes = plt.subplots(2, 1, figsize=(10, 6), sharex=True)

    axes[0].plot(log.t, log.target_y, 'b--', label='Target', linewidth=2, alpha=0.7)
    axes[0].plot(log.t, log.p[:, 1], 'g-', label='Actual', linewidth=1.5)
    axes[0].set_ylabel('Y [m]')
    axes[0].legend(loc='upper right')
    axes[0].grid(True, alpha=0.3)
    axes[0].set_title(title)

    err_mm = (log.target_y - log.p[:, 1]) * 1000
    axes[1].plot(log.t, err_mm, 'k-', linewidth=1.5)
    axes[1].axhline(0.0, color='gray', linestyle=':', alpha=0.7)
    axes[1].set_ylabel('Error [mm]')
    axes[1].set_xlabel('Time [s]')
    axes[1].grid(True, alpha=0.3)

    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_tilt_angle(
    log: FlightLog,
    title: str = "Tilt Angle",
    show: bool = False,
) -> Figure:
    """
    Plot the angle between body up and world up.

    Args:
        log: Flight log
        title: Plot title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=(10, 4))

    tilt = log.tilt_deg()
    ax.plot(log.t, tilt, 'b-', linewidth=1.5)
    ax.fill_between(log.t, 0, tilt, alpha=0.2)

    ax.set_xlabel('Time [s]')
    ax.set_ylabel('Tilt [deg]')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.set_ylim(bottom=0)

    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_controls(
    log: FlightLog,
    title: str = "Control Outputs",
    show: bool = False,
) -> Figure:
    """
    Plot per-rotor lift and the stabilizer's angular-acceleration command.

    Args:
        log: Flight log
        title: Plot title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, axes = plt.subplots(2, 1, figsize=(10, 6), sharex=True)

    axes[0].plot(log.t, log.lift_per_point, 'k-', linewidth=1.5)
    axes[0].set_ylabel('Lift / rotor [N]')
    axes[0].grid(True, alpha=0.3)
    axes[0].set_title(title)

    labels = ['x', 'y', 'z']
    colors = ['r', 'g', 'b']
    for i, (label, color) in enumerate(zip(labels, colors)):
        axes[1].plot(log.t, log.torque[:, i], color=color,
                     label=f'α_{label}', linewidth=1.2)
    axes[1].plot(log.t, np.linalg.norm(log.torque, axis=1), 'k--',
                 label='|α|', linewidth=1.0, alpha=0.7)
    axes[1].set_ylabel('Torque cmd [rad/s²]')
    axes[1].set_xlabel('Time [s]')
    axes[1].legend(loc='upper right')
    axes[1].grid(True, alpha=0.3)

    fig.tight_layout()

    if show:
        plt.show()

    return fig
