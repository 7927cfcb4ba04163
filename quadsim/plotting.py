"""
Plotting Module

Time-history plots of quadcopter flight logs.
"""

import logging
import matplotlib.pyplot as plt
from typing import Dict, List, Optional, Sequence

from .data_export import history_to_dataframe


logger = logging.getLogger(__name__)


PLOT_STYLE = {
    'figure.figsize': (10, 6),
    'figure.dpi': 100,
    'font.size': 10,
    'axes.labelsize': 11,
    'axes.titlesize': 12,
    'legend.fontsize': 9,
    'xtick.labelsize': 9,
    'ytick.labelsize': 9,
    'lines.linewidth': 1.5,
    'grid.alpha': 0.3
}

VAR_LABELS = {
    'x_m': 'x (m)',
    'y_m': 'y (m)',
    'z_m': 'Altitude (m)',
    'vx_m_s': r'$v_x$ (m/s)',
    'vy_m_s': r'$v_y$ (m/s)',
    'vz_m_s': r'$v_z$ (m/s)',
    'ax_m_s2': r'$a_x$ (m/s$^2$)',
    'ay_m_s2': r'$a_y$ (m/s$^2$)',
    'az_m_s2': r'$a_z$ (m/s$^2$)',
    'roll_deg': r'$\phi$ (deg)',
    'pitch_deg': r'$\theta$ (deg)',
    'yaw_deg': r'$\psi$ (deg)',
    'throttle': 'Throttle',
    'thrust_N': 'Thrust (N)',
}


def setup_plot_style():
    plt.style.use('seaborn-v0_8-darkgrid' if 'seaborn-v0_8-darkgrid' in plt.style.available else 'default')
    plt.rcParams.update(PLOT_STYLE)


def plot_flight_history(
    history: List[Dict],
    variables: Sequence[str] = ('z_m', 'vz_m_s', 'az_m_s2', 'throttle'),
    title: str = "Flight Time History",
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Plot time history of flight variables.

    Args:
        history: Tick records from ``FlightDynamicsModel.run``
        variables: Columns of ``history_to_dataframe`` to plot
        title: Plot title
        save_path: Optional save path

    Returns:
        Figure
    """
    setup_plot_style()

    df = history_to_dataframe(history)
    missing = [v for v in variables if v not in df.columns]
    if missing:
        logger.warning("Variables not found in history: %s", missing)
    variables = [v for v in variables if v in df.columns]
    if not variables:
        raise ValueError("None of the requested variables are in the history")

    n_vars = len(variables)
    fig, axes = plt.subplots(n_vars, 1, figsize=(10, 2.5*n_vars), sharex=True)

    if n_vars == 1:
        axes = [axes]

    time = df['time_s'].values

    for ax, var in zip(axes, variables):
        ax.plot(time, df[var].values, 'b-', linewidth=1.5)
        ax.set_ylabel(VAR_LABELS.get(var, var))
        ax.grid(True, alpha=0.3)
        ax.axhline(0, color='gray', linestyle=':', linewidth=1, alpha=0.5)

    axes[-1].set_xlabel('Time (s)')
    fig.suptitle(title)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
