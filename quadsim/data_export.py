"""
Data Export Module

Export flight histories for offline analysis:
- pandas DataFrame with flat, unit-suffixed columns
- CSV with a commented header describing units and frames
- JSON for web tools
"""

import json
import logging
import numpy as np
import pandas as pd
from datetime import datetime
from typing import Any, Dict, List, Optional


logger = logging.getLogger(__name__)


class StateEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy arrays and numpy types."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, (np.bool_, np.integer, np.floating)):
            return obj.item()
        if hasattr(obj, '__dict__'):
            return {k: v for k, v in obj.__dict__.items() if not k.startswith('_')}
        return super().default(obj)


def history_to_dataframe(history: List[Dict]) -> pd.DataFrame:
    """
    Flatten tick records from ``FlightDynamicsModel.run`` into a table.

    Args:
        history: List of tick records

    Returns:
        DataFrame, one row per tick
    """
    if not history:
        raise ValueError("History is empty")

    rows = []
    for record in history:
        rows.append({
            'time_s': record['time'],

            # Position (inertial, z up)
            'x_m': record['position'][0],
            'y_m': record['position'][1],
            'z_m': record['position'][2],

            'vx_m_s': record['velocity'][0],
            'vy_m_s': record['velocity'][1],
            'vz_m_s': record['velocity'][2],

            'ax_m_s2': record['acceleration'][0],
            'ay_m_s2': record['acceleration'][1],
            'az_m_s2': record['acceleration'][2],

            # Euler angles (degrees)
            'roll_deg': np.degrees(record['euler'][0]),
            'pitch_deg': np.degrees(record['euler'][1]),
            'yaw_deg': np.degrees(record['euler'][2]),

            'throttle': record['throttle'],
            'thrust_N': record['thrust'],
            'grounded': bool(record['grounded']),
        })

    return pd.DataFrame(rows)


def export_history_csv(
    history: List[Dict],
    filename: str,
    metadata: Optional[Dict[str, Any]] = None
) -> pd.DataFrame:
    """
    Export flight history to CSV with a commented header.

    Args:
        history: List of tick records
        filename: Output filename
        metadata: Optional metadata dictionary for header

    Returns:
        The exported DataFrame
    """
    df = history_to_dataframe(history)

    with open(filename, 'w') as f:
        f.write("# Quadcopter Flight Log\n")
        f.write(f"# Generated: {datetime.now().isoformat()}\n")

        if metadata:
            for key, value in metadata.items():
                f.write(f"# {key}: {value}\n")

        f.write("#\n")
        f.write("# Units:\n")
        f.write("#   Length: meters (m)\n")
        f.write("#   Time: seconds (s)\n")
        f.write("#   Angles: degrees (deg)\n")
        f.write("#   Thrust: Newtons (N)\n")
        f.write("#\n")
        f.write("# Coordinate Systems:\n")
        f.write("#   Position/velocity/acceleration: inertial frame, Z up\n")
        f.write("#   Euler angles: yaw-pitch-roll sequence, math frame\n")
        f.write("#\n")

        df.to_csv(f, index=False)

    logger.info("Exported %d records to %s", len(df), filename)
    return df


def load_history_csv(filename: str) -> pd.DataFrame:
    """Read a flight log written by ``export_history_csv``."""
    return pd.read_csv(filename, comment='#')


def export_json(history: List[Dict], filename: str, metadata: Optional[Dict[str, Any]] = None):
    """
    Export raw tick records as JSON.

    Args:
        history: List of tick records
        filename: Output filename
        metadata: Optional metadata stored next to the records
    """
    payload = {
        'generated': datetime.now().isoformat(),
        'metadata': metadata or {},
        'history': history,
    }

    with open(filename, 'w') as f:
        json.dump(payload, f, cls=StateEncoder, indent=2)

    logger.info("Exported %d records to %s", len(history), filename)
