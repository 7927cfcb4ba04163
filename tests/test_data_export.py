"""
Tests for flight log export and plotting.
"""

import json

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest
from quadsim.quadcopter import PhysicalParameters
from quadsim.dynamics import FlightDynamicsModel
from quadsim.data_export import (
    history_to_dataframe,
    export_history_csv,
    load_history_csv,
    export_json
)
from quadsim.plotting import plot_flight_history


@pytest.fixture
def history():
    """One second of full-throttle climb from the ground."""
    model = FlightDynamicsModel(PhysicalParameters(), [0.0, 0.0, 0.0])
    return model.run(1.0, lambda state, t: 1.0 if t < 0.5 else 0.0)


class TestDataFrame:

    def test_one_row_per_tick(self, history):
        df = history_to_dataframe(history)

        assert len(df) == 50
        for column in ('time_s', 'z_m', 'vz_m_s', 'az_m_s2', 'roll_deg', 'throttle', 'grounded'):
            assert column in df.columns

    def test_values(self, history):
        df = history_to_dataframe(history)

        assert df['throttle'].iloc[0] == 1.0
        assert df['throttle'].iloc[-1] == 0.0
        assert df['z_m'].iloc[-1] > 0.0
        assert df['thrust_N'].iloc[0] == pytest.approx(9.8)
        assert not df['grounded'].iloc[0]

    def test_empty_history(self):
        with pytest.raises(ValueError):
            history_to_dataframe([])


class TestFileExport:

    def test_csv_roundtrip(self, history, tmp_path):
        path = tmp_path / "flight.csv"
        exported = export_history_csv(history, str(path), metadata={'throttle': 1.0})

        text = path.read_text()
        assert text.startswith("# Quadcopter Flight Log")
        assert "# throttle: 1.0" in text

        loaded = load_history_csv(str(path))
        assert list(loaded.columns) == list(exported.columns)
        np.testing.assert_allclose(loaded['z_m'].values, exported['z_m'].values)

    def test_json_export(self, history, tmp_path):
        path = tmp_path / "flight.json"
        export_json(history, str(path), metadata={'vehicle': 'test'})

        payload = json.loads(path.read_text())
        assert payload['metadata'] == {'vehicle': 'test'}
        assert len(payload['history']) == 50
        assert len(payload['history'][0]['position']) == 3


class TestPlotting:

    def test_plot_default_variables(self, history, tmp_path):
        path = tmp_path / "flight.png"
        fig = plot_flight_history(history, save_path=str(path))

        assert len(fig.axes) == 4
        assert path.exists()

    def test_plot_skips_unknown_variables(self, history):
        fig = plot_flight_history(history, variables=['z_m', 'airspeed'])
        assert len(fig.axes) == 1

    def test_plot_requires_known_variable(self, history):
        with pytest.raises(ValueError):
            plot_flight_history(history, variables=['airspeed'])
