"""
Tests for the command-line entry point.
"""

import matplotlib
matplotlib.use("Agg")

import pytest
from quadsim.quadcopter import QuadcopterConfig, PhysicalParameters
from quadsim.data_export import load_history_csv
from quadsim.main import main, run_validation_tests, run_headless_simulation


class TestValidation:

    def test_default_vehicle_passes(self):
        assert run_validation_tests(QuadcopterConfig(), verbose=False)

    def test_heavy_vehicle_passes(self):
        config = QuadcopterConfig(physics=PhysicalParameters(mass=1.5, drag_coefficients=(0.3, 0.3, 0.5)))
        assert run_validation_tests(config, verbose=False)

    def test_validate_flag(self, capsys):
        assert main(['--validate']) == 0
        assert "VALIDATION COMPLETE: 5/5 passed" in capsys.readouterr().out


class TestHeadless:

    def test_history_length(self, capsys):
        history = run_headless_simulation(QuadcopterConfig(), duration=1.0, throttle=0.0)
        assert len(history) == 50

    def test_writes_outputs(self, tmp_path, capsys):
        csv_path = tmp_path / "flight.csv"
        png_path = tmp_path / "flight.png"

        code = main([
            '--headless', '--duration', '1', '--throttle', '0.5',
            '--output', str(csv_path), '--plot', str(png_path)
        ])

        assert code == 0
        assert png_path.exists()
        df = load_history_csv(str(csv_path))
        assert len(df) == 50
        assert df['throttle'].unique().tolist() == [0.5]
        assert df['z_m'].iloc[-1] > 0.0

    def test_config_file(self, tmp_path, capsys):
        config_path = tmp_path / "quad.yaml"
        QuadcopterConfig(name="File Quad").save_yaml(str(config_path))

        assert main(['--config', str(config_path), '--headless', '--duration', '0.1']) == 0
        assert "Loaded quadcopter: File Quad" in capsys.readouterr().out

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            main(['--config', str(tmp_path / "missing.yaml"), '--headless'])


class TestServerLauncher:

    @pytest.fixture
    def launched(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "quadsim.visualization.run_server",
            lambda simulation, port: calls.append((simulation, port))
        )
        return calls

    def test_default_config(self, launched, capsys):
        import run_server as launcher

        assert launcher.main([]) == 0

        simulation, port = launched[0]
        assert port == 8765
        assert simulation.config.physics == PhysicalParameters()
        assert "ws://localhost:8765" in capsys.readouterr().out

    def test_config_argument(self, launched, tmp_path, capsys):
        import run_server as launcher
        config_path = tmp_path / "quad.yaml"
        QuadcopterConfig(name="Launcher Quad").save_yaml(str(config_path))

        launcher.main([str(config_path)])

        simulation, _ = launched[0]
        assert simulation.config.name == "Launcher Quad"
