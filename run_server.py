#!/usr/bin/env python3
"""
Start the quadcopter simulator behind the WebSocket server.

Usage: run_server.py [config.yaml]

Clients connect to ws://localhost:8765 and send input axes:
    {"type": "axes", "Thrust": 0.3, "MoveUp": 0.0, "MoveRight": 0.0}
    {"type": "collision"}
    {"type": "command", "command": "reset" | "pause" | "resume" | "stop"}

The server answers with pose messages at 60 Hz while the dynamics run at
the configured fixed tick.
"""

import sys
from pathlib import Path

from quadsim.main import main as quadsim_main


DEFAULT_CONFIG = Path(__file__).parent / "configs" / "default_quad.yaml"


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config_path = Path(argv[0]) if argv else DEFAULT_CONFIG
    return quadsim_main(['--config', str(config_path), '--port', '8765'])


if __name__ == "__main__":
    raise SystemExit(main())
