"""
Visualization Server

WebSocket server that plays the host role for the quadcopter model:
it receives analog axes and commands from a client, drives the fixed-tick
simulation, and streams the pose back in host units and conventions.
"""

import asyncio
import json
import logging
import time
import numpy as np
from typing import Dict, Optional

from websockets.asyncio.server import serve as ws_serve

from .controls import AXES
from .dynamics import NumericalInstabilityError
from .simulation import QuadSimulation
from .state import Pose
from .data_export import StateEncoder


logger = logging.getLogger(__name__)


def pose_to_message(pose: Pose, simulation: Optional[QuadSimulation] = None) -> str:
    """
    Convert a pose snapshot to a JSON message for the client.

    Location is in host units (cm) and the rotation in the host's
    mirrored convention (degrees).
    """
    roll, pitch, yaw = pose.host_rotation.to_degrees()
    location = pose.host_location

    data = {
        'type': 'pose',
        'time': pose.time,
        'location': {'x': location[0], 'y': location[1], 'z': location[2]},
        'rotation': {'roll': roll, 'pitch': pitch, 'yaw': yaw},
        'position_m': pose.position,
    }

    if simulation is not None:
        model = simulation.model
        controls = simulation.mapper.state
        data['velocity'] = model.linear_velocity
        data['acceleration'] = model.linear_acceleration
        data['grounded'] = model.grounded
        data['controls'] = {
            'throttle': controls.throttle,
            'forward_speed': controls.forward_speed,
            'pitch_speed': controls.pitch_speed,
            'yaw_speed': controls.yaw_speed,
            'roll_speed': controls.roll_speed,
        }

    return json.dumps(data, cls=StateEncoder)


class SimulationServer:
    """
    WebSocket server for streaming simulation state.

    Handles bidirectional communication:
    - Server -> Client: Pose updates at the frame rate
    - Client -> Server: Input axes, collisions, commands
    """

    def __init__(
        self,
        simulation: QuadSimulation,
        host: str = "localhost",
        port: int = 8765,
        frame_rate: float = 60.0  # Hz
    ):
        self.simulation = simulation
        self.host = host
        self.port = port
        self.frame_interval = 1.0 / frame_rate

        self.clients: set = set()
        self.running = False
        self.paused = False

        # Latest axes received from clients
        self.axes: Dict[str, float] = {axis: 0.0 for axis in AXES}

    async def register(self, websocket):
        """Register a new client connection."""
        self.clients.add(websocket)
        logger.info("Client connected. Total clients: %d", len(self.clients))

        await websocket.send(pose_to_message(self.simulation.pose, self.simulation))

    async def unregister(self, websocket):
        """Unregister a client connection."""
        self.clients.discard(websocket)
        logger.info("Client disconnected. Total clients: %d", len(self.clients))

    async def broadcast(self, message: str):
        """Send message to all connected clients."""
        if self.clients:
            await asyncio.gather(
                *[client.send(message) for client in self.clients],
                return_exceptions=True
            )

    def handle_message(self, message: str):
        """Process incoming message from client."""
        try:
            data = json.loads(message)
        except json.JSONDecodeError:
            logger.warning("Invalid JSON received: %s", message)
            return

        if not isinstance(data, dict):
            logger.warning("Expected a JSON object, got: %s", message)
            return

        msg_type = data.get('type', '')

        if msg_type == 'axes':
            for axis in AXES:
                if axis not in data:
                    continue
                try:
                    value = float(data[axis])
                except (TypeError, ValueError):
                    value = float('nan')
                if not np.isfinite(value):
                    logger.warning("Bad value for axis %s: %r", axis, data[axis])
                    continue
                self.axes[axis] = float(np.clip(value, -1.0, 1.0))

        elif msg_type == 'collision':
            self.simulation.notify_collision()

        elif msg_type == 'command':
            cmd = data.get('command', '')
            if cmd == 'reset':
                self.simulation.reset()
                self.axes = {axis: 0.0 for axis in AXES}
            elif cmd == 'pause':
                self.paused = True
            elif cmd == 'resume':
                self.paused = False
            elif cmd == 'stop':
                self.running = False
            else:
                logger.warning("Unknown command: %s", cmd)

        else:
            logger.warning("Unknown message type: %s", msg_type)

    async def client_handler(self, websocket):
        """Handle a single client connection."""
        await self.register(websocket)
        try:
            async for message in websocket:
                self.handle_message(message)
        finally:
            await self.unregister(websocket)

    async def simulation_loop(self):
        """Frame loop: advance the simulation and broadcast the pose."""
        self.running = True
        last = time.monotonic()

        while self.running:
            now = time.monotonic()
            frame_dt = now - last
            last = now

            if not self.paused:
                try:
                    pose = self.simulation.advance(frame_dt, self.axes)
                except NumericalInstabilityError:
                    logger.exception("Simulation diverged, stopping server loop")
                    self.running = False
                    raise
                await self.broadcast(pose_to_message(pose, self.simulation))

            await asyncio.sleep(self.frame_interval)

    async def run_async(self):
        """Run the WebSocket server asynchronously."""
        async with ws_serve(self.client_handler, self.host, self.port):
            logger.info("WebSocket server running on ws://%s:%d", self.host, self.port)
            await self.simulation_loop()

    def run(self):
        """Run the WebSocket server (blocking)."""
        asyncio.run(self.run_async())


def run_server(
    simulation: QuadSimulation,
    host: str = "localhost",
    port: int = 8765,
    frame_rate: float = 60.0
):
    """Run the simulation behind a WebSocket server until stopped."""
    server = SimulationServer(simulation, host=host, port=port, frame_rate=frame_rate)
    server.run()
