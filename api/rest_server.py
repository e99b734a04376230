"""
REST API Server for the defense simulator

Runs in a separate thread alongside the frame loop. Read-mostly:
external scripts watch turrets and drop hostiles into the world.

Endpoints:
  GET  /                — Index
  GET  /status          — Simulation summary
  GET  /turrets         — All turret statuses
  GET  /turrets/<id>    — One turret
  GET  /hostiles        — Live hostiles
  POST /hostiles        — Spawn hostile {position: [x,y,z], velocity?: [vx,vy,vz]}
  GET  /projectiles     — Live projectiles
  POST /sim/pause       — Pause the simulation
  POST /sim/resume      — Resume the simulation
"""

import threading
import logging
from flask import Flask, request, jsonify
from flask_cors import CORS

logger = logging.getLogger("turret_api")


def _parse_vec3(value, name):
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"{name} must be a list of 3 numbers")
    return [float(v) for v in value]


class DefenseAPI:
    """REST API over a DefenseManager, runs in background thread."""

    def __init__(self, host="127.0.0.1", port=8420):
        self.host = host
        self.port = port
        self.app = Flask("turret_api")
        CORS(self.app)

        # Set by main app
        self.manager = None

        # Suppress Flask request logging
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

        self._setup_routes()
        self._thread = None

    def bind(self, manager):
        """Bind the simulation manager to the API."""
        self.manager = manager

    def start(self):
        """Start API server in background thread."""
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="turret_api"
        )
        self._thread.start()
        logger.info(f"REST API started on http://{self.host}:{self.port}")

    def _run(self):
        self.app.run(
            host=self.host,
            port=self.port,
            threaded=True,
            use_reloader=False,
        )

    def _setup_routes(self):
        app = self.app

        def not_ready():
            return jsonify({"error": "not initialized"}), 503

        @app.route("/", methods=["GET"])
        def index():
            return jsonify({
                "name": "Turret Defense Simulator API",
                "version": "1.0",
                "endpoints": [
                    "GET  /status",
                    "GET  /turrets",
                    "GET  /turrets/<id>",
                    "GET  /hostiles",
                    "POST /hostiles {position, velocity?}",
                    "GET  /projectiles",
                    "POST /sim/pause",
                    "POST /sim/resume",
                ],
            })

        @app.route("/status", methods=["GET"])
        def get_status():
            if not self.manager:
                return not_ready()
            return jsonify(self.manager.get_full_status())

        @app.route("/turrets", methods=["GET"])
        def get_turrets():
            if not self.manager:
                return not_ready()
            return jsonify({"turrets": self.manager.get_turret_statuses()})

        @app.route("/turrets/<int:turret_id>", methods=["GET"])
        def get_turret(turret_id):
            if not self.manager:
                return not_ready()
            turret = self.manager.get_turret(turret_id)
            if turret is None:
                return jsonify({"error": f"no turret {turret_id}"}), 404
            return jsonify(turret.get_status())

        @app.route("/hostiles", methods=["GET"])
        def get_hostiles():
            if not self.manager:
                return not_ready()
            return jsonify({"hostiles": self.manager.get_hostiles()})

        @app.route("/hostiles", methods=["POST"])
        def spawn_hostile():
            if not self.manager:
                return not_ready()

            data = request.get_json(force=True, silent=True) or {}
            if not isinstance(data, dict):
                return jsonify({"error": "body must be a JSON object"}), 400
            try:
                position = _parse_vec3(data.get("position"), "position")
                velocity = data.get("velocity")
                if velocity is not None:
                    velocity = _parse_vec3(velocity, "velocity")
            except (TypeError, ValueError) as e:
                return jsonify({"error": str(e)}), 400

            hostile = self.manager.spawn_hostile(position, velocity)
            return jsonify({"ok": True, "hostile": hostile.to_dict()}), 201

        @app.route("/projectiles", methods=["GET"])
        def get_projectiles():
            if not self.manager:
                return not_ready()
            return jsonify({"projectiles": self.manager.get_projectiles()})

        @app.route("/sim/pause", methods=["POST"])
        def pause():
            if not self.manager:
                return not_ready()
            self.manager.pause()
            return jsonify({"ok": True, "paused": True})

        @app.route("/sim/resume", methods=["POST"])
        def resume():
            if not self.manager:
                return not_ready()
            self.manager.resume()
            return jsonify({"ok": True, "paused": False})
