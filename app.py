"""
Turret Defense Simulator - Main Application
Panda3D-based 3D desktop application.

Controls:
  LMB / MMB drag : Orbit camera
  Scroll         : Zoom camera
  H              : Spawn a hostile on the ring
  Space          : Pause / resume
  F1             : Toggle range rings
  Esc            : Quit
"""

import math
import logging

from direct.showbase.ShowBase import ShowBase
from direct.task import Task
from direct.gui.OnscreenText import OnscreenText

from panda3d.core import (
    LVector3, LVector4, LPoint3, LQuaternionf,
    AmbientLight, DirectionalLight,
    TextNode, AntialiasAttrib,
    loadPrcFileData,
)

# Configure Panda3D before ShowBase opens the window
loadPrcFileData("", """
    window-title Turret Defense Simulator
    win-size 1280 720
    show-frame-rate-meter 1
    sync-video 0
""")

from config import SimConfig
from game.manager import DefenseManager
from rendering.assets import TurretAssetLoader
from rendering.models import (
    build_environment, build_range_ring,
    build_hostile_model, build_projectile_model,
)
from api.rest_server import DefenseAPI
from api.ws_server import EventBroadcaster

logger = logging.getLogger("turret_sim")


class DefenseApp(ShowBase):
    """Main application class."""

    def __init__(self, config: SimConfig = None):
        ShowBase.__init__(self)
        self.sim_config = config or SimConfig()

        # === SIMULATION ===
        self.manager = DefenseManager(self.sim_config)
        self.manager.add_event_listener(self._on_sim_event)

        # === SERVERS ===
        self.api_server = None
        self.ws_server = None
        if self.sim_config.server.enabled:
            srv = self.sim_config.server
            self.api_server = DefenseAPI(host=srv.host, port=srv.api_port)
            self.api_server.bind(self.manager)
            self.api_server.start()

            self.ws_server = EventBroadcaster(host=srv.host, port=srv.ws_port)
            self.ws_server.start()
            self.manager.add_event_listener(self.ws_server.push_event)

        # === SCENE SETUP ===
        self._setup_scene()
        self._setup_lights()
        self._setup_camera()
        self._setup_turrets()
        self._setup_hud()
        self._setup_controls()

        # Visual pools keyed by sim id
        self.hostile_nodes = {}
        self.projectile_nodes = {}

        # === MAIN LOOP ===
        self.taskMgr.add(self._update, "main_update")

        logger.info("Defense simulator running")

    # =========================================================
    # SCENE SETUP
    # =========================================================

    def _setup_scene(self):
        self.setBackgroundColor(0.55, 0.7, 0.9, 1)
        self.env_root = self.render.attachNewNode("environment")
        build_environment(self.env_root)
        self.render.setAntialias(AntialiasAttrib.MAuto)

    def _setup_lights(self):
        alight = AmbientLight('ambient')
        alight.setColor(LVector4(0.35, 0.35, 0.4, 1))
        self.render.setLight(self.render.attachNewNode(alight))

        dlight = DirectionalLight('sun')
        dlight.setColor(LVector4(1.0, 0.95, 0.85, 1))
        dlnp = self.render.attachNewNode(dlight)
        dlnp.setHpr(45, -45, 0)
        self.render.setLight(dlnp)

    def _setup_camera(self):
        """Orbit camera around the defended point."""
        self.disableMouse()

        self.cam_distance = 45.0
        self.cam_heading = 30.0
        self.cam_pitch = -35.0
        dp = self.sim_config.defended_point
        self.cam_target = LPoint3(dp[0], dp[1], dp[2] + 1.0)
        self._update_camera()

        self._mouse_dragging = False
        self._last_mouse_x = 0
        self._last_mouse_y = 0

    def _update_camera(self):
        h_rad = math.radians(self.cam_heading)
        p_rad = math.radians(self.cam_pitch)

        x = self.cam_distance * math.cos(p_rad) * math.sin(h_rad)
        y = self.cam_distance * math.cos(p_rad) * math.cos(h_rad)
        z = self.cam_distance * math.sin(-p_rad)

        cam_pos = self.cam_target + LVector3(x, y, z)
        if cam_pos.getZ() < 0.5:
            cam_pos.setZ(0.5)
        self.camera.setPos(cam_pos)
        self.camera.lookAt(self.cam_target)

    def _setup_turrets(self):
        """One scene node per turret; the model streams in asynchronously."""
        self.asset_loader = TurretAssetLoader(self.loader, self.sim_config.asset_path)
        self.turret_nodes = []
        self.range_rings = []

        for turret in self.manager.turrets:
            node = self.render.attachNewNode(f"turret_{turret.turret_id}")
            node.setPos(*turret.position)
            self.turret_nodes.append(node)

            ring = build_range_ring(self.render, min(turret.config.range, 150.0))
            ring.setPos(turret.position[0], turret.position[1], 0)
            self.range_rings.append(ring)

            self.asset_loader.load(turret, node)

    # =========================================================
    # HUD
    # =========================================================

    def _setup_hud(self):
        self.hud_texts = {}

        def add_text(name, pos, align=TextNode.ALeft, scale=0.045):
            t = OnscreenText(
                text="", pos=pos, scale=scale,
                fg=(1, 1, 1, 1), shadow=(0, 0, 0, 0.8),
                align=align, mayChange=True,
                parent=self.aspect2d,
            )
            self.hud_texts[name] = t
            return t

        add_text("sim", (-1.7, 0.92), scale=0.06)
        add_text("counts", (-1.7, 0.85))
        add_text("turrets", (1.7, 0.92), TextNode.ARight)
        add_text("help", (-1.7, -0.92), scale=0.035)
        self.hud_texts["help"].setText("H: spawn hostile   Space: pause   F1: range rings   Esc: quit")

    def _update_hud(self):
        status = self.manager.get_full_status()
        state = "PAUSED" if status["paused"] else "RUNNING"
        self.hud_texts["sim"].setText(f"{state}  t={status['sim_time']:.1f}s")
        self.hud_texts["counts"].setText(
            f"Hostiles: {status['hostiles']}   Projectiles: {status['projectiles']}   "
            f"Shots: {status['stats']['shots_fired']}   "
            f"Breaches: {status['stats']['hostiles_breached']}"
        )

        lines = []
        for t in self.manager.turrets:
            ready = "" if t.ready else " (loading)"
            lines.append(f"T{t.turret_id} {t.state.value.upper()}{ready}  "
                         f"cd {t.cooldown:.2f}s  hdg {math.degrees(t.heading):6.1f}")
        self.hud_texts["turrets"].setText("\n".join(lines))

    # =========================================================
    # CONTROLS
    # =========================================================

    def _setup_controls(self):
        self.accept("escape", self.userExit)
        self.accept("space", self._on_toggle_pause)
        self.accept("h", self._on_spawn_hostile)
        self.accept("f1", self._on_toggle_rings)
        self.accept("mouse1", self._on_mouse_down)
        self.accept("mouse1-up", self._on_mouse_up)
        self.accept("mouse2", self._on_mouse_down)
        self.accept("mouse2-up", self._on_mouse_up)
        self.accept("wheel_up", self._on_scroll, [-1])
        self.accept("wheel_down", self._on_scroll, [1])

    def _on_toggle_pause(self):
        if self.manager.paused:
            self.manager.resume()
        else:
            self.manager.pause()

    def _on_spawn_hostile(self):
        self.manager.spawn_random_hostile()

    def _on_toggle_rings(self):
        for ring in self.range_rings:
            if ring.isHidden():
                ring.show()
            else:
                ring.hide()

    def _on_mouse_down(self):
        if self.mouseWatcherNode.hasMouse():
            self._mouse_dragging = True
            self._last_mouse_x = self.mouseWatcherNode.getMouseX()
            self._last_mouse_y = self.mouseWatcherNode.getMouseY()

    def _on_mouse_up(self):
        self._mouse_dragging = False

    def _on_scroll(self, direction):
        self.cam_distance = max(5.0, min(200.0, self.cam_distance * (1 + 0.1 * direction)))
        self._update_camera()

    def _handle_mouse(self):
        if not self._mouse_dragging or not self.mouseWatcherNode.hasMouse():
            return
        mx = self.mouseWatcherNode.getMouseX()
        my = self.mouseWatcherNode.getMouseY()
        self.cam_heading -= (mx - self._last_mouse_x) * 100
        self.cam_pitch = max(-89.0, min(-5.0, self.cam_pitch + (my - self._last_mouse_y) * 60))
        self._last_mouse_x = mx
        self._last_mouse_y = my
        self._update_camera()

    # =========================================================
    # VISUAL SYNC
    # =========================================================

    def _update_turret_visuals(self):
        for turret, node in zip(self.manager.turrets, self.turret_nodes):
            w, x, y, z = turret.orientation
            node.setQuat(LQuaternionf(w, x, y, z))

    def _sync_pool(self, pool, items, id_attr, build):
        live = set()
        for item in items:
            key = getattr(item, id_attr)
            live.add(key)
            node = pool.get(key)
            if node is None:
                node = build(self.render)
                pool[key] = node
            node.setPos(*item.position)

        for key in list(pool):
            if key not in live:
                pool.pop(key).removeNode()

    def _update_world_visuals(self):
        world = self.manager.world
        self._sync_pool(self.hostile_nodes, world.hostiles,
                        "hostile_id", build_hostile_model)
        self._sync_pool(self.projectile_nodes, world.projectiles,
                        "projectile_id", build_projectile_model)

    # =========================================================
    # EVENTS
    # =========================================================

    def _on_sim_event(self, event):
        etype = event.get("type")
        if etype == "hostile_breached":
            logger.info(f"Hostile {event.get('id')} breached the perimeter")

    # =========================================================
    # MAIN UPDATE LOOP
    # =========================================================

    def _update(self, task):
        """Main loop - called every frame."""
        dt = globalClock.getDt()

        self._handle_mouse()

        # Simulation (caps dt itself)
        self.manager.update(dt)

        # Visuals
        self._update_turret_visuals()
        self._update_world_visuals()
        self._update_hud()

        return Task.cont


def main(config: SimConfig = None):
    """Entry point."""
    app = DefenseApp(config)
    app.run()
