"""
Procedural 3D geometry for the defense simulator.
Placeholder bodies for turrets, hostiles and projectiles, plus the
ground. Used when no asset is available and for everything that has no
asset at all.
"""

import math
from panda3d.core import (
    GeomVertexFormat, GeomVertexData, GeomVertexWriter,
    Geom, GeomTriangles, GeomNode,
    NodePath, LineSegs,
)


def _writers(name):
    vdata = GeomVertexData(name, GeomVertexFormat.getV3n3c4(), Geom.UHStatic)
    return (
        vdata,
        GeomVertexWriter(vdata, 'vertex'),
        GeomVertexWriter(vdata, 'normal'),
        GeomVertexWriter(vdata, 'color'),
    )


def _to_nodepath(name, vdata, tris):
    geom = Geom(vdata)
    geom.addPrimitive(tris)
    node = GeomNode(name)
    node.addGeom(geom)
    return NodePath(node)


def make_box(name, sx, sy, sz, color=(0.5, 0.5, 0.5, 1)):
    """Axis-aligned box centred on the origin."""
    vdata, vertex, normal, col = _writers(name)
    tris = GeomTriangles(Geom.UHStatic)
    half = (sx / 2, sy / 2, sz / 2)

    idx = 0
    for axis in range(3):
        for sign in (1, -1):
            # Two in-plane axes, ordered so the winding faces outward
            u, v = [(1, 2), (2, 0), (0, 1)][axis]
            if sign < 0:
                u, v = v, u
            n = [0, 0, 0]
            n[axis] = sign
            for du, dv in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
                p = [0.0, 0.0, 0.0]
                p[axis] = sign * half[axis]
                p[u] = du * half[u]
                p[v] = dv * half[v]
                vertex.addData3(*p)
                normal.addData3(*n)
                col.addData4(*color)
            tris.addVertices(idx, idx + 1, idx + 2)
            tris.addVertices(idx, idx + 2, idx + 3)
            idx += 4

    return _to_nodepath(name, vdata, tris)


def make_cylinder(name, radius, height, segments=16, color=(0.5, 0.5, 0.5, 1)):
    """Cylinder standing on z = 0, growing along +Z, with end caps."""
    vdata, vertex, normal, col = _writers(name)
    tris = GeomTriangles(Geom.UHStatic)

    ring = [(math.cos(2 * math.pi * i / segments),
             math.sin(2 * math.pi * i / segments)) for i in range(segments + 1)]

    # Side wall: bottom/top vertex pairs
    for c, s in ring:
        for z in (0.0, height):
            vertex.addData3(radius * c, radius * s, z)
            normal.addData3(c, s, 0)
            col.addData4(*color)
    for i in range(segments):
        b = i * 2
        tris.addVertices(b, b + 1, b + 2)
        tris.addVertices(b + 1, b + 3, b + 2)

    # Caps: centre vertex then rim
    idx = (segments + 1) * 2
    for z, nz in ((height, 1), (0.0, -1)):
        centre = idx
        vertex.addData3(0, 0, z)
        normal.addData3(0, 0, nz)
        col.addData4(*color)
        for c, s in ring:
            vertex.addData3(radius * c, radius * s, z)
            normal.addData3(0, 0, nz)
            col.addData4(*color)
        for i in range(segments):
            if nz > 0:
                tris.addVertices(centre, centre + 1 + i, centre + 2 + i)
            else:
                tris.addVertices(centre, centre + 2 + i, centre + 1 + i)
        idx = centre + segments + 2

    return _to_nodepath(name, vdata, tris)


def build_environment(parent: NodePath) -> NodePath:
    """Flat ground slab with a faint grid so motion reads on screen."""
    ground = make_box("ground", 300, 300, 0.1, (0.32, 0.38, 0.26, 1))
    ground.reparentTo(parent)
    ground.setPos(0, 0, -0.05)

    segs = LineSegs("grid")
    segs.setThickness(1.0)
    segs.setColor(0.25, 0.3, 0.2, 1)
    for i in range(-150, 151, 10):
        segs.moveTo(i, -150, 0.01)
        segs.drawTo(i, 150, 0.01)
        segs.moveTo(-150, i, 0.01)
        segs.drawTo(150, i, 0.01)
    grid = parent.attachNewNode(segs.create())
    grid.setLightOff()
    return ground


def build_range_ring(parent: NodePath, radius: float, segments: int = 64) -> NodePath:
    """Circle on the ground marking a turret's firing range."""
    segs = LineSegs("range_ring")
    segs.setThickness(1.5)
    segs.setColor(0.9, 0.6, 0.2, 0.8)
    for i in range(segments + 1):
        a = 2 * math.pi * i / segments
        p = (radius * math.cos(a), radius * math.sin(a), 0.02)
        if i == 0:
            segs.moveTo(*p)
        else:
            segs.drawTo(*p)
    ring = parent.attachNewNode(segs.create())
    ring.setLightOff()
    return ring


def build_turret_body(parent: NodePath) -> NodePath:
    """
    Placeholder turret: squat base, head and a single barrel along +Y.
    Rests on z = 0 already.
    """
    metal_dark = (0.25, 0.25, 0.22, 1)
    metal_light = (0.45, 0.45, 0.4, 1)

    body = parent.attachNewNode("turret_body")

    base = make_cylinder("base", 0.6, 0.5, 16, metal_dark)
    base.reparentTo(body)

    head = make_box("head", 0.8, 0.9, 0.5, metal_light)
    head.reparentTo(body)
    head.setPos(0, 0, 0.75)

    barrel = make_cylinder("barrel", 0.07, 1.1, 10, metal_dark)
    barrel.reparentTo(body)
    barrel.setPos(0, 0.4, 0.75)
    barrel.setP(-90)  # Lay the cylinder along +Y

    return body


def build_hostile_model(parent: NodePath) -> NodePath:
    hostile_np = parent.attachNewNode("hostile")
    torso = make_box("torso", 0.6, 0.4, 1.2, (0.7, 0.15, 0.12, 1))
    torso.reparentTo(hostile_np)
    torso.setPos(0, 0, 0.9)
    head = make_box("head", 0.35, 0.35, 0.35, (0.55, 0.1, 0.1, 1))
    head.reparentTo(hostile_np)
    head.setPos(0, 0, 1.75)
    return hostile_np


def build_projectile_model(parent: NodePath) -> NodePath:
    proj_np = make_box("projectile", 0.12, 0.12, 0.12, (1.0, 0.85, 0.3, 1))
    proj_np.reparentTo(parent)
    proj_np.setLightOff()
    return proj_np
