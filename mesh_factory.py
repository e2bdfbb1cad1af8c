"""Seed shapes used as the starting point of a subdivision session."""

from mesh import Vertex, Face, Mesh

# Corners of the unit cube centred at the origin, front face at z = +0.5.
CUBE_CORNERS = {
    "a": (-0.5, -0.5, 0.5),
    "b": (0.5, -0.5, 0.5),
    "c": (0.5, 0.5, 0.5),
    "d": (-0.5, 0.5, 0.5),
    "e": (-0.5, -0.5, -0.5),
    "f": (0.5, -0.5, -0.5),
    "g": (0.5, 0.5, -0.5),
    "h": (-0.5, 0.5, -0.5),
}

# Counter-clockwise when seen from outside the cube.
CUBE_SIDES = ("abcd", "ehgf", "bfgc", "adhe", "dcgh", "aefb")


def _corners():
    return {name: Vertex(*xyz) for name, xyz in CUBE_CORNERS.items()}


def quad_unit_cube():
    """Unit cube made of six square faces."""
    corners = _corners()
    return Mesh([Face.from_vertices(*[corners[c] for c in side]) for side in CUBE_SIDES])


def triangulated_unit_cube():
    """Unit cube with every square side split along a diagonal into two triangles."""
    corners = _corners()
    faces = []
    for side in CUBE_SIDES:
        p0, p1, p2, p3 = [corners[c] for c in side]
        faces.append(Face.from_vertices(p0, p1, p2))
        faces.append(Face.from_vertices(p0, p2, p3))
    return Mesh(faces)


SEED_SHAPES = {
    "triangle_cube": triangulated_unit_cube,
    "quad_cube": quad_unit_cube,
}


def seed_shape(name):
    try:
        builder = SEED_SHAPES[name]
    except KeyError:
        raise KeyError("Unknown seed shape {!r}, expected one of {}".format(
            name, sorted(SEED_SHAPES))) from None
    return builder()
