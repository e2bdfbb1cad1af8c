import pytest

from mesh import Vertex, Face, Mesh
from mesh_factory import quad_unit_cube, triangulated_unit_cube
from topology import MeshTopology


@pytest.fixture
def quad_cube():
    return quad_unit_cube()


@pytest.fixture
def triangle_cube():
    return triangulated_unit_cube()


@pytest.fixture
def tetrahedron():
    # Regular tetrahedron centred at the origin, every edge traversed once in each direction.
    p = [Vertex(1, 1, 1), Vertex(1, -1, -1), Vertex(-1, 1, -1), Vertex(-1, -1, 1)]
    loops = [(0, 1, 2), (0, 3, 1), (0, 2, 3), (1, 3, 2)]
    return Mesh([Face.from_vertices(*[p[i] for i in loop]) for loop in loops])


@pytest.fixture
def open_cube(quad_cube):
    return Mesh(quad_cube.faces[1:])


@pytest.fixture
def quad_topology(quad_cube):
    return MeshTopology(quad_cube)
