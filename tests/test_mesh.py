"""Tests for the vertex, edge, face and mesh value types."""
import numpy as np
import pytest

from mesh import (Vertex, VertexIndex, Edge, Face, Mesh, MalformedFaceError)
from subdivision_config import EPSILON
from topology import average


def test_vertex_equality_is_epsilon_tolerant():
    assert Vertex(0.0, 0.0, 0.0) == Vertex(EPSILON / 2, 0.0, -EPSILON / 2)
    assert Vertex(0.0, 0.0, 0.0) != Vertex(2 * EPSILON, 0.0, 0.0)
    assert Vertex(1.0, 2.0, 3.0) != (1.0, 2.0, 3.0)


def test_vertex_is_immutable():
    v = Vertex(1, 2, 3)
    with pytest.raises(AttributeError):
        v.x = 4.0
    assert v.as_tuple() == (1.0, 2.0, 3.0)


def test_vertex_arithmetic():
    a = Vertex(1.0, 2.0, 3.0)
    b = Vertex(0.5, 0.5, 0.5)
    assert a + b == Vertex(1.5, 2.5, 3.5)
    assert a - b == Vertex(0.5, 1.5, 2.5)
    assert a * 2 == Vertex(2.0, 4.0, 6.0)
    assert 2 * a == a * 2
    assert a / 2 == Vertex(0.5, 1.0, 1.5)
    np.testing.assert_array_equal(a.as_array(), [1.0, 2.0, 3.0])
    assert Vertex.from_array(a.as_array()) == a


def test_vertex_index_merges_points_across_cell_boundary():
    index = VertexIndex()
    boundary = 10 * EPSILON
    first = index.add(Vertex(boundary - EPSILON / 50, 0.0, 0.0))
    second = index.add(Vertex(boundary + EPSILON / 50, 0.0, 0.0))
    third = index.add(Vertex(1.0, 0.0, 0.0))
    assert first == second
    assert third != first
    assert len(index) == 2
    assert index.find(Vertex(5.0, 5.0, 5.0)) is None


def test_edge_reverse_twice_is_identity():
    edge = Edge(Vertex(0, 0, 0), Vertex(1, 2, 3))
    assert edge.reverse().reverse() == edge
    assert edge.reverse() != edge
    assert edge.same_undirected(edge.reverse())
    assert edge.midpoint == Vertex(0.5, 1.0, 1.5)
    assert edge.contains_vertex(Vertex(1, 2, 3))
    assert not edge.contains_vertex(Vertex(1, 1, 1))


def test_face_from_vertices_builds_closed_loop():
    a, b, c, d = Vertex(0, 0, 0), Vertex(1, 0, 0), Vertex(1, 1, 0), Vertex(0, 1, 0)
    face = Face.from_vertices(a, b, c, d)
    assert face.number_of_edges == 4
    assert face.vertices == (a, b, c, d)
    assert face.edges[-1] == Edge(d, a)
    assert face.contains_edge(Edge(b, c))
    assert not face.contains_edge(Edge(c, b))
    assert face.contains_edge(Edge(c, b), bidirectional=True)
    assert face.contains_vertex(Vertex(1, 1, 0))


def test_face_rejects_open_loop():
    a, b, c = Vertex(0, 0, 0), Vertex(1, 0, 0), Vertex(0, 1, 0)
    with pytest.raises(MalformedFaceError):
        Face(Edge(a, b), Edge(b, c), Edge(a, c))


def test_face_rejects_revisited_vertex():
    a, b, c = Vertex(0, 0, 0), Vertex(1, 0, 0), Vertex(0, 1, 0)
    with pytest.raises(MalformedFaceError):
        Face.from_vertices(a, b, a, c)


def test_face_needs_three_edges():
    a, b = Vertex(0, 0, 0), Vertex(1, 0, 0)
    with pytest.raises(MalformedFaceError):
        Face(Edge(a, b), Edge(b, a))


def test_face_centroid_lies_in_bounding_box(triangle_cube, quad_cube):
    for mesh in (triangle_cube, quad_cube):
        for face in mesh.faces:
            coords = np.array([v.as_tuple() for v in face.vertices])
            center = average(face.vertices).as_array()
            assert np.all(center >= coords.min(axis=0) - EPSILON)
            assert np.all(center <= coords.max(axis=0) + EPSILON)


def test_mesh_derives_undirected_edges_and_vertices(quad_cube, triangle_cube):
    assert len(quad_cube.faces) == 6
    assert len(quad_cube.vertices) == 8
    assert len(quad_cube.edges) == 12
    assert quad_cube.vertex_array.shape == (8, 3)
    assert quad_cube.edge_indices.shape == (12, 2)

    assert len(triangle_cube.faces) == 12
    assert len(triangle_cube.vertices) == 8
    assert len(triangle_cube.edges) == 18

    for i, edge in enumerate(quad_cube.edges):
        for other in quad_cube.edges[i + 1:]:
            assert not edge.same_undirected(other)


def test_mesh_snaps_near_duplicate_vertices():
    a, b, c = Vertex(0, 0, 0), Vertex(1, 0, 0), Vertex(0, 1, 0)
    d = Vertex(0, 0, 1)
    nudged = Vertex(1.0 + EPSILON / 10, 0.0, 0.0)
    mesh = Mesh([Face.from_vertices(a, b, c), Face.from_vertices(d, nudged, a)])
    assert len(mesh.vertices) == 4
    assert mesh.faces[1].vertices[1] is mesh.faces[0].vertices[1]
    assert mesh.face_indices == [[0, 1, 2], [3, 1, 0]]


def test_mesh_drops_repeated_faces(quad_cube):
    mesh = Mesh(list(quad_cube.faces) + [quad_cube.faces[0]])
    assert len(mesh) == 6
    assert mesh == quad_cube


def test_empty_mesh():
    mesh = Mesh([])
    assert len(mesh) == 0
    assert mesh.vertices == ()
    assert mesh.edges == ()
    assert mesh.vertex_array.shape == (0, 3)


def test_to_trimesh_keeps_outward_winding(quad_cube, triangle_cube):
    for mesh in (quad_cube, triangle_cube):
        tm = mesh.to_trimesh()
        assert len(tm.faces) == 12
        assert tm.is_watertight
        assert tm.is_winding_consistent
        assert tm.volume == pytest.approx(1.0)


def test_repr_reports_counts(quad_cube):
    assert repr(quad_cube) == "<Mesh(vertices.shape=(8, 3), faces=6, edges=12)>"


def test_equal_vertices_across_cell_boundary_share_one_mesh_vertex():
    left = Vertex(9.98e-07, 0.0, 0.0)
    right = Vertex(1.002e-06, 0.0, 0.0)
    assert left == right

    index = VertexIndex()
    assert index.add(left) == index.add(right) == 0
    assert index.find(right) == 0

    far = Vertex(0.0, 1.0, 0.0)
    mesh = Mesh([Face.from_vertices(left, far, Vertex(0.0, 0.0, 1.0)),
                 Face.from_vertices(right, Vertex(0.0, 0.0, 1.0), Vertex(1.0, 1.0, 1.0))])
    assert len(mesh.vertices) == 4
    assert mesh.index_of(right) == mesh.index_of(left) == 0
