import math

import numpy as np
import trimesh

from subdivision_config import EPSILON, NEIGHBOUR_OFFSETS


class MeshError(ValueError):
    """Base class for every mesh and subdivision failure."""


class MalformedFaceError(MeshError):
    """A face whose edges do not form a closed, simple loop."""


class NonManifoldMeshError(MeshError):
    """A mesh that is not a closed 2-manifold."""


class NonTriangularFaceError(MeshError):
    """A face of degree other than three handed to a triangle-only pass."""


def _cell(x, y, z):
    return (math.floor(x / EPSILON), math.floor(y / EPSILON), math.floor(z / EPSILON))


class Vertex:
    """
    An immutable point in 3D space. Two vertices are equal when every
    coordinate differs by less than EPSILON, so points computed along
    different paths compare equal to each other.

    The hash buckets coordinates on the EPSILON grid, so two equal points on
    either side of a cell boundary can hash apart and a set or dict of
    vertices may miss a match. Use VertexIndex to de-duplicate vertices by
    value; Mesh does so for every vertex it holds.
    """

    __slots__ = ("x", "y", "z")

    def __init__(self, x, y, z):
        object.__setattr__(self, "x", float(x))
        object.__setattr__(self, "y", float(y))
        object.__setattr__(self, "z", float(z))

    def __setattr__(self, name, value):
        raise AttributeError("Vertex is immutable")

    @classmethod
    def from_array(cls, arr):
        return cls(arr[0], arr[1], arr[2])

    def as_tuple(self):
        return (self.x, self.y, self.z)

    def as_array(self):
        return np.array(self.as_tuple(), dtype=np.float64)

    def __add__(self, other):
        return Vertex(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other):
        return Vertex(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar):
        return Vertex(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return Vertex(self.x / scalar, self.y / scalar, self.z / scalar)

    def __eq__(self, other):
        if not isinstance(other, Vertex):
            return NotImplemented
        return (abs(self.x - other.x) < EPSILON
                and abs(self.y - other.y) < EPSILON
                and abs(self.z - other.z) < EPSILON)

    def __hash__(self):
        return hash(_cell(self.x, self.y, self.z))

    def __repr__(self):
        return "Vertex({}, {}, {})".format(self.x, self.y, self.z)


class VertexIndex:
    """
    Assigns a stable integer id to each distinct point, treating points
    within EPSILON of each other as the same point. Points are bucketed on a
    grid of cell size EPSILON and a lookup probes the 27 cells around the
    query, so an equal point is found even across a cell boundary.
    """

    def __init__(self):
        self.vertices = []
        self.cells = {}

    def __len__(self):
        return len(self.vertices)

    def find(self, vertex):
        cx, cy, cz = _cell(vertex.x, vertex.y, vertex.z)
        for dx, dy, dz in NEIGHBOUR_OFFSETS:
            for idx in self.cells.get((cx + dx, cy + dy, cz + dz), ()):
                if self.vertices[idx] == vertex:
                    return idx
        return None

    def add(self, vertex):
        idx = self.find(vertex)
        if idx is not None:
            return idx
        idx = len(self.vertices)
        self.vertices.append(vertex)
        self.cells.setdefault(_cell(vertex.x, vertex.y, vertex.z), []).append(idx)
        return idx


class Edge:
    """A directed edge from start to end. An edge is not equal to its reverse."""

    __slots__ = ("start", "end")

    def __init__(self, start, end):
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def __setattr__(self, name, value):
        raise AttributeError("Edge is immutable")

    def reverse(self):
        return Edge(self.end, self.start)

    @property
    def midpoint(self):
        return Vertex((self.start.x + self.end.x) / 2.0,
                      (self.start.y + self.end.y) / 2.0,
                      (self.start.z + self.end.z) / 2.0)

    def contains_vertex(self, vertex):
        return self.start == vertex or self.end == vertex

    def same_undirected(self, other):
        return self == other or self == other.reverse()

    def __eq__(self, other):
        if not isinstance(other, Edge):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return "Edge({!r} > {!r})".format(self.start, self.end)


class Face:
    def __init__(self, *edges):
        """
        Creates a face from an ordered loop of edges. Each edge must end where
        the next one starts, the last edge must close back on the first, and
        no vertex may be visited twice. The winding of the loop is kept as
        given since it fixes the outward side of the face.
        """
        if len(edges) < 3:
            raise MalformedFaceError(
                "A face needs at least three edges, got {}".format(len(edges)))
        for i, edge in enumerate(edges):
            following = edges[(i + 1) % len(edges)]
            if edge.end != following.start:
                raise MalformedFaceError(
                    "Edge {} ends at {!r} but edge {} starts at {!r}".format(
                        i, edge.end, (i + 1) % len(edges), following.start))
        self.edges = tuple(edges)
        self.vertices = tuple(edge.start for edge in self.edges)
        if _distinct_count(self.vertices) != len(self.edges):
            raise MalformedFaceError("Face loop revisits a vertex: {!r}".format(self.vertices))

    @classmethod
    def from_vertices(cls, *vertices):
        """Builds the edge loop v0 -> v1 -> ... -> vk -> v0."""
        count = len(vertices)
        return cls(*[Edge(vertices[i], vertices[(i + 1) % count]) for i in range(count)])

    @property
    def number_of_edges(self):
        return len(self.edges)

    def contains_edge(self, edge, bidirectional=False):
        for e in self.edges:
            if e == edge:
                return True
            if bidirectional and e == edge.reverse():
                return True
        return False

    def contains_vertex(self, vertex):
        return any(v == vertex for v in self.vertices)

    def __eq__(self, other):
        if not isinstance(other, Face):
            return NotImplemented
        return self.edges == other.edges

    def __hash__(self):
        return hash(self.edges)

    def __repr__(self):
        return "Face({})".format(", ".join(repr(v) for v in self.vertices))


def _distinct_count(vertices):
    index = VertexIndex()
    for v in vertices:
        index.add(v)
    return len(index)


class Mesh:
    def __init__(self, faces):
        """
        Builds a mesh from a collection of faces. Every vertex is snapped to a
        canonical instance so that points equal within EPSILON become one
        mesh vertex, then the undirected edge set and the indexed arrays
        (vertex positions and per-face vertex ids) are derived. Faces equal
        to an earlier face are dropped; the order of the rest is kept.
        """
        self.index = VertexIndex()
        kept = {}
        self.face_indices = []
        for face in faces:
            ids = [self.index.add(v) for v in face.vertices]
            canonical = Face.from_vertices(*[self.index.vertices[i] for i in ids])
            if canonical in kept:
                continue
            kept[canonical] = len(self.face_indices)
            self.face_indices.append(ids)
        self.faces = tuple(kept)
        self.vertices = tuple(self.index.vertices)
        self.construct_edges()

        if self.vertices:
            self.vertex_array = np.array([v.as_tuple() for v in self.vertices], dtype=np.float64)
        else:
            self.vertex_array = np.zeros((0, 3), dtype=np.float64)

    def construct_edges(self):
        """
        Walks every face loop and keeps an edge only if neither it nor its
        reverse was kept before, so each shared edge appears once.
        """
        seen = set()
        edges = []
        edge_ids = []
        for face, ids in zip(self.faces, self.face_indices):
            for i, edge in enumerate(face.edges):
                key = tuple(sorted((ids[i], ids[(i + 1) % len(ids)])))
                if key in seen:
                    continue
                seen.add(key)
                edges.append(edge)
                edge_ids.append([ids[i], ids[(i + 1) % len(ids)]])
        self.edges = tuple(edges)
        self.edge_indices = np.array(edge_ids, dtype=np.int64).reshape(-1, 2)

    def index_of(self, vertex):
        return self.index.find(vertex)

    @property
    def face_degrees(self):
        return [len(ids) for ids in self.face_indices]

    def to_trimesh(self):
        """
        Converts the mesh into a trimesh.Trimesh for rendering. Polygons are
        fan triangulated around their first vertex, which keeps the winding.
        """
        triangles = []
        for ids in self.face_indices:
            for i in range(1, len(ids) - 1):
                triangles.append([ids[0], ids[i], ids[i + 1]])
        triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        return trimesh.Trimesh(vertices=self.vertex_array, faces=triangles, process=False)

    def __len__(self):
        return len(self.faces)

    def __iter__(self):
        return iter(self.faces)

    def __eq__(self, other):
        if not isinstance(other, Mesh):
            return NotImplemented
        return self.faces == other.faces

    __hash__ = None

    def __repr__(self):
        return "<Mesh(vertices.shape={}, faces={}, edges={})>".format(
            self.vertex_array.shape, len(self.faces), len(self.edges))
