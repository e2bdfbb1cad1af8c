import logging

import numpy as np
import scipy as sp
import scipy.sparse

from mesh import Vertex, NonManifoldMeshError

logger = logging.getLogger(__name__)


def average(vertices):
    """Component-wise arithmetic mean of a non-empty sequence of vertices."""
    vertices = list(vertices)
    if not vertices:
        raise ValueError("Cannot average an empty list of vertices")
    coords = np.array([v.as_tuple() for v in vertices], dtype=np.float64)
    return Vertex.from_array(coords.mean(axis=0))


class MeshTopology:
    def __init__(self, mesh):
        """
        Read-only adjacency queries over one mesh. All incidence maps are
        built once here: vertex to faces, vertex to edges, undirected edge to
        the faces it borders, the sparse vertex adjacency matrix and the face
        centers. Query vertices are matched to mesh vertices by value.
        """
        self.mesh = mesh
        self.map_vertices_to_faces()
        self.map_edges_to_faces()
        self.establish_vertex_adjacency()
        self.computing_face_center()

    def map_vertices_to_faces(self):
        """
        Creates a mapping from each vertex to the faces that vertex is part
        of, in mesh face order.
        """
        vert_to_face = [[] for _ in self.mesh.vertices]
        for face_id, ids in enumerate(self.mesh.face_indices):
            for vertex_id in ids:
                vert_to_face[vertex_id].append(face_id)
        self.vert_to_face = vert_to_face

    def map_edges_to_faces(self):
        """
        Maps each undirected edge, keyed by its sorted vertex ids, to the
        faces whose loop runs along it in either direction, and each vertex
        to the mesh edges touching it.
        """
        edge_to_faces = {}
        for face_id, ids in enumerate(self.mesh.face_indices):
            for i in range(len(ids)):
                key = tuple(sorted((ids[i], ids[(i + 1) % len(ids)])))
                edge_to_faces.setdefault(key, []).append(face_id)
        self.edge_to_faces = edge_to_faces

        vert_to_edge = [[] for _ in self.mesh.vertices]
        for edge_id, (v0, v1) in enumerate(self.mesh.edge_indices):
            vert_to_edge[v0].append(edge_id)
            vert_to_edge[v1].append(edge_id)
        self.vert_to_edge = vert_to_edge

    def establish_vertex_adjacency(self):
        """
        Builds the symmetric sparse adjacency matrix of the mesh edges. Row i
        holds a one for every vertex in the 1-ring of vertex i, so the matrix
        times the vertex array sums each ring.
        """
        total_vertices = len(self.mesh.vertices)
        edges = self.mesh.edge_indices
        rows = np.concatenate([edges[:, 0], edges[:, 1]])
        cols = np.concatenate([edges[:, 1], edges[:, 0]])
        values = np.ones(len(rows), dtype=np.float64)
        self.adjacency_matrix = sp.sparse.csr_matrix(
            (values, (rows, cols)), shape=(total_vertices, total_vertices))
        self.vertex_degrees = np.asarray(self.adjacency_matrix.sum(axis=1)).flatten().astype(np.int64)
        self.face_valences = np.array([len(f) for f in self.vert_to_face], dtype=np.int64)

    def computing_face_center(self):
        """Computes the center of each face as the average of its vertex positions."""
        vs = self.mesh.vertex_array
        centers = [vs[ids].mean(axis=0) for ids in self.mesh.face_indices]
        self.face_center = np.asarray(centers, dtype=np.float64).reshape(-1, 3)

    def _vertex_id(self, vertex):
        return self.mesh.index_of(vertex)

    def edge_key(self, edge):
        start, end = self._vertex_id(edge.start), self._vertex_id(edge.end)
        if start is None or end is None:
            return None
        return tuple(sorted((start, end)))

    def faces_containing(self, vertex):
        vertex_id = self._vertex_id(vertex)
        if vertex_id is None:
            return []
        return [self.mesh.faces[i] for i in self.vert_to_face[vertex_id]]

    def edges_containing(self, vertex):
        vertex_id = self._vertex_id(vertex)
        if vertex_id is None:
            return []
        return [self.mesh.edges[i] for i in self.vert_to_edge[vertex_id]]

    def edges_of_face_containing(self, face, vertex):
        """
        Returns the edges of the face's own loop that touch the vertex: the
        edge leaving the vertex first, then the edge entering it.
        """
        for i, v in enumerate(face.vertices):
            if v == vertex:
                return [face.edges[i], face.edges[i - 1]]
        return []

    def winging_face_ids(self, edge):
        key = self.edge_key(edge)
        face_ids = self.edge_to_faces.get(key, []) if key is not None else []
        if len(face_ids) != 2:
            raise NonManifoldMeshError(
                "Edge {!r} borders {} faces, expected exactly 2".format(edge, len(face_ids)))
        return face_ids[0], face_ids[1]

    def winging_faces(self, edge):
        first, second = self.winging_face_ids(edge)
        return self.mesh.faces[first], self.mesh.faces[second]

    def other_winging_face(self, edge, face):
        first, second = self.winging_faces(edge)
        if first == face:
            return second
        if second == face:
            return first
        raise ValueError("Face {!r} does not border edge {!r}".format(face, edge))

    def valence(self, vertex):
        vertex_id = self._vertex_id(vertex)
        if vertex_id is None:
            return 0
        return int(self.face_valences[vertex_id])

    def ring_vertices(self, vertex):
        vertex_id = self._vertex_id(vertex)
        if vertex_id is None:
            return []
        ring = []
        for edge_id in self.vert_to_edge[vertex_id]:
            v0, v1 = self.mesh.edge_indices[edge_id]
            ring.append(self.mesh.vertices[v1 if v0 == vertex_id else v0])
        return ring

    def ring_sums(self):
        """Sum of the 1-ring positions of every vertex, as a (V, 3) array."""
        return self.adjacency_matrix.dot(self.mesh.vertex_array)

    def check_manifold(self):
        """
        Raises NonManifoldMeshError unless every edge borders exactly two
        faces and every vertex touches as many faces as edges.
        """
        for key, face_ids in self.edge_to_faces.items():
            if len(face_ids) != 2:
                v0, v1 = (self.mesh.vertices[i] for i in key)
                raise NonManifoldMeshError(
                    "Edge {!r} - {!r} borders {} faces, expected exactly 2".format(
                        v0, v1, len(face_ids)))
        mismatch = np.nonzero(self.face_valences != self.vertex_degrees)[0]
        if len(mismatch):
            vertex_id = mismatch[0]
            raise NonManifoldMeshError(
                "Vertex {!r} touches {} faces but {} edges".format(
                    self.mesh.vertices[vertex_id], self.face_valences[vertex_id],
                    self.vertex_degrees[vertex_id]))
        logger.debug("Mesh is a closed manifold: %d vertices, %d edges, %d faces",
                     len(self.mesh.vertices), len(self.mesh.edges), len(self.mesh.faces))

    def is_closed_manifold(self):
        try:
            self.check_manifold()
        except NonManifoldMeshError:
            return False
        return True
