import logging
import math

import numpy as np
from tqdm import tqdm

from mesh import Vertex, Face, Mesh, VertexIndex, NonManifoldMeshError, NonTriangularFaceError
from subdivision_config import resolve_cfg
from topology import MeshTopology

logger = logging.getLogger(__name__)


def relaxation_weight(n, rule="kobbelt"):
    """
    Kobbelt's smoothing scalar B(n) = (4 - 2cos(2pi/n)) / 9n for a vertex of
    valence n. The "legacy" rule evaluates (4 - 2cos(2pi)/n) / 9n instead,
    which ignores the valence inside the cosine.
    """
    if n <= 0:
        raise NonManifoldMeshError("Cannot relax a vertex of valence {}".format(n))
    if rule == "legacy":
        return (4.0 - 2.0 * math.cos(2.0 * math.pi) / n) / (9.0 * n)
    return (4.0 - 2.0 * math.cos(2.0 * math.pi / n)) / (9.0 * n)


def relax_vertex(topology, vertex, rule="kobbelt"):
    """P(1 - nB) + B * (sum of the 1-ring of P)."""
    n = topology.valence(vertex)
    b = relaxation_weight(n, rule)
    ring_sum = Vertex(0.0, 0.0, 0.0)
    for neighbour in topology.ring_vertices(vertex):
        ring_sum = ring_sum + neighbour
    return vertex * (1.0 - n * b) + ring_sum * b


def relaxed_positions(topology, rule="kobbelt"):
    """
    Relaxes every vertex of the mesh at once, as a (V, 3) array indexed like
    the mesh vertices. Valence and B are taken once per vertex so each
    vertex gets one relaxed position whichever face refers to it.
    """
    n = topology.face_valences.astype(np.float64)
    if np.any(n <= 0):
        raise NonManifoldMeshError("Mesh contains a vertex with no incident faces")
    if rule == "legacy":
        b = (4.0 - 2.0 * np.cos(2.0 * np.pi) / n) / (9.0 * n)
    else:
        b = (4.0 - 2.0 * np.cos(2.0 * np.pi / n)) / (9.0 * n)
    vs = topology.mesh.vertex_array
    return vs * (1.0 - n * b)[:, None] + topology.ring_sums() * b[:, None]


def check_triangular(mesh):
    bad = [face for face in mesh.faces if face.number_of_edges != 3]
    if bad:
        raise NonTriangularFaceError(
            "Cannot perform Root-Three subdivision on a non-triangular face: "
            "{} of {} faces have degree other than 3, first is {!r}".format(
                len(bad), len(mesh.faces), bad[0]))


def root_three(mesh, cfg=None):
    """
    Runs one Root-Three refinement pass and returns a new triangle mesh.
    Each face gets a new vertex at its centroid. For each original edge the
    centroids of its two winging faces are joined and two triangles are
    formed with the relaxed edge endpoints, so the original edge is
    flipped. Each such triangle is produced from both sides of the edge and
    is kept once. Every face must be a triangle; otherwise the whole pass
    is rejected before any work.
    """
    cfg = resolve_cfg(cfg)
    logger.info("Root-Three pass on %r", mesh)
    check_triangular(mesh)
    if not mesh.faces:
        return Mesh([])

    topology = MeshTopology(mesh)
    if cfg["check_manifold"]:
        topology.check_manifold()

    relaxed = [Vertex.from_array(p) for p in relaxed_positions(topology, cfg["root_three_weights"])]
    centroids = [Vertex.from_array(c) for c in topology.face_center]

    index = VertexIndex()
    seen = set()
    new_faces = []
    faces = tqdm(enumerate(mesh.faces), total=len(mesh.faces),
                 desc="Root-Three", disable=not cfg["progress"])
    for face_id, face in faces:
        ids = mesh.face_indices[face_id]
        mid = centroids[face_id]
        for i, edge in enumerate(face.edges):
            first, second = topology.winging_face_ids(edge)
            other_mid = centroids[second if first == face_id else first]
            relaxed_start = relaxed[ids[i]]
            relaxed_end = relaxed[ids[(i + 1) % 3]]
            # (start, other_mid, mid) rather than (start, mid, other_mid): with the
            # face wound outward this keeps both triangles wound outward too, and
            # both sides of the edge emit the same cyclic order.
            for triangle in ((relaxed_start, other_mid, mid), (relaxed_end, mid, other_mid)):
                key = frozenset(index.add(v) for v in triangle)
                if key in seen:
                    continue
                seen.add(key)
                new_faces.append(Face.from_vertices(*triangle))

    logger.debug("Root-Three kept %d of %d candidate triangles",
                 len(new_faces), 6 * len(mesh.faces))
    result = Mesh(new_faces)
    logger.info("Root-Three result %r", result)
    return result
