import logging

from tqdm import tqdm

from mesh import Vertex, Edge, Face, Mesh, NonManifoldMeshError
from subdivision_config import resolve_cfg
from topology import MeshTopology, average

logger = logging.getLogger(__name__)


def face_point(face):
    """Average of the face's own vertices."""
    return average(face.vertices)


def edge_point(topology, edge, face_points=None):
    """
    Average of the edge midpoint and the face points of the two faces
    winging the edge. Precomputed face points, indexed like the mesh faces,
    may be passed in to avoid recomputing them.
    """
    first, second = topology.winging_face_ids(edge)
    if face_points is None:
        fp1 = face_point(topology.mesh.faces[first])
        fp2 = face_point(topology.mesh.faces[second])
    else:
        fp1, fp2 = face_points[first], face_points[second]
    return average([edge.midpoint, fp1, fp2])


def vertex_point(topology, vertex, face_points=None):
    """
    Moves an original vertex S of valence n to

        F/n + 2R/n + S(n - 3)/n

    where F is the average face point of the faces around S and R the
    average midpoint of the edges around S.
    """
    n = topology.valence(vertex)
    if n == 0:
        raise NonManifoldMeshError("Vertex {!r} has no incident faces".format(vertex))

    if face_points is None:
        around = [face_point(face) for face in topology.faces_containing(vertex)]
    else:
        vertex_id = topology.mesh.index_of(vertex)
        around = [face_points[i] for i in topology.vert_to_face[vertex_id]]
    vertex_f = average(around) / n

    midpoints = [edge.midpoint for edge in topology.edges_containing(vertex)]
    vertex_r = (average(midpoints) * 2.0) / n

    adjusted_s = (vertex * (n - 3.0)) / n
    return vertex_f + vertex_r + adjusted_s


def catmull_clark(mesh, cfg=None):
    """
    Runs one Catmull-Clark refinement pass and returns a new mesh of quads.
    For every original vertex and every face around it one quad is emitted:
    vertex point -> edge point of the edge leaving the vertex -> face point
    -> edge point of the edge entering the vertex. The input mesh is not
    modified; if any step fails no mesh is returned.
    """
    cfg = resolve_cfg(cfg)
    logger.info("Catmull-Clark pass on %r", mesh)
    if not mesh.faces:
        return Mesh([])

    topology = MeshTopology(mesh)
    if cfg["check_manifold"]:
        topology.check_manifold()

    face_points = [Vertex.from_array(center) for center in topology.face_center]
    edge_points = {}

    def cached_edge_point(edge):
        key = topology.edge_key(edge)
        if key not in edge_points:
            edge_points[key] = edge_point(topology, edge, face_points)
        return edge_points[key]

    new_faces = []
    vertices = tqdm(enumerate(mesh.vertices), total=len(mesh.vertices),
                    desc="Catmull-Clark", disable=not cfg["progress"])
    for vertex_id, vertex_s in vertices:
        new_vertex = vertex_point(topology, vertex_s, face_points)
        for face_id in topology.vert_to_face[vertex_id]:
            face = mesh.faces[face_id]
            leaving, entering = topology.edges_of_face_containing(face, vertex_s)
            ep1 = cached_edge_point(leaving)
            ep2 = cached_edge_point(entering)
            fp = face_points[face_id]
            new_faces.append(Face(Edge(new_vertex, ep1), Edge(ep1, fp),
                                  Edge(fp, ep2), Edge(ep2, new_vertex)))

    logger.debug("Catmull-Clark computed %d edge points and %d quads",
                 len(edge_points), len(new_faces))
    result = Mesh(new_faces)
    logger.info("Catmull-Clark result %r", result)
    return result
