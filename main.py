import argparse
import logging
import sys

from mesh import MeshError
from mesh_factory import SEED_SHAPES, seed_shape
from subdivision_config import ALGORITHMS
from subdivision_session import PASSES


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Refine a seed shape with Catmull-Clark or Root-Three subdivision.")
    parser.add_argument("--algorithm", choices=ALGORITHMS, default="catmull_clark")
    parser.add_argument("--seed", choices=sorted(SEED_SHAPES), default="triangle_cube")
    parser.add_argument("--iterations", type=int, default=1)
    parser.add_argument("--legacy-weights", action="store_true",
                        help="use the cos(2*pi) Root-Three weight instead of cos(2*pi/n)")
    parser.add_argument("--show", action="store_true", help="open the result in the trimesh viewer")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def run(args):
    cfg = {
        "progress": True,
        "root_three_weights": "legacy" if args.legacy_weights else "kobbelt",
    }
    subdivide = PASSES[args.algorithm]

    mesh = seed_shape(args.seed)
    print(f'Mesh Info: {mesh}')
    for _ in range(args.iterations):
        mesh = subdivide(mesh, cfg)
        print(f'Subdivided Mesh Info: {mesh}')
    return mesh


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        mesh = run(args)
    except MeshError as exc:
        print(f'Subdivision failed: {exc}', file=sys.stderr)
        return 2
    if args.show:
        mesh.to_trimesh().show()
    return 0


if __name__ == '__main__':
    sys.exit(main())
