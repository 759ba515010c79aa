#!/usr/bin/env python3
"""
Small demo: random point cloud inside a square frame with a square hole.
Triangulate it (optionally constrained / alpha filtered), print the counters
and save a plot and a VTK file.
"""
from __future__ import annotations

import argparse
import numpy as np

from deltri.core.constraints import ConstraintSet
from deltri.core.delaunay import delaunay_2d
from deltri.core.io import write_vtk
from deltri.core.logging_utils import configure_logging, get_logger
from deltri.core.stats import print_stats
from deltri.core.visualization import plot_triangulation

logger = get_logger('deltri.demo')


def framed_cloud(npts=200, seed=0):
    """Frame corners 0..3, hole corners 4..7 (clockwise), then random interior points."""
    rng = np.random.default_rng(seed)
    frame = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
    hole = np.array([[0.4, 0.4], [0.4, 0.6], [0.6, 0.6], [0.6, 0.4]], dtype=float)
    cloud = rng.uniform(0.02, 0.98, size=(npts, 2))
    inside_hole = np.all((cloud > 0.38) & (cloud < 0.62), axis=1)
    pts = np.vstack([frame, hole, cloud[~inside_hole]])
    return pts, ConstraintSet(polys=[[0, 1, 2, 3], [4, 5, 6, 7]])


def main():
    ap = argparse.ArgumentParser(description='Delaunay demo: point cloud with frame and hole')
    ap.add_argument('--npts', type=int, default=200)
    ap.add_argument('--seed', type=int, default=0)
    ap.add_argument('--alpha', type=float, default=0.0, help='Alpha radius (0 disables the filter)')
    ap.add_argument('--no-constraints', action='store_true', help='Ignore the frame and hole polygons')
    ap.add_argument('--random-order', action='store_true', help='Pseudo-random insertion order')
    ap.add_argument('--out', type=str, default='delaunay_demo.png')
    ap.add_argument('--vtk', type=str, default=None, help='Optional legacy VTK output path')
    ap.add_argument('--log-level', type=str, default='INFO')
    args = ap.parse_args()

    configure_logging(args.log_level)

    pts, source = framed_cloud(args.npts, args.seed)
    if args.no_constraints:
        source = None
    result = delaunay_2d(pts, source=source, alpha=args.alpha,
                         random_point_insertion=args.random_order)
    logger.info("%d points -> %d triangles, %d lines, %d vertices",
                len(pts), result.number_of_triangles, len(result.lines), len(result.verts))
    print_stats(result.stats)

    edges = [] if source is None else list(source.iter_poly_edges())
    plot_triangulation(result, outname=args.out, constraint_edges=edges)
    if args.vtk:
        write_vtk(args.vtk, result)


if __name__ == '__main__':  # pragma: no cover
    main()
