"""Central numerical tolerances and fixed limits for the triangulator.

Tiny thresholds used across the point locator, the legalizer and the plane
fitting are collected here so they can be referenced without scattering
literals through the algorithmic code.
"""
from __future__ import annotations

# Point location
EPS_EDGE_PROXIMITY: float = 1e-14   # half-space margin for "on edge" / "inside" (normalized vectors)

# In-circumcircle test
INCIRCLE_FACTOR: float = 0.999999999999   # dist2 < factor * radius2 counts as inside
BOUNDING_RADIUS_FACTOR: float = 4.0       # sanity bound on radius2 is (2*r)**2

# Bounding triangulation
NUM_BOUNDING_POINTS: int = 8

# Recursion / iteration caps
MAX_RECURSION_DEPTH: int = 2500   # edge legalization
MIN_WALK_STEPS: int = 64          # point location lower bound on steps

# Plane fitting
EPS_FLAT_BOUNDS: float = 1e-3     # relative bbox width treated as planar

# Auxiliary small epsilons
EPS_AREA: float = 1e-12           # minimum positive (absolute) triangle area
EPS_COLINEAR: float = 1e-15       # near-colinearity threshold for polygon/tri tests
EPS_DENOMINATOR: float = 1e-300   # barycentric denominator treated as a degenerate triangle

# Default interval (processed points) between progress callbacks
PROGRESS_INTERVAL: int = 1000

__all__ = [
    'EPS_EDGE_PROXIMITY',
    'INCIRCLE_FACTOR',
    'BOUNDING_RADIUS_FACTOR',
    'NUM_BOUNDING_POINTS',
    'MAX_RECURSION_DEPTH',
    'MIN_WALK_STEPS',
    'EPS_FLAT_BOUNDS',
    'EPS_AREA',
    'EPS_COLINEAR',
    'EPS_DENOMINATOR',
    'PROGRESS_INTERVAL',
]
