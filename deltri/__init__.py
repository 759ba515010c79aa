"""Public package API for the deltri triangulator.

This facade provides a flat import surface on top of the implementation
modules in ``deltri.core``. Plotting pulls in matplotlib, so it is only
imported on first use.

Example
-------
    from deltri import delaunay_2d, ConstraintSet

    result = delaunay_2d(points, alpha=0.5)
    constrained = delaunay_2d(points, source=ConstraintSet(polys=[[0, 1, 2, 3]]))

The deeper modules (``deltri.core.*``) are considered internal and may
change; rely on this layer for public symbols.
"""
from importlib import import_module as _imp
import logging as _logging

try:  # Python 3.8+ runtime version export
    from importlib.metadata import version as _pkg_version
    __version__ = _pkg_version("deltri")  # populated when installed
except Exception:  # pragma: no cover - editable / unknown state
    __version__ = "0.0.0+dev"

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

# Eager light-weight submodules
_geom = _imp('deltri.core.geometry')
_const = _imp('deltri.core.constants')
_conf = _imp('deltri.core.conformity')
_cfg = _imp('deltri.core.config')
_cons = _imp('deltri.core.constraints')
_del = _imp('deltri.core.delaunay')
_stats = _imp('deltri.core.stats')
_io = _imp('deltri.core.io')
_log = _imp('deltri.core.logging_utils')


def _lazy_viz_attr(name):
    def _wrapper(*args, **kwargs):
        viz = _imp('deltri.core.visualization')
        return getattr(viz, name)(*args, **kwargs)
    return _wrapper


# Main entry points
Delaunay2D = _del.Delaunay2D
delaunay_2d = _del.delaunay_2d
TriangulationResult = _del.TriangulationResult
NonManifoldEdgeError = _del.NonManifoldEdgeError
Delaunay2DConfig = _cfg.Delaunay2DConfig
ProjectionPlaneMode = _cfg.ProjectionPlaneMode
ConstraintSet = _cons.ConstraintSet
TriangulationStats = _stats.TriangulationStats

# Diagnostics and export
check_triangulation = _conf.check_triangulation
delaunay_violations = _conf.delaunay_violations
write_vtk = _io.write_vtk
plot_triangulation = _lazy_viz_attr('plot_triangulation')
configure_logging = _log.configure_logging

# Tolerances
EPS_AREA = _const.EPS_AREA
INCIRCLE_FACTOR = _const.INCIRCLE_FACTOR

# Namespace submodules for exploratory users
geometry = _geom
conformity = _conf
constants = _const
stats = _stats
io = _io

__all__ = [
    '__version__',
    # triangulation
    'Delaunay2D', 'delaunay_2d', 'TriangulationResult', 'NonManifoldEdgeError',
    'Delaunay2DConfig', 'ProjectionPlaneMode', 'ConstraintSet', 'TriangulationStats',
    # diagnostics / export
    'check_triangulation', 'delaunay_violations', 'write_vtk', 'plot_triangulation',
    'configure_logging',
    # tolerances
    'EPS_AREA', 'INCIRCLE_FACTOR',
    # submodules / namespaces
    'geometry', 'conformity', 'constants', 'stats', 'io',
]
