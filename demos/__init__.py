"""Demos for the deltri triangulator.

Each module exposes a main() and a module-level __main__ guard so it can be
executed via:

    python -m demos.delaunay_demo --alpha 0.08 --out cloud.png
"""
