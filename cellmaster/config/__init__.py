"""Configuration package for the cell-culture lab simulation.

Tunables are grouped by concern into small modules of UPPER_CASE constants.
Import from the concrete module, e.g. ``from cellmaster.config.cell import ...``.
"""
