"""CellMaster: a cell-culture lab management simulation.

The core is headless and single-threaded. A :class:`~cellmaster.simulation.session.LabSession`
owns all mutable state, :class:`~cellmaster.simulation.engine.LabEngine` advances it one
tick at a time and :class:`~cellmaster.simulation.actions.LabActions` applies player actions.
"""

__version__ = "0.1.0"
