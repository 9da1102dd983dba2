"""Lab entities: live cultures and the records they leave behind."""

from cellmaster.entities.cell import Cell, CellStatus, HarvestOutcome
from cellmaster.entities.storage import CellStorage, FrozenCell, HarvestedCell

__all__ = [
    "Cell",
    "CellStatus",
    "CellStorage",
    "FrozenCell",
    "HarvestOutcome",
    "HarvestedCell",
]
