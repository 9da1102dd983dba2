"""CellMaster exception hierarchy.

Only programming or data errors raise. Expected business-rule failures
(not enough gold, wrong cell status, locked slot) are reported through
``ActionResult`` instead.
"""


class CellMasterError(Exception):
    """Root of all CellMaster domain exceptions."""


class PersistenceError(CellMasterError):
    """Errors during save / load / snapshot operations."""


class ConfigurationError(CellMasterError):
    """Invalid or missing configuration."""


class UnknownCatalogIdError(ConfigurationError, KeyError):
    """A catalog lookup was made with an id that does not exist."""

    def __init__(self, kind: str, catalog_id: str):
        self.kind = kind
        self.catalog_id = catalog_id
        super().__init__(f"Unknown {kind} id: {catalog_id!r}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]
