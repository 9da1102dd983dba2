"""Structured outcome for player-invoked lab actions.

Every action on the lab (harvest, passage, purchase, delivery...) returns
an ``ActionResult`` instead of raising. A failed precondition and an
unlucky biological outcome are both valid results; they are told apart by
``success`` and by what the payload carries.

Usage:
------
    result = ActionResult.fail("Not enough gold")
    result = ActionResult.ok("Harvested HeLa", value=76, exp=7)

    match result:
        case ActionResult(success=True, payload=payload):
            gold = payload["value"]
        case ActionResult(success=False, message=message):
            show(message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a single lab action.

    Attributes:
        success: Whether the action's preconditions held and it was applied
        message: Human readable summary
        payload: Structured details (value, exp, penalty, ids...)
    """

    success: bool
    message: str
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **payload: Any) -> ActionResult:
        return cls(True, message, payload)

    @classmethod
    def fail(cls, message: str, **payload: Any) -> ActionResult:
        return cls(False, message, payload)

    def get(self, key: str, default: Any = None) -> Any:
        """Read a payload field."""
        return self.payload.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, "payload": dict(self.payload)}
