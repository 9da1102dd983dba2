"""Request and response bodies for the lab HTTP API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ActionResponse(BaseModel):
    """Common envelope returned by every action endpoint."""

    success: bool
    message: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class NewGameRequest(BaseModel):
    """Start over with a fresh lab."""

    mode: str = "medium"
    seed: Optional[int] = None


class CultivateRequest(BaseModel):
    cell_type: str
    slot_index: Optional[int] = None
    items: List[str] = Field(default_factory=list)


class SlotRequest(BaseModel):
    """Body for actions that target a single incubator slot."""

    slot_index: int


class PassageRequest(BaseModel):
    slot_index: int
    ratio: int = 2
    use_reagent: bool = False


class ApplyItemRequest(BaseModel):
    slot_index: int
    item_id: str


class ThawRequest(BaseModel):
    frozen_id: str
    slot_index: Optional[int] = None


class DeliverRequest(BaseModel):
    harvested_id: str


class RefreshRequest(BaseModel):
    pay_currency: bool = True


class PurchaseRequest(BaseModel):
    item_id: str
    quantity: int = 1


class SellRequest(BaseModel):
    harvested_id: str


class SellPearlsRequest(BaseModel):
    count: Optional[int] = None


class SpeedRequest(BaseModel):
    speed: int
