"""Lab API endpoints.

Every action endpoint answers with the same envelope,
``{"success": ..., "message": ..., "payload": {...}}``:

- 200 when the action was applied
- 400 when a precondition failed (nothing changed)
- 404 when the request names an unknown catalog id
"""

import logging
from typing import Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.app_factory import AppContext
from backend.models import (
    ActionResponse,
    ApplyItemRequest,
    CultivateRequest,
    DeliverRequest,
    NewGameRequest,
    PassageRequest,
    PurchaseRequest,
    RefreshRequest,
    SellPearlsRequest,
    SellRequest,
    SlotRequest,
    SpeedRequest,
    ThawRequest,
)
from backend.state_payloads import build_lab_state
from cellmaster.exceptions import ConfigurationError, UnknownCatalogIdError
from cellmaster.result import ActionResult
from cellmaster.simulation import LabActions

logger = logging.getLogger(__name__)


def _envelope(success: bool, message: str, status_code: int, **payload) -> JSONResponse:
    body = ActionResponse(success=success, message=message, payload=payload)
    return JSONResponse(body.model_dump(), status_code=status_code)


def setup_lab_router(ctx: AppContext) -> APIRouter:
    """Create and configure the lab router.

    Args:
        ctx: The application context holding the live session

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api/lab", tags=["lab"])

    def _actions() -> LabActions:
        ctx.ensure_session()
        return ctx.actions

    def _run(action: Callable[[LabActions], ActionResult]) -> JSONResponse:
        try:
            result = action(_actions())
        except UnknownCatalogIdError as e:
            return _envelope(False, str(e), 404, kind=e.kind, id=e.catalog_id)
        return _envelope(result.success, result.message, 200 if result.success else 400, **result.payload)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @router.get("/state")
    async def get_state():
        """Full lab state: player, incubator, contracts, events and storage."""
        session = ctx.ensure_session()
        return JSONResponse(build_lab_state(session, ctx.engine))

    @router.get("/server")
    async def get_server_info():
        ctx.ensure_session()
        return JSONResponse(ctx.server_info())

    @router.get("/notifications")
    async def get_notifications(since: int = 0):
        """Domain events newer than ``since``."""
        ctx.ensure_session()
        return JSONResponse(
            {"last_seq": ctx.notifications.last_seq, "events": ctx.notifications.since(since)}
        )

    @router.post("/new-game")
    async def new_game(request: NewGameRequest):
        try:
            session = ctx.new_game(request.mode, request.seed)
        except ConfigurationError as e:
            return _envelope(False, str(e), 400)
        logger.info(f"New game requested (mode={request.mode}, seed={request.seed})")
        return _envelope(True, f"Started a new {session.mode.name} lab", 200, mode=session.mode.id)

    @router.post("/save")
    async def save_game():
        ctx.ensure_session()
        filepath = ctx.save()
        if filepath is None:
            return _envelope(False, "Save failed", 500)
        return _envelope(True, "Lab saved", 200, path=filepath)

    # ------------------------------------------------------------------
    # Incubator
    # ------------------------------------------------------------------

    @router.post("/cultivate")
    async def cultivate(request: CultivateRequest):
        return _run(lambda a: a.start_cultivation(request.cell_type, request.slot_index, request.items))

    @router.post("/harvest")
    async def harvest(request: SlotRequest):
        return _run(lambda a: a.harvest(request.slot_index))

    @router.post("/discard")
    async def discard(request: SlotRequest):
        return _run(lambda a: a.discard(request.slot_index))

    @router.post("/rescue")
    async def rescue(request: SlotRequest):
        return _run(lambda a: a.emergency_rescue(request.slot_index))

    @router.post("/passage")
    async def passage(request: PassageRequest):
        return _run(lambda a: a.passage(request.slot_index, request.ratio, request.use_reagent))

    @router.post("/qc")
    async def run_qc(request: SlotRequest):
        return _run(lambda a: a.run_qc(request.slot_index))

    @router.post("/apply-item")
    async def apply_item(request: ApplyItemRequest):
        return _run(lambda a: a.apply_item(request.slot_index, request.item_id))

    @router.post("/freeze")
    async def freeze(request: SlotRequest):
        return _run(lambda a: a.freeze(request.slot_index))

    @router.post("/thaw")
    async def thaw(request: ThawRequest):
        return _run(lambda a: a.thaw(request.frozen_id, request.slot_index))

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    @router.post("/contracts/refresh")
    async def refresh_contracts(request: RefreshRequest = RefreshRequest()):
        return _run(lambda a: a.refresh_contracts(request.pay_currency))

    @router.post("/contracts/{task_id}/accept")
    async def accept_contract(task_id: str):
        return _run(lambda a: a.accept_contract(task_id))

    @router.post("/contracts/{task_id}/deliver")
    async def deliver(task_id: str, request: DeliverRequest):
        return _run(lambda a: a.deliver_cell(task_id, request.harvested_id))

    @router.post("/contracts/{task_id}/abandon")
    async def abandon_contract(task_id: str):
        return _run(lambda a: a.abandon_contract(task_id))

    # ------------------------------------------------------------------
    # Economy
    # ------------------------------------------------------------------

    @router.post("/purchase")
    async def purchase(request: PurchaseRequest):
        return _run(lambda a: a.purchase(request.item_id, request.quantity))

    @router.post("/unlock-slot")
    async def unlock_slot():
        return _run(lambda a: a.unlock_slot())

    @router.post("/sell")
    async def sell(request: SellRequest):
        return _run(lambda a: a.sell_harvested(request.harvested_id))

    @router.post("/sell-pearls")
    async def sell_pearls(request: SellPearlsRequest = SellPearlsRequest()):
        return _run(lambda a: a.sell_pearls(request.count))

    @router.post("/speed")
    async def set_speed(request: SpeedRequest):
        return _run(lambda a: a.set_speed(request.speed))

    return router
