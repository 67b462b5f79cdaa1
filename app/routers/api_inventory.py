from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud.inventory import get_inventory, set_controllers_out
from ..db.session import get_db
from ..schemas.inventory import ControllerInventoryOut, ControllerInventoryUpdate
from ..services.clock import Clock, get_clock

router = APIRouter(prefix="/api/v1/inventory", tags=["inventory"])


@router.get("/controllers", response_model=ControllerInventoryOut)
def api_controllers(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return get_inventory(db, now=clock.now(), default_total=settings.CONTROLLERS_TOTAL)


@router.put("/controllers", response_model=ControllerInventoryOut)
def api_set_controllers(
    payload: ControllerInventoryUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return set_controllers_out(
        db,
        payload.controllers_out,
        now=clock.now(),
        default_total=settings.CONTROLLERS_TOTAL,
    )
