"""Controller inventory counter helpers."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import StorageUnavailableError
from ..models.inventory import INVENTORY_ROW_ID, ControllerInventory
from ..services.timecalc import to_iso

LOGGER = logging.getLogger(__name__)


def clamp_controllers_out(value: int, total: int) -> int:
    """Keep the handed-out count inside ``[0, total]``."""

    if value < 0:
        return 0
    return min(value, total)


def get_inventory(db: Session, *, now: datetime, default_total: int) -> ControllerInventory:
    """Fetch the counter row, creating it on first use."""

    try:
        row = db.get(ControllerInventory, INVENTORY_ROW_ID)
        if row is None:
            row = ControllerInventory(
                id=INVENTORY_ROW_ID,
                total=default_total,
                controllers_out=0,
                updated_at=to_iso(now),
            )
            db.add(row)
            db.commit()
            db.refresh(row)
        return row
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.exception("Storage failure while loading controller inventory")
        raise StorageUnavailableError("Failed to load controller inventory") from exc


def set_controllers_out(
    db: Session,
    value: int,
    *,
    now: datetime,
    default_total: int,
) -> ControllerInventory:
    row = get_inventory(db, now=now, default_total=default_total)
    try:
        row.controllers_out = clamp_controllers_out(value, row.total)
        row.updated_at = to_iso(now)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.exception("Storage failure while updating controller inventory")
        raise StorageUnavailableError("Failed to update controller inventory") from exc
    LOGGER.info(
        "inventory.updated",
        extra={"extra_data": {"controllers_out": row.controllers_out, "total": row.total}},
    )
    return row
