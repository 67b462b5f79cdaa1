from __future__ import annotations

from pydantic import BaseModel


class ControllerInventoryUpdate(BaseModel):
    # Out-of-range values are clamped to [0, total], not rejected.
    controllers_out: int


class ControllerInventoryOut(BaseModel):
    total: int
    controllers_out: int
    in_stock: int
    updated_at: str

    class Config:
        from_attributes = True
