from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Integer, Text

from ..db.session import Base

INVENTORY_ROW_ID = 1


class ControllerInventory(Base):
    """Single-row counter of controllers handed out to customers.

    ``controllers_out`` is always kept within ``[0, total]``.
    """

    __tablename__ = "controller_inventory"
    __table_args__ = (CheckConstraint("controllers_out >= 0", name="ck_controller_inventory_out"),)

    id = Column(Integer, primary_key=True, default=INVENTORY_ROW_ID)
    total = Column(Integer, nullable=False)
    controllers_out = Column(Integer, nullable=False, default=0)
    updated_at = Column(Text, nullable=False)

    @property
    def in_stock(self) -> int:
        return self.total - self.controllers_out
