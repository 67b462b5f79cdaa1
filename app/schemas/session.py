from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

WALL_TIME_PATTERN = r"^\d{2}:\d{2}(:\d{2})?$"


class SessionStart(BaseModel):
    console_name: str = Field(min_length=1)


class ManualSessionCreate(BaseModel):
    console_name: str = Field(min_length=1)
    start_time: str = Field(pattern=WALL_TIME_PATTERN, examples=["23:00"])
    end_time: str = Field(pattern=WALL_TIME_PATTERN, examples=["01:00"])
    day: Optional[date] = None  # local calendar day of start_time; defaults to today


class SessionOut(BaseModel):
    id: str
    console_name: str
    start_iso: str
    end_iso: Optional[str] = None
    duration_hours: Optional[float] = None
    price: Optional[float] = None
    status: str
    created_at: str

    class Config:
        from_attributes = True


class RunningSessionOut(SessionOut):
    elapsed_seconds: float
    elapsed_display: str


class ConsoleStateOut(BaseModel):
    console_name: str
    running: Optional[RunningSessionOut] = None


class PurgeOut(BaseModel):
    deleted: int
