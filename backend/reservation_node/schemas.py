from pydantic import BaseModel, Field

from .node import OperationResult


class SlotCreate(BaseModel):
    event_id: str = Field(min_length=1)
    event_type: str
    capacity: int = Field(ge=1)


class ReservationCreate(BaseModel):
    event_id: str = Field(min_length=1)
    event_type: str


class ExchangeCreate(BaseModel):
    event_id: str = Field(min_length=1)
    new_event_id: str = Field(min_length=1)
    new_event_type: str


class OperationRead(BaseModel):
    success: bool
    message: str

    @classmethod
    def from_result(cls, result: OperationResult) -> "OperationRead":
        return cls(success=result.success, message=result.message)


class OptionsRead(BaseModel):
    options: str


class CheckRead(BaseModel):
    value: bool
