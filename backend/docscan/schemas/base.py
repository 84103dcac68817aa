# backend/docscan/schemas/base.py
from pydantic import BaseModel, ConfigDict

class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

class ReadOnlySchema(BaseModel):
    """Snapshot handed to presentation and export; never mutated in place"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

class TimestampMixin(BaseModel):
    # Epoch milliseconds
    created_at: int
    updated_at: int
