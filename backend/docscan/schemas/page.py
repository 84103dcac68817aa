# backend/docscan/schemas/page.py
from pydantic import BaseModel, Field

from .base import BaseSchema, ReadOnlySchema
from ..models.page import FilterName


class PageCreate(BaseSchema):
    original_uri: str
    processed_uri: str
    filter_name: FilterName = FilterName.ORIGINAL
    rotation: int = 0


class PageFilterUpdate(BaseModel):
    filter_name: FilterName


class PageMove(BaseModel):
    new_position: int = Field(..., ge=0)


class Page(ReadOnlySchema):
    id: str
    document_id: str
    original_uri: str
    processed_uri: str
    filter_name: FilterName
    rotation: int = 0
    order: int
