# backend/docscan/schemas/document.py
from typing import List, Tuple

from pydantic import BaseModel, computed_field

from .base import ReadOnlySchema, TimestampMixin
from .page import Page


class DocumentUpdate(BaseModel):
    title: str


class PageOrderUpdate(BaseModel):
    page_ids: List[str]


class Document(ReadOnlySchema, TimestampMixin):
    id: str
    title: str
    pages: Tuple[Page, ...] = ()

    @computed_field
    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def page_ids(self) -> List[str]:
        return [page.id for page in self.pages]
