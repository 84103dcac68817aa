# backend/docscan/models/page.py
import enum

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from ..database import Base


class FilterName(str, enum.Enum):
    ORIGINAL = "Original"
    COLOR = "Color"
    GRAYSCALE = "Grayscale"
    BW = "BW"
    ENHANCE = "Enhance"


class Page(Base):
    __tablename__ = "pages"
    __table_args__ = (
        Index("idx_pages_documentId", "documentId"),
        Index("idx_pages_order", "documentId", "orderIndex"),
    )

    id = Column(String, primary_key=True)
    document_id = Column(
        "documentId",
        String,
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False
    )
    original_uri = Column("originalUri", Text, nullable=False)
    processed_uri = Column("processedUri", Text, nullable=False)
    # Stored as the plain filter label, e.g. "Grayscale"
    filter_name = Column("filterName", String(16), nullable=False, default=FilterName.ORIGINAL.value)
    rotation = Column(Integer, nullable=False, default=0, server_default="0")
    order = Column("orderIndex", Integer, nullable=False)

    document = relationship("Document", back_populates="pages")
