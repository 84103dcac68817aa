# backend/docscan/models/document.py
from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from ..database import Base

class Document(Base):
    __tablename__ = "documents"

    id = Column(String, primary_key=True)
    title = Column(Text, nullable=False)
    # Epoch milliseconds
    created_at = Column("createdAt", Integer, nullable=False)
    updated_at = Column("updatedAt", Integer, nullable=False)

    pages = relationship(
        "Page",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[Page.order, Page.id]"
    )
