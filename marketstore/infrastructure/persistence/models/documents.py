"""Document table: every collection's rows in one keyed table."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from marketstore.infrastructure.database import Base


class Document(Base):
    """One stored entity.

    id, createdAt, updatedAt and deletedAt are lifted into columns so the
    id ordering and the tombstone filter never touch JSON.  body holds the
    complete document, system fields included, exactly as it is returned
    to the repository.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_collection_live", "collection", "deleted_at", "id"),
    )

    collection: Mapped[str] = mapped_column(Text, primary_key=True)
    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )  # tombstone; NULL on live rows
    body: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
