# feedrank/models.py
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Float, DateTime, ForeignKey, Boolean, UniqueConstraint, Index, Text
from datetime import datetime, timezone
from typing import Optional
from feedrank.db import Base

class ItemRow(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)
    item_type: Mapped[Optional[str]] = mapped_column(String(32), index=True, nullable=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # maintained by the periodic hot score job, read-only here
    hot_score: Mapped[Optional[float]] = mapped_column(Float, index=True, nullable=True)
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    tags: Mapped[list["ItemTag"]] = relationship(back_populates="item", cascade="all, delete-orphan", lazy="selectin")

    __table_args__ = (
        Index("idx_items_recent", "created_at"),
    )

class ItemTag(Base):
    __tablename__ = "item_tags"
    id: Mapped[int] = mapped_column(primary_key=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id", ondelete="CASCADE"), index=True)
    tag_id: Mapped[str] = mapped_column(String(64), index=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)

    item: Mapped[ItemRow] = relationship(back_populates="tags")

    __table_args__ = (UniqueConstraint("item_id", "tag_id", name="uq_item_tag"),)

class ItemView(Base):
    __tablename__ = "item_views"
    id: Mapped[int] = mapped_column(primary_key=True)
    viewer_id: Mapped[str] = mapped_column(String(64), index=True)
    item_id: Mapped[int] = mapped_column(index=True)
    viewed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (UniqueConstraint("viewer_id", "item_id", name="uq_viewer_item_view"),)
