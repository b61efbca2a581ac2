"""Content tables touched by the improvement pipeline.

Only the columns read or written here are mapped; the tables carry more.
"""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class NewsArticle(Base):
  __tablename__ = "news_articles"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  title: Mapped[str | None] = mapped_column(Text, nullable=True)
  summary: Mapped[str | None] = mapped_column(Text, nullable=True)
  original_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
  content: Mapped[str | None] = mapped_column(Text, nullable=True)
  emlak_analysis: Mapped[str | None] = mapped_column(Text, nullable=True)
  seo_keywords: Mapped[list[str] | None] = mapped_column(ARRAY(Text), nullable=True)
  quality_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
  updated_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())
  deleted_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Listing(Base):
  __tablename__ = "listings"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  title: Mapped[str | None] = mapped_column(Text, nullable=True)
  description: Mapped[str | None] = mapped_column(Text, nullable=True)
  description_short: Mapped[str | None] = mapped_column(Text, nullable=True)
  property_type: Mapped[str | None] = mapped_column(Text, nullable=True)
  quality_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
  updated_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())
